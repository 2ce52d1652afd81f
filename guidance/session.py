"""Navigation session: scoped sensor subscriptions around the direction engine"""
import logging
import threading
from contextlib import contextmanager
from typing import List, Optional

from .core.data_types import NavigationTarget
from .direction_engine import DirectionEngine
from sensors.core.interfaces import (
    PositionSource, MagnetometerSource, Subscription,
    PermissionDeniedError, SensorUnavailableError
)

logger = logging.getLogger(__name__)


class NavigationSession:
    """
    Owns the sensor subscriptions for one navigation session

    start_session() subscribes to the position and magnetometer sources and
    selects the target; stop_session() releases every subscription and
    clears the target, whichever way the session ends.
    """

    def __init__(self, engine: DirectionEngine, position_source: PositionSource,
                 magnetometer: MagnetometerSource):
        self.engine = engine
        self.position_source = position_source
        self.magnetometer = magnetometer

        self._subscriptions: List[Subscription] = []
        self._active = False
        self._lock = threading.Lock()

    @property
    def active(self) -> bool:
        return self._active

    @property
    def target(self) -> Optional[NavigationTarget]:
        return self.engine.target

    def start_session(self, target: NavigationTarget):
        """
        Start navigating to target

        If a session is already running, only the target changes.

        Raises:
            PermissionDeniedError: location access refused; nothing stays subscribed
        """
        with self._lock:
            if self._active:
                self.engine.select_target(target)
                return

            acquired: List[Subscription] = []
            try:
                # Select first so the initial fix delivered on subscribe is used
                self.engine.select_target(target)
                acquired.append(self.position_source.subscribe(self.engine.update_position))
                magnetometer_subscription = self._subscribe_magnetometer()
                if magnetometer_subscription is not None:
                    acquired.append(magnetometer_subscription)
            except PermissionDeniedError as e:
                self.engine.metrics.add_permission_denied()
                logger.error(f"❌ Permission denied: {e}")
                self._release(acquired)
                self.engine.clear_target()
                raise
            except Exception as e:
                logger.error(f"Failed to start navigation session: {e}", exc_info=True)
                self._release(acquired)
                self.engine.clear_target()
                raise

            self._subscriptions = acquired
            self._active = True
            self.engine.metrics.add_session_started()
            logger.info(f"🚀 Navigation session started: {target.display_name}")

    def stop_session(self):
        """End the session; safe to call when no session is active"""
        with self._lock:
            if not self._active:
                return
            subscriptions = self._subscriptions
            self._subscriptions = []
            self._active = False
            try:
                self._release(subscriptions)
            finally:
                self.engine.clear_target()
                self.engine.metrics.add_session_stopped()
                logger.info("🛑 Navigation session stopped")

    def clear_target(self):
        self.stop_session()

    @contextmanager
    def navigate(self, target: NavigationTarget):
        """Run a session for the duration of a with-block"""
        self.start_session(target)
        try:
            yield self.engine
        finally:
            self.stop_session()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop_session()
        return False

    def _subscribe_magnetometer(self) -> Optional[Subscription]:
        if not self.magnetometer.is_available():
            logger.warning("Magnetometer not available, using fallback heading")
            self.engine.set_magnetometer_unavailable()
            return None
        try:
            return self.magnetometer.subscribe(self.engine.update_magnetic_reading)
        except SensorUnavailableError as e:
            logger.warning(f"Magnetometer error, using fallback: {e}")
            self.engine.set_magnetometer_unavailable()
            return None

    @staticmethod
    def _release(subscriptions: List[Subscription]):
        errors = []
        for subscription in subscriptions:
            try:
                subscription.remove()
            except Exception as e:
                errors.append(e)
                logger.error(f"Error releasing sensor subscription: {e}")
        if errors:
            raise errors[0]
