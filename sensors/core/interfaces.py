import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from guidance.core.data_types import GeoPoint, MagneticReading

logger = logging.getLogger(__name__)


class SensorError(Exception):
    """Base error for position and magnetometer sources"""
    pass


class SensorUnavailableError(SensorError):
    """The device has no such sensor"""
    pass


class PermissionDeniedError(SensorError):
    """Access to the sensor was refused by the user"""
    pass


PositionCallback = Callable[[GeoPoint], None]
ReadingCallback = Callable[[MagneticReading], None]


class Subscription:
    """Handle returned by subscribe(); remove() is idempotent"""

    def __init__(self, release: Callable[[], None]):
        self._release = release
        self._active = True
        self._lock = threading.Lock()

    @property
    def active(self) -> bool:
        return self._active

    def remove(self):
        with self._lock:
            if not self._active:
                return
            self._active = False
        self._release()


class CallbackSource:
    """Subscriber bookkeeping shared by sources"""

    def __init__(self, name: str):
        self.name = name
        self._callbacks: List[Callable] = []
        self._callbacks_lock = threading.Lock()

    @property
    def subscriber_count(self) -> int:
        with self._callbacks_lock:
            return len(self._callbacks)

    def _add_callback(self, callback: Callable) -> Subscription:
        with self._callbacks_lock:
            self._callbacks.append(callback)
            first = len(self._callbacks) == 1
        if first:
            self._on_first_subscriber()
        return Subscription(lambda: self._remove_callback(callback))

    def _remove_callback(self, callback: Callable):
        with self._callbacks_lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)
            last = not self._callbacks
        if last:
            self._on_last_unsubscribed()

    def _emit(self, value):
        with self._callbacks_lock:
            callbacks = list(self._callbacks)
        for callback in callbacks:
            try:
                callback(value)
            except Exception as e:
                logger.error(f"{self.name} subscriber error: {e}")

    def _on_first_subscriber(self):
        pass

    def _on_last_unsubscribed(self):
        pass


class PositionSource(ABC):
    @abstractmethod
    def subscribe(self, callback: PositionCallback) -> Subscription: pass

    @property
    @abstractmethod
    def last_position(self) -> Optional[GeoPoint]: pass


class MagnetometerSource(ABC):
    @abstractmethod
    def is_available(self) -> bool: pass

    @abstractmethod
    def subscribe(self, callback: ReadingCallback) -> Subscription: pass
