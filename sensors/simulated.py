"""
Simulated and push-based sensor sources

FixedPositionSource stands in for GPS by repeating one coordinate on a
fixed interval; the engine does not depend on that cadence.
"""
import math
import logging
import threading
from typing import Optional, Sequence

from guidance.core.data_types import GeoPoint, MagneticReading
from .core.interfaces import (
    CallbackSource, PositionSource, MagnetometerSource, Subscription,
    PositionCallback, ReadingCallback, PermissionDeniedError, SensorUnavailableError
)

logger = logging.getLogger(__name__)


class IntervalWorker:
    """Background thread calling tick() every interval seconds until stopped"""

    def __init__(self, tick, interval: float, name: str):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._tick = tick
        self.interval = interval
        self.name = name
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self.running:
            return
        # A thread left over from stop() keeps watching its own, already set, event
        self._stop_event = threading.Event()
        self._thread = threading.Thread(target=self._loop, args=(self._stop_event,),
                                        daemon=True, name=self.name)
        self._thread.start()
        logger.debug(f"{self.name} started (interval {self.interval}s)")

    def stop(self, timeout: float = 2.0):
        self._stop_event.set()
        thread = self._thread
        self._thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
            logger.debug(f"{self.name} stopped")

    def _loop(self, stop_event: threading.Event):
        while not stop_event.wait(self.interval):
            try:
                self._tick()
            except Exception as e:
                logger.error(f"{self.name} tick error: {e}")


class ManualPositionSource(CallbackSource, PositionSource):
    """Position source fed by push(); new subscribers get the last fix at once"""

    def __init__(self, initial: Optional[GeoPoint] = None, permission_granted: bool = True,
                 name: str = "ManualPosition"):
        super().__init__(name)
        self._last_position = initial
        self.permission_granted = permission_granted

    @property
    def last_position(self) -> Optional[GeoPoint]:
        return self._last_position

    def subscribe(self, callback: PositionCallback) -> Subscription:
        if not self.permission_granted:
            raise PermissionDeniedError("Location access is required for AR navigation")
        subscription = self._add_callback(callback)
        if self._last_position is not None:
            callback(self._last_position)
        return subscription

    def push(self, point: GeoPoint):
        self._last_position = point
        self._emit(point)


class FixedPositionSource(ManualPositionSource):
    """Repeats a fixed demo coordinate every interval seconds"""

    def __init__(self, location: GeoPoint, interval: float = 1.0, permission_granted: bool = True):
        super().__init__(initial=location, permission_granted=permission_granted, name="FixedPosition")
        self.location = location
        self._worker = IntervalWorker(self._tick, interval, name="FixedPositionSource")

    @property
    def running(self) -> bool:
        return self._worker.running

    def _tick(self):
        self.push(self.location)

    def _on_first_subscriber(self):
        logger.info(f"📍 Demo location source started at "
                    f"({self.location.latitude:.6f}, {self.location.longitude:.6f})")
        self._worker.start()

    def _on_last_unsubscribed(self):
        self._worker.stop()
        logger.info("📍 Demo location source stopped")


class ManualMagnetometer(CallbackSource, MagnetometerSource):
    """Magnetometer fed by push()"""

    def __init__(self, name: str = "ManualMagnetometer"):
        super().__init__(name)
        self.last_reading: Optional[MagneticReading] = None

    def is_available(self) -> bool:
        return True

    def subscribe(self, callback: ReadingCallback) -> Subscription:
        subscription = self._add_callback(callback)
        if self.last_reading is not None:
            callback(self.last_reading)
        return subscription

    def push(self, reading: MagneticReading):
        self.last_reading = reading
        self._emit(reading)


class SimulatedMagnetometer(ManualMagnetometer):
    """
    Cycles through a list of headings, one reading per interval

    Readings are horizontal unit vectors scaled by field_strength so that
    atan2(y, x) gives back the heading.
    """

    def __init__(self, headings: Sequence[float] = (0.0,), interval: float = 0.1,
                 field_strength: float = 1.0):
        super().__init__(name="SimulatedMagnetometer")
        if not headings:
            raise ValueError("headings must not be empty")
        self.headings = list(headings)
        self.field_strength = field_strength
        self._index = 0
        self._worker = IntervalWorker(self._tick, interval, name="SimulatedMagnetometer")

    @staticmethod
    def reading_for_heading(heading: float, field_strength: float = 1.0) -> MagneticReading:
        rad = math.radians(heading)
        return MagneticReading(
            x=field_strength * math.cos(rad),
            y=field_strength * math.sin(rad),
            z=0.0
        )

    @property
    def running(self) -> bool:
        return self._worker.running

    def next_reading(self) -> MagneticReading:
        heading = self.headings[self._index % len(self.headings)]
        self._index += 1
        return self.reading_for_heading(heading, self.field_strength)

    def _tick(self):
        self.push(self.next_reading())

    def _on_first_subscriber(self):
        self._worker.start()

    def _on_last_unsubscribed(self):
        self._worker.stop()


class UnavailableMagnetometer(MagnetometerSource):
    """Device without a magnetometer"""

    def is_available(self) -> bool:
        return False

    def subscribe(self, callback: ReadingCallback) -> Subscription:
        raise SensorUnavailableError("Magnetometer not available on this device")
