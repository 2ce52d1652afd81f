"""Fade-in and pulse effects for the direction arrow"""
import logging
import threading

logger = logging.getLogger(__name__)


class FadeIn:
    """Linear opacity ramp 0 -> 1, started once per target selection"""

    def __init__(self, duration: float = 0.5):
        if duration <= 0:
            raise ValueError("duration must be positive")
        self.duration = duration
        self._elapsed = 0.0
        self._active = False

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def opacity(self) -> float:
        if not self._active:
            return 0.0
        return min(1.0, self._elapsed / self.duration)

    def start(self):
        self._active = True
        self._elapsed = 0.0

    def update(self, dt: float) -> float:
        if self._active and dt > 0:
            self._elapsed += dt
        return self.opacity

    def fade_out(self):
        self._active = False
        self._elapsed = 0.0


class PulseEffect:
    """
    One-shot scale pulse 1.0 -> peak -> 1.0

    The release back to 1.0 runs on a timer. Triggering again before the
    release cancels the pending timer so pulses never overlap.
    """

    REST_SCALE = 1.0

    def __init__(self, peak: float = 1.2, hold: float = 0.3, timer_factory=threading.Timer):
        """
        Args:
            peak: Scale at the top of the pulse
            hold: Seconds before scale returns to rest
            timer_factory: Callable with threading.Timer's signature
        """
        self.peak = peak
        self.hold = hold
        self._timer_factory = timer_factory
        self._timer = None
        self._generation = 0
        self._scale = self.REST_SCALE
        self._pulse_count = 0
        self._lock = threading.Lock()

    @property
    def scale(self) -> float:
        return self._scale

    @property
    def pulse_count(self) -> int:
        return self._pulse_count

    @property
    def is_pending(self) -> bool:
        return self._timer is not None

    def trigger(self):
        with self._lock:
            self._cancel_timer()
            self._generation += 1
            self._scale = self.peak
            self._pulse_count += 1

            timer = self._timer_factory(self.hold, self._release, args=(self._generation,))
            timer.daemon = True
            self._timer = timer
            timer.start()
            logger.debug(f"💫 Pulse #{self._pulse_count} (scale {self.peak})")

    def cancel(self):
        """Drop any pending release and return to rest scale"""
        with self._lock:
            self._cancel_timer()
            self._generation += 1
            self._scale = self.REST_SCALE

    def _release(self, generation: int):
        with self._lock:
            # A superseded timer may still fire after cancel()
            if generation != self._generation:
                return
            self._scale = self.REST_SCALE
            self._timer = None

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
