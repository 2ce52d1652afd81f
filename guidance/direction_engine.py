"""Direction engine: position + heading + target -> arrow direction"""
import logging
import threading
import time
from typing import Optional, List, Tuple

from .core.data_types import (
    GeoPoint, MagneticReading, NavigationTarget, DirectionState,
    ProximityBand, SessionState, VisualEvent, VisualEventKind, ArrowPose
)
from .core.interfaces import DirectionObserver
from .algorithms.geo_utils import GeoUtils
from .algorithms.heading_resolver import HeadingResolver
from .algorithms.arrow_classifier import ArrowClassifier
from .algorithms.spring_animator import SpringAnimator
from .visual_effects import FadeIn, PulseEffect
from telemetry.metrics import DirectionMetrics

logger = logging.getLogger(__name__)


class DirectionEngine:
    """
    Main direction computation
    Combines the latest position, magnetometer reading and selected target
    into a DirectionState and drives the arrow's visual feedback.

    State machine: IDLE → ACQUIRING → TRACKING
    - IDLE: no target, output suppressed
    - ACQUIRING: target selected, no position received yet
    - TRACKING: recomputed on every input tick
    """

    def __init__(self,
                 heading_resolver: Optional[HeadingResolver] = None,
                 classifier: Optional[ArrowClassifier] = None,
                 near_threshold: float = 20.0,
                 very_near_threshold: float = 5.0,
                 pulse_threshold: float = 10.0,
                 animator: Optional[SpringAnimator] = None,
                 fade_in: Optional[FadeIn] = None,
                 pulse_effect: Optional[PulseEffect] = None,
                 metrics: Optional[DirectionMetrics] = None,
                 clock=time.monotonic):
        """
        Initialize direction engine

        Args:
            heading_resolver: Magnetometer to heading conversion
            classifier: Relative angle to arrow category mapping
            near_threshold: Distance below which the target is NEAR (meters)
            very_near_threshold: Distance below which the target is VERY_NEAR (meters)
            pulse_threshold: Entering this distance triggers a pulse (meters)
            animator: Spring easing for the arrow rotation
            fade_in: Opacity ramp shown on the first tracking tick
            pulse_effect: Scale pulse shown when getting close
            metrics: Telemetry sink
            clock: Monotonic seconds source for frames without an explicit dt
        """
        if not 0 < very_near_threshold < near_threshold:
            raise ValueError(
                f"Proximity thresholds must satisfy 0 < very_near < near, "
                f"got {very_near_threshold}, {near_threshold}"
            )
        if pulse_threshold <= 0:
            raise ValueError("pulse_threshold must be positive")

        # Components
        self.heading_resolver = heading_resolver or HeadingResolver()
        self.classifier = classifier or ArrowClassifier()
        self.animator = animator or SpringAnimator()
        self.fade_in = fade_in or FadeIn()
        self.pulse_effect = pulse_effect or PulseEffect()
        self.metrics = metrics or DirectionMetrics()

        # Configuration
        self.near_threshold = near_threshold
        self.very_near_threshold = very_near_threshold
        self.pulse_threshold = pulse_threshold

        # State
        self._session_state = SessionState.IDLE
        self._target: Optional[NavigationTarget] = None
        self._current_position: Optional[GeoPoint] = None
        self._latest_reading: Optional[MagneticReading] = None
        self._magnetometer_available = True
        self._last_state: Optional[DirectionState] = None
        self._previous_distance: Optional[float] = None
        self._selection_generation = 0
        self._last_frame_time: Optional[float] = None
        self._clock = clock

        self._observers: List[DirectionObserver] = []

        # Sources may call back from their own threads
        self._lock = threading.RLock()
        # Held while delivering so a cleared selection cannot be overtaken by a late tick
        self._notify_lock = threading.RLock()

        logger.info("Direction engine initialized")
        logger.info(f"  Proximity: near<{near_threshold}m, very near<{very_near_threshold}m, "
                    f"pulse<{pulse_threshold}m")

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def select_target(self, target: Optional[NavigationTarget]):
        """Select target; None clears the selection"""
        if target is None:
            self.clear_target()
            return

        with self._lock:
            if self._target is not None and self._target.id == target.id:
                # Same product, possibly re-placed by the catalog
                self._target = target
                result = self._recompute()
            else:
                previous = self._target
                self._target = target
                self._reset_selection()
                self._session_state = SessionState.ACQUIRING
                self.metrics.add_target_selected()

                if previous is not None:
                    logger.info(f"🔄 Target changed: '{previous.display_name}' → '{target.display_name}'")
                logger.info(f"🎯 Target set: {target.display_name} at "
                            f"({target.location.latitude:.6f}, {target.location.longitude:.6f})")
                result = self._recompute()

                if self._session_state == SessionState.ACQUIRING:
                    logger.info("📡 Acquiring - waiting for first position fix")

        self._notify(*result)

    def clear_target(self):
        """Clear selection and suppress further output"""
        with self._lock:
            if self._session_state == SessionState.IDLE:
                return
            target = self._target
            self._target = None
            self._session_state = SessionState.IDLE
            self._reset_selection()
            event = VisualEvent(VisualEventKind.FADE_OUT, target_id=target.id if target else None, value=0.0)
            generation = self._selection_generation
            logger.info(f"🗑️  Target cleared: '{target.display_name if target else 'Unnamed'}'")

        self._notify(None, [event], generation)

    def update_position(self, point: GeoPoint):
        """Update current position from the position source"""
        if not isinstance(point, GeoPoint):
            raise TypeError(f"Expected GeoPoint, got {type(point).__name__}")

        with self._lock:
            self._current_position = point
            logger.debug(f"Position updated: ({point.latitude:.6f}, {point.longitude:.6f})")
            result = self._recompute()

        self._notify(*result)

    def update_magnetic_reading(self, reading: MagneticReading):
        """Update latest magnetometer sample"""
        if not isinstance(reading, MagneticReading):
            raise TypeError(f"Expected MagneticReading, got {type(reading).__name__}")

        with self._lock:
            if not self._magnetometer_available:
                logger.info("🧭 Magnetometer available again")
            self._magnetometer_available = True
            self._latest_reading = reading
            result = self._recompute()

        self._notify(*result)

    def set_magnetometer_unavailable(self):
        """Switch to the fallback heading until a new reading arrives"""
        with self._lock:
            if self._magnetometer_available:
                logger.warning("🧭 Magnetometer unavailable - using fallback heading")
            self._magnetometer_available = False
            self._latest_reading = None
            result = self._recompute()

        self._notify(*result)

    # ------------------------------------------------------------------
    # Outputs
    # ------------------------------------------------------------------

    @property
    def session_state(self) -> SessionState:
        return self._session_state

    @property
    def target(self) -> Optional[NavigationTarget]:
        return self._target

    @property
    def current_position(self) -> Optional[GeoPoint]:
        return self._current_position

    @property
    def magnetometer_available(self) -> bool:
        return self._magnetometer_available

    def get_state(self) -> Optional[DirectionState]:
        """Latest direction snapshot, or None unless tracking"""
        with self._lock:
            if self._session_state != SessionState.TRACKING:
                return None
            return self._last_state

    def advance_animation(self, dt: Optional[float] = None) -> ArrowPose:
        """
        Advance rotation easing and fade, return the arrow pose

        Args:
            dt: Seconds since last frame. If None, measured with the engine clock
        """
        with self._lock:
            now = self._clock()
            if dt is None:
                dt = 0.0 if self._last_frame_time is None else now - self._last_frame_time
            self._last_frame_time = now

            rotation = self.animator.update(dt)
            opacity = self.fade_in.update(dt)
            if self._session_state != SessionState.TRACKING:
                opacity = 0.0
            return ArrowPose(rotation=rotation, opacity=opacity, scale=self.pulse_effect.scale)

    def get_status(self) -> dict:
        with self._lock:
            state = self._last_state if self._session_state == SessionState.TRACKING else None
            return {
                'session_state': self._session_state.value,
                'target': self._target.to_dict() if self._target else None,
                'position': self._current_position.to_dict() if self._current_position else None,
                'magnetometer_available': self._magnetometer_available,
                'direction': state.to_dict() if state else None
            }

    def add_observer(self, observer: DirectionObserver):
        with self._lock:
            if observer not in self._observers:
                self._observers.append(observer)

    def remove_observer(self, observer: DirectionObserver):
        with self._lock:
            if observer in self._observers:
                self._observers.remove(observer)

    def shutdown(self):
        """Cancel pending timers"""
        self.pulse_effect.cancel()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def classify_proximity(self, distance: float) -> ProximityBand:
        if distance < self.very_near_threshold:
            return ProximityBand.VERY_NEAR
        if distance < self.near_threshold:
            return ProximityBand.NEAR
        return ProximityBand.FAR

    def _reset_selection(self):
        self._selection_generation += 1
        self._last_frame_time = None
        self._last_state = None
        self._previous_distance = None
        self.pulse_effect.cancel()
        self.fade_in.fade_out()

    def _recompute(self) -> Tuple[Optional[DirectionState], List[VisualEvent], int]:
        """
        Recompute direction from the latest inputs. Caller holds the lock.

        Returns:
            (state, events, selection generation the result belongs to)
        """
        generation = self._selection_generation
        if self._session_state == SessionState.IDLE or self._target is None:
            return None, [], generation

        if self._current_position is None:
            # No stale angle while waiting for a fix
            self.metrics.add_suppressed_tick()
            return None, [], generation

        target = self._target
        position = self._current_position
        reading = self._latest_reading if self._magnetometer_available else None

        bearing = GeoUtils.calculate_bearing(position, target.location)
        heading, used_fallback = self.heading_resolver.resolve_with_fallback(reading)
        relative = GeoUtils.relative_angle(bearing, heading)
        distance = GeoUtils.haversine_distance(position, target.location)

        state = DirectionState(
            bearing_degrees=bearing,
            heading_degrees=heading,
            relative_angle_degrees=relative,
            distance_meters=distance,
            arrow_category=self.classifier.classify(relative),
            proximity_band=self.classify_proximity(distance),
            target_id=target.id,
            heading_fallback=used_fallback
        )

        events = []
        if self._session_state == SessionState.ACQUIRING:
            self._session_state = SessionState.TRACKING
            # Arrow appears already pointing the right way
            self.animator.reset(relative)
            self.fade_in.start()
            self.metrics.add_fade_in()
            events.append(VisualEvent(VisualEventKind.FADE_IN, target_id=target.id, value=1.0))
            logger.info(f"✅ Tracking '{target.display_name}': {distance:.1f}m, "
                        f"bearing {bearing:.1f}°, relative {relative:.1f}°")

        self.animator.set_target(relative)
        events.append(VisualEvent(VisualEventKind.ROTATE, target_id=target.id, value=relative))

        entered_pulse_zone = distance < self.pulse_threshold and (
            self._previous_distance is None or self._previous_distance >= self.pulse_threshold
        )
        if entered_pulse_zone:
            self.pulse_effect.trigger()
            self.metrics.add_pulse()
            events.append(VisualEvent(VisualEventKind.PULSE, target_id=target.id, value=self.pulse_effect.peak))
            logger.info(f"📍 Within {self.pulse_threshold:.0f}m of '{target.display_name}' ({distance:.1f}m)")

        self._previous_distance = distance
        self._last_state = state
        self.metrics.add_tracking_tick(distance, used_fallback)

        logger.debug(f"Direction: bearing={bearing:.1f}°, heading={heading:.1f}°, "
                     f"relative={relative:.1f}°, distance={distance:.1f}m, "
                     f"arrow={state.arrow_category.value}, band={state.proximity_band.value}")
        return state, events, generation

    def _notify(self, state: Optional[DirectionState], events: List[VisualEvent], generation: int):
        """
        Deliver results outside the state lock

        Results from a selection that has since been cleared or replaced are
        dropped, also part way through the observer list.
        """
        if state is None and not events:
            return

        with self._notify_lock:
            with self._lock:
                observers = list(self._observers)

            for observer in observers:
                if generation != self._selection_generation:
                    logger.debug("Dropping direction update from a previous selection")
                    return
                try:
                    if state is not None:
                        observer.on_direction_update(state)
                    for event in events:
                        observer.on_visual_event(event)
                except Exception as e:
                    self.metrics.add_observer_error()
                    logger.error(f"Observer error: {e}")
