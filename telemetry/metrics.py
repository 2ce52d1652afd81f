"""Telemetry and metrics collection for direction sessions"""
from dataclasses import dataclass, field
from typing import List, Optional
from datetime import datetime
import statistics


@dataclass
class DirectionMetrics:
    """Metrics for direction session tracking"""

    # Sessions and targets
    sessions_started: int = 0
    sessions_stopped: int = 0
    targets_selected: int = 0

    # Recompute ticks
    tracking_ticks: int = 0
    suppressed_ticks: int = 0  # ticks while acquiring (no position yet)
    fallback_heading_ticks: int = 0

    # Visual events
    pulses: int = 0
    fade_ins: int = 0

    # Distance
    closest_distance: Optional[float] = None  # meters
    distance_samples: List[float] = field(default_factory=list)

    # Errors and events
    permission_denied_events: int = 0
    observer_errors: int = 0

    # Session info
    session_start: datetime = field(default_factory=datetime.now)

    MAX_SAMPLES = 500

    def add_session_started(self):
        """Record a navigation session starting"""
        self.sessions_started += 1

    def add_session_stopped(self):
        """Record a navigation session ending"""
        self.sessions_stopped += 1

    def add_target_selected(self):
        self.targets_selected += 1

    def add_tracking_tick(self, distance: float, used_fallback: bool):
        """Record a recompute that produced a direction state"""
        self.tracking_ticks += 1
        if used_fallback:
            self.fallback_heading_ticks += 1
        self.distance_samples.append(distance)
        if len(self.distance_samples) > self.MAX_SAMPLES:
            self.distance_samples = self.distance_samples[-self.MAX_SAMPLES:]
        if self.closest_distance is None or distance < self.closest_distance:
            self.closest_distance = distance

    def add_suppressed_tick(self):
        """Record a recompute skipped while waiting for a position"""
        self.suppressed_ticks += 1

    def add_pulse(self):
        self.pulses += 1

    def add_fade_in(self):
        self.fade_ins += 1

    def add_permission_denied(self):
        self.permission_denied_events += 1

    def add_observer_error(self):
        self.observer_errors += 1

    @property
    def average_distance(self) -> float:
        if not self.distance_samples:
            return 0.0
        return statistics.mean(self.distance_samples)

    def to_dict(self) -> dict:
        """Convert metrics to dictionary"""
        return {
            'sessions_started': self.sessions_started,
            'sessions_stopped': self.sessions_stopped,
            'targets_selected': self.targets_selected,
            'tracking_ticks': self.tracking_ticks,
            'suppressed_ticks': self.suppressed_ticks,
            'fallback_heading_ticks': self.fallback_heading_ticks,
            'pulses': self.pulses,
            'fade_ins': self.fade_ins,
            'closest_distance_m': round(self.closest_distance, 2) if self.closest_distance is not None else None,
            'average_distance_m': round(self.average_distance, 2),
            'permission_denied_events': self.permission_denied_events,
            'observer_errors': self.observer_errors,
            'session_start': self.session_start.isoformat(),
            'session_duration_s': (datetime.now() - self.session_start).total_seconds()
        }
