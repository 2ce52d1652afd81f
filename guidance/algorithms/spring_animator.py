"""Damped spring easing for the arrow rotation"""
import math
import time
from typing import Optional

from .geo_utils import GeoUtils


class SpringAnimator:
    """
    Mass-spring-damper that glides the arrow angle towards its target
    Used to smooth rotation between direction updates

    With the default (critical) damping the angle converges without
    oscillating; lighter damping still decays since damping > 0.
    """

    MAX_STEP = 1.0 / 120.0  # seconds per integration sub-step
    MAX_DT = 1.0  # longer gaps are integrated as one second

    def __init__(self, stiffness: float = 100.0, mass: float = 1.0,
                 damping: Optional[float] = None, wrap_degrees: bool = True,
                 initial_value: float = 0.0):
        """
        Initialize spring animator

        Args:
            stiffness: Spring constant k
            mass: Mass m
            damping: Damping coefficient c. If None, uses critical damping 2*sqrt(k*m)
            wrap_degrees: Treat values as angles and take the shortest way round
            initial_value: Starting value
        """
        if stiffness <= 0 or mass <= 0:
            raise ValueError("stiffness and mass must be positive")
        if damping is not None and damping <= 0:
            raise ValueError("damping must be positive")

        self.stiffness = stiffness
        self.mass = mass
        self.damping = damping if damping is not None else 2 * math.sqrt(stiffness * mass)
        self.wrap_degrees = wrap_degrees

        self._value = initial_value
        self._velocity = 0.0
        self._target = initial_value
        self._last_time = None

    @property
    def value(self) -> float:
        """Current value; angles are reported in (-180, 180]"""
        if self.wrap_degrees:
            return GeoUtils.normalize_angle(self._value)
        return self._value

    @property
    def target(self) -> float:
        if self.wrap_degrees:
            return GeoUtils.normalize_angle(self._target)
        return self._target

    @property
    def velocity(self) -> float:
        return self._velocity

    def set_target(self, target: float):
        """Set new resting value, unwrapped to the nearest equivalent angle"""
        if self.wrap_degrees:
            self._target = self._value + GeoUtils.calculate_angle_difference(self._value, target)
        else:
            self._target = target

    def update(self, dt: Optional[float] = None) -> float:
        """
        Advance the spring

        Args:
            dt: Time delta since last update (seconds). If None, calculated automatically

        Returns:
            Current value
        """
        current_time = time.time()

        # Calculate dt if not provided
        if dt is None:
            if self._last_time is not None:
                dt = current_time - self._last_time
            else:
                dt = 0.0

        self._last_time = current_time

        if dt <= 0:
            return self.value

        remaining = min(dt, self.MAX_DT)
        while remaining > 0:
            step = min(self.MAX_STEP, remaining)
            displacement = self._value - self._target
            acceleration = (-self.stiffness * displacement - self.damping * self._velocity) / self.mass
            # Semi-implicit Euler
            self._velocity += acceleration * step
            self._value += self._velocity * step
            remaining -= step

        if self.is_settled():
            self._value = self._target
            self._velocity = 0.0

        return self.value

    def is_settled(self, tolerance: float = 0.01) -> bool:
        return (abs(self._value - self._target) < tolerance and
                abs(self._velocity) < tolerance)

    def reset(self, value: float = 0.0):
        """Reset animator state"""
        self._value = value
        self._target = value
        self._velocity = 0.0
        self._last_time = None
