"""Relative angle to arrow shape classification"""
import math

from ..core.data_types import ArrowCategory


class ArrowClassifier:
    """
    Maps a relative angle in degrees (-180, 180] to an ArrowCategory

    Boundaries: |angle| <= straight_threshold is STRAIGHT and
    |angle| >= turn_around_threshold is TURN_AROUND; anything in
    between curves towards the side of the sign.
    """

    STRAIGHT_THRESHOLD = 15.0
    TURN_AROUND_THRESHOLD = 90.0

    def __init__(self, straight_threshold: float = STRAIGHT_THRESHOLD,
                 turn_around_threshold: float = TURN_AROUND_THRESHOLD):
        if not 0 <= straight_threshold < turn_around_threshold <= 180:
            raise ValueError(
                f"Thresholds must satisfy 0 <= straight < turn_around <= 180, "
                f"got {straight_threshold}, {turn_around_threshold}"
            )
        self.straight_threshold = straight_threshold
        self.turn_around_threshold = turn_around_threshold

    def classify(self, relative_angle: float) -> ArrowCategory:
        if not math.isfinite(relative_angle):
            raise ValueError(f"Relative angle must be finite, got {relative_angle}")

        magnitude = abs(relative_angle)
        if magnitude <= self.straight_threshold:
            return ArrowCategory.STRAIGHT
        if magnitude >= self.turn_around_threshold:
            return ArrowCategory.TURN_AROUND
        if relative_angle > 0:
            return ArrowCategory.CURVE_RIGHT
        return ArrowCategory.CURVE_LEFT


_default_classifier = ArrowClassifier()


def classify(relative_angle: float) -> ArrowCategory:
    """Classify with the default 15°/90° thresholds"""
    return _default_classifier.classify(relative_angle)
