"""Compass heading from raw magnetometer readings"""
import math
import logging
from typing import Optional, Tuple

from ..core.data_types import MagneticReading
from .geo_utils import GeoUtils

logger = logging.getLogger(__name__)


class HeadingResolver:
    """
    Converts a 3-axis magnetic vector into a compass heading

    Only the x/y plane is used (no tilt compensation, no declination).
    A missing sensor, a zero horizontal vector or a non-finite sample
    resolves to FALLBACK_HEADING so the heading is never NaN.
    """

    FALLBACK_HEADING = 0.0  # north

    def __init__(self, fallback_heading: float = FALLBACK_HEADING):
        if not math.isfinite(fallback_heading):
            raise ValueError(f"Fallback heading must be finite, got {fallback_heading}")
        self.fallback_heading = GeoUtils.normalize_compass(fallback_heading)
        self._fallback_logged = False

    def resolve(self, reading: Optional[MagneticReading]) -> float:
        """
        Resolve heading in degrees [0, 360)

        Args:
            reading: Latest magnetometer sample, or None if the sensor is unavailable
        """
        heading, _ = self.resolve_with_fallback(reading)
        return heading

    def resolve_with_fallback(self, reading: Optional[MagneticReading]) -> Tuple[float, bool]:
        """
        Resolve heading and report whether the fallback was used

        Returns:
            (heading_degrees, used_fallback)
        """
        if reading is None:
            self._log_fallback("magnetometer unavailable")
            return self.fallback_heading, True

        if not (math.isfinite(reading.x) and math.isfinite(reading.y)):
            self._log_fallback(f"non-finite reading x={reading.x}, y={reading.y}")
            return self.fallback_heading, True

        if reading.is_planar_zero:
            self._log_fallback("zero magnetic vector")
            return self.fallback_heading, True

        self._fallback_logged = False
        heading = math.degrees(math.atan2(reading.y, reading.x))
        return GeoUtils.normalize_compass(heading), False

    def _log_fallback(self, reason: str):
        # Once per run of fallback readings, sensors tick every ~100 ms
        if not self._fallback_logged:
            logger.warning(f"🧭 Using fallback heading {self.fallback_heading:.0f}° ({reason})")
            self._fallback_logged = True
