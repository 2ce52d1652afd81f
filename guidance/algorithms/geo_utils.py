"""Geographic utility functions for direction finding"""
import math

from ..core.data_types import GeoPoint


class GeoUtils:
    """Utilities for geographic calculations"""

    EARTH_RADIUS = 6371000  # meters

    @staticmethod
    def haversine_distance(a: GeoPoint, b: GeoPoint) -> float:
        """
        Calculate distance between two GPS coordinates using Haversine formula

        Args:
            a: First point
            b: Second point

        Returns:
            Distance in meters
        """
        # Convert to radians
        lat1_rad = math.radians(a.latitude)
        lat2_rad = math.radians(b.latitude)
        delta_lat = math.radians(b.latitude - a.latitude)
        delta_lon = math.radians(b.longitude - a.longitude)

        # Haversine formula
        h = (math.sin(delta_lat / 2) ** 2 +
             math.cos(lat1_rad) * math.cos(lat2_rad) *
             math.sin(delta_lon / 2) ** 2)
        # Rounding can push h a hair above 1 for antipodal points
        h = min(1.0, h)
        c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))

        return GeoUtils.EARTH_RADIUS * c

    @staticmethod
    def calculate_bearing(a: GeoPoint, b: GeoPoint) -> float:
        """
        Calculate initial great-circle bearing from point a to point b

        Args:
            a: Starting point
            b: Target point

        Returns:
            Bearing in degrees [0, 360), where 0 is North.
            Identical points have no bearing; 0.0 (North) is returned.
        """
        if a == b:
            return 0.0

        lat1_rad = math.radians(a.latitude)
        lat2_rad = math.radians(b.latitude)
        delta_lon = math.radians(b.longitude - a.longitude)

        y = math.sin(delta_lon) * math.cos(lat2_rad)
        x = (math.cos(lat1_rad) * math.sin(lat2_rad) -
             math.sin(lat1_rad) * math.cos(lat2_rad) * math.cos(delta_lon))

        bearing_deg = math.degrees(math.atan2(y, x))

        # Normalize to 0-360
        return GeoUtils.normalize_compass(bearing_deg)

    @staticmethod
    def normalize_compass(angle: float) -> float:
        """Normalize angle to [0, 360)"""
        normalized = (angle + 360) % 360
        # (-tiny + 360) % 360 can round up to exactly 360.0
        if normalized >= 360.0:
            normalized = 0.0
        return normalized

    @staticmethod
    def normalize_angle(angle: float) -> float:
        """Normalize angle to (-180, 180] range"""
        while angle > 180:
            angle -= 360
        while angle <= -180:
            angle += 360
        return angle

    @staticmethod
    def relative_angle(bearing: float, heading: float) -> float:
        """
        Signed shortest rotation from heading to bearing

        Both inputs are in [0, 360), so a single +/-360 correction
        brings the difference into (-180, 180].

        Args:
            bearing: Bearing to target (0-360)
            heading: Device heading (0-360)

        Returns:
            Relative angle (-180 to 180, negative = target on the left)
        """
        relative = bearing - heading
        if relative > 180:
            relative -= 360
        elif relative <= -180:
            relative += 360
        return relative

    @staticmethod
    def calculate_angle_difference(current: float, target: float) -> float:
        """
        Calculate shortest angle difference between current and target heading

        Args:
            current: Current heading (any range)
            target: Target heading (any range)

        Returns:
            Angle difference (-180 to 180, negative = turn left, positive = turn right)
        """
        diff = target - current
        return GeoUtils.normalize_angle(diff)

    @staticmethod
    def destination_point(point: GeoPoint, bearing: float, distance: float) -> GeoPoint:
        """
        Calculate destination point given start point, bearing and distance

        Args:
            point: Starting point
            bearing: Bearing in degrees
            distance: Distance in meters

        Returns:
            Destination GeoPoint
        """
        lat_rad = math.radians(point.latitude)
        lon_rad = math.radians(point.longitude)
        bearing_rad = math.radians(bearing)

        angular_distance = distance / GeoUtils.EARTH_RADIUS

        dest_lat = math.asin(
            math.sin(lat_rad) * math.cos(angular_distance) +
            math.cos(lat_rad) * math.sin(angular_distance) * math.cos(bearing_rad)
        )

        dest_lon = lon_rad + math.atan2(
            math.sin(bearing_rad) * math.sin(angular_distance) * math.cos(lat_rad),
            math.cos(angular_distance) - math.sin(lat_rad) * math.sin(dest_lat)
        )

        # Wrap longitude back into [-180, 180]
        lon_deg = (math.degrees(dest_lon) + 540) % 360 - 180
        return GeoPoint(math.degrees(dest_lat), lon_deg)

    @staticmethod
    def offset_point(point: GeoPoint, delta_lat: float, delta_lon: float) -> GeoPoint:
        """
        Shift a point by raw degree offsets

        Raises:
            InvalidCoordinateError: if the result leaves the valid range
        """
        return GeoPoint(point.latitude + delta_lat, point.longitude + delta_lon)


def distance(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in meters"""
    return GeoUtils.haversine_distance(a, b)


def bearing(a: GeoPoint, b: GeoPoint) -> float:
    """Initial bearing in degrees [0, 360)"""
    return GeoUtils.calculate_bearing(a, b)
