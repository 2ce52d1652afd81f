"""Data structures for the direction system"""
import math
from dataclasses import dataclass, field
from typing import Optional, Tuple
from enum import Enum
from datetime import datetime


class InvalidCoordinateError(ValueError):
    """Raised when a latitude/longitude pair is outside the valid range"""
    pass


def validate_coordinates(lat, lon) -> Tuple[bool, Optional[str]]:
    """
    Validate GPS coordinates

    Args:
        lat: Latitude value
        lon: Longitude value

    Returns:
        tuple: (is_valid: bool, error_message: str or None)
    """
    # bool is an int subclass but never a coordinate
    if isinstance(lat, bool) or isinstance(lon, bool):
        return False, "Coordinates must be numbers"

    if not isinstance(lat, (int, float)) or not isinstance(lon, (int, float)):
        return False, "Coordinates must be numbers"

    if math.isnan(lat) or math.isnan(lon):
        return False, "Invalid coordinate values (NaN)"

    if math.isinf(lat) or math.isinf(lon):
        return False, "Invalid coordinate values (Infinity)"

    if not (-90 <= lat <= 90):
        return False, "Latitude must be between -90 and 90"

    if not (-180 <= lon <= 180):
        return False, "Longitude must be between -180 and 180"

    return True, None


class SessionState(Enum):
    """Direction engine states"""
    IDLE = "idle"
    ACQUIRING = "acquiring"
    TRACKING = "tracking"


class ArrowCategory(Enum):
    """Discrete arrow shapes shown by the overlay"""
    STRAIGHT = "straight"
    CURVE_LEFT = "curved-left"
    CURVE_RIGHT = "curved-right"
    TURN_AROUND = "turn-around"


class ProximityBand(Enum):
    """Distance classification used for visual feedback intensity"""
    FAR = "far"
    NEAR = "near"
    VERY_NEAR = "very_near"

    @property
    def color(self) -> str:
        """Arrow colour hint for renderers"""
        return _BAND_COLORS[self]


_BAND_COLORS = {
    ProximityBand.FAR: "#0099ff",
    ProximityBand.NEAR: "#ffff00",
    ProximityBand.VERY_NEAR: "#00ff00",
}


class VisualEventKind(Enum):
    """Fire-and-forget rendering requests"""
    ROTATE = "rotate"
    FADE_IN = "fade_in"
    FADE_OUT = "fade_out"
    PULSE = "pulse"


@dataclass(frozen=True)
class GeoPoint:
    """Immutable geographic coordinate in decimal degrees"""
    latitude: float
    longitude: float

    def __post_init__(self):
        is_valid, error = validate_coordinates(self.latitude, self.longitude)
        if not is_valid:
            raise InvalidCoordinateError(
                f"{error} (lat={self.latitude!r}, lon={self.longitude!r})"
            )

    def as_tuple(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)

    def to_dict(self):
        return {
            'lat': self.latitude,
            'lon': self.longitude
        }


@dataclass(frozen=True)
class MagneticReading:
    """
    Raw 3-axis magnetometer sample (arbitrary units)

    The zero vector means the sensor is absent; it is a valid input.
    """
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @property
    def is_planar_zero(self) -> bool:
        """True when the horizontal components carry no direction"""
        return self.x == 0 and self.y == 0

    def to_dict(self):
        return {'x': self.x, 'y': self.y, 'z': self.z}


@dataclass(frozen=True)
class NavigationTarget:
    """A product the user can be guided to"""
    id: str
    display_name: str
    location: GeoPoint
    zone: Optional[str] = None  # aisle label
    shelf: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    in_stock: bool = True

    @property
    def picker_label(self) -> str:
        if self.zone:
            return f"{self.display_name} - {self.zone}"
        return self.display_name

    def with_location(self, location: GeoPoint) -> 'NavigationTarget':
        return NavigationTarget(
            id=self.id,
            display_name=self.display_name,
            location=location,
            zone=self.zone,
            shelf=self.shelf,
            category=self.category,
            description=self.description,
            price=self.price,
            in_stock=self.in_stock
        )

    def with_stock(self, in_stock: bool) -> 'NavigationTarget':
        return NavigationTarget(
            id=self.id,
            display_name=self.display_name,
            location=self.location,
            zone=self.zone,
            shelf=self.shelf,
            category=self.category,
            description=self.description,
            price=self.price,
            in_stock=in_stock
        )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.display_name,
            'zone': self.zone,
            'shelf': self.shelf,
            'category': self.category,
            'description': self.description,
            'price': self.price,
            'in_stock': self.in_stock,
            'location': self.location.to_dict()
        }


@dataclass(frozen=True)
class DirectionState:
    """
    Snapshot of the direction towards the active target

    Recomputed from the current position, heading and target on every
    input change; never updated in place.
    """
    bearing_degrees: float  # [0, 360)
    heading_degrees: float  # [0, 360)
    relative_angle_degrees: float  # (-180, 180]
    distance_meters: float
    arrow_category: ArrowCategory
    proximity_band: ProximityBand
    target_id: Optional[str] = None
    heading_fallback: bool = False
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self):
        return {
            'bearing_degrees': round(self.bearing_degrees, 2),
            'heading_degrees': round(self.heading_degrees, 2),
            'relative_angle_degrees': round(self.relative_angle_degrees, 2),
            'distance_meters': round(self.distance_meters, 2),
            'arrow_category': self.arrow_category.value,
            'proximity_band': self.proximity_band.value,
            'arrow_color': self.proximity_band.color,
            'target_id': self.target_id,
            'heading_fallback': self.heading_fallback,
            'timestamp': self.timestamp.isoformat()
        }


@dataclass(frozen=True)
class VisualEvent:
    """Rendering request emitted by the direction engine"""
    kind: VisualEventKind
    target_id: Optional[str] = None
    value: Optional[float] = None  # rotation angle, scale or opacity target
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self):
        return {
            'kind': self.kind.value,
            'target_id': self.target_id,
            'value': self.value,
            'timestamp': self.timestamp.isoformat()
        }


@dataclass
class ArrowPose:
    """Current animated arrow transform"""
    rotation: float = 0.0  # degrees
    opacity: float = 0.0
    scale: float = 1.0

    def to_dict(self):
        return {
            'rotation': round(self.rotation, 2),
            'opacity': round(self.opacity, 3),
            'scale': round(self.scale, 3)
        }
