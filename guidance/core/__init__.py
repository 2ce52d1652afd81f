"""Direction core interfaces and data structures"""
from .interfaces import DirectionObserver, TargetCatalog
from .data_types import (
    GeoPoint, MagneticReading, NavigationTarget, DirectionState,
    ArrowCategory, ProximityBand, SessionState, VisualEvent, VisualEventKind,
    ArrowPose, InvalidCoordinateError, validate_coordinates
)

__all__ = [
    'DirectionObserver',
    'TargetCatalog',
    'GeoPoint',
    'MagneticReading',
    'NavigationTarget',
    'DirectionState',
    'ArrowCategory',
    'ProximityBand',
    'SessionState',
    'VisualEvent',
    'VisualEventKind',
    'ArrowPose',
    'InvalidCoordinateError',
    'validate_coordinates'
]
