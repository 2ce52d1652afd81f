"""Position and magnetometer sources"""
from .core.interfaces import (
    PositionSource, MagnetometerSource, Subscription,
    SensorError, SensorUnavailableError, PermissionDeniedError
)
from .simulated import (
    FixedPositionSource, ManualPositionSource, ManualMagnetometer,
    SimulatedMagnetometer, UnavailableMagnetometer
)

__all__ = [
    'PositionSource',
    'MagnetometerSource',
    'Subscription',
    'SensorError',
    'SensorUnavailableError',
    'PermissionDeniedError',
    'FixedPositionSource',
    'ManualPositionSource',
    'ManualMagnetometer',
    'SimulatedMagnetometer',
    'UnavailableMagnetometer'
]
