import logging

from guidance.core.data_types import GeoPoint
from .core.interfaces import PositionSource, MagnetometerSource
from .simulated import (
    FixedPositionSource, ManualPositionSource, ManualMagnetometer,
    SimulatedMagnetometer, UnavailableMagnetometer
)
from .nmea_replay import NmeaReplayPositionSource

logger = logging.getLogger(__name__)


def create_position_source(sensor_config: dict, demo_location: dict) -> PositionSource:
    kind = sensor_config.get('position_source', 'fixed')
    location = GeoPoint(demo_location['lat'], demo_location['lon'])

    if kind == 'fixed':
        return FixedPositionSource(location, interval=sensor_config.get('position_interval', 1.0))
    if kind == 'manual':
        return ManualPositionSource(initial=location)
    if kind == 'nmea':
        return NmeaReplayPositionSource(
            sensor_config['nmea_log_path'],
            interval=sensor_config.get('position_interval', 1.0),
            loop=sensor_config.get('nmea_loop', False)
        )
    raise ValueError(f"Unknown position source: {kind}")


def create_magnetometer_source(sensor_config: dict) -> MagnetometerSource:
    kind = sensor_config.get('magnetometer_source', 'manual')

    if kind == 'manual':
        return ManualMagnetometer()
    if kind == 'simulated':
        # Slow sweep around the compass
        headings = [float(h) for h in range(0, 360, 5)]
        return SimulatedMagnetometer(headings, interval=sensor_config.get('magnetometer_interval', 0.1))
    if kind == 'unavailable':
        return UnavailableMagnetometer()
    raise ValueError(f"Unknown magnetometer source: {kind}")


class SensorFactory:
    @staticmethod
    def create_sources(sensor_config: dict, demo_location: dict):
        position_source = create_position_source(sensor_config, demo_location)
        magnetometer = create_magnetometer_source(sensor_config)
        logger.info(f"Sensors: position={type(position_source).__name__}, "
                    f"magnetometer={type(magnetometer).__name__}")
        return position_source, magnetometer
