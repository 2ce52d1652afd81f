"""
NMEA replay position source
Replays fixes from a recorded NMEA log (GGA, RMC and GLL sentences)
"""
import logging
from pathlib import Path
from typing import List, Optional, Union

from pynmeagps import NMEAReader, NMEAMessage, NMEAMessageError, NMEAParseError, NMEATypeError

from guidance.core.data_types import GeoPoint, InvalidCoordinateError
from .simulated import ManualPositionSource, IntervalWorker

logger = logging.getLogger(__name__)

POSITION_MESSAGES = ('GGA', 'RMC', 'GLL')


def parse_position(nmea_msg: NMEAMessage) -> Optional[GeoPoint]:
    """
    Extract a GeoPoint from a parsed NMEA message

    Returns None for message types without position and for sentences
    that report no fix.
    """
    msg_type = getattr(nmea_msg, 'msgID', None)
    if msg_type not in POSITION_MESSAGES:
        return None

    if msg_type == 'GGA':
        quality = getattr(nmea_msg, 'quality', 0)
        if quality in (None, '') or int(quality) == 0:
            logger.debug("📡 GGA without fix, skipping")
            return None
    else:
        # RMC / GLL: 'A' = valid, 'V' = void
        if getattr(nmea_msg, 'status', 'V') != 'A':
            logger.debug(f"📡 {msg_type} void status, skipping")
            return None

    lat = getattr(nmea_msg, 'lat', '')
    lon = getattr(nmea_msg, 'lon', '')
    if lat in (None, '') or lon in (None, ''):
        logger.debug(f"📡 {msg_type} message has empty lat/lon data")
        return None

    # pynmeagps already returns decimal degrees
    try:
        return GeoPoint(float(lat), float(lon))
    except (ValueError, InvalidCoordinateError) as e:
        logger.warning(f"📡 {msg_type}: invalid coordinates lat={lat}, lon={lon}: {e}")
        return None


def parse_sentence(sentence: Union[str, bytes]) -> Optional[GeoPoint]:
    """Parse one raw NMEA sentence; bad checksums and malformed lines give None"""
    if isinstance(sentence, str):
        sentence = sentence.encode('ascii', errors='replace')
    sentence = sentence.strip()
    if not sentence.startswith(b'$'):
        return None

    try:
        parsed = NMEAReader.parse(sentence)
    except (NMEAMessageError, NMEAParseError, NMEATypeError) as e:
        logger.debug(f"NMEA format/checksum error: {e}")
        return None

    return parse_position(parsed)


def load_track(path: Union[str, Path]) -> List[GeoPoint]:
    """Read every position fix from an NMEA log file"""
    points = []
    skipped = 0
    with open(path, 'rb') as stream:
        for line in stream:
            point = parse_sentence(line)
            if point is None:
                skipped += 1
                continue
            points.append(point)
    logger.info(f"📂 Loaded {len(points)} fixes from {path} ({skipped} lines skipped)")
    return points


class NmeaReplayPositionSource(ManualPositionSource):
    """
    Replays a recorded track, one fix per interval

    The first fix is delivered on subscribe. With loop=True the track
    restarts after the last fix, otherwise the last fix is repeated.
    """

    def __init__(self, track: Union[str, Path, List[GeoPoint]], interval: float = 1.0,
                 loop: bool = False, permission_granted: bool = True):
        if isinstance(track, (str, Path)):
            points = load_track(track)
        else:
            points = list(track)
        if not points:
            raise ValueError("NMEA track contains no position fixes")

        super().__init__(initial=points[0], permission_granted=permission_granted, name="NmeaReplay")
        self.points = points
        self.loop = loop
        self._index = 1
        self._worker = IntervalWorker(self._tick, interval, name="NmeaReplayPositionSource")

    @property
    def running(self) -> bool:
        return self._worker.running

    def next_point(self) -> GeoPoint:
        if self._index >= len(self.points):
            if self.loop:
                self._index = 0
            else:
                return self.points[-1]
        point = self.points[self._index]
        self._index += 1
        return point

    def _tick(self):
        self.push(self.next_point())

    def _on_first_subscriber(self):
        logger.info(f"📡 Replaying {len(self.points)} NMEA fixes")
        self._worker.start()

    def _on_last_unsubscribed(self):
        self._worker.stop()
