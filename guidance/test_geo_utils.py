"""
Unit tests for geodesy helpers
Distance, bearing and angle normalisation used by the direction engine
"""
import math
import unittest

from guidance.core.data_types import GeoPoint, InvalidCoordinateError, validate_coordinates
from guidance.algorithms.geo_utils import GeoUtils, distance, bearing


class TestDistance(unittest.TestCase):
    """Haversine distance"""

    def setUp(self):
        self.store = GeoPoint(40.7128, -74.0060)

    def test_same_point_is_zero(self):
        self.assertEqual(distance(self.store, self.store), 0.0)

    def test_symmetric(self):
        other = GeoPoint(40.7130, -74.0055)
        self.assertAlmostEqual(distance(self.store, other), distance(other, self.store), places=9)

    def test_small_offset_in_store_range(self):
        """0.0001° of latitude is about 11 meters"""
        other = GeoPoint(40.7129, -74.0060)
        d = distance(self.store, other)
        self.assertGreater(d, 10.0)
        self.assertLess(d, 15.0)

    def test_one_degree_latitude(self):
        d = distance(GeoPoint(0.0, 0.0), GeoPoint(1.0, 0.0))
        self.assertAlmostEqual(d, 6371000 * math.pi / 180, delta=1.0)

    def test_antipodal_points(self):
        d = distance(GeoPoint(0.0, 0.0), GeoPoint(0.0, 180.0))
        self.assertAlmostEqual(d, math.pi * GeoUtils.EARTH_RADIUS, delta=1.0)


class TestBearing(unittest.TestCase):
    """Initial great-circle bearing"""

    def setUp(self):
        self.origin = GeoPoint(52.0, 21.0)

    def test_cardinal_directions(self):
        self.assertAlmostEqual(bearing(self.origin, GeoPoint(52.001, 21.0)), 0.0, delta=0.01)
        self.assertAlmostEqual(bearing(self.origin, GeoPoint(52.0, 21.001)), 90.0, delta=0.1)
        self.assertAlmostEqual(bearing(self.origin, GeoPoint(51.999, 21.0)), 180.0, delta=0.01)
        self.assertAlmostEqual(bearing(self.origin, GeoPoint(52.0, 20.999)), 270.0, delta=0.1)

    def test_range(self):
        for lat, lon in [(52.01, 21.01), (51.99, 20.99), (52.01, 20.99), (51.99, 21.01)]:
            b = bearing(self.origin, GeoPoint(lat, lon))
            self.assertGreaterEqual(b, 0.0)
            self.assertLess(b, 360.0)

    def test_identical_points_point_north(self):
        self.assertEqual(bearing(self.origin, self.origin), 0.0)


class TestAngles(unittest.TestCase):
    """Angle normalisation"""

    def test_normalize_compass(self):
        self.assertEqual(GeoUtils.normalize_compass(-90.0), 270.0)
        self.assertEqual(GeoUtils.normalize_compass(360.0), 0.0)
        self.assertEqual(GeoUtils.normalize_compass(725.0), 5.0)
        self.assertLess(GeoUtils.normalize_compass(-1e-15), 360.0)

    def test_normalize_angle(self):
        self.assertEqual(GeoUtils.normalize_angle(180.0), 180.0)
        self.assertEqual(GeoUtils.normalize_angle(-180.0), 180.0)
        self.assertEqual(GeoUtils.normalize_angle(270.0), -90.0)
        self.assertEqual(GeoUtils.normalize_angle(-540.0), 180.0)

    def test_relative_angle(self):
        self.assertEqual(GeoUtils.relative_angle(10.0, 350.0), 20.0)
        self.assertEqual(GeoUtils.relative_angle(350.0, 10.0), -20.0)
        self.assertEqual(GeoUtils.relative_angle(0.0, 180.0), 180.0)
        self.assertEqual(GeoUtils.relative_angle(180.0, 0.0), 180.0)
        self.assertEqual(GeoUtils.relative_angle(90.0, 90.0), 0.0)

    def test_relative_angle_range(self):
        for b in range(0, 360, 15):
            for h in range(0, 360, 15):
                r = GeoUtils.relative_angle(float(b), float(h))
                self.assertGreater(r, -180.0)
                self.assertLessEqual(r, 180.0)


class TestDestinationPoint(unittest.TestCase):
    def test_travel_and_measure(self):
        start = GeoPoint(40.7128, -74.0060)
        dest = GeoUtils.destination_point(start, 45.0, 25.0)
        self.assertAlmostEqual(distance(start, dest), 25.0, delta=0.01)
        self.assertAlmostEqual(bearing(start, dest), 45.0, delta=0.1)

    def test_longitude_wraps(self):
        dest = GeoUtils.destination_point(GeoPoint(0.0, 179.9999), 90.0, 100.0)
        self.assertLessEqual(dest.longitude, 180.0)
        self.assertGreaterEqual(dest.longitude, -180.0)


class TestCoordinateValidation(unittest.TestCase):
    def test_valid(self):
        self.assertEqual(validate_coordinates(40.0, -74.0), (True, None))

    def test_invalid_values(self):
        for lat, lon in [(91.0, 0.0), (0.0, -181.0), (float('nan'), 0.0),
                         (0.0, float('inf')), ("40", 0.0), (True, 0.0)]:
            is_valid, error = validate_coordinates(lat, lon)
            self.assertFalse(is_valid, f"{lat}, {lon} should be rejected")
            self.assertIsNotNone(error)

    def test_geopoint_rejects_out_of_range(self):
        with self.assertRaises(InvalidCoordinateError):
            GeoPoint(100.0, 0.0)
        with self.assertRaises(ValueError):
            GeoPoint(0.0, float('nan'))

    def test_offset_point_out_of_range(self):
        with self.assertRaises(InvalidCoordinateError):
            GeoUtils.offset_point(GeoPoint(89.99995, 0.0), 0.0001, 0.0)


if __name__ == '__main__':
    unittest.main()
