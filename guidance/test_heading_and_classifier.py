"""
Unit tests for heading resolution and arrow classification
"""
import math
import unittest

from guidance.core.data_types import MagneticReading, ArrowCategory
from guidance.algorithms.geo_utils import GeoUtils
from guidance.algorithms.heading_resolver import HeadingResolver
from guidance.algorithms.arrow_classifier import ArrowClassifier, classify


class TestHeadingResolver(unittest.TestCase):
    """Magnetometer vector to compass heading"""

    def setUp(self):
        self.resolver = HeadingResolver()

    def test_axis_headings(self):
        self.assertAlmostEqual(self.resolver.resolve(MagneticReading(1.0, 0.0, 0.0)), 0.0)
        self.assertAlmostEqual(self.resolver.resolve(MagneticReading(0.0, 1.0, 0.0)), 90.0)
        self.assertAlmostEqual(self.resolver.resolve(MagneticReading(-1.0, 0.0, 0.0)), 180.0)
        self.assertAlmostEqual(self.resolver.resolve(MagneticReading(0.0, -1.0, 0.0)), 270.0)

    def test_z_axis_ignored(self):
        flat = self.resolver.resolve(MagneticReading(3.0, 3.0, 0.0))
        tilted = self.resolver.resolve(MagneticReading(3.0, 3.0, 40.0))
        self.assertAlmostEqual(flat, tilted)
        self.assertAlmostEqual(flat, 45.0)

    def test_zero_vector_uses_fallback(self):
        heading, used_fallback = self.resolver.resolve_with_fallback(MagneticReading(0.0, 0.0, 0.0))
        self.assertEqual(heading, 0.0)
        self.assertTrue(used_fallback)

    def test_missing_sensor_uses_fallback(self):
        heading, used_fallback = self.resolver.resolve_with_fallback(None)
        self.assertEqual(heading, 0.0)
        self.assertTrue(used_fallback)

    def test_non_finite_uses_fallback(self):
        heading = self.resolver.resolve(MagneticReading(float('nan'), 1.0, 0.0))
        self.assertEqual(heading, 0.0)
        self.assertFalse(math.isnan(heading))

    def test_custom_fallback(self):
        resolver = HeadingResolver(fallback_heading=-90.0)
        self.assertEqual(resolver.resolve(None), 270.0)

    def test_non_finite_fallback_rejected(self):
        with self.assertRaises(ValueError):
            HeadingResolver(fallback_heading=float('nan'))
        with self.assertRaises(ValueError):
            HeadingResolver(fallback_heading=float('inf'))

    def test_range(self):
        for angle in range(-720, 720, 7):
            rad = math.radians(angle)
            heading = self.resolver.resolve(MagneticReading(math.cos(rad), math.sin(rad), 0.0))
            self.assertGreaterEqual(heading, 0.0)
            self.assertLess(heading, 360.0)


class TestArrowClassifier(unittest.TestCase):
    """Relative angle to arrow category"""

    def test_examples(self):
        self.assertEqual(classify(0.0), ArrowCategory.STRAIGHT)
        self.assertEqual(classify(45.0), ArrowCategory.CURVE_RIGHT)
        self.assertEqual(classify(-45.0), ArrowCategory.CURVE_LEFT)
        self.assertEqual(classify(170.0), ArrowCategory.TURN_AROUND)
        self.assertEqual(classify(-170.0), ArrowCategory.TURN_AROUND)
        self.assertEqual(classify(180.0), ArrowCategory.TURN_AROUND)

    def test_bearing_heading_examples(self):
        cases = [(0.0, ArrowCategory.STRAIGHT), (45.0, ArrowCategory.CURVE_RIGHT),
                 (315.0, ArrowCategory.CURVE_LEFT), (170.0, ArrowCategory.TURN_AROUND)]
        for bearing_deg, expected in cases:
            relative = GeoUtils.relative_angle(bearing_deg, 0.0)
            self.assertEqual(classify(relative), expected, bearing_deg)
        self.assertEqual(GeoUtils.relative_angle(315.0, 0.0), -45.0)

    def test_boundaries(self):
        self.assertEqual(classify(15.0), ArrowCategory.STRAIGHT)
        self.assertEqual(classify(-15.0), ArrowCategory.STRAIGHT)
        self.assertEqual(classify(15.01), ArrowCategory.CURVE_RIGHT)
        self.assertEqual(classify(-15.01), ArrowCategory.CURVE_LEFT)
        self.assertEqual(classify(89.99), ArrowCategory.CURVE_RIGHT)
        self.assertEqual(classify(-89.99), ArrowCategory.CURVE_LEFT)
        self.assertEqual(classify(90.0), ArrowCategory.TURN_AROUND)
        self.assertEqual(classify(-90.0), ArrowCategory.TURN_AROUND)

    def test_every_angle_has_one_category(self):
        for tenth in range(-1799, 1801):
            self.assertIsInstance(classify(tenth / 10.0), ArrowCategory)

    def test_non_finite_rejected(self):
        with self.assertRaises(ValueError):
            classify(float('nan'))
        with self.assertRaises(ValueError):
            classify(float('inf'))

    def test_custom_thresholds(self):
        classifier = ArrowClassifier(straight_threshold=5.0, turn_around_threshold=120.0)
        self.assertEqual(classifier.classify(10.0), ArrowCategory.CURVE_RIGHT)
        self.assertEqual(classifier.classify(100.0), ArrowCategory.CURVE_RIGHT)
        self.assertEqual(classifier.classify(-120.0), ArrowCategory.TURN_AROUND)

    def test_invalid_thresholds(self):
        with self.assertRaises(ValueError):
            ArrowClassifier(straight_threshold=90.0, turn_around_threshold=15.0)
        with self.assertRaises(ValueError):
            ArrowClassifier(straight_threshold=-1.0)
        with self.assertRaises(ValueError):
            ArrowClassifier(turn_around_threshold=200.0)

    def test_category_values(self):
        self.assertEqual(ArrowCategory.CURVE_LEFT.value, "curved-left")
        self.assertEqual(ArrowCategory.TURN_AROUND.value, "turn-around")


if __name__ == '__main__':
    unittest.main()
