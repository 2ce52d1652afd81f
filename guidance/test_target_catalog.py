"""
Unit tests for the store catalog
"""
import unittest

from guidance.core.data_types import GeoPoint, NavigationTarget
from guidance.algorithms.geo_utils import GeoUtils
from guidance.target_catalog import (
    StoreCatalog, DEMO_STORE_LOCATION, TargetNotFoundError, TargetOutOfStockError
)


class TestStoreCatalog(unittest.TestCase):

    def setUp(self):
        self.catalog = StoreCatalog()

    def test_demo_products(self):
        ids = {target.id for target in self.catalog.get_all_targets()}
        self.assertEqual(ids, {'feastables', 'toothpaste', 'soda'})

    def test_demo_products_are_close_to_store(self):
        for target in self.catalog.get_all_targets():
            d = GeoUtils.haversine_distance(DEMO_STORE_LOCATION, target.location)
            self.assertLess(d, 30.0, target.id)

    def test_picker_items(self):
        items = self.catalog.get_picker_items()
        self.assertIn({'label': 'Soda - Aisle 1', 'value': 'soda'}, items)
        self.assertEqual(len(items), 3)

    def test_require_unknown_target(self):
        with self.assertRaises(TargetNotFoundError) as ctx:
            self.catalog.require_target('milk')
        self.assertEqual(ctx.exception.target_id, 'milk')
        self.assertIsNone(self.catalog.get_target('milk'))

    def test_search(self):
        self.assertEqual([t.id for t in self.catalog.search('SODA')], ['soda'])
        self.assertEqual([t.id for t in self.catalog.search('personal')], ['toothpaste'])
        self.assertEqual([t.id for t in self.catalog.search('aisle 2')], ['feastables'])
        self.assertEqual(len(self.catalog.search('  ')), 3)
        self.assertEqual(self.catalog.search('milk'), [])

    def test_update_items_near_location(self):
        user = GeoPoint(51.5074, -0.1278)
        self.catalog.set_in_stock('soda', False)
        self.catalog.update_items_near_location(user)

        soda = self.catalog.require_target('soda')
        self.assertLess(GeoUtils.haversine_distance(user, soda.location), 30.0)
        self.assertFalse(soda.in_stock)

    def test_nearby_sorted_and_in_stock(self):
        user = DEMO_STORE_LOCATION
        nearby = self.catalog.get_nearby(user, radius=50.0)
        distances = [GeoUtils.haversine_distance(user, t.location) for t in nearby]
        self.assertEqual(distances, sorted(distances))
        self.assertEqual(len(nearby), 3)

        self.catalog.set_in_stock('feastables', False)
        self.assertNotIn('feastables', [t.id for t in self.catalog.get_nearby(user, radius=50.0)])
        self.assertEqual(self.catalog.get_nearby(user, radius=1.0), [])

    def test_add_and_remove(self):
        milk = NavigationTarget(id='milk', display_name='Milk', location=DEMO_STORE_LOCATION,
                                zone='Aisle 4', category='Dairy')
        self.catalog.add_target(milk)
        self.assertEqual(self.catalog.require_target('milk'), milk)
        self.assertTrue(self.catalog.remove_target('milk'))
        self.assertFalse(self.catalog.remove_target('milk'))

    def test_empty_catalog(self):
        catalog = StoreCatalog(targets=[])
        self.assertEqual(catalog.get_all_targets(), [])
        self.catalog.clear()
        self.assertEqual(self.catalog.get_picker_items(), [])

    def test_route_summary(self):
        summary = self.catalog.route_summary('soda', DEMO_STORE_LOCATION)
        self.assertEqual(summary['target']['id'], 'soda')
        self.assertGreater(summary['distance_m'], 0)
        self.assertGreaterEqual(summary['estimated_time_s'], summary['distance_m'] / 1.4)
        self.assertEqual(summary['instructions'],
                         ['Head to Aisle 1', 'Look for Soda on Left-2', 'You have arrived at Soda'])

    def test_route_summary_without_shelf(self):
        milk = NavigationTarget(id='milk', display_name='Milk', location=DEMO_STORE_LOCATION,
                                zone='Aisle 4')
        self.catalog.add_target(milk)
        summary = self.catalog.route_summary('milk', DEMO_STORE_LOCATION)
        self.assertEqual(summary['instructions'], ['Head to Aisle 4', 'You have arrived at Milk'])
        self.assertIsNone(summary['target']['shelf'])

    def test_route_to_out_of_stock_offers_alternatives(self):
        cola = NavigationTarget(id='cola', display_name='Cola', location=DEMO_STORE_LOCATION,
                                category='Beverages')
        self.catalog.add_target(cola)
        self.catalog.set_in_stock('soda', False)

        with self.assertRaises(TargetOutOfStockError) as ctx:
            self.catalog.route_summary('soda', DEMO_STORE_LOCATION)
        self.assertEqual([t.id for t in ctx.exception.alternatives], ['cola'])


if __name__ == '__main__':
    unittest.main()
