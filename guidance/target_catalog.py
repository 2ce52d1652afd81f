"""In-memory store catalog of navigation targets"""
import math
import logging
from typing import List, Optional, Dict

from .core.interfaces import TargetCatalog
from .core.data_types import GeoPoint, NavigationTarget
from .algorithms.geo_utils import GeoUtils

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Base error for catalog lookups"""
    pass


class TargetNotFoundError(CatalogError):
    """Raised when a target id is not in the catalog"""

    def __init__(self, target_id: str):
        super().__init__(f"Target not found: {target_id}")
        self.target_id = target_id


class TargetOutOfStockError(CatalogError):
    """Raised when routing to a target that is out of stock"""

    def __init__(self, target: NavigationTarget, alternatives: List[NavigationTarget]):
        super().__init__(
            f"{target.display_name} is out of stock. {len(alternatives)} alternatives available."
        )
        self.target = target
        self.alternatives = alternatives


DEMO_STORE_LOCATION = GeoPoint(40.7128, -74.0060)

# (id, name, aisle, shelf, category, lat offset, lon offset); offsets in units of the placement offset
_DEMO_LAYOUT = [
    ('feastables', 'Feastables', 'Aisle 2', 'Center-3', 'Snacks', 1.0, 0.5),
    ('toothpaste', 'Toothpaste', 'Aisle 3', 'Top-1', 'Personal Care', -0.8, 1.2),
    ('soda', 'Soda', 'Aisle 1', 'Left-2', 'Beverages', 1.5, -0.7),
]


class StoreCatalog(TargetCatalog):
    """Simple in-memory catalog with demo products placed around the shopper"""

    DEFAULT_OFFSET = 0.0001  # degrees, roughly 10-15 meters
    WALKING_SPEED = 1.4  # m/s

    def __init__(self, targets: Optional[List[NavigationTarget]] = None):
        """
        Initialize catalog

        Args:
            targets: Initial targets. If None, the demo products are placed
                around DEMO_STORE_LOCATION.
        """
        self._targets: Dict[str, NavigationTarget] = {}
        if targets is None:
            targets = self.build_demo_targets(DEMO_STORE_LOCATION)
        for target in targets:
            self.add_target(target)

    @classmethod
    def build_demo_targets(cls, center: GeoPoint, offset: float = DEFAULT_OFFSET) -> List[NavigationTarget]:
        return [
            NavigationTarget(
                id=target_id,
                display_name=name,
                location=GeoUtils.offset_point(center, lat_factor * offset, lon_factor * offset),
                zone=aisle,
                shelf=shelf,
                category=category
            )
            for target_id, name, aisle, shelf, category, lat_factor, lon_factor in _DEMO_LAYOUT
        ]

    def update_items_near_location(self, point: GeoPoint, offset: float = DEFAULT_OFFSET):
        """
        Re-place the demo products around the user's location

        Keeps stock status of products that already exist.
        """
        for target in self.build_demo_targets(point, offset):
            existing = self._targets.get(target.id)
            if existing is not None:
                target = target.with_stock(existing.in_stock)
            self._targets[target.id] = target
        logger.info(f"📦 Demo items placed around ({point.latitude:.6f}, {point.longitude:.6f})")

    def add_target(self, target: NavigationTarget):
        """Add or replace target"""
        if target.id in self._targets:
            logger.debug(f"Replacing target '{target.id}'")
        self._targets[target.id] = target

    def remove_target(self, target_id: str) -> bool:
        if self._targets.pop(target_id, None) is not None:
            logger.info(f"Removed target '{target_id}'")
            return True
        return False

    def clear(self):
        count = len(self._targets)
        self._targets.clear()
        logger.info(f"🗑️  Cleared {count} target(s) from catalog")

    def get_all_targets(self) -> List[NavigationTarget]:
        return list(self._targets.values())

    def get_target(self, target_id: str) -> Optional[NavigationTarget]:
        return self._targets.get(target_id)

    def require_target(self, target_id: str) -> NavigationTarget:
        target = self._targets.get(target_id)
        if target is None:
            raise TargetNotFoundError(target_id)
        return target

    def get_picker_items(self) -> List[dict]:
        """Items for the product dropdown"""
        return [
            {'label': target.picker_label, 'value': target.id}
            for target in self._targets.values()
        ]

    def search(self, query: str) -> List[NavigationTarget]:
        needle = query.strip().lower()
        if not needle:
            return self.get_all_targets()

        def matches(target: NavigationTarget) -> bool:
            fields = (target.display_name, target.category, target.zone, target.description)
            return any(value and needle in value.lower() for value in fields)

        return [target for target in self._targets.values() if matches(target)]

    def get_nearby(self, point: GeoPoint, radius: float = 50.0) -> List[NavigationTarget]:
        with_distance = [
            (GeoUtils.haversine_distance(point, target.location), target)
            for target in self._targets.values()
            if target.in_stock
        ]
        with_distance = [item for item in with_distance if item[0] <= radius]
        with_distance.sort(key=lambda item: item[0])
        return [target for _, target in with_distance]

    def set_in_stock(self, target_id: str, in_stock: bool):
        target = self.require_target(target_id)
        self._targets[target_id] = target.with_stock(in_stock)
        logger.info(f"Stock for '{target_id}': {'in stock' if in_stock else 'out of stock'}")

    def get_alternatives(self, target: NavigationTarget) -> List[NavigationTarget]:
        """In-stock targets of the same category"""
        if not target.category:
            return []
        return [
            other for other in self._targets.values()
            if other.category == target.category and other.in_stock and other.id != target.id
        ]

    def route_summary(self, target_id: str, point: GeoPoint) -> dict:
        """
        Distance, walking time and instructions to a target

        Raises:
            TargetNotFoundError: unknown target id
            TargetOutOfStockError: target exists but is out of stock
        """
        target = self.require_target(target_id)
        if not target.in_stock:
            raise TargetOutOfStockError(target, self.get_alternatives(target))

        distance = GeoUtils.haversine_distance(point, target.location)

        instructions = []
        if target.zone:
            instructions.append(f"Head to {target.zone}")
        if target.shelf:
            instructions.append(f"Look for {target.display_name} on {target.shelf}")
        instructions.append(f"You have arrived at {target.display_name}")

        return {
            'target': target.to_dict(),
            'distance_m': round(distance, 2),
            'estimated_time_s': math.ceil(distance / self.WALKING_SPEED),
            'instructions': instructions
        }
