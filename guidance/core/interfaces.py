"""Direction system interfaces"""
from abc import ABC, abstractmethod
from typing import Optional, List
from .data_types import GeoPoint, NavigationTarget, DirectionState, VisualEvent


class DirectionObserver(ABC):
    """Receives direction snapshots and visual events from the engine"""

    @abstractmethod
    def on_direction_update(self, state: DirectionState):
        """Called after every recompute while tracking"""
        pass

    def on_visual_event(self, event: VisualEvent):
        """Called for rotation, fade and pulse requests"""
        pass


class TargetCatalog(ABC):
    """Interface for product/target lookup"""

    @abstractmethod
    def get_all_targets(self) -> List[NavigationTarget]:
        """Get all targets in the catalog"""
        pass

    @abstractmethod
    def get_target(self, target_id: str) -> Optional[NavigationTarget]:
        """Get target by id"""
        pass

    @abstractmethod
    def search(self, query: str) -> List[NavigationTarget]:
        """Search targets by name, category, zone or description"""
        pass

    @abstractmethod
    def get_nearby(self, point: GeoPoint, radius: float = 50.0) -> List[NavigationTarget]:
        """Get in-stock targets within radius meters, nearest first"""
        pass
