"""
Example script walking a shopper towards a product
Shows how the direction engine, catalog and session fit together
"""
import logging

from guidance.core.data_types import GeoPoint, VisualEvent, DirectionState
from guidance.core.interfaces import DirectionObserver
from guidance.direction_engine import DirectionEngine
from guidance.target_catalog import StoreCatalog, DEMO_STORE_LOCATION
from guidance.session import NavigationSession
from sensors.simulated import ManualPositionSource, SimulatedMagnetometer

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class ConsoleArrow(DirectionObserver):
    """Prints what a renderer would draw"""

    def on_direction_update(self, state: DirectionState):
        logger.info(f"  arrow={state.arrow_category.value:<12} "
                    f"relative={state.relative_angle_degrees:7.1f}°  "
                    f"distance={state.distance_meters:6.1f}m  band={state.proximity_band.value}")

    def on_visual_event(self, event: VisualEvent):
        if event.kind.value != "rotate":
            logger.info(f"  ✨ {event.kind.value}")


def example_walk_to_product():
    """Example 1: approach a product while the device faces east"""
    logger.info("=" * 60)
    logger.info("Example 1: Walk to Soda")
    logger.info("=" * 60)

    catalog = StoreCatalog()
    engine = DirectionEngine()
    engine.add_observer(ConsoleArrow())

    positions = ManualPositionSource()
    # Device facing east, read once
    magnetometer = SimulatedMagnetometer(headings=[90.0])
    magnetometer.last_reading = magnetometer.next_reading()

    session = NavigationSession(engine, positions, magnetometer)
    soda = catalog.require_target('soda')

    with session.navigate(soda):
        # 40 m south of the store, walking north
        for meters in (40, 25, 12, 8, 3):
            start = DEMO_STORE_LOCATION.latitude - meters / 111_195.0
            positions.push(GeoPoint(start, DEMO_STORE_LOCATION.longitude))

    logger.info(f"Session state after exit: {engine.session_state.value}")
    logger.info(f"Metrics: {engine.metrics.to_dict()}")


def example_picker_and_routes():
    """Example 2: dropdown items and route summaries"""
    logger.info("\n" + "=" * 60)
    logger.info("Example 2: Picker items and routes")
    logger.info("=" * 60)

    catalog = StoreCatalog()
    user = GeoPoint(40.7128, -74.0060)
    catalog.update_items_near_location(user)

    for item in catalog.get_picker_items():
        logger.info(f"  {item['label']} ({item['value']})")

    for target in catalog.get_nearby(user, radius=50):
        summary = catalog.route_summary(target.id, user)
        logger.info(f"  {target.display_name}: {summary['distance_m']}m, "
                    f"~{summary['estimated_time_s']}s - {'; '.join(summary['instructions'])}")


def main():
    example_walk_to_product()
    example_picker_and_routes()


if __name__ == '__main__':
    main()
