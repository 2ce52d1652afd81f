import unittest
from unittest.mock import Mock

from guidance.core.data_types import GeoPoint, MagneticReading, NavigationTarget, SessionState
from guidance.algorithms.geo_utils import GeoUtils
from guidance.direction_engine import DirectionEngine
from guidance.session import NavigationSession
from guidance.visual_effects import PulseEffect
from sensors.core.interfaces import PermissionDeniedError
from sensors.simulated import ManualPositionSource, ManualMagnetometer, UnavailableMagnetometer

STORE = GeoPoint(40.7128, -74.0060)


class TestNavigationSession(unittest.TestCase):

    def setUp(self):
        self.engine = DirectionEngine(pulse_effect=PulseEffect(timer_factory=Mock()))
        self.positions = ManualPositionSource()
        self.magnetometer = ManualMagnetometer()
        self.session = NavigationSession(self.engine, self.positions, self.magnetometer)
        self.target = NavigationTarget(id='soda', display_name='Soda', location=STORE)

    def test_start_subscribes_and_tracks(self):
        self.session.start_session(self.target)
        self.assertTrue(self.session.active)
        self.assertEqual(self.positions.subscriber_count, 1)
        self.assertEqual(self.magnetometer.subscriber_count, 1)
        self.assertEqual(self.engine.session_state, SessionState.ACQUIRING)

        self.positions.push(GeoUtils.destination_point(STORE, 180.0, 25.0))
        self.magnetometer.push(MagneticReading(1.0, 0.0, 0.0))
        self.assertEqual(self.engine.session_state, SessionState.TRACKING)
        self.assertAlmostEqual(self.engine.get_state().relative_angle_degrees, 0.0, delta=0.01)

    def test_known_position_tracks_immediately(self):
        self.positions.push(GeoUtils.destination_point(STORE, 180.0, 25.0))
        self.session.start_session(self.target)
        self.assertEqual(self.engine.session_state, SessionState.TRACKING)

    def test_stop_releases_everything(self):
        self.session.start_session(self.target)
        self.session.stop_session()

        self.assertFalse(self.session.active)
        self.assertEqual(self.positions.subscriber_count, 0)
        self.assertEqual(self.magnetometer.subscriber_count, 0)
        self.assertEqual(self.engine.session_state, SessionState.IDLE)
        self.assertEqual(self.engine.metrics.sessions_stopped, 1)

        # Stopping twice is harmless
        self.session.stop_session()
        self.assertEqual(self.engine.metrics.sessions_stopped, 1)

    def test_permission_denied_leaves_nothing_subscribed(self):
        self.positions.permission_granted = False
        with self.assertRaises(PermissionDeniedError):
            self.session.start_session(self.target)

        self.assertFalse(self.session.active)
        self.assertEqual(self.magnetometer.subscriber_count, 0)
        self.assertEqual(self.engine.session_state, SessionState.IDLE)
        self.assertEqual(self.engine.metrics.permission_denied_events, 1)

    def test_failing_magnetometer_releases_position(self):
        self.magnetometer.subscribe = Mock(side_effect=RuntimeError("driver error"))
        with self.assertRaises(RuntimeError):
            self.session.start_session(self.target)
        self.assertEqual(self.positions.subscriber_count, 0)
        self.assertEqual(self.engine.session_state, SessionState.IDLE)

    def test_unavailable_magnetometer_falls_back(self):
        session = NavigationSession(self.engine, self.positions, UnavailableMagnetometer())
        session.start_session(self.target)
        self.positions.push(GeoUtils.destination_point(STORE, 90.0, 25.0))

        state = self.engine.get_state()
        self.assertTrue(state.heading_fallback)
        self.assertEqual(state.heading_degrees, 0.0)
        self.assertFalse(self.engine.magnetometer_available)
        session.stop_session()
        self.assertEqual(self.positions.subscriber_count, 0)

    def test_switching_target_keeps_subscriptions(self):
        other = NavigationTarget(id='toothpaste', display_name='Toothpaste',
                                 location=GeoUtils.destination_point(STORE, 0.0, 10.0))
        self.session.start_session(self.target)
        self.session.start_session(other)
        self.assertEqual(self.positions.subscriber_count, 1)
        self.assertEqual(self.session.target, other)
        self.assertEqual(self.engine.metrics.sessions_started, 1)

    def test_navigate_context_releases_on_error(self):
        with self.assertRaises(KeyError):
            with self.session.navigate(self.target) as engine:
                self.assertIs(engine, self.engine)
                self.assertEqual(self.positions.subscriber_count, 1)
                raise KeyError("user closed the view")

        self.assertEqual(self.positions.subscriber_count, 0)
        self.assertEqual(self.magnetometer.subscriber_count, 0)
        self.assertEqual(self.engine.session_state, SessionState.IDLE)

    def test_session_as_context_manager(self):
        with self.session as session:
            session.start_session(self.target)
        self.assertFalse(self.session.active)
        self.assertEqual(self.positions.subscriber_count, 0)


if __name__ == '__main__':
    unittest.main()
