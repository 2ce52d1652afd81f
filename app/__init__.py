from flask import Flask, jsonify, request
from datetime import datetime, timezone
import logging
import threading
import time
import os
import atexit

from config.settings import demo_location, direction_config, animation_config, sensor_config
from guidance.core.data_types import GeoPoint, MagneticReading, InvalidCoordinateError, validate_coordinates
from guidance.algorithms.arrow_classifier import ArrowClassifier
from guidance.algorithms.heading_resolver import HeadingResolver
from guidance.algorithms.spring_animator import SpringAnimator
from guidance.visual_effects import FadeIn, PulseEffect
from guidance.direction_engine import DirectionEngine
from guidance.target_catalog import StoreCatalog, TargetNotFoundError, TargetOutOfStockError
from guidance.session import NavigationSession
from sensors.core.interfaces import PermissionDeniedError
from sensors.factory import SensorFactory

logger = logging.getLogger(__name__)


class FinderAppError(Exception):
    """Application-specific error for the finder API"""
    pass


def build_engine() -> DirectionEngine:
    """Direction engine configured from config.settings"""
    return DirectionEngine(
        heading_resolver=HeadingResolver(direction_config['fallback_heading']),
        classifier=ArrowClassifier(
            straight_threshold=direction_config['straight_threshold'],
            turn_around_threshold=direction_config['turn_around_threshold']
        ),
        near_threshold=direction_config['near_threshold'],
        very_near_threshold=direction_config['very_near_threshold'],
        pulse_threshold=direction_config['pulse_threshold'],
        animator=SpringAnimator(stiffness=animation_config['spring_stiffness']),
        fade_in=FadeIn(duration=animation_config['fade_in_duration']),
        pulse_effect=PulseEffect(peak=animation_config['pulse_scale'], hold=animation_config['pulse_hold'])
    )


class FinderApplicationManager:
    """Holds the engine, catalog, sensors and session behind the API"""

    MAX_FRAME_DT = 0.5  # seconds

    def __init__(self, engine=None, catalog=None, position_source=None, magnetometer=None):
        if position_source is None or magnetometer is None:
            default_position, default_magnetometer = SensorFactory.create_sources(sensor_config, demo_location)
            position_source = position_source or default_position
            magnetometer = magnetometer or default_magnetometer

        self.engine = engine or build_engine()
        self.catalog = catalog or StoreCatalog()
        self.position_source = position_source
        self.magnetometer = magnetometer
        self.session = NavigationSession(self.engine, position_source, magnetometer)

        self._frame_lock = threading.Lock()
        self._last_frame_time = None

    def next_frame_dt(self) -> float:
        with self._frame_lock:
            now = time.monotonic()
            dt = 0.0 if self._last_frame_time is None else now - self._last_frame_time
            self._last_frame_time = now
            return min(dt, self.MAX_FRAME_DT)

    def current_position(self):
        return self.engine.current_position or self.position_source.last_position

    def shutdown(self):
        logger.info("Stopping navigation session...")
        self.session.stop_session()
        self.engine.shutdown()


def _parse_coordinates(data):
    """Extract lat/lon from request JSON; returns (GeoPoint, None) or (None, error)"""
    if not data:
        return None, "No data provided"
    lat = data.get('lat')
    lon = data.get('lon')
    if lat is None or lon is None:
        return None, "lat and lon are required"

    is_valid, error = validate_coordinates(lat, lon)
    if not is_valid:
        return None, error
    return GeoPoint(float(lat), float(lon)), None


def create_app(manager: FinderApplicationManager = None):
    """Flask application factory"""
    app = Flask(__name__)

    app.config.update(
        SECRET_KEY=os.getenv('FLASK_SECRET_KEY', os.urandom(24)),
        DEBUG=os.getenv('FLASK_DEBUG', 'False').lower() == 'true',
    )

    if manager is None:
        manager = FinderApplicationManager()
    app.extensions['finder'] = manager

    # Register cleanup handler
    def cleanup():
        """Cleanup on application shutdown"""
        logger.info("Application shutting down...")
        try:
            manager.shutdown()
        except Exception as e:
            logger.error(f"Error during shutdown: {e}")

    atexit.register(cleanup)

    _register_routes(app, manager)
    _register_error_handlers(app)

    return app


def _register_error_handlers(app):
    """Register global error handlers"""

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"error": "Endpoint not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Internal server error: {error}", exc_info=True)
        return jsonify({"error": "Internal server error"}), 500

    @app.errorhandler(InvalidCoordinateError)
    def invalid_coordinate(error):
        return jsonify({"error": str(error), "success": False}), 400

    @app.errorhandler(TargetNotFoundError)
    def target_not_found(error):
        return jsonify({"error": str(error)}), 404

    @app.errorhandler(TargetOutOfStockError)
    def out_of_stock(error):
        return jsonify({
            "error": str(error),
            "alternatives": [target.to_dict() for target in error.alternatives]
        }), 409

    @app.errorhandler(PermissionDeniedError)
    def permission_denied(error):
        logger.warning(f"Permission denied: {error}")
        return jsonify({"error": str(error), "permission_denied": True}), 403

    @app.errorhandler(FinderAppError)
    def finder_error(error):
        logger.error(f"Finder application error: {error}")
        return jsonify({"error": str(error)}), 409


def _register_routes(app, manager: FinderApplicationManager):
    """Register Flask routes"""

    @app.route('/api/health')
    def api_health():
        engine = manager.engine
        return jsonify({
            "status": "ok",
            "session_active": manager.session.active,
            "session_state": engine.session_state.value,
            "magnetometer_available": manager.magnetometer.is_available(),
            "has_position": manager.current_position() is not None,
            "timestamp": datetime.now(timezone.utc).isoformat()
        })

    @app.route('/api/targets', methods=['GET'])
    def api_targets():
        targets = manager.catalog.get_all_targets()
        return jsonify({
            "items": manager.catalog.get_picker_items(),
            "targets": [target.to_dict() for target in targets],
            "count": len(targets)
        })

    @app.route('/api/targets/search', methods=['GET'])
    def api_search_targets():
        query = request.args.get('q', '')
        results = manager.catalog.search(query)
        return jsonify({
            "query": query,
            "targets": [target.to_dict() for target in results],
            "count": len(results)
        })

    @app.route('/api/targets/nearby', methods=['GET'])
    def api_nearby_targets():
        position = manager.current_position()
        if position is None:
            return jsonify({"error": "No position available", "targets": []}), 409
        try:
            radius = float(request.args.get('radius', '50'))
        except ValueError:
            return jsonify({"error": "radius must be a number"}), 400

        results = manager.catalog.get_nearby(position, radius)
        return jsonify({
            "radius_m": radius,
            "targets": [target.to_dict() for target in results],
            "count": len(results)
        })

    @app.route('/api/targets/relocate', methods=['POST'])
    def api_relocate_targets():
        point, error = _parse_coordinates(request.get_json(silent=True))
        if error:
            return jsonify({"error": error, "success": False}), 400

        manager.catalog.update_items_near_location(point)
        # Keep the active target pointing at its new placement
        current = manager.engine.target
        if current is not None:
            relocated = manager.catalog.get_target(current.id)
            if relocated is not None:
                manager.engine.select_target(relocated)
        return jsonify({"success": True, "items": manager.catalog.get_picker_items()})

    @app.route('/api/targets/<target_id>/route', methods=['GET'])
    def api_route(target_id):
        position = manager.current_position()
        if position is None:
            return jsonify({"error": "No position available"}), 409
        return jsonify(manager.catalog.route_summary(target_id, position))

    @app.route('/api/target', methods=['POST'])
    def api_select_target():
        data = request.get_json(silent=True)
        if not data or not data.get('id'):
            return jsonify({"error": "Target id is required"}), 400

        target = manager.catalog.require_target(data['id'])
        manager.session.start_session(target)
        logger.info(f"🎯 Target selected via API: {target.display_name}")
        return jsonify({
            "success": True,
            "target": target.to_dict(),
            "session_state": manager.engine.session_state.value
        })

    @app.route('/api/target', methods=['DELETE'])
    def api_clear_target():
        manager.session.stop_session()
        return jsonify({
            "success": True,
            "session_state": manager.engine.session_state.value
        })

    @app.route('/api/direction', methods=['GET'])
    def api_direction():
        return jsonify(manager.engine.get_status())

    @app.route('/api/arrow', methods=['GET'])
    def api_arrow():
        pose = manager.engine.advance_animation(manager.next_frame_dt())
        return jsonify(pose.to_dict())

    @app.route('/api/position', methods=['POST'])
    def api_position():
        point, error = _parse_coordinates(request.get_json(silent=True))
        if error:
            return jsonify({"error": error, "success": False}), 400

        push = getattr(manager.position_source, 'push', None)
        if push is None:
            raise FinderAppError("Position source does not accept pushed fixes")
        push(point)
        return jsonify({"success": True, "position": point.to_dict()})

    @app.route('/api/magnetometer', methods=['POST'])
    def api_magnetometer():
        data = request.get_json(silent=True)
        if not data:
            return jsonify({"error": "No data provided"}), 400
        try:
            reading = MagneticReading(
                x=float(data.get('x', 0.0)),
                y=float(data.get('y', 0.0)),
                z=float(data.get('z', 0.0))
            )
        except (TypeError, ValueError):
            return jsonify({"error": "x, y and z must be valid numbers"}), 400

        push = getattr(manager.magnetometer, 'push', None)
        if push is None:
            raise FinderAppError("Magnetometer does not accept pushed readings")
        push(reading)
        return jsonify({"success": True, "reading": reading.to_dict()})

    @app.route('/api/metrics', methods=['GET'])
    def api_metrics():
        return jsonify(manager.engine.metrics.to_dict())
