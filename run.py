#!/usr/bin/env python3
import sys
import os
import logging
import signal
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from app import create_app, FinderApplicationManager
from config.settings import app_config, sensor_config, direction_config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
QUIET_LOGGERS = ('pynmeagps', 'pynmeagps.nmeareader', 'werkzeug')


def setup_logging():
    """Console logging, plus logs/aisle_finder.log when LOG_TO_FILE=true"""
    verbose = app_config['debug']
    handlers = [logging.StreamHandler(sys.stdout)]

    if os.getenv('LOG_TO_FILE', 'False').lower() == 'true':
        log_path = PROJECT_ROOT / 'logs' / 'aisle_finder.log'
        log_path.parent.mkdir(exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO,
                        format=LOG_FORMAT, handlers=handlers)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING if name == 'werkzeug' else logging.ERROR)


def install_shutdown_handlers(manager: FinderApplicationManager):
    """Release sensors and timers on SIGINT/SIGTERM"""
    def handle(signum, frame):
        logging.info(f"Signal {signum} received, ending navigation session...")
        try:
            manager.shutdown()
        except Exception as e:
            logging.error(f"Error during shutdown: {e}")
        logging.info("Shutdown complete")
        sys.exit(0)

    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, handle)


def check_environment():
    """
    Check the runtime before starting sensors

    Returns:
        (errors, warnings) lists of messages
    """
    errors = []
    warnings = []

    if sys.version_info < (3, 8):
        errors.append(f"Python 3.8+ required, got {sys.version.split()[0]}")

    if not (PROJECT_ROOT / '.env').exists():
        warnings.append("no .env file, built-in defaults are used")

    if sensor_config['position_source'] == 'nmea':
        track = Path(sensor_config['nmea_log_path'])
        if not track.is_file():
            errors.append(f"NMEA_LOG_PATH does not point to a file: {track}")
    elif sensor_config['position_source'] == 'fixed':
        warnings.append("position is the fixed demo coordinate, not a live fix")

    if sensor_config['magnetometer_source'] == 'unavailable':
        warnings.append(f"no magnetometer, arrow assumes heading {direction_config['fallback_heading']:.0f}°")

    return errors, warnings


def main():
    setup_logging()
    logger = logging.getLogger(__name__)
    logger.info("🛒 Aisle Finder starting...")

    errors, warnings = check_environment()
    for warning in warnings:
        logger.warning(f"⚠️  {warning}")
    if errors:
        for error in errors:
            logger.error(f"❌ {error}")
        sys.exit(1)

    try:
        manager = FinderApplicationManager()
        app = create_app(manager)
        install_shutdown_handlers(manager)

        logger.info(f"🧭 Sensors: position={sensor_config['position_source']}, "
                    f"magnetometer={sensor_config['magnetometer_source']}")
        logger.info(f"🌐 API on http://{app_config['host']}:{app_config['port']}/api/health "
                    f"(debug={app_config['debug']})")

        app.run(
            host=app_config['host'],
            port=app_config['port'],
            debug=app_config['debug'],
            threaded=True,
            use_reloader=False  # the reloader would start the sensor threads twice
        )
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.error(f"Failed to start Aisle Finder: {e}", exc_info=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
