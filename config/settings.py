import os
import math
import logging
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load environment variables from .env file
load_dotenv()

POSITION_SOURCE_KINDS = ("fixed", "manual", "nmea")
MAGNETOMETER_SOURCE_KINDS = ("manual", "simulated", "unavailable")


class ConfigurationError(Exception):
    """Raised when configuration is invalid or incomplete"""
    pass


def _env_float(env, name: str, default: str) -> float:
    raw = env.get(name, default).strip()
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got '{raw}'")


def _env_int(env, name: str, default: str) -> int:
    raw = env.get(name, default).strip()
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a valid integer, got '{raw}'")


def load_settings(env=None) -> dict:
    """
    Read all configuration sections

    Args:
        env: Mapping to read from. If None, uses os.environ
    """
    if env is None:
        env = os.environ
    return {
        "demo_location": {
            "lat": _env_float(env, "DEMO_LATITUDE", "40.7128"),
            "lon": _env_float(env, "DEMO_LONGITUDE", "-74.0060"),
        },
        "direction": {
            "near_threshold": _env_float(env, "NEAR_THRESHOLD_M", "20.0"),  # meters
            "very_near_threshold": _env_float(env, "VERY_NEAR_THRESHOLD_M", "5.0"),  # meters
            "pulse_threshold": _env_float(env, "PULSE_THRESHOLD_M", "10.0"),  # meters
            "straight_threshold": _env_float(env, "STRAIGHT_THRESHOLD_DEG", "15.0"),  # degrees
            "turn_around_threshold": _env_float(env, "TURN_AROUND_THRESHOLD_DEG", "90.0"),  # degrees
            "fallback_heading": _env_float(env, "FALLBACK_HEADING_DEG", "0.0"),  # north
        },
        "animation": {
            "spring_stiffness": _env_float(env, "SPRING_STIFFNESS", "100.0"),
            "fade_in_duration": _env_float(env, "FADE_IN_DURATION", "0.5"),  # seconds
            "pulse_scale": _env_float(env, "PULSE_SCALE", "1.2"),
            "pulse_hold": _env_float(env, "PULSE_HOLD", "0.3"),  # seconds
        },
        "sensors": {
            "position_source": env.get("POSITION_SOURCE", "fixed").strip().lower(),
            "position_interval": _env_float(env, "POSITION_INTERVAL", "1.0"),  # seconds
            "nmea_log_path": env.get("NMEA_LOG_PATH", "").strip(),
            "nmea_loop": env.get("NMEA_LOOP", "False").lower() == "true",
            "magnetometer_source": env.get("MAGNETOMETER_SOURCE", "manual").strip().lower(),
            "magnetometer_interval": _env_float(env, "MAGNETOMETER_INTERVAL", "0.1"),  # seconds
        },
        "app": {
            "host": env.get("FLASK_HOST", "0.0.0.0"),
            "port": _env_int(env, "FLASK_PORT", "5002"),
            "debug": env.get("FLASK_DEBUG", "False").lower() == "true",
        },
    }


def validate_direction_config(settings: dict) -> dict:
    """Validate configuration values; raises ConfigurationError listing every problem"""
    errors = []
    warnings = []

    for section in ("demo_location", "direction", "animation"):
        for key, value in settings[section].items():
            if isinstance(value, float) and not math.isfinite(value):
                errors.append(f"{section}.{key} must be a finite number, got {value}")
    for key in ("position_interval", "magnetometer_interval"):
        if not math.isfinite(settings["sensors"][key]):
            errors.append(f"{key.upper()} must be a finite number, got {settings['sensors'][key]}")

    demo = settings["demo_location"]
    if not -90 <= demo["lat"] <= 90:
        errors.append(f"DEMO_LATITUDE must be between -90 and 90, got {demo['lat']}")
    if not -180 <= demo["lon"] <= 180:
        errors.append(f"DEMO_LONGITUDE must be between -180 and 180, got {demo['lon']}")

    direction = settings["direction"]
    if not 0 < direction["very_near_threshold"] < direction["near_threshold"]:
        errors.append("VERY_NEAR_THRESHOLD_M must be positive and below NEAR_THRESHOLD_M")
    if direction["pulse_threshold"] <= 0:
        errors.append("PULSE_THRESHOLD_M must be positive")
    if not 0 <= direction["straight_threshold"] < direction["turn_around_threshold"] <= 180:
        errors.append("Arrow thresholds must satisfy 0 <= STRAIGHT < TURN_AROUND <= 180")

    animation = settings["animation"]
    for key in ("spring_stiffness", "fade_in_duration", "pulse_hold"):
        if animation[key] <= 0:
            errors.append(f"{key.upper()} must be positive")
    if animation["pulse_scale"] < 1.0:
        warnings.append(f"PULSE_SCALE {animation['pulse_scale']} shrinks the arrow instead of growing it")

    sensors = settings["sensors"]
    if sensors["position_source"] not in POSITION_SOURCE_KINDS:
        errors.append(f"POSITION_SOURCE must be one of {', '.join(POSITION_SOURCE_KINDS)}")
    elif sensors["position_source"] == "nmea" and not sensors["nmea_log_path"]:
        errors.append("NMEA_LOG_PATH is required when POSITION_SOURCE=nmea")
    if sensors["magnetometer_source"] not in MAGNETOMETER_SOURCE_KINDS:
        errors.append(f"MAGNETOMETER_SOURCE must be one of {', '.join(MAGNETOMETER_SOURCE_KINDS)}")
    for key in ("position_interval", "magnetometer_interval"):
        if sensors[key] <= 0:
            errors.append(f"{key.upper()} must be positive")

    port = settings["app"]["port"]
    if port < 1 or port > 65535:
        errors.append(f"FLASK_PORT must be between 1-65535, got {port}")

    # Log results
    if errors:
        error_msg = "Direction configuration validation failed:\n" + "\n".join(f"  - {err}" for err in errors)
        logger.error(error_msg)
        raise ConfigurationError(error_msg)

    if warnings:
        warning_msg = "Direction configuration warnings:\n" + "\n".join(f"  - {warn}" for warn in warnings)
        logger.warning(warning_msg)

    return settings


def _default_settings() -> dict:
    return load_settings({})


# Validate configuration on import
try:
    settings = validate_direction_config(load_settings())
except ConfigurationError as e:
    logger.error(f"Configuration invalid: {e}")
    logger.info("Falling back to default configuration")
    settings = _default_settings()

demo_location = settings["demo_location"]
direction_config = settings["direction"]
animation_config = settings["animation"]
sensor_config = settings["sensors"]
app_config = settings["app"]
