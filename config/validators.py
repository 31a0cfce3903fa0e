"""
Configuration Validation for the Check-in Feed Client

This module contains configuration validation logic.
Kept apart from settings.py so settings stay plain constants.
"""

from urllib.parse import urlparse

from utils.exceptions import ConfigurationError


def _is_http_url(value: str) -> bool:
    result = urlparse(value or "")
    return result.scheme in ("http", "https") and bool(result.netloc)


def validate_settings():
    """
    Validate that all required settings are properly configured.

    Raises:
        ConfigurationError: If required settings are missing or invalid.
    """
    # Import settings here to avoid circular imports
    from config import settings

    errors = []

    # Required environment variables
    required_vars = [
        ("AT_PROTOCOL_USERNAME", settings.AT_PROTOCOL_USERNAME),
        ("AT_PROTOCOL_PASSWORD", settings.AT_PROTOCOL_PASSWORD),
        ("FEED_URI", settings.FEED_URI),
    ]

    for var_name, var_value in required_vars:
        if not var_value:
            errors.append(f"Missing required environment variable: {var_name}")

    if settings.FEED_URI and not settings.FEED_URI.startswith("at://"):
        errors.append(f"FEED_URI must be an at:// URI, got {settings.FEED_URI}")

    for name, value in [("AT_PROTOCOL_SERVICE", settings.AT_PROTOCOL_SERVICE),
                        ("FEED_SERVICE_URL", settings.FEED_SERVICE_URL)]:
        if not _is_http_url(value):
            errors.append(f"{name} must be an http(s) URL, got {value!r}")

    # Validate numeric settings are within reasonable bounds
    numeric_validations = [
        ("FEED_FETCH_LIMIT", settings.FEED_FETCH_LIMIT, 1, 100),
        ("FEED_FETCH_MAX_ATTEMPTS", settings.FEED_FETCH_MAX_ATTEMPTS, 1, 10),
        ("FEED_RETRY_DELAY", settings.FEED_RETRY_DELAY, 0.0, 60.0),
        ("FEED_RETRY_BACKOFF", settings.FEED_RETRY_BACKOFF, 1.0, 10.0),
    ]

    for name, value, min_val, max_val in numeric_validations:
        if value < min_val or value > max_val:
            errors.append(f"{name} must be between {min_val} and {max_val}, got {value}")

    if settings.FEED_REQUEST_TIMEOUT <= 0:
        errors.append(f"FEED_REQUEST_TIMEOUT must be positive, got {settings.FEED_REQUEST_TIMEOUT}")

    # Raise all errors at once
    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ConfigurationError(error_msg)

    return True


def get_config_summary() -> dict:
    """
    Returns a summary of current configuration (without sensitive values).
    Useful for logging startup state.
    """
    # Import settings here to avoid circular imports
    from config import settings

    return {
        "account": {
            "username": settings.AT_PROTOCOL_USERNAME,
            "configured": bool(settings.AT_PROTOCOL_USERNAME and settings.AT_PROTOCOL_PASSWORD),
            "service": settings.AT_PROTOCOL_SERVICE,
        },
        "feed": {
            "service_url": settings.FEED_SERVICE_URL,
            "feed_uri": settings.FEED_URI,
            "limit": settings.FEED_FETCH_LIMIT,
            "timeout": settings.FEED_REQUEST_TIMEOUT,
        },
        "retry": {
            "max_attempts": settings.FEED_FETCH_MAX_ATTEMPTS,
            "delay": settings.FEED_RETRY_DELAY,
            "backoff": settings.FEED_RETRY_BACKOFF,
        },
    }
