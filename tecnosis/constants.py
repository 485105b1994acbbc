"""
Application Constants
=====================

Centralized constants to replace magic numbers and strings throughout the codebase.
Organized by domain for easy discovery and maintenance.

Usage:
    from tecnosis.constants import Humidity, CloudPaths, Messages
"""

# =============================================================================
# Timing Constants (seconds unless otherwise noted)
# =============================================================================

class Timeouts:
    """Timeout values for outbound calls."""
    HTTP_REQUEST_TIMEOUT = 20  # seconds, per call to the IoT cloud


# =============================================================================
# Irrigation
# =============================================================================

class Humidity:
    """Soil humidity bounds and the default hysteresis band (percent)."""
    MIN = 0
    MAX = 100
    THRESHOLD = 45  # open at or below
    MARGIN = 5  # close strictly above THRESHOLD + MARGIN


class AutoClose:
    """Limits of the timed close after a manual open."""
    MAX_DURATION_MINUTES = 7 * 24 * 60  # one week


# =============================================================================
# Tuya OpenAPI
# =============================================================================

class CloudPaths:
    """Path templates of the Tuya OpenAPI endpoints we call."""
    TOKEN = "/v1.0/token"
    TOKEN_QUERY = "?grant_type=1"
    DEVICE = "/v1.0/devices/{device_id}"
    COMMANDS = "/v1.0/devices/{device_id}/commands"


SIGN_METHOD = "HMAC-SHA256"


# =============================================================================
# HTTP surface
# =============================================================================

AUTH_TOKEN_HEADER = "x-auth-token"
MIN_AUTH_TOKEN_LENGTH = 10  # tokens must be strictly longer


class Messages:
    """Response strings. Clients match on these, keep them byte-identical."""
    SENSOR_INVALID = "Datos de humedad inválidos."
    SENSOR_RECEIVED = "Dato recibido."
    ACCESS_DENIED = "Acceso denegado. Token requerido o inválido."
    INVALID_ACTION = "Invalid action."
    TOKEN_UNAVAILABLE = "Token inválido o no disponible."
    REMOTE_ERROR_FALLBACK = "Internal Tuya error"
    DEVICE_ID_MISSING = "Device ID no definido."
    LOGIN_OK = "Login exitoso."
    LOGIN_FAILED = "Credenciales inválidas."
