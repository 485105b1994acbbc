"""
Configuration for the TECNOSIS irrigation backend
=================================================
Runtime settings loaded from environment variables (and an optional ``.env``
file). The four Tuya values are required; the process must not start without
them. Sets up the logging configuration as well.
"""

import os
from contextlib import suppress
from dataclasses import dataclass, field
from typing import Any

from dotenv import load_dotenv

from tecnosis.constants import Humidity, Timeouts
from tecnosis.domain.exceptions import ConfigurationError
from tecnosis.domain.irrigation import Credentials, Thresholds


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer.") from None


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be a number.") from None


def _env_stripped(name: str) -> str:
    return (os.getenv(name) or "").strip()


# Environment variable name for each required setting
REQUIRED_SETTINGS: dict[str, str] = {
    "tuya_endpoint": "TUYA_ENDPOINT",
    "tuya_access_id": "TUYA_ACCESS_ID",
    "tuya_secret_key": "TUYA_SECRET_KEY",
    "tuya_device_id": "TUYA_DEVICE_ID_VALVE",
}


@dataclass
class AppConfig:
    """Runtime configuration loaded from environment variables."""

    environment: str = field(default_factory=lambda: os.getenv("TECNOSIS_ENV", "development"))

    # Tuya cloud project (required)
    tuya_endpoint: str = field(default_factory=lambda: _env_stripped("TUYA_ENDPOINT"))
    tuya_access_id: str = field(default_factory=lambda: _env_stripped("TUYA_ACCESS_ID"))
    tuya_secret_key: str = field(default_factory=lambda: _env_stripped("TUYA_SECRET_KEY"), repr=False)
    tuya_device_id: str = field(default_factory=lambda: _env_stripped("TUYA_DEVICE_ID_VALVE"))
    http_timeout_seconds: float = field(
        default_factory=lambda: _env_float("TECNOSIS_HTTP_TIMEOUT", Timeouts.HTTP_REQUEST_TIMEOUT)
    )

    # Server binding
    host: str = field(default_factory=lambda: os.getenv("TECNOSIS_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: _env_int("TECNOSIS_PORT", 3000))
    cors_origins: str = field(default_factory=lambda: os.getenv("TECNOSIS_CORS_ORIGINS", "*"))

    # Access gating
    require_auth_on_control: bool = field(
        default_factory=lambda: _env_bool("TECNOSIS_REQUIRE_AUTH_ON_CONTROL", True)
    )
    login_username: str = field(default_factory=lambda: os.getenv("TECNOSIS_LOGIN_USERNAME", "admin"))
    login_password: str = field(default_factory=lambda: os.getenv("TECNOSIS_LOGIN_PASSWORD", "123"), repr=False)
    session_secret: str = field(
        default_factory=lambda: os.getenv("TECNOSIS_SESSION_SECRET", "TecnosisDevSessionSecret"), repr=False
    )

    # Hysteresis band (percent)
    humidity_threshold: float = field(
        default_factory=lambda: _env_float("TECNOSIS_HUMIDITY_THRESHOLD", Humidity.THRESHOLD)
    )
    humidity_margin: float = field(default_factory=lambda: _env_float("TECNOSIS_HUMIDITY_MARGIN", Humidity.MARGIN))

    # Startup
    probe_on_start: bool = field(default_factory=lambda: _env_bool("TECNOSIS_PROBE_ON_START", True))

    # Logging Configuration
    DEBUG: bool = field(default_factory=lambda: _env_bool("TECNOSIS_DEBUG", False))
    log_level: str = field(default_factory=lambda: os.getenv("TECNOSIS_LOG_LEVEL", "INFO"))
    log_dir: str = field(default_factory=lambda: os.getenv("TECNOSIS_LOG_DIR", "logs"))
    audit_log_path: str = field(default_factory=lambda: os.getenv("TECNOSIS_AUDIT_LOG_PATH", "logs/audit.log"))

    # Default insecure session secret - used only for detection
    _DEFAULT_SESSION_SECRET: str = field(default="TecnosisDevSessionSecret", init=False, repr=False)

    def __post_init__(self) -> None:
        """Normalize credentials; refuse the default session secret in production."""
        for attr in REQUIRED_SETTINGS:
            value = getattr(self, attr)
            setattr(self, attr, value.strip() if isinstance(value, str) else "")
        self.tuya_endpoint = self.tuya_endpoint.rstrip("/")

        if self.environment == "production" and self.session_secret == self._DEFAULT_SESSION_SECRET:
            raise RuntimeError(
                "SECURITY ERROR: Cannot use default session secret in production!\n"
                "Set TECNOSIS_SESSION_SECRET environment variable to a secure random value.\n"
                'Generate one with: python -c "import secrets; print(secrets.token_hex(32))"'
            )

    def missing_settings(self) -> list[str]:
        """Environment variable names of required settings that are empty."""
        return [env for attr, env in REQUIRED_SETTINGS.items() if not getattr(self, attr)]

    def validate(self) -> "AppConfig":
        """Raise :class:`ConfigurationError` unless every required setting is present."""
        missing = self.missing_settings()
        if missing:
            raise ConfigurationError(
                "Missing required environment variables: " + ", ".join(missing) + ". Check the .env file.",
                missing=missing,
            )
        if self.humidity_margin < 0:
            raise ConfigurationError("TECNOSIS_HUMIDITY_MARGIN must not be negative.")
        return self

    @property
    def credentials(self) -> Credentials:
        return Credentials(access_id=self.tuya_access_id, secret_key=self.tuya_secret_key)

    @property
    def thresholds(self) -> Thresholds:
        return Thresholds(threshold=self.humidity_threshold, margin=self.humidity_margin)

    def as_flask_config(self) -> dict[str, Any]:
        """Render configuration values for Flask application."""
        return {
            "ENV": self.environment,
            "SECRET_KEY": self.session_secret,
            "DEBUG": self.DEBUG,
            "REQUIRE_AUTH_ON_CONTROL": self.require_auth_on_control,
            "AUDIT_LOG_PATH": self.audit_log_path,
        }


def setup_logging(debug: bool = False, log_dir: str = "logs", level: str = "INFO") -> None:
    """Setup logging configuration. ``debug`` forces DEBUG over ``level``."""
    import logging
    import sys
    from logging.handlers import RotatingFileHandler

    log_level = logging.DEBUG if debug else logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    # Root logger
    root = logging.getLogger()
    root.setLevel(log_level)

    # Keep existing handlers but avoid adding duplicates when create_app is called multiple times
    has_console = any(getattr(h, "name", "") == "tecnosis_console" for h in root.handlers)
    has_file = any(getattr(h, "name", "") == "tecnosis_file" for h in root.handlers)
    added_handler = False

    # Console handler (force UTF-8, the log lines carry accented Spanish text)
    stream = sys.stdout
    with suppress(AttributeError, ValueError):
        stream.reconfigure(encoding="utf-8", errors="replace")
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    if not has_console:
        console_handler = logging.StreamHandler(stream=stream)
        console_handler.name = "tecnosis_console"
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)
        added_handler = True

    # File handler
    if not has_file:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, "tecnosis.log"),
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.name = "tecnosis_file"
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        added_handler = True

    # Ensure handler levels follow the desired log level
    for handler in root.handlers:
        if getattr(handler, "name", "") in {"tecnosis_console", "tecnosis_file"}:
            handler.setLevel(log_level)

    if added_handler:
        root.info(f"Logging initialized at level: {logging.getLevelName(log_level)}")

    if _env_bool("TECNOSIS_SILENCE_WERKZEUG", True):
        logging.getLogger("werkzeug").setLevel(logging.WARNING)

    # urllib3 logs every connection to the cloud at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def load_config(*, validate: bool = True, dotenv_path: str | None = None) -> AppConfig:
    """Helper for callers to load and validate configuration.

    Values already present in the process environment win over the ``.env`` file.
    """
    load_dotenv(dotenv_path=dotenv_path, override=False)
    config = AppConfig()
    if validate:
        config.validate()
    return config
