from __future__ import annotations

import atexit
import contextlib
import logging
import signal
import threading
from pathlib import Path
from typing import Any, Optional

import requests
from flask import Flask, request
from werkzeug.exceptions import HTTPException

from tecnosis.blueprints.api import control_api, sensor_api
from tecnosis.blueprints.auth.routes import auth_bp
from tecnosis.blueprints.ui.routes import ui_bp
from tecnosis.config import load_config, setup_logging
from tecnosis.extensions import init_extensions
from tecnosis.services.application.auto_close_scheduler import TimerFactory


def create_app(
    config_overrides: dict[str, Any] | None = None,
    *,
    session: Optional[requests.Session] = None,
    timer_factory: Optional[TimerFactory] = None,
    install_signal_handlers: bool = True,
) -> Flask:
    """Build the irrigation backend.

    Args:
        config_overrides: AppConfig attribute overrides applied after the environment is read
        session: HTTP session used for every call to the IoT cloud
        timer_factory: Replaces ``threading.Timer`` for the auto-close scheduler
        install_signal_handlers: Register SIGINT/SIGTERM graceful shutdown

    Raises:
        ConfigurationError: a required setting is missing
    """
    config = load_config(validate=False)
    if config_overrides:
        for key, value in config_overrides.items():
            setattr(config, key.lower(), value)
    config.validate()

    # Configure logging early so the container build and the cloud probe are
    # visible in the terminal and tecnosis.log.
    setup_logging(debug=config.DEBUG, log_dir=config.log_dir, level=config.log_level)

    base_path = Path(__file__).resolve().parent.parent
    flask_app = Flask(__name__, template_folder=str(base_path / "templates"))
    flask_app.config.update(config.as_flask_config())
    flask_app.json.ensure_ascii = False

    init_extensions(flask_app, config.cors_origins)

    from tecnosis.services.container import ServiceContainer

    container = ServiceContainer.build(config, session=session, timer_factory=timer_factory)
    flask_app.config["CONTAINER"] = container

    # ── Graceful shutdown handlers ──────────────────────────────────
    _shutdown_lock = threading.Lock()
    _shutdown_done = False

    def _graceful_shutdown(reason: str = "unknown") -> None:
        nonlocal _shutdown_done
        if getattr(container, "_shutdown_complete", False):
            return
        with _shutdown_lock:
            if _shutdown_done:
                return
            _shutdown_done = True
        logging.info("Graceful shutdown initiated (%s)", reason)
        try:
            container.shutdown()
        except Exception as exc:
            logging.warning("Error during graceful shutdown: %s", exc)

    def _signal_handler(signum: int, _frame: object) -> None:
        sig_name = signal.Signals(signum).name
        logging.info("Received %s, shutting down", sig_name)
        _graceful_shutdown(sig_name)
        raise SystemExit(0)

    # Register atexit (covers normal interpreter exit)
    atexit.register(_graceful_shutdown, "atexit")

    # Register OS signal handlers (SIGINT=Ctrl-C, SIGTERM=container/systemd stop)
    if install_signal_handlers:
        for sig in (signal.SIGINT, signal.SIGTERM):
            with contextlib.suppress(OSError, ValueError):
                signal.signal(sig, _signal_handler)

    # Global JSON error handler: catches any unhandled exception on /api/
    # routes and returns a generic message instead of leaking stack traces.
    # Domain exceptions carry their own ``http_status``.
    @flask_app.errorhandler(Exception)
    def _handle_unhandled(exc):
        if not request.path.startswith("/api/"):
            # Flask's default HTML error pages handle UI routes
            if isinstance(exc, HTTPException):
                return exc
            raise exc
        from tecnosis.domain.exceptions import TecnosisError
        from tecnosis.utils.http import error_response, safe_error

        if isinstance(exc, HTTPException):
            status = int(exc.code or 500)
            if status >= 500:
                return safe_error(exc, status, context="http-exception")
            return error_response(exc.description or "Request failed", status)

        if isinstance(exc, TecnosisError):
            status = exc.http_status
            if status >= 500:
                return safe_error(exc, status, context=type(exc).__name__)
            return error_response(str(exc) or "Request failed", status)

        return safe_error(exc, 500, context="unhandled")

    flask_app.register_blueprint(sensor_api, url_prefix="/api/data")
    flask_app.register_blueprint(control_api, url_prefix="/api/control")
    flask_app.register_blueprint(auth_bp, url_prefix="/api/auth")
    flask_app.register_blueprint(ui_bp)

    for bp_name, _bp in flask_app.blueprints.items():
        logging.info(f" Registered blueprint: {bp_name}")

    logger = logging.getLogger(__name__)
    logger.info("TECNOSIS irrigation backend initialized.")

    return flask_app


__all__ = ["create_app"]
