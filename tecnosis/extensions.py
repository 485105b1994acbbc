"""Flask Extension Instances and Initialisation."""

import logging

from flask import Flask
from flask_cors import CORS

# The control app is served from other origins (mobile webview, static hosting)
cors = CORS()


def _parse_origins(cors_origins: str) -> str | list[str]:
    if not isinstance(cors_origins, str) or cors_origins.strip() in ("", "*"):
        return "*"
    return [origin.strip() for origin in cors_origins.split(",") if origin.strip()]


def init_extensions(app: Flask, cors_origins: str) -> None:
    """Initialise Flask extension objects."""
    origins = _parse_origins(cors_origins)
    try:
        cors.init_app(
            app,
            resources={r"/api/*": {"origins": origins}},
            allow_headers=["Content-Type", "x-auth-token"],
        )
        logging.info(f"✅ CORS initialized with origins: {origins}")
    except Exception as e:
        logging.error(f"Failed to initialize CORS: {e}", exc_info=True)
        raise
