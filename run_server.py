"""Entry point for the TECNOSIS irrigation backend.

Loads the configuration (environment first, then ``.env``), refuses to start
when a required cloud setting is missing, optionally checks the cloud
connection once, then serves the HTTP API with Flask's threaded server.
"""
from __future__ import annotations

import logging
import sys

from tecnosis import create_app
from tecnosis.config import load_config
from tecnosis.domain.exceptions import ConfigurationError

if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8")


def main() -> int:
    try:
        config = load_config()
    except ConfigurationError as exc:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
        logging.critical("CRITICAL ERROR: %s", exc)
        return 1

    app = create_app()
    container = app.config["CONTAINER"]

    if config.probe_on_start and not container.probe_connection():
        logging.warning("Tuya connection check failed; serving anyway.")

    logging.info("Server starting on http://%s:%s", config.host, config.port)
    logging.info("Press Ctrl+C to stop")

    try:
        app.run(host=config.host, port=config.port, debug=config.DEBUG, use_reloader=False, threaded=True)
        logging.info("Server stopped.")
        return 0
    except KeyboardInterrupt:
        logging.info("Server stopped by user.")
        return 0
    except Exception as exc:  # pragma: no cover - top-level runtime errors
        logging.exception("ERROR: Failed to start server: %s", exc)
        return 1
    finally:
        container.shutdown()


if __name__ == "__main__":
    raise SystemExit(main())
