from __future__ import annotations

import functools
import logging
from typing import Any, Callable

from flask import Response, jsonify

_log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Generic user-facing message - never leak internals
# ---------------------------------------------------------------------------
_GENERIC_MESSAGE = "An internal error occurred"


def safe_error(
    exc: BaseException,
    status: int = 500,
    *,
    context: str = "",
) -> Response:
    """Return a generic error response while logging the real exception.

    Parameters
    ----------
    exc:
        The caught exception - logged server-side, **never** sent to the
        client.
    status:
        HTTP status code for the response.
    context:
        Optional human-readable context string logged alongside *exc*.
    """
    _log.error("API error [%s] %s: %s", status, context, exc, exc_info=exc)
    return error_response(_GENERIC_MESSAGE, status)


def success_response(status: int = 200, **fields: Any) -> Response:
    """``{"status": "success", **fields}`` with the given HTTP status."""
    payload: dict[str, Any] = {"status": "success"}
    payload.update(fields)
    response = jsonify(payload)
    response.status_code = status
    return response


def error_response(message: str, status: int = 500) -> Response:
    """``{"status": "error", "message": message}`` with the given HTTP status."""
    response = jsonify({"status": "error", "message": message})
    response.status_code = status
    return response


# ---------------------------------------------------------------------------
# Route decorator - eliminates per-route try/except boilerplate
# ---------------------------------------------------------------------------


def safe_route(
    error_message: str = _GENERIC_MESSAGE,
    *,
    error_status: int = 500,
) -> Callable:
    """Decorator that wraps a Flask route handler with standardized error handling.

    Catches :class:`~tecnosis.domain.exceptions.TecnosisError` subclasses and
    maps them to the correct HTTP status via ``exc.http_status``; their
    message is returned to the caller. Any other ``Exception`` is logged and
    returns a generic 500.

    Usage::

        @sensor_api.post("/sensor")
        @safe_route("Failed to record sensor data")
        def receive_sensor_data():
            ...
    """
    from tecnosis.domain.exceptions import TecnosisError

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Response:
            try:
                return fn(*args, **kwargs)
            except TecnosisError as exc:
                status = exc.http_status
                if status >= 500:
                    _log.error("API error [%s] %s: %s", status, error_message, exc)
                return error_response(str(exc) or error_message, status)
            except Exception as exc:
                return safe_error(exc, error_status, context=error_message)

        return wrapper

    return decorator
