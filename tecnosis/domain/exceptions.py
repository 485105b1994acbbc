"""Centralized exception hierarchy for TECNOSIS.

All domain and service exceptions inherit from :class:`TecnosisError` so that
callers can catch a single base class when they need a broad safety net, yet
still match on specific subclasses where narrower handling is appropriate.

Blueprint-level error handling (see ``tecnosis/utils/http.safe_route``) maps
these to the correct HTTP status codes automatically.

Hierarchy
---------
::

    TecnosisError (base - maps to 500)
    ├── ValidationError            (400 - bad humidity / action input)
    ├── AuthenticationError        (401 - bad login)
    ├── AccessDeniedError          (403 - missing or short control token)
    ├── InfrastructureError        (500 - token fetch / remote envelope failure)
    └── ConfigurationError         (500 - missing / invalid config)
"""

from __future__ import annotations


class TecnosisError(Exception):
    """Base exception for all TECNOSIS application errors.

    Parameters
    ----------
    message:
        Human-readable description. For 4xx classes it is returned to the
        HTTP client verbatim.
    detail:
        Optional machine-readable context dict attached to the error for
        structured logging.
    """

    http_status: int = 500

    def __init__(self, message: str = "", *, detail: dict | None = None) -> None:
        super().__init__(message)
        self.detail = detail or {}


# ── Client errors (4xx) ──────────────────────────────────────────────


class ValidationError(TecnosisError):
    """Caller supplied invalid or incomplete input (HTTP 400)."""

    http_status: int = 400


class AuthenticationError(TecnosisError):
    """Login credentials were rejected (HTTP 401)."""

    http_status: int = 401


class AccessDeniedError(TecnosisError):
    """Control request lacks an acceptable session token (HTTP 403)."""

    http_status: int = 403


# ── Server errors (5xx) ──────────────────────────────────────────────


class InfrastructureError(TecnosisError):
    """The IoT cloud could not be used for this operation (HTTP 500).

    Raised when no access token is available or the remote platform answers
    with a non-success envelope. The message is meant for the caller.
    """

    http_status: int = 500


class ConfigurationError(TecnosisError):
    """Missing or invalid application configuration (HTTP 500)."""

    http_status: int = 500

    def __init__(self, message: str = "", *, missing: list[str] | None = None) -> None:
        super().__init__(message, detail={"missing": list(missing or [])})
        self.missing = list(missing or [])
