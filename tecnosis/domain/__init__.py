"""
Domain Value Objects Package
=============================
Immutable value objects and the exception hierarchy shared by every layer.
"""

from .exceptions import (
    AccessDeniedError,
    AuthenticationError,
    ConfigurationError,
    InfrastructureError,
    TecnosisError,
    ValidationError,
)
from .irrigation import SWITCH_CODE, ControlResult, Credentials, Thresholds, ValveStatus

__all__ = [
    "AccessDeniedError",
    "AuthenticationError",
    "ConfigurationError",
    "ControlResult",
    "Credentials",
    "InfrastructureError",
    "SWITCH_CODE",
    "TecnosisError",
    "Thresholds",
    "ValidationError",
    "ValveStatus",
]
