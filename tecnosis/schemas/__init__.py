"""
Schemas Module
==============

This module provides Pydantic models for request validation.
Schemas ensure data integrity and provide automatic validation.
"""

from tecnosis.schemas.irrigation import (
    LoginRequest,
    SensorReadingRequest,
    ValveControlRequest,
    parse_minutes,
)

__all__ = [
    "LoginRequest",
    "SensorReadingRequest",
    "ValveControlRequest",
    "parse_minutes",
]
