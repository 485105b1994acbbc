"""
Irrigation Schemas
==================

Request schemas for the sensor, valve control and login endpoints.
"""

import math
import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tecnosis.constants import AutoClose

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_minutes(value: Any) -> int:
    """Lenient integer parse: leading digits of strings, truncated numbers, 0 otherwise."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        return int(match.group(1)) if match else 0
    return 0


class SensorReadingRequest(BaseModel):
    """Request schema for a soil humidity reading."""
    model_config = ConfigDict(extra="ignore")

    humidity: float = Field(
        ...,
        ge=0,
        le=100,
        description="Soil humidity in percent (0-100)",
    )

    @field_validator("humidity", mode="before")
    @classmethod
    def require_number(cls, v):
        """Only JSON numbers; strings and booleans are not coerced."""
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("humidity must be a number")
        return v


class ValveControlRequest(BaseModel):
    """Request schema for manual valve control."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    action: Optional[str] = Field(default=None, description="open or close")
    duration_minutes: int = Field(
        default=0,
        alias="durationMinutes",
        le=AutoClose.MAX_DURATION_MINUTES,
        description="Minutes until automatic close (open only, 0 = no timer)",
    )

    @field_validator("duration_minutes", mode="before")
    @classmethod
    def normalize_duration(cls, v):
        """Accept anything; unparseable values mean no timer."""
        return parse_minutes(v)


class LoginRequest(BaseModel):
    """Request schema for the static-credential login."""
    model_config = ConfigDict(extra="ignore")

    username: Optional[str] = None
    password: Optional[str] = None
