"""
Irrigation Domain Objects
=========================
Value objects passed between the cloud client, the scheduler and the controller.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

SWITCH_CODE = "switch_1"


@dataclass(frozen=True)
class Credentials:
    """Cloud project credentials. Loaded once at startup."""
    access_id: str
    secret_key: str = field(repr=False)


@dataclass(frozen=True)
class ControlResult:
    """Outcome of a single valve command."""
    success: bool
    message: Optional[str] = None

    @classmethod
    def failed(cls, message: str) -> "ControlResult":
        return cls(success=False, message=message)


@dataclass(frozen=True)
class ValveStatus:
    """Result of a status query.

    ``error`` is set when the query failed; ``is_open`` is then ``False``,
    the same value a genuinely closed valve reports.
    """
    is_open: bool
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def unknown(cls, error: str) -> "ValveStatus":
        return cls(is_open=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        return {"is_open": self.is_open, "ok": self.ok, "error": self.error}


@dataclass(frozen=True)
class Thresholds:
    """Hysteresis band: open at or below ``threshold``, close above ``threshold + margin``."""
    threshold: float = 45.0
    margin: float = 5.0

    @property
    def close_above(self) -> float:
        return self.threshold + self.margin

    def in_dead_zone(self, humidity: float) -> bool:
        return self.threshold < humidity <= self.close_above
