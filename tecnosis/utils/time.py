"""Utility functions for time handling.

All timestamps should be UTC and timezone-aware.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return current UTC time as an aware datetime."""
    return datetime.now(timezone.utc)


def epoch_ms() -> int:
    """Milliseconds since the Unix epoch."""
    return int(time.time() * 1000)
