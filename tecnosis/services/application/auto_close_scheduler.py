"""
Auto-close scheduler for timed manual irrigation.

Features:
    - At most one pending close at any time
    - Scheduling replaces (and cancels) the previous timer
    - The close re-acquires an access token when it fires
    - Stale timers never close the valve
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Callable, Optional

from tecnosis.enums import CommandSource
from tecnosis.utils.concurrency import synchronized
from tecnosis.utils.time import utc_now

if TYPE_CHECKING:
    from tecnosis.services.cloud.token_provider import TokenProvider
    from tecnosis.services.cloud.valve_client import ValveClient


logger = logging.getLogger(__name__)

TimerFactory = Callable[..., threading.Timer]


class AutoCloseScheduler:
    """
    Owns the single pending "close the valve later" action.

    The pending timer is identified by a generation counter. Every schedule or
    cancel bumps the generation, so a timer thread that already woke up but
    lost the race against a cancel finds a newer generation and does nothing.
    """

    def __init__(
        self,
        valve_client: "ValveClient",
        token_provider: "TokenProvider",
        timer_factory: TimerFactory = threading.Timer,
    ):
        """
        Initialize the scheduler.

        Args:
            valve_client: Issues the close command when the timer fires
            token_provider: Source of the fresh token used at fire time
            timer_factory: ``threading.Timer`` compatible constructor
        """
        self.valve_client = valve_client
        self.token_provider = token_provider
        self._timer_factory = timer_factory
        self._lock = threading.RLock()
        self._timer: Optional[threading.Timer] = None
        self._generation = 0
        self._due_at: Optional[datetime] = None
        self._duration_minutes: Optional[float] = None

    @property
    def pending(self) -> bool:
        return self._timer is not None

    @property
    def due_at(self) -> Optional[datetime]:
        return self._due_at

    @synchronized
    def schedule(self, duration_minutes: float) -> None:
        """
        Arm a close after ``duration_minutes``, replacing any pending one.

        Args:
            duration_minutes: Minutes until the valve is closed; delays beyond
                ``threading.TIMEOUT_MAX`` seconds are clamped to it
        """
        if self._cancel_pending():
            logger.info("[SCHEDULE] Previous auto-close timer cancelled")

        # Timer.wait() overflows past TIMEOUT_MAX and the timer thread dies
        delay_seconds = min(float(duration_minutes) * 60, threading.TIMEOUT_MAX)
        due_at = utc_now() + timedelta(seconds=delay_seconds)

        self._generation += 1
        timer = self._timer_factory(delay_seconds, self._fire, args=(self._generation, duration_minutes))
        timer.daemon = True
        timer.start()
        self._timer = timer
        self._duration_minutes = duration_minutes
        self._due_at = due_at
        logger.info("[SCHEDULE] Valve OPEN. Close scheduled in %s minutes", duration_minutes)

    @synchronized
    def cancel(self) -> bool:
        """
        Cancel the pending close, if any.

        Returns:
            True if a timer was pending
        """
        cancelled = self._cancel_pending()
        if cancelled:
            logger.info("[SCHEDULE] Auto-close timer cancelled")
        return cancelled

    def shutdown(self) -> None:
        """Drop the pending close at process exit."""
        self.cancel()

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "pending": self._timer is not None,
                "due_at": self._due_at.isoformat() if self._due_at else None,
                "duration_minutes": self._duration_minutes,
            }

    def _cancel_pending(self) -> bool:
        self._generation += 1
        timer, self._timer = self._timer, None
        self._due_at = None
        self._duration_minutes = None
        if timer is None:
            return False
        timer.cancel()
        return True

    def _fire(self, generation: int, duration_minutes: float) -> None:
        with self._lock:
            if generation != self._generation:
                logger.debug("[SCHEDULE] Stale auto-close timer ignored")
                return

        # Network calls run outside the lock; a cancel arriving meanwhile
        # does not stop the close that is already in flight.
        logger.info("[SCHEDULE] Time is up (%s minutes). Attempting automatic CLOSE", duration_minutes)
        try:
            token = self.token_provider.fetch_access_token()
            if token:
                result = self.valve_client.set_state(False, token, source=CommandSource.TIMER)
                if not result.success:
                    logger.error("[SCHEDULE] Automatic close failed: %s", result.message)
            else:
                logger.error("[SCHEDULE] CLOSE FAILED: could not obtain a valid access token")
        finally:
            with self._lock:
                if generation == self._generation:
                    self._timer = None
                    self._due_at = None
                    self._duration_minutes = None
