"""
Irrigation Controller
=====================

Holds the most recent soil humidity reading and turns it into valve commands
using a hysteresis band, and handles manual open/close requests (optionally
timed, through the auto-close scheduler).
"""

from __future__ import annotations

import logging
import math
import numbers
import threading
from typing import TYPE_CHECKING, Any

from tecnosis.constants import Humidity, Messages
from tecnosis.domain.exceptions import InfrastructureError, ValidationError
from tecnosis.domain.irrigation import ControlResult, Thresholds
from tecnosis.enums import CommandSource, IrrigationDecision, ValveAction
from tecnosis.utils.concurrency import synchronized

if TYPE_CHECKING:
    from tecnosis.services.application.auto_close_scheduler import AutoCloseScheduler
    from tecnosis.services.cloud.token_provider import TokenProvider
    from tecnosis.services.cloud.valve_client import ValveClient

logger = logging.getLogger(__name__)


def is_valid_humidity(value: Any) -> bool:
    """True for real numbers in [0, 100]. Booleans and NaN are rejected."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    if isinstance(value, float) and math.isnan(value):
        return False
    return Humidity.MIN <= value <= Humidity.MAX


def decide(humidity: float, is_open: bool, thresholds: Thresholds) -> IrrigationDecision:
    """Pure hysteresis decision for one reading and the current valve state."""
    if humidity <= thresholds.threshold:
        return IrrigationDecision.NONE if is_open else IrrigationDecision.OPEN
    if humidity > thresholds.close_above:
        return IrrigationDecision.CLOSE if is_open else IrrigationDecision.NONE
    return IrrigationDecision.NONE


class IrrigationController:
    """Automatic (humidity driven) and manual valve control."""

    def __init__(
        self,
        valve_client: "ValveClient",
        token_provider: "TokenProvider",
        scheduler: "AutoCloseScheduler",
        thresholds: Thresholds | None = None,
    ):
        self._valve = valve_client
        self._tokens = token_provider
        self._scheduler = scheduler
        self.thresholds = thresholds or Thresholds(threshold=Humidity.THRESHOLD, margin=Humidity.MARGIN)
        self._lock = threading.Lock()
        self._last_known_humidity: float = 0

    @property
    def last_known_humidity(self) -> float:
        return self._last_known_humidity

    # ── Sensor ingestion ─────────────────────────────────────────────

    def record_humidity(self, value: Any) -> IrrigationDecision:
        """Store a reading and evaluate the automatic logic right away.

        Raises:
            ValidationError: value is not a number in [0, 100]; state is untouched.
        """
        if not is_valid_humidity(value):
            raise ValidationError(Messages.SENSOR_INVALID, detail={"humidity": value})

        self._store(value)
        logger.info("[SENSOR] New humidity reading received: %s%%", value)
        return self.evaluate_auto_irrigation()

    @synchronized
    def _store(self, value: float) -> None:
        self._last_known_humidity = value

    def evaluate_auto_irrigation(self) -> IrrigationDecision:
        """Open when dry and closed, close when wet and open; otherwise do nothing."""
        is_open = self._valve.get_status()
        humidity = self._last_known_humidity
        decision = decide(humidity, is_open, self.thresholds)

        if decision is IrrigationDecision.OPEN:
            logger.info(
                "[AUTO] Humidity (%s%%) <= threshold (%s%%). Starting irrigation",
                humidity,
                self.thresholds.threshold,
            )
            self._send_auto_command(True)
        elif decision is IrrigationDecision.CLOSE:
            logger.info(
                "[AUTO] Humidity (%s%%) > threshold (%s%%). Stopping irrigation",
                humidity,
                self.thresholds.close_above,
            )
            result = self._send_auto_command(False)
            if result is None or not result.success:
                logger.warning(
                    "[AUTO] Humidity close not confirmed: %s",
                    result.message if result is not None else "access token unavailable",
                )
            # A humidity close always wins over a pending timed close
            if self._scheduler.cancel():
                if result is not None and result.success:
                    logger.info("[SCHEDULE] Closed by humidity. Manual auto-close timer CANCELLED")
                else:
                    logger.info("[SCHEDULE] Humidity close attempted. Manual auto-close timer CANCELLED")
        elif self.thresholds.in_dead_zone(humidity):
            logger.debug("[AUTO] Humidity %s%% inside the dead zone. No action", humidity)
        else:
            logger.debug("[AUTO] No action (humidity=%s%%, valve_open=%s)", humidity, is_open)
        return decision

    def _send_auto_command(self, is_open: bool) -> ControlResult | None:
        token = self._tokens.fetch_access_token()
        if not token:
            logger.error("[AUTO] Command skipped: access token unavailable")
            return None
        return self._valve.set_state(is_open, token, source=CommandSource.AUTO)

    # ── Manual control ───────────────────────────────────────────────

    def manual_control(self, action: ValveAction | str, duration_minutes: float = 0) -> ControlResult:
        """Open or close the valve on request; a timed open arms the auto-close.

        Raises:
            ValidationError: unknown action.
            InfrastructureError: no access token could be obtained.
        """
        try:
            action = ValveAction(action)
        except ValueError:
            raise ValidationError(Messages.INVALID_ACTION, detail={"action": action}) from None

        token = self._tokens.fetch_access_token()
        if not token:
            raise InfrastructureError(Messages.TOKEN_UNAVAILABLE)

        result = self._valve.set_state(action.is_open, token, source=CommandSource.MANUAL)
        if not result.success:
            return result

        if action is ValveAction.OPEN:
            if duration_minutes and duration_minutes > 0:
                self._scheduler.schedule(duration_minutes)
        elif self._scheduler.cancel():
            logger.info("[SCHEDULE] Manual close detected. Auto-close timer CANCELLED")
        return result

    def snapshot(self) -> dict[str, Any]:
        return {
            "last_known_humidity": self._last_known_humidity,
            "threshold": self.thresholds.threshold,
            "margin": self.thresholds.margin,
            "auto_close": self._scheduler.snapshot(),
        }
