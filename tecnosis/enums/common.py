"""
Common Enumerations
====================

Enums shared by the irrigation controller, the cloud client and the HTTP layer.
"""

from enum import Enum


class ValveAction(str, Enum):
    """
    Manual control actions accepted by the control endpoint.
    Used by: control blueprint, irrigation_controller
    """
    OPEN = "open"
    CLOSE = "close"

    @property
    def is_open(self) -> bool:
        return self is ValveAction.OPEN

    def __str__(self) -> str:
        return self.value


class IrrigationDecision(str, Enum):
    """
    Outcome of the hysteresis check for a humidity reading.
    Used by: irrigation_controller
    """
    OPEN = "open"
    CLOSE = "close"
    NONE = "none"

    def __str__(self) -> str:
        return self.value


class CommandSource(str, Enum):
    """
    Who asked for a valve command. Recorded in the audit log.
    """
    MANUAL = "manual"
    AUTO = "auto"
    TIMER = "timer"

    def __str__(self) -> str:
        return self.value
