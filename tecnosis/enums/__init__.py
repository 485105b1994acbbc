"""
Enums Module
============

This module provides enumeration types for the TECNOSIS application.
Enums ensure type safety and consistency across the codebase.
"""

from tecnosis.enums.common import CommandSource, IrrigationDecision, ValveAction

__all__ = [
    "CommandSource",
    "IrrigationDecision",
    "ValveAction",
]
