"""
Blueprint Common Utilities
==========================

Shared helper functions for all API blueprints.
Import these instead of duplicating helper code in each blueprint.

Usage:
    from tecnosis.blueprints.api._common import (
        get_container, get_json, get_irrigation_controller,
    )
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from flask import current_app, request

if TYPE_CHECKING:
    from tecnosis.services.application.auth_service import SessionAuthenticator
    from tecnosis.services.application.irrigation_controller import IrrigationController
    from tecnosis.services.cloud.valve_client import ValveClient
    from tecnosis.services.container import ServiceContainer

logger = logging.getLogger("api._common")

# ============================================================================
# CONTAINER ACCESS
# ============================================================================

def get_container() -> "ServiceContainer":
    """
    Get the service container from Flask app config.

    Returns:
        ServiceContainer: The application service container

    Raises:
        RuntimeError: If container is not configured
    """
    container = current_app.config.get("CONTAINER")
    if not container:
        raise RuntimeError("ServiceContainer not found in app config")
    return container


def get_irrigation_controller() -> "IrrigationController":
    return get_container().irrigation_controller


def get_valve_client() -> "ValveClient":
    return get_container().valve_client


def get_authenticator() -> "SessionAuthenticator":
    return get_container().authenticator


# ============================================================================
# REQUEST HELPERS
# ============================================================================

def get_json() -> dict:
    """
    Get JSON request body with silent failure.

    Returns:
        dict: Parsed JSON body or empty dict if not available
    """
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}
