"""
Valve Control API Blueprint
===========================

REST API endpoints for the mobile/web control app.

Endpoints:
- POST /api/control/valvula - Open or close the valve (optionally timed)
- GET /api/control/status - Humidity, hysteresis band, valve state and pending auto-close

Both endpoints require an ``x-auth-token`` header unless the app runs with
``TECNOSIS_REQUIRE_AUTH_ON_CONTROL=false``.
"""

from __future__ import annotations

from flask import Blueprint, Response
from pydantic import ValidationError

from tecnosis.blueprints.api._common import get_irrigation_controller, get_json, get_valve_client
from tecnosis.constants import Messages
from tecnosis.enums import ValveAction
from tecnosis.schemas import ValveControlRequest
from tecnosis.security.auth import control_token_required
from tecnosis.utils.http import error_response, safe_route, success_response

control_api = Blueprint("control_api", __name__)


@control_api.post("/valvula")
@control_token_required
@safe_route("Failed to control valve")
def control_valve() -> Response:
    """
    Open or close the valve.

    Body:
    - action: "open" | "close"
    - durationMinutes: optional; on open, close automatically after this many minutes
    """
    try:
        body = ValveControlRequest.model_validate(get_json())
        action = ValveAction(body.action)
    except (ValidationError, ValueError):
        return error_response(Messages.INVALID_ACTION, 400)

    result = get_irrigation_controller().manual_control(action, body.duration_minutes)
    if not result.success:
        return error_response(result.message or Messages.REMOTE_ERROR_FALLBACK, 500)

    return success_response(action=action.value)


@control_api.get("/status")
@control_token_required
@safe_route("Failed to read irrigation status")
def get_status() -> Response:
    """Current controller state plus a live valve status query."""
    status = get_valve_client().query_status()
    return success_response(**get_irrigation_controller().snapshot(), valve=status.to_dict())
