from __future__ import annotations

from flask import Blueprint, Response, current_app
from pydantic import ValidationError

from tecnosis.blueprints.api._common import get_authenticator, get_json
from tecnosis.constants import Messages
from tecnosis.schemas import LoginRequest
from tecnosis.utils.http import error_response, safe_route, success_response

auth_bp = Blueprint("auth", __name__)


@auth_bp.post("/login")
@safe_route("Login failed")
def authenticate() -> Response:
    try:
        body = LoginRequest.model_validate(get_json())
    except ValidationError:
        return error_response(Messages.LOGIN_FAILED, 401)

    # AuthenticationError (401) is mapped by safe_route
    token = get_authenticator().login(body.username, body.password)
    current_app.logger.info("User '%s' authenticated. Token generated.", body.username)
    return success_response(message=Messages.LOGIN_OK, token=token)
