from functools import wraps
from typing import Callable, TypeVar, cast

from flask import current_app, request

from tecnosis.constants import AUTH_TOKEN_HEADER
from tecnosis.domain.exceptions import AccessDeniedError
from tecnosis.utils.http import error_response

F = TypeVar("F", bound=Callable[..., object])


def control_token_required(view_func: F) -> F:
    """Reject control requests without an acceptable ``x-auth-token`` (JSON 403).

    The check is skipped when the app runs with ``REQUIRE_AUTH_ON_CONTROL`` off.
    """

    @wraps(view_func)
    def wrapped(*args, **kwargs):
        if current_app.config.get("REQUIRE_AUTH_ON_CONTROL", True):
            authenticator = current_app.config["CONTAINER"].authenticator
            try:
                authenticator.require_control_token(request.headers.get(AUTH_TOKEN_HEADER))
            except AccessDeniedError as exc:
                current_app.logger.warning(
                    "Blocked control request to %s from %s: missing or invalid token",
                    request.path,
                    request.remote_addr,
                )
                return error_response(str(exc), status=403)
        return view_func(*args, **kwargs)

    return cast(F, wrapped)
