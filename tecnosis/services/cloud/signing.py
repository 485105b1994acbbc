"""
Tuya OpenAPI request signing.

Every call to the cloud carries an HMAC-SHA256 signature over a canonical
string built from the request. The token request signs itself with an empty
access token; every other request includes the token in the signing input.
"""

from __future__ import annotations

import hashlib
import hmac
import json
from typing import Any

from tecnosis.constants import SIGN_METHOD
from tecnosis.domain.irrigation import Credentials
from tecnosis.utils.time import epoch_ms


def serialize_body(body: Any) -> str:
    """Canonical JSON for a request body; ``""`` when there is none.

    The same string is hashed for the signature and sent on the wire.
    """
    if body is None:
        return ""
    return json.dumps(body, separators=(",", ":"), ensure_ascii=False)


def timestamp_ms() -> str:
    """Current epoch time in milliseconds, as the ``t`` header expects."""
    return str(epoch_ms())


class RequestSigner:
    """Builds signatures and signed header sets for one cloud project."""

    def __init__(self, credentials: Credentials):
        self._credentials = credentials

    @property
    def access_id(self) -> str:
        return self._credentials.access_id

    def string_to_sign(self, method: str, path: str, query: str = "", body: Any = None) -> str:
        body_hash = hashlib.sha256(serialize_body(body).encode("utf-8")).hexdigest()
        # The third line is a headers field the protocol always leaves empty here.
        return "\n".join([method.upper(), body_hash, "", path + (query or "")])

    def sign(
        self,
        method: str,
        path: str,
        query: str = "",
        body: Any = None,
        access_token: str | None = None,
        timestamp: str | None = None,
    ) -> str:
        """Return the uppercase hex HMAC-SHA256 signature for a request."""
        if timestamp is None:
            timestamp = timestamp_ms()
        signing_input = (
            self._credentials.access_id
            + (access_token or "")
            + timestamp
            + self.string_to_sign(method, path, query, body)
        )
        digest = hmac.new(
            self._credentials.secret_key.encode("utf-8"),
            signing_input.encode("utf-8"),
            hashlib.sha256,
        )
        return digest.hexdigest().upper()

    def headers(
        self,
        method: str,
        path: str,
        query: str = "",
        body: Any = None,
        access_token: str | None = None,
        timestamp: str | None = None,
    ) -> dict[str, str]:
        """Signed header set for a request. ``access_token`` is omitted when empty."""
        if timestamp is None:
            timestamp = timestamp_ms()
        headers = {
            "client_id": self._credentials.access_id,
            "t": timestamp,
            "sign": self.sign(method, path, query, body, access_token, timestamp),
            "sign_method": SIGN_METHOD,
            "Content-Type": "application/json",
        }
        if access_token:
            headers["access_token"] = access_token
        return headers
