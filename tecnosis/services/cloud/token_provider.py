"""Grant-token acquisition for the Tuya OpenAPI."""

from __future__ import annotations

import logging
from typing import Optional

import requests

from tecnosis.constants import CloudPaths, Timeouts
from tecnosis.services.cloud.signing import RequestSigner

logger = logging.getLogger(__name__)


class TokenProvider:
    """
    Fetches a short-lived access token.

    Tokens are never cached: every control action asks for a fresh one, and
    a failure is reported as ``None`` so the caller decides what to do.
    There is exactly one attempt per call.
    """

    def __init__(
        self,
        base_url: str,
        signer: RequestSigner,
        session: Optional[requests.Session] = None,
        timeout: float = Timeouts.HTTP_REQUEST_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.signer = signer
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch_access_token(self) -> Optional[str]:
        """Return a fresh access token, or ``None`` if the cloud did not provide one."""
        path, query = CloudPaths.TOKEN, CloudPaths.TOKEN_QUERY
        headers = self.signer.headers("GET", path, query, None, access_token=None)
        # The token request carries no JSON body
        headers.pop("Content-Type", None)

        try:
            response = self.session.get(f"{self.base_url}{path}{query}", headers=headers, timeout=self.timeout)
            payload = response.json()
        except requests.exceptions.RequestException as e:
            logger.error("Token request failed: %s", e)
            return None
        except ValueError as e:
            logger.error("Token response is not JSON: %s", e)
            return None

        if not isinstance(payload, dict) or not payload.get("success"):
            logger.error("Tuya authentication error: %s", payload)
            return None

        result = payload.get("result")
        token = result.get("access_token") if isinstance(result, dict) else None
        if not token or not isinstance(token, str):
            logger.error("Token response without access_token: %s", payload)
            return None

        logger.debug("Access token obtained (expires in %ss)", result.get("expire_time"))
        return token
