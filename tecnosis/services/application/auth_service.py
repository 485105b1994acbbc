"""
Session Authentication Service
==============================
Static-credential login for the control app and the placeholder token check
guarding the valve control endpoint.

Tokens are opaque: they are handed out on login and only checked for length
on control requests. Nothing verifies or revokes them.
"""

import hashlib
import hmac
import logging
from dataclasses import dataclass, field
from typing import Optional

from infrastructure.logging.audit import AuditLogger
from tecnosis.constants import MIN_AUTH_TOKEN_LENGTH, Messages
from tecnosis.domain.exceptions import AccessDeniedError, AuthenticationError
from tecnosis.utils.time import epoch_ms


def _matches(provided: Optional[str], expected: str) -> bool:
    if not isinstance(provided, str):
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


@dataclass
class SessionAuthenticator:
    """
    Checks the configured username/password and issues bearer tokens.
    """

    username: str
    password: str = field(repr=False)
    session_secret: str = field(repr=False)
    audit_logger: Optional[AuditLogger] = None

    def issue_token(self, username: str, now_ms: Optional[int] = None) -> str:
        """sha256 hex of username + secret + epoch milliseconds."""
        if now_ms is None:
            now_ms = epoch_ms()
        material = f"{username}{self.session_secret}{now_ms}"
        return hashlib.sha256(material.encode("utf-8")).hexdigest()

    def login(self, username: Optional[str], password: Optional[str]) -> str:
        """Return a new token for valid credentials.

        Raises:
            AuthenticationError: credentials do not match the configured pair.
        """
        if not (_matches(username, self.username) and _matches(password, self.password)):
            logging.warning("Authentication failed for user '%s': invalid credentials.", username)
            if self.audit_logger:
                self.audit_logger.log_event(
                    actor=str(username or "anonymous"), action="login", resource="session", outcome="denied"
                )
            raise AuthenticationError(Messages.LOGIN_FAILED)

        token = self.issue_token(username)
        logging.info("User '%s' authenticated. Token issued.", username)
        if self.audit_logger:
            self.audit_logger.log_event(actor=username, action="login", resource="session", outcome="success")
        return token

    @staticmethod
    def is_acceptable_token(token: Optional[str]) -> bool:
        """Placeholder check: any token longer than the minimum length passes."""
        return bool(token) and len(token) > MIN_AUTH_TOKEN_LENGTH

    def require_control_token(self, token: Optional[str]) -> None:
        if not self.is_acceptable_token(token):
            raise AccessDeniedError(Messages.ACCESS_DENIED)
