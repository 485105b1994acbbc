import logging
from typing import Any, Dict, Optional

import requests

from infrastructure.logging.audit import AuditLogger
from tecnosis.constants import CloudPaths, Messages, Timeouts
from tecnosis.domain.irrigation import SWITCH_CODE, ControlResult, ValveStatus
from tecnosis.enums import CommandSource
from tecnosis.services.cloud.signing import RequestSigner, serialize_body
from tecnosis.services.cloud.token_provider import TokenProvider

logger = logging.getLogger(__name__)


def _direction(is_open: bool) -> str:
    return "ABRIR" if is_open else "CERRAR"


class ValveClient:
    """
    Controls the irrigation valve through the Tuya OpenAPI.

    Attributes:
        device_id (str): Tuya device identifier of the valve.
        base_url (str): API endpoint of the cloud data center.

    Methods:
        query_status(): Typed status, distinguishing "closed" from "query failed".
        get_status(): True when the valve reports open; False otherwise or on failure.
        set_state(is_open, token): Sends the switch_1 command.
        describe_device(): Device record, used by the startup probe.
    """

    def __init__(
        self,
        base_url: str,
        device_id: str,
        signer: RequestSigner,
        token_provider: TokenProvider,
        session: Optional[requests.Session] = None,
        timeout: float = Timeouts.HTTP_REQUEST_TIMEOUT,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """
        Initializes the valve client.

        Args:
            base_url (str): Cloud API base URL, without trailing slash.
            device_id (str): Valve device identifier. May be empty; commands then fail fast.
            signer (RequestSigner): Signs every outgoing request.
            token_provider (TokenProvider): Source of fresh access tokens for status queries.
            session (requests.Session): Shared HTTP session.
            timeout (float): Per-request timeout in seconds.
            audit_logger (AuditLogger): Optional sink for one record per command.
        """
        self.base_url = base_url.rstrip("/")
        self.device_id = device_id
        self.signer = signer
        self.token_provider = token_provider
        self.session = session or requests.Session()
        self.timeout = timeout
        self.audit_logger = audit_logger

    def query_status(self) -> ValveStatus:
        """Fetch a token and read the switch_1 data point of the valve."""
        if not self.device_id:
            return ValveStatus.unknown("device id not configured")
        token = self.token_provider.fetch_access_token()
        if not token:
            return ValveStatus.unknown("access token unavailable")

        try:
            payload = self._get_device(token)
        except requests.exceptions.RequestException as e:
            logger.warning("Valve status query failed: %s", e)
            return ValveStatus.unknown(f"network error: {e}")
        except ValueError as e:
            logger.warning("Valve status response is not JSON: %s", e)
            return ValveStatus.unknown("malformed response")

        if not isinstance(payload, dict) or not payload.get("success"):
            msg = payload.get("msg") if isinstance(payload, dict) else None
            logger.warning("Valve status query rejected: %s", msg or payload)
            return ValveStatus.unknown(msg or "remote error")

        result = payload.get("result") or {}
        status_list = result.get("status") if isinstance(result, dict) else None
        for entry in status_list or []:
            if isinstance(entry, dict) and entry.get("code") == SWITCH_CODE:
                return ValveStatus(is_open=bool(entry.get("value")))

        logger.warning("Valve status has no %s data point", SWITCH_CODE)
        return ValveStatus.unknown(f"{SWITCH_CODE} not reported")

    def get_status(self) -> bool:
        """Return True if the valve is open. Any failure reads as closed."""
        return self.query_status().is_open

    def set_state(
        self,
        is_open: bool,
        token: Optional[str],
        source: CommandSource = CommandSource.MANUAL,
    ) -> ControlResult:
        """
        Sends the open/close command to the valve.

        Args:
            is_open (bool): True to open, False to close.
            token (str): Access token obtained by the caller for this operation.
            source (CommandSource): Who asked for the command, for the audit log.

        Returns:
            ControlResult: success flag plus the remote or transport message on failure.
        """
        if not self.device_id:
            logger.error("Valve command not sent: device id is not configured")
            return self._audit(is_open, source, ControlResult.failed(Messages.DEVICE_ID_MISSING))

        path = CloudPaths.COMMANDS.format(device_id=self.device_id)
        body = {"commands": [{"code": SWITCH_CODE, "value": bool(is_open)}]}
        headers = self.signer.headers("POST", path, "", body, access_token=token)

        logger.info("[Tuya] Sending command: %s valve", _direction(is_open))
        try:
            response = self.session.post(
                f"{self.base_url}{path}",
                data=serialize_body(body).encode("utf-8"),
                headers=headers,
                timeout=self.timeout,
            )
            payload = response.json()
        except requests.exceptions.RequestException as e:
            logger.error("[Tuya] Network error sending %s command: %s", _direction(is_open), e)
            return self._audit(is_open, source, ControlResult.failed(str(e)))
        except ValueError as e:
            logger.error("[Tuya] %s command answered with non-JSON body: %s", _direction(is_open), e)
            return self._audit(is_open, source, ControlResult.failed(f"Invalid response from Tuya: {e}"))

        if isinstance(payload, dict) and payload.get("success"):
            logger.info("[Tuya] Command %s sent OK", _direction(is_open))
            return self._audit(is_open, source, ControlResult(success=True))

        msg = payload.get("msg") if isinstance(payload, dict) else None
        logger.error("[Tuya] Command %s rejected: %s", _direction(is_open), msg or payload)
        return self._audit(is_open, source, ControlResult(success=False, message=msg))

    def describe_device(self) -> Optional[Dict[str, Any]]:
        """Return the device record (name, online flag, status list), or None on failure."""
        token = self.token_provider.fetch_access_token()
        if not token:
            return None
        try:
            payload = self._get_device(token)
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error("Device lookup failed: %s", e)
            return None
        if not isinstance(payload, dict) or not payload.get("success"):
            logger.error("Device lookup rejected: %s", payload)
            return None
        result = payload.get("result")
        return result if isinstance(result, dict) else None

    def _get_device(self, token: str) -> Any:
        path = CloudPaths.DEVICE.format(device_id=self.device_id)
        headers = self.signer.headers("GET", path, "", None, access_token=token)
        response = self.session.get(f"{self.base_url}{path}", headers=headers, timeout=self.timeout)
        return response.json()

    def _audit(self, is_open: bool, source: CommandSource, result: ControlResult) -> ControlResult:
        if self.audit_logger:
            self.audit_logger.log_event(
                actor=str(source),
                action="open" if is_open else "close",
                resource=f"valve:{self.device_id or '-'}",
                outcome="success" if result.success else "error",
                message=result.message,
            )
        return result
