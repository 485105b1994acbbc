from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import requests

from infrastructure.logging.audit import AuditLogger
from tecnosis.config import AppConfig
from tecnosis.services.application.auth_service import SessionAuthenticator
from tecnosis.services.application.auto_close_scheduler import AutoCloseScheduler, TimerFactory
from tecnosis.services.application.irrigation_controller import IrrigationController
from tecnosis.services.cloud.signing import RequestSigner
from tecnosis.services.cloud.token_provider import TokenProvider
from tecnosis.services.cloud.valve_client import ValveClient

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Aggregate and manage the single instance of every backend service."""

    config: AppConfig
    http_session: requests.Session
    audit_logger: AuditLogger
    signer: RequestSigner
    token_provider: TokenProvider
    valve_client: ValveClient
    auto_close_scheduler: AutoCloseScheduler
    irrigation_controller: IrrigationController
    authenticator: SessionAuthenticator
    _shutdown_complete: bool = field(default=False, init=False, repr=False)

    @classmethod
    def build(
        cls,
        config: AppConfig,
        *,
        session: Optional[requests.Session] = None,
        timer_factory: Optional[TimerFactory] = None,
    ) -> "ServiceContainer":
        """Construct the service container with all dependencies.

        Args:
            config: Application configuration (already validated)
            session: HTTP session for the cloud; a new one is created when omitted
            timer_factory: Replaces ``threading.Timer`` for the auto-close scheduler
        """
        logger.info("Building ServiceContainer...")
        http_session = session or requests.Session()
        audit_logger = AuditLogger(config.audit_log_path)

        signer = RequestSigner(config.credentials)
        token_provider = TokenProvider(
            config.tuya_endpoint, signer, session=http_session, timeout=config.http_timeout_seconds
        )
        valve_client = ValveClient(
            config.tuya_endpoint,
            config.tuya_device_id,
            signer,
            token_provider,
            session=http_session,
            timeout=config.http_timeout_seconds,
            audit_logger=audit_logger,
        )
        scheduler_kwargs = {"timer_factory": timer_factory} if timer_factory else {}
        scheduler = AutoCloseScheduler(valve_client, token_provider, **scheduler_kwargs)
        controller = IrrigationController(valve_client, token_provider, scheduler, thresholds=config.thresholds)
        authenticator = SessionAuthenticator(
            username=config.login_username,
            password=config.login_password,
            session_secret=config.session_secret,
            audit_logger=audit_logger,
        )

        container = cls(
            config=config,
            http_session=http_session,
            audit_logger=audit_logger,
            signer=signer,
            token_provider=token_provider,
            valve_client=valve_client,
            auto_close_scheduler=scheduler,
            irrigation_controller=controller,
            authenticator=authenticator,
        )
        logger.info("ServiceContainer built successfully.")
        return container

    def probe_connection(self) -> bool:
        """Check the cloud integration once: token, then the valve device record."""
        logger.info("-----------------------------------------")
        logger.info("Tuya integration check at startup...")
        try:
            if not self.token_provider.fetch_access_token():
                logger.error("Could not obtain an access token. The connection failed at the first step.")
                return False

            device = self.valve_client.describe_device()
            if device is None:
                logger.error("CRITICAL: failed to fetch the valve device.")
                return False

            logger.info("Tuya connection OK.")
            logger.info(
                "Device [%s] found (online=%s).",
                device.get("name", self.config.tuya_device_id),
                device.get("online"),
            )
            return True
        finally:
            logger.info("-----------------------------------------")

    def shutdown(self) -> None:
        """Release external resources before process exit."""
        if self._shutdown_complete:
            return
        self._shutdown_complete = True

        try:
            self.auto_close_scheduler.shutdown()
            logger.info("✓ Auto-close scheduler stopped")
        except Exception as e:
            logger.warning(f"Failed to stop auto-close scheduler: {e}")

        self.http_session.close()
        self.audit_logger.close()
        logger.info("ServiceContainer shutdown complete.")
