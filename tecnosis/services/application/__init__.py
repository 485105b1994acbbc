from tecnosis.services.application.auth_service import SessionAuthenticator
from tecnosis.services.application.auto_close_scheduler import AutoCloseScheduler
from tecnosis.services.application.irrigation_controller import IrrigationController, decide, is_valid_humidity

__all__ = [
    "AutoCloseScheduler",
    "IrrigationController",
    "SessionAuthenticator",
    "decide",
    "is_valid_humidity",
]
