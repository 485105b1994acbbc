import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict


class WindowsSafeRotatingFileHandler(RotatingFileHandler):
    """
    A RotatingFileHandler that works better on Windows by closing the file
    handle before rotation and catching PermissionError exceptions.
    """
    def doRollover(self):
        """
        Do a rollover, as described in __init__().
        Close the log file and rotate it, handling Windows file locking issues.
        """
        if self.stream:
            self.stream.close()
            self.stream = None
        try:
            super().doRollover()
        except PermissionError:
            # On Windows, file may still be locked. Skip rotation and continue logging.
            pass
        finally:
            if not self.stream:
                self.stream = self._open()


class AuditLogger:
    """Structured audit logger that writes one JSON record per valve command."""

    def __init__(self, log_path: str, level: str = "INFO") -> None:
        self.log_path = Path(log_path)
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

        self.logger = logging.getLogger("tecnosis.audit")
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        self.logger.propagate = False

        if not any(isinstance(handler, RotatingFileHandler) for handler in self.logger.handlers):
            handler_cls = WindowsSafeRotatingFileHandler if sys.platform == "win32" else RotatingFileHandler
            handler = handler_cls(
                filename=str(self.log_path),
                maxBytes=10 * 1024 * 1024,  # 10 MB
                backupCount=30,
                encoding="utf-8",
                delay=True,
            )
            formatter = logging.Formatter(
                fmt="%(asctime)sZ | %(levelname)s | %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_event(self, actor: str, action: str, resource: str, outcome: str, **metadata: Any) -> None:
        payload: Dict[str, Any] = {
            "actor": actor,
            "action": action,
            "resource": resource,
            "outcome": outcome,
        }
        if metadata:
            payload["meta"] = metadata

        self.logger.info(json.dumps(payload, ensure_ascii=False))

    def close(self) -> None:
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)
