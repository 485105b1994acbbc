"""
Shared test fixtures for the TECNOSIS backend test suite.

Provides:
- Required cloud settings in the environment
- A fake Tuya OpenAPI session recording every request
- A fake ``threading.Timer`` factory for the auto-close scheduler
- Flask app/client fixtures wired to both fakes

Usage:
    def test_example(client, cloud):
        client.post("/api/data/sensor", json={"humidity": 30})
        assert cloud.commands == [True]
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from tecnosis import create_app  # noqa: E402

# ---------------------------------------------------------------------------
# Logging - keep test output clean
# ---------------------------------------------------------------------------
logging.getLogger("tecnosis").setLevel(logging.WARNING)

ENDPOINT = "https://openapi.tuya.test"
ACCESS_ID = "test-access-id"
SECRET_KEY = "test-secret-key"
DEVICE_ID = "valve-device-1"
ACCESS_TOKEN = "cloud-access-token"

CLOUD_ENV = {
    "TUYA_ENDPOINT": ENDPOINT,
    "TUYA_ACCESS_ID": ACCESS_ID,
    "TUYA_SECRET_KEY": SECRET_KEY,
    "TUYA_DEVICE_ID_VALVE": DEVICE_ID,
}

# A token the control endpoint accepts (longer than 10 characters)
CONTROL_TOKEN = "a-valid-session-token"


# ========================== Fake Tuya cloud ================================


class FakeResponse:
    def __init__(self, payload: Any):
        self._payload = payload

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeTuyaCloud:
    """Stands in for ``requests.Session``; answers token, device and command calls.

    Every call is kept in ``requests`` as ``(method, url, headers, data)``.
    A successful command flips ``valve_open`` the way the real valve would.
    """

    def __init__(self) -> None:
        self.requests: list[tuple[str, str, dict, Any]] = []
        self.valve_open = False
        self.token_ok = True
        self.command_ok = True
        self.command_msg: str | None = "device is offline"
        self.post_error: Exception | None = None
        self.closed = False

    @property
    def commands(self) -> list[bool]:
        """Values sent to switch_1, in order."""
        sent = []
        for method, _url, _headers, data in self.requests:
            if method == "POST":
                body = json.loads(data.decode("utf-8"))
                sent.append(body["commands"][0]["value"])
        return sent

    def get(self, url: str, headers: dict | None = None, timeout: float | None = None) -> FakeResponse:
        self.requests.append(("GET", url, dict(headers or {}), None))
        if url.endswith("/v1.0/token?grant_type=1"):
            if not self.token_ok:
                return FakeResponse({"success": False, "code": 1004, "msg": "sign invalid"})
            return FakeResponse({"success": True, "result": {"access_token": ACCESS_TOKEN, "expire_time": 7200}})
        if url.endswith(f"/v1.0/devices/{DEVICE_ID}"):
            return FakeResponse(
                {
                    "success": True,
                    "result": {
                        "id": DEVICE_ID,
                        "name": "Válvula huerto",
                        "online": True,
                        "status": [{"code": "switch_1", "value": self.valve_open}],
                    },
                }
            )
        return FakeResponse({"success": False, "msg": "not found"})

    def post(self, url: str, data: bytes | None = None, headers: dict | None = None, timeout: float | None = None):
        self.requests.append(("POST", url, dict(headers or {}), data))
        if self.post_error is not None:
            raise self.post_error
        if not self.command_ok:
            payload: dict[str, Any] = {"success": False, "code": 2001}
            if self.command_msg is not None:
                payload["msg"] = self.command_msg
            return FakeResponse(payload)
        self.valve_open = json.loads(data.decode("utf-8"))["commands"][0]["value"]
        return FakeResponse({"success": True, "result": True})

    def close(self) -> None:
        self.closed = True


# ========================== Fake timers ====================================


class FakeTimer:
    """``threading.Timer`` look-alike that only fires when the test says so."""

    def __init__(self, interval: float, function: Callable, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = tuple(args or ())
        self.kwargs = dict(kwargs or {})
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        self.function(*self.args, **self.kwargs)


class TimerRecorder:
    """Timer factory that remembers every timer it built."""

    def __init__(self) -> None:
        self.timers: list[FakeTimer] = []

    def __call__(self, interval: float, function: Callable, args=None, kwargs=None) -> FakeTimer:
        timer = FakeTimer(interval, function, args=args, kwargs=kwargs)
        self.timers.append(timer)
        return timer

    @property
    def last(self) -> FakeTimer:
        return self.timers[-1]


# ========================== Fixtures =======================================


@pytest.fixture()
def cloud_env(monkeypatch, tmp_path):
    """Required cloud settings plus log paths under the test's tmp dir."""
    for name, value in CLOUD_ENV.items():
        monkeypatch.setenv(name, value)
    monkeypatch.setenv("TECNOSIS_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("TECNOSIS_AUDIT_LOG_PATH", str(tmp_path / "audit.log"))
    return CLOUD_ENV


@pytest.fixture()
def cloud():
    return FakeTuyaCloud()


@pytest.fixture()
def timers():
    return TimerRecorder()


@pytest.fixture()
def make_app(cloud_env, cloud, timers):
    """Factory so a test can build an app with its own config overrides."""
    built = []

    def _make(**overrides):
        flask_app = create_app(
            overrides,
            session=cloud,
            timer_factory=timers,
            install_signal_handlers=False,
        )
        flask_app.config["TESTING"] = True
        built.append(flask_app)
        return flask_app

    yield _make

    for flask_app in built:
        container = flask_app.config.get("CONTAINER")
        if container is not None:
            container.shutdown()


@pytest.fixture()
def app(make_app):
    return make_app()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def control_headers():
    return {"x-auth-token": CONTROL_TOKEN}
