from __future__ import annotations

import json
from pathlib import Path

import requests

from conftest import ACCESS_TOKEN, CONTROL_TOKEN


def _controller(client):
    return client.application.config["CONTAINER"].irrigation_controller


# ── Sensor ingestion ─────────────────────────────────────────────────


def test_sensor_reading_below_threshold_opens_closed_valve(client, cloud):
    response = client.post("/api/data/sensor", json={"humidity": 30})

    assert response.status_code == 200
    assert response.get_json() == {"status": "success", "message": "Dato recibido."}
    assert cloud.commands == [True]
    assert _controller(client).last_known_humidity == 30


def test_sensor_reading_out_of_range_is_rejected_without_side_effects(client, cloud):
    response = client.post("/api/data/sensor", json={"humidity": 130})

    assert response.status_code == 400
    assert response.get_json() == {"status": "error", "message": "Datos de humedad inválidos."}
    assert cloud.requests == []
    assert _controller(client).last_known_humidity == 0


def test_sensor_reading_rejects_non_numeric_and_missing_values(client, cloud):
    for body in ({"humidity": "50"}, {"humidity": True}, {"humidity": None}, {}):
        response = client.post("/api/data/sensor", json=body)
        assert response.status_code == 400, body
        assert response.get_json()["message"] == "Datos de humedad inválidos."

    response = client.post("/api/data/sensor", data="not json", content_type="application/json")
    assert response.status_code == 400
    assert cloud.requests == []


def test_sensor_reading_in_dead_zone_sends_nothing(client, cloud):
    cloud.valve_open = True

    response = client.post("/api/data/sensor", json={"humidity": 47})

    assert response.status_code == 200
    assert cloud.commands == []


def test_sensor_reading_above_band_closes_open_valve(client, cloud):
    cloud.valve_open = True

    response = client.post("/api/data/sensor", json={"humidity": 60})

    assert response.status_code == 200
    assert cloud.commands == [False]


def test_sensor_reading_still_acknowledged_when_cloud_token_fails(client, cloud):
    cloud.token_ok = False

    response = client.post("/api/data/sensor", json={"humidity": 10})

    assert response.status_code == 200
    assert cloud.commands == []


# ── Manual control ───────────────────────────────────────────────────


def test_control_requires_token(client, cloud):
    response = client.post("/api/control/valvula", json={"action": "open"})

    assert response.status_code == 403
    assert response.get_json() == {
        "status": "error",
        "message": "Acceso denegado. Token requerido o inválido.",
    }
    assert cloud.requests == []


def test_control_rejects_short_token(client, cloud):
    response = client.post(
        "/api/control/valvula", json={"action": "open"}, headers={"x-auth-token": "0123456789"}
    )

    assert response.status_code == 403
    assert cloud.requests == []


def test_control_rejects_unknown_action(client, cloud, control_headers):
    for body in ({"action": "toggle"}, {"action": "OPEN"}, {}, {"action": 1}):
        response = client.post("/api/control/valvula", json=body, headers=control_headers)
        assert response.status_code == 400, body
        assert response.get_json() == {"status": "error", "message": "Invalid action."}
    assert cloud.requests == []


def test_control_open_with_duration_schedules_auto_close(client, cloud, timers, control_headers):
    response = client.post(
        "/api/control/valvula", json={"action": "open", "durationMinutes": 10}, headers=control_headers
    )

    assert response.status_code == 200
    assert response.get_json() == {"status": "success", "action": "open"}
    assert cloud.commands == [True]
    assert len(timers.timers) == 1
    assert timers.last.interval == 600
    assert timers.last.started


def test_control_accepts_duration_as_string(client, timers, control_headers):
    response = client.post(
        "/api/control/valvula", json={"action": "open", "durationMinutes": "5"}, headers=control_headers
    )

    assert response.status_code == 200
    assert timers.last.interval == 300


def test_control_open_without_duration_does_not_schedule(client, timers, control_headers):
    response = client.post("/api/control/valvula", json={"action": "open"}, headers=control_headers)

    assert response.status_code == 200
    assert timers.timers == []


def test_control_rejects_oversized_duration_before_opening(client, cloud, timers, control_headers):
    response = client.post(
        "/api/control/valvula",
        json={"action": "open", "durationMinutes": 2_000_000_000_000},
        headers=control_headers,
    )

    assert response.status_code == 400
    assert response.get_json() == {"status": "error", "message": "Invalid action."}
    assert cloud.commands == []
    assert timers.timers == []
    assert client.application.config["CONTAINER"].auto_close_scheduler.pending is False


def test_control_close_cancels_pending_auto_close(client, cloud, timers, control_headers):
    client.post("/api/control/valvula", json={"action": "open", "durationMinutes": 10}, headers=control_headers)
    pending = timers.last

    response = client.post("/api/control/valvula", json={"action": "close"}, headers=control_headers)

    assert response.status_code == 200
    assert response.get_json() == {"status": "success", "action": "close"}
    assert pending.cancelled
    assert cloud.commands == [True, False]

    # The cancelled timer firing late must not send a second close
    pending.fire()
    assert cloud.commands == [True, False]


def test_auto_close_fires_with_fresh_token(client, cloud, timers, control_headers):
    client.post("/api/control/valvula", json={"action": "open", "durationMinutes": 1}, headers=control_headers)
    token_calls_before = sum(1 for m, url, *_ in cloud.requests if m == "GET" and "/token" in url)

    timers.last.fire()

    token_calls_after = sum(1 for m, url, *_ in cloud.requests if m == "GET" and "/token" in url)
    assert token_calls_after == token_calls_before + 1
    assert cloud.commands == [True, False]
    assert cloud.requests[-1][2]["access_token"] == ACCESS_TOKEN
    assert client.application.config["CONTAINER"].auto_close_scheduler.pending is False


def test_control_reports_unavailable_token(client, cloud, control_headers):
    cloud.token_ok = False

    response = client.post("/api/control/valvula", json={"action": "open"}, headers=control_headers)

    assert response.status_code == 500
    assert response.get_json() == {"status": "error", "message": "Token inválido o no disponible."}
    assert cloud.commands == []


def test_control_surfaces_remote_message(client, cloud, timers, control_headers):
    cloud.command_ok = False

    response = client.post(
        "/api/control/valvula", json={"action": "open", "durationMinutes": 10}, headers=control_headers
    )

    assert response.status_code == 500
    assert response.get_json() == {"status": "error", "message": "device is offline"}
    assert timers.timers == []


def test_control_falls_back_to_generic_remote_message(client, cloud, control_headers):
    cloud.command_ok = False
    cloud.command_msg = None

    response = client.post("/api/control/valvula", json={"action": "close"}, headers=control_headers)

    assert response.status_code == 500
    assert response.get_json()["message"] == "Internal Tuya error"


def test_control_reports_network_failure(client, cloud, control_headers):
    cloud.post_error = requests.exceptions.ConnectionError("connection reset")

    response = client.post("/api/control/valvula", json={"action": "open"}, headers=control_headers)

    assert response.status_code == 500
    assert response.get_json() == {"status": "error", "message": "connection reset"}


def test_control_token_check_can_be_disabled(make_app, cloud):
    client = make_app(require_auth_on_control=False).test_client()

    response = client.post("/api/control/valvula", json={"action": "open"})

    assert response.status_code == 200
    assert cloud.commands == [True]


def test_manual_close_then_dry_reading_reopens(client, cloud, control_headers):
    client.post("/api/control/valvula", json={"action": "close"}, headers=control_headers)
    client.post("/api/data/sensor", json={"humidity": 20})

    assert cloud.commands == [False, True]


def test_status_reports_controller_and_valve_state(client, cloud, control_headers):
    cloud.valve_open = True
    client.post("/api/data/sensor", json={"humidity": 47})

    response = client.get("/api/control/status", headers=control_headers)

    assert response.status_code == 200
    body = response.get_json()
    assert body["status"] == "success"
    assert body["last_known_humidity"] == 47
    assert body["threshold"] == 45
    assert body["margin"] == 5
    assert body["auto_close"]["pending"] is False
    assert body["valve"] == {"is_open": True, "ok": True, "error": None}


def test_status_requires_token(client):
    response = client.get("/api/control/status")

    assert response.status_code == 403


# ── Login ────────────────────────────────────────────────────────────


def test_login_with_configured_credentials_returns_token(client, control_headers):
    response = client.post("/api/auth/login", json={"username": "admin", "password": "123"})

    assert response.status_code == 200
    body = response.get_json()
    assert body["status"] == "success"
    assert body["message"] == "Login exitoso."
    assert len(body["token"]) == 64

    control = client.post(
        "/api/control/valvula", json={"action": "close"}, headers={"x-auth-token": body["token"]}
    )
    assert control.status_code == 200


def test_login_rejects_wrong_credentials(client):
    for body in ({"username": "admin", "password": "wrong"}, {"username": "root", "password": "123"}, {}):
        response = client.post("/api/auth/login", json=body)
        assert response.status_code == 401, body
        assert response.get_json() == {"status": "error", "message": "Credenciales inválidas."}


def test_login_uses_configured_credentials(make_app):
    client = make_app(login_username="operator", login_password="s3cret").test_client()

    assert client.post("/api/auth/login", json={"username": "admin", "password": "123"}).status_code == 401
    assert client.post("/api/auth/login", json={"username": "operator", "password": "s3cret"}).status_code == 200


# ── Misc ─────────────────────────────────────────────────────────────


def test_index_serves_control_page(client):
    response = client.get("/")

    assert response.status_code == 200
    assert "Control de riego".encode("utf-8") in response.data


def test_unknown_api_route_returns_json_error(client):
    response = client.get("/api/nope")

    assert response.status_code == 404
    assert response.get_json()["status"] == "error"


def test_cors_headers_on_api_routes(client):
    response = client.post(
        "/api/data/sensor", json={"humidity": 80}, headers={"Origin": "http://mobile.example"}
    )

    assert response.headers.get("Access-Control-Allow-Origin") in ("*", "http://mobile.example")


def test_commands_are_written_to_audit_log(client, app, control_headers):
    client.post("/api/control/valvula", json={"action": "open"}, headers=control_headers)

    audit_path = Path(app.config["AUDIT_LOG_PATH"])
    lines = audit_path.read_text(encoding="utf-8").splitlines()
    record = json.loads(lines[-1].split(" | ", 2)[2])
    assert record["actor"] == "manual"
    assert record["action"] == "open"
    assert record["outcome"] == "success"
    assert record["resource"] == "valve:valve-device-1"
    assert CONTROL_TOKEN not in lines[-1]
