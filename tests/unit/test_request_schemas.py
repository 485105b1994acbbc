import pytest
from pydantic import ValidationError

from tecnosis.constants import AutoClose
from tecnosis.schemas import LoginRequest, SensorReadingRequest, ValveControlRequest, parse_minutes


@pytest.mark.parametrize(
    "raw, minutes",
    [
        (10, 10),
        ("10", 10),
        ("10abc", 10),
        (" 5", 5),
        ("-3", -3),
        (7.9, 7),
        ("abc", 0),
        ("", 0),
        (None, 0),
        (True, 0),
        (float("inf"), 0),
        ([10], 0),
    ],
)
def test_parse_minutes_is_lenient(raw, minutes):
    assert parse_minutes(raw) == minutes


def test_valve_control_request_reads_camel_case_duration():
    body = ValveControlRequest.model_validate({"action": "open", "durationMinutes": "15"})

    assert body.action == "open"
    assert body.duration_minutes == 15


def test_valve_control_request_defaults():
    body = ValveControlRequest.model_validate({})

    assert body.action is None
    assert body.duration_minutes == 0


def test_valve_control_request_ignores_garbage_duration():
    body = ValveControlRequest.model_validate({"action": "open", "durationMinutes": {"minutes": 3}})

    assert body.duration_minutes == 0


@pytest.mark.parametrize("humidity", [0, 100, 45, 47.5])
def test_sensor_reading_accepts_numbers_in_range(humidity):
    assert SensorReadingRequest.model_validate({"humidity": humidity}).humidity == humidity


@pytest.mark.parametrize("humidity", [-0.1, 100.5, "50", True, None, [50]])
def test_sensor_reading_rejects_invalid_values(humidity):
    with pytest.raises(ValidationError):
        SensorReadingRequest.model_validate({"humidity": humidity})


def test_sensor_reading_requires_humidity():
    with pytest.raises(ValidationError):
        SensorReadingRequest.model_validate({"moisture": 40})


def test_login_request_fields_are_optional():
    body = LoginRequest.model_validate({"username": "admin"})

    assert body.username == "admin"
    assert body.password is None


def test_valve_control_request_accepts_duration_up_to_one_week():
    body = ValveControlRequest.model_validate({"action": "open", "durationMinutes": AutoClose.MAX_DURATION_MINUTES})

    assert body.duration_minutes == 7 * 24 * 60


@pytest.mark.parametrize("duration", [AutoClose.MAX_DURATION_MINUTES + 1, 2_000_000_000_000, "99999999999"])
def test_valve_control_request_rejects_oversized_duration(duration):
    with pytest.raises(ValidationError):
        ValveControlRequest.model_validate({"action": "open", "durationMinutes": duration})
