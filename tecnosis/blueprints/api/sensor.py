"""
Sensor Ingestion API Blueprint
==============================

Endpoints:
- POST /api/data/sensor - Receive a soil humidity reading and run the automatic logic
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response
from pydantic import ValidationError

from tecnosis.blueprints.api._common import get_irrigation_controller, get_json
from tecnosis.constants import Messages
from tecnosis.schemas import SensorReadingRequest
from tecnosis.utils.http import error_response, safe_route, success_response

logger = logging.getLogger(__name__)

sensor_api = Blueprint("sensor_api", __name__)


@sensor_api.post("/sensor")
@safe_route("Failed to process sensor reading")
def receive_sensor_data() -> Response:
    """
    Store the reading and evaluate automatic irrigation before answering.

    Body: {"humidity": number in [0, 100]}
    """
    try:
        body = SensorReadingRequest.model_validate(get_json())
    except ValidationError as ve:
        logger.info("Rejected sensor reading: %s", ve.errors(include_url=False))
        return error_response(Messages.SENSOR_INVALID, 400)

    get_irrigation_controller().record_humidity(body.humidity)
    return success_response(message=Messages.SENSOR_RECEIVED)
