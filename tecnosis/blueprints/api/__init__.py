from tecnosis.blueprints.api.control import control_api
from tecnosis.blueprints.api.sensor import sensor_api

__all__ = ["control_api", "sensor_api"]
