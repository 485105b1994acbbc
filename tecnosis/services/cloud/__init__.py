"""Tuya OpenAPI client: request signing, token acquisition and valve commands."""

from tecnosis.services.cloud.signing import RequestSigner, serialize_body, timestamp_ms
from tecnosis.services.cloud.token_provider import TokenProvider
from tecnosis.services.cloud.valve_client import ValveClient

__all__ = [
    "RequestSigner",
    "TokenProvider",
    "ValveClient",
    "serialize_body",
    "timestamp_ms",
]
