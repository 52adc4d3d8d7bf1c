"""Relay handlers: ingest (device POST) and query (device/frontend GET)."""

from colorrelay.relay.ingest import handle_post
from colorrelay.relay.query import DEVICE_CLIENT, handle_get

__all__ = ["handle_post", "handle_get", "DEVICE_CLIENT"]
