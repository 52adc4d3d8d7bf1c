"""Query handler: device scan polling and frontend latest-color reads (GET)."""

import logging
from typing import Any, Dict, Optional

from colorrelay.core.logging_utils import log_scan_event
from colorrelay.relay.common import DEFAULT_COLOR, now_iso
from colorrelay.store.base import COLOR_FIELDS, LATEST_COLOR_KEY, SCAN_CONTROL_KEY, DocumentStore

logger = logging.getLogger(__name__)

# Value of the ?client= query parameter sent by the sensor device
DEVICE_CLIENT = "esp32"


def poll_scan_request(store: DocumentStore, trace_id: Optional[str] = None) -> Dict[str, bool]:
    """Device poll: report a pending scan request and clear it in the same step (one-shot)."""
    consumed = store.consume_flag(SCAN_CONTROL_KEY, "scan_requested", now_iso())
    if consumed:
        log_scan_event("consumed", False, trace_id=trace_id)
    return {"scan_requested": consumed}


def read_latest_color(store: DocumentStore) -> Dict[str, Any]:
    """Frontend read: red/green/blue of the latest reading, or the neutral default if none yet."""
    doc = store.get(LATEST_COLOR_KEY)
    if doc is None:
        logger.debug("%s not written yet; returning default color", LATEST_COLOR_KEY)
        return dict(DEFAULT_COLOR)
    return {f: doc[f] if doc.get(f) is not None else DEFAULT_COLOR[f] for f in COLOR_FIELDS}


def handle_get(
    store: DocumentStore,
    client: Optional[str] = None,
    trace_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Dispatch a GET by caller identity: client=esp32 polls the scan flag, anything else reads the color."""
    if (client or "").strip().lower() == DEVICE_CLIENT:
        return poll_scan_request(store, trace_id=trace_id)
    return read_latest_color(store)
