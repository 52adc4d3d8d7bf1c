"""Ingest handler: device-originated color readings and scan triggers (POST)."""

import logging
from typing import Any, Dict, Optional, Tuple

from colorrelay.core.logging_utils import log_color_update, log_scan_event
from colorrelay.exceptions import BadRequestError
from colorrelay.relay.common import now_iso
from colorrelay.store.base import COLOR_FIELDS, LATEST_COLOR_KEY, SCAN_CONTROL_KEY, DocumentStore

logger = logging.getLogger(__name__)


def handle_post(
    store: DocumentStore,
    body: Any,
    trace_id: Optional[str] = None,
) -> Tuple[int, Dict[str, Any]]:
    """Apply one POST body and return (status_code, payload).

    {"scan": true} upserts scan_control (scan_requested=true) -> 200.
    {"red", "green", "blue"} upserts latest_color -> 201. Values are stored as given.
    Anything else raises BadRequestError. Store errors propagate.
    """
    if not isinstance(body, dict):
        raise BadRequestError("request body must be a JSON object")

    if body.get("scan") is True:
        store.upsert(SCAN_CONTROL_KEY, {"scan_requested": True, "timestamp": now_iso()})
        log_scan_event("requested", True, trace_id=trace_id)
        return 200, {"message": "Scan requested"}

    missing = [f for f in COLOR_FIELDS if body.get(f) is None]
    if missing:
        logger.debug("rejecting POST body keys=%s", sorted(body))
        raise BadRequestError("missing color fields: " + ", ".join(missing))

    red, green, blue = (body[f] for f in COLOR_FIELDS)
    store.upsert(
        LATEST_COLOR_KEY,
        {"red": red, "green": green, "blue": blue, "timestamp": now_iso()},
    )
    log_color_update(red, green, blue, trace_id=trace_id)
    return 201, {"message": "Data saved successfully"}
