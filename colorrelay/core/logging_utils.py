"""Structured logging for color updates and scan flag transitions."""

import logging
import uuid
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(logging_config: Optional[Dict[str, Any]] = None) -> None:
    """Configure root logging once (format shared by scripts and server)."""
    level_name = str((logging_config or {}).get("level") or "INFO").upper()
    logging.basicConfig(
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        level=getattr(logging, level_name, logging.INFO),
    )


def _ensure_trace_id(extra: dict) -> str:
    trace_id = extra.get("trace_id")
    if not trace_id:
        trace_id = str(uuid.uuid4())[:8]
        extra["trace_id"] = trace_id
    return trace_id


def _emit(event: str, extra: dict) -> None:
    msg = event + " " + " ".join(f"{k}={v}" for k, v in sorted(extra.items()))
    logger.info(msg)


def log_color_update(
    red: Any,
    green: Any,
    blue: Any,
    trace_id: Optional[str] = None,
    extra: Optional[dict] = None,
) -> None:
    """Log a LatestColor upsert as structured key-value."""
    extra = extra or {}
    if trace_id:
        extra["trace_id"] = trace_id
    _ensure_trace_id(extra)
    extra["red"] = red
    extra["green"] = green
    extra["blue"] = blue
    _emit("color_update", extra)


def log_scan_event(
    action: str,
    scan_requested: bool,
    trace_id: Optional[str] = None,
    extra: Optional[dict] = None,
) -> None:
    """Log a scan flag transition: action (requested/consumed/idle), resulting scan_requested."""
    extra = extra or {}
    if trace_id:
        extra["trace_id"] = trace_id
    _ensure_trace_id(extra)
    extra["action"] = action
    extra["scan_requested"] = scan_requested
    _emit("scan_flag", extra)
