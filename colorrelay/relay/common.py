"""Shared constants and helpers for relay handlers."""

from datetime import datetime, timezone
from typing import Dict

# Neutral gray reported before any reading arrives
DEFAULT_COLOR: Dict[str, int] = {"red": 128, "green": 128, "blue": 128}


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
