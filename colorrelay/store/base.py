"""DocumentStore abstract interface: fixed-key document upsert/read plus one-shot flag consume.

The relay uses exactly two well-known keys (LATEST_COLOR_KEY, SCAN_CONTROL_KEY); each holds a single
document that is created on first upsert and never deleted.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


LATEST_COLOR_KEY = "latest_color"
SCAN_CONTROL_KEY = "scan_control"

# Color fields of the latest_color document (plus an ISO-8601 UTC timestamp)
COLOR_FIELDS = ("red", "green", "blue")


class DocumentStore(ABC):
    """Abstract single-slot document store.

    Implementations (PostgresStore, MemoryStore) raise StoreError on any failure reaching
    or querying the backend; callers (relay handlers) let it propagate to the transport layer.
    """

    backend: str = ""

    @abstractmethod
    def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Return a copy of the document stored under key, or None if it was never written."""
        ...

    @abstractmethod
    def upsert(self, key: str, fields: Dict[str, Any]) -> None:
        """Create the document under key if absent, else merge fields into it (given fields overwrite)."""
        ...

    @abstractmethod
    def consume_flag(self, key: str, field: str, timestamp: str) -> bool:
        """If document[field] is true, set it false (and timestamp) and return True; else return False.

        Read and clear happen as one atomic step, so one set flag is observed by at most one caller.
        """
        ...

    def ping(self) -> None:
        """Raise StoreError if the backend is unreachable. Default: always reachable."""
        return

    def close(self) -> None:
        return
