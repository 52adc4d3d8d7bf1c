"""In-memory DocumentStore: dict of documents guarded by a lock. Dev and tests only."""

import copy
import logging
import threading
from typing import Any, Dict, Optional

from colorrelay.store.base import DocumentStore

logger = logging.getLogger(__name__)


class MemoryStore(DocumentStore):
    """Thread-safe document store kept in process memory; lost on restart."""

    backend = "memory"

    def __init__(self):
        self._lock = threading.Lock()
        self._docs: Dict[str, Dict[str, Any]] = {}

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            doc = self._docs.get(key)
            return copy.deepcopy(doc) if doc is not None else None

    def upsert(self, key: str, fields: Dict[str, Any]) -> None:
        with self._lock:
            doc = self._docs.setdefault(key, {})
            doc.update(copy.deepcopy(fields))

    def consume_flag(self, key: str, field: str, timestamp: str) -> bool:
        with self._lock:
            doc = self._docs.get(key)
            if doc is None or doc.get(field) is not True:
                return False
            doc[field] = False
            doc["timestamp"] = timestamp
            return True

    def close(self) -> None:
        with self._lock:
            logger.debug("MemoryStore closed (%d documents dropped)", len(self._docs))
            self._docs.clear()
