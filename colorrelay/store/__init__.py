"""Document store package: fixed-key documents for latest color and scan control."""

from colorrelay.store.base import (
    LATEST_COLOR_KEY,
    SCAN_CONTROL_KEY,
    DocumentStore,
)
from colorrelay.store.memory_store import MemoryStore


# Lazy import so the package loads without psycopg2 (e.g. memory backend in tests)
def __getattr__(name: str):
    if name == "PostgresStore":
        from colorrelay.store.postgres_store import PostgresStore
        return PostgresStore
    if name == "StorePool":
        from colorrelay.store.postgres_store import StorePool
        return StorePool
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "DocumentStore",
    "MemoryStore",
    "PostgresStore",
    "StorePool",
    "LATEST_COLOR_KEY",
    "SCAN_CONTROL_KEY",
]
