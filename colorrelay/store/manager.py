"""Process-wide store manager: one DocumentStore per process, explicit init and teardown.

init_store() is called once at process start (server lifespan or script), get_store() by request
handlers, close_store() at shutdown. No environment-triggered reuse across reloads.
"""

import logging
import threading
from typing import Any, Dict, Optional

from colorrelay.config.settings import get_database_url, get_store_config
from colorrelay.exceptions import ConfigError
from colorrelay.store.base import DocumentStore

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_store: Optional[DocumentStore] = None


def build_store(config: Optional[Dict[str, Any]] = None) -> DocumentStore:
    """Build a store from config. Postgres: open the pool and ensure the table (ConfigError if no DATABASE_URL)."""
    store_cfg = get_store_config(config)
    if store_cfg["backend"] == "memory":
        from colorrelay.store.memory_store import MemoryStore

        logger.warning("Using in-memory store: state is lost on restart")
        return MemoryStore()

    from colorrelay.store.postgres_store import PostgresStore, StorePool

    dsn = get_database_url(config)
    pg = store_cfg["postgres"]
    store_pool = StorePool(
        dsn,
        minconn=pg["minconn"],
        maxconn=pg["maxconn"],
        connect_timeout=pg["connect_timeout"],
    )
    store = PostgresStore(store_pool, table=pg["table"])
    try:
        store.ensure_table()
    except Exception:
        store_pool.close()
        raise
    return store


def init_store(config: Optional[Dict[str, Any]] = None, store: Optional[DocumentStore] = None) -> DocumentStore:
    """Install the process store (built from config unless given). Raises ConfigError if already initialized."""
    global _store
    with _lock:
        if _store is not None:
            raise ConfigError("store already initialized; call close_store() first")
        _store = store if store is not None else build_store(config)
        logger.info("Store initialized (backend=%s)", _store.backend)
        return _store


def get_store() -> DocumentStore:
    """Return the process store. Raises ConfigError if init_store() has not run."""
    store = _store
    if store is None:
        raise ConfigError("store not initialized; call init_store() at startup")
    return store


def close_store() -> None:
    """Close and forget the process store. No-op if not initialized."""
    global _store
    with _lock:
        if _store is None:
            return
        store, _store = _store, None
    store.close()
    logger.info("Store closed (backend=%s)", store.backend)
