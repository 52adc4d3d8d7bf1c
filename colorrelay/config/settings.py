"""Unified config: server, store, logging sections.

Defaults: loaded from config/config.yaml.example (single source of truth, no code-level defaults).
DATABASE_URL in the environment overrides store.postgres.dsn.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from colorrelay.exceptions import ConfigError

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

# Lazy-loaded example config (single source of truth for defaults)
_EXAMPLE_CONFIG: Optional[Dict[str, Any]] = None

_VALID_BACKENDS = frozenset(("postgres", "memory"))


def _load_example_config() -> Dict[str, Any]:
    """Load config.yaml.example as defaults. No code-level defaults."""
    global _EXAMPLE_CONFIG
    if _EXAMPLE_CONFIG is None:
        path = _PROJECT_ROOT / "config" / "config.yaml.example"
        with open(path, encoding="utf-8") as f:
            _EXAMPLE_CONFIG = yaml.safe_load(f) or {}
    return _EXAMPLE_CONFIG


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge override into base. Override values take precedence."""
    out = dict(base)
    for k, v in override.items():
        if k in out and isinstance(out[k], dict) and isinstance(v, dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _merged_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Merge config with example so missing keys come from config file."""
    return _deep_merge(_load_example_config(), cfg)


def _section(cfg: Dict[str, Any], section: str) -> Dict[str, Any]:
    s = cfg.get(section)
    return dict(s) if isinstance(s, dict) else {}


def read_config(config_path: Optional[str] = None) -> Tuple[dict, str]:
    """Load YAML config. Path from argument, COLOR_RELAY_CONFIG, or config/config.yaml; falls back to the example.
    Returns (config, resolved_path)."""
    config_path = config_path or os.environ.get("COLOR_RELAY_CONFIG") or str(_PROJECT_ROOT / "config" / "config.yaml")
    if not Path(config_path).exists():
        config_path = str(_PROJECT_ROOT / "config" / "config.yaml.example")
    config_path = str(Path(config_path).resolve())
    with open(config_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}
    if not isinstance(config, dict):
        raise ConfigError(f"config root must be a mapping: {config_path}")
    return config, config_path


def get_server_config(config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return server config (host, port, api_path)."""
    server = _section(_merged_config(config or {}), "server")
    api_path = str(server.get("api_path") or "/api/data")
    if not api_path.startswith("/"):
        api_path = "/" + api_path
    return {
        "host": server.get("host"),
        "port": int(server.get("port")),
        "api_path": api_path,
    }


def get_store_config(config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return store config: backend plus the postgres pool section (minconn, maxconn, connect_timeout, table)."""
    store = _section(_merged_config(config or {}), "store")
    backend = str(store.get("backend") or "").strip().lower()
    if backend not in _VALID_BACKENDS:
        raise ConfigError(f"store.backend must be one of {sorted(_VALID_BACKENDS)}, got {store.get('backend')!r}")
    pg = store.get("postgres") or {}
    return {
        "backend": backend,
        "postgres": {
            "minconn": int(pg.get("minconn")),
            "maxconn": int(pg.get("maxconn")),
            "connect_timeout": int(pg.get("connect_timeout")),
            "table": pg.get("table") or "relay_documents",
        },
    }


def get_logging_config(config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return logging config (level)."""
    log = _section(_merged_config(config or {}), "logging")
    return {"level": str(log.get("level") or "INFO").upper()}


def get_database_url(config: Optional[Dict[str, Any]] = None) -> str:
    """Return the store connection string. DATABASE_URL overrides store.postgres.dsn.

    Raises ConfigError when neither is set: the postgres store cannot start without it.
    """
    env_url = os.environ.get("DATABASE_URL", "").strip()
    if env_url:
        return env_url
    pg = _section(_merged_config(config or {}), "store").get("postgres") or {}
    dsn = (pg.get("dsn") or "").strip() if isinstance(pg.get("dsn"), str) else ""
    if not dsn:
        raise ConfigError("DATABASE_URL is not set (required for store.backend=postgres)")
    return dsn
