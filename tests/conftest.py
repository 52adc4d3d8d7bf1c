"""Pytest fixtures for Color Relay tests."""

import sys
from pathlib import Path

import pytest
import yaml

# Ensure project root is in path for colorrelay/servers imports
_project_root = Path(__file__).resolve().parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent


@pytest.fixture
def project_root() -> Path:
    return _project_root()


@pytest.fixture
def example_config(project_root: Path) -> dict:
    """Load config dict from config.yaml.example."""
    with open(project_root / "config" / "config.yaml.example", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


@pytest.fixture
def memory_config() -> dict:
    return {"store": {"backend": "memory"}}


@pytest.fixture
def no_database_url(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)


@pytest.fixture
def memory_store():
    from colorrelay.store.memory_store import MemoryStore

    return MemoryStore()


@pytest.fixture
def client(memory_store):
    """TestClient over an app bound to a fresh MemoryStore."""
    from fastapi.testclient import TestClient

    from servers.app import create_app

    app = create_app(store=memory_store, config={"store": {"backend": "memory"}})
    with TestClient(app) as c:
        yield c


@pytest.fixture
def reset_store_manager():
    """Make sure the process store is closed before and after a test."""
    from colorrelay.store.manager import close_store

    close_store()
    yield
    close_store()
