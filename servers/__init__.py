"""HTTP transport for the color relay (FastAPI app, single data path)."""

from servers.app import create_app, run_server

__all__ = ["create_app", "run_server"]
