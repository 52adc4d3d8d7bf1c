"""FastAPI app for the color relay: one data path (GET/POST/OPTIONS) plus GET /health.

POST from the sensor device stores a color reading or a scan request; GET with ?client=esp32 polls
(and clears) the scan flag; any other GET returns the latest color. Every response carries open CORS headers.
"""

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from colorrelay.config.settings import get_logging_config, get_server_config
from colorrelay.exceptions import BadRequestError, StoreError
from colorrelay.relay import handle_get, handle_post
from colorrelay.store.base import DocumentStore
from colorrelay.store.manager import close_store, get_store, init_store

logger = logging.getLogger(__name__)

ALLOWED_METHODS = ("GET", "POST")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

# Methods answered on the data path; anything else gets 405 before routing
_HANDLED_METHODS = frozenset(ALLOWED_METHODS + ("OPTIONS",))


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-JSON constant {name}")


def _method_not_allowed_response() -> JSONResponse:
    return JSONResponse(
        status_code=405,
        content={"message": "Method Not Allowed"},
        headers={"Allow": ", ".join(ALLOWED_METHODS)},
    )


def _store_error_response(e: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"message": "Error connecting to database", "error": str(e)})


def create_app(
    store: Optional[DocumentStore] = None,
    config: Optional[Dict[str, Any]] = None,
) -> FastAPI:
    """Build FastAPI app. With store given, the caller owns its lifecycle; otherwise the process store
    is opened from config at startup (init_store) and closed at shutdown (close_store)."""
    server_cfg = get_server_config(config)
    api_path = server_cfg["api_path"]

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if store is not None:
            yield
            return
        init_store(config)
        try:
            yield
        finally:
            close_store()

    app = FastAPI(title="Color Relay API", description="Latest color and scan flag relay for the ESP32 color sensor", lifespan=lifespan)

    def _current_store() -> DocumentStore:
        return store if store is not None else get_store()

    async def _call(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run a blocking handler in the threadpool; map store and unexpected errors to 500."""
        try:
            return await run_in_threadpool(fn, _current_store(), *args, **kwargs)
        except BadRequestError:
            raise
        except StoreError as e:
            logger.warning("%s failed: %s", fn.__name__, e)
            return _store_error_response(e)
        except Exception as e:
            logger.exception("%s failed with unexpected error", fn.__name__)
            return _store_error_response(e)

    @app.middleware("http")
    async def add_cors_headers(request: Request, call_next):
        if request.url.path == api_path and request.method.upper() not in _HANDLED_METHODS:
            response = _method_not_allowed_response()
        else:
            response = await call_next(request)
        for name, value in CORS_HEADERS.items():
            response.headers[name] = value
        return response

    @app.exception_handler(BadRequestError)
    async def bad_request_handler(request: Request, exc: BadRequestError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})

    @app.options(api_path)
    def options_data() -> Response:
        """CORS pre-flight: 200 with no body."""
        return Response(status_code=200)

    @app.get(api_path)
    async def get_data(
        client: Optional[str] = Query(None, description="Caller identity; 'esp32' polls the scan flag"),
    ) -> Any:
        """client=esp32 -> {scan_requested}; otherwise -> {red, green, blue} (default 128,128,128)."""
        result = await _call(handle_get, client)
        if isinstance(result, Response):
            return result
        return JSONResponse(status_code=200, content=result)

    @app.post(api_path)
    async def post_data(request: Request) -> Response:
        """{scan: true} -> 200; {red, green, blue} -> 201; any other shape -> 400."""
        raw = await request.body()
        try:
            body = json.loads(raw, parse_constant=_reject_constant) if raw else None
        except (ValueError, UnicodeDecodeError) as e:
            raise BadRequestError(f"invalid JSON body: {e}") from e
        result = await _call(handle_post, body)
        if isinstance(result, Response):
            return result
        status_code, payload = result
        return JSONResponse(status_code=status_code, content=payload)

    @app.get("/health")
    def get_health() -> JSONResponse:
        """200 when the store answers a ping, 503 otherwise."""
        try:
            current = _current_store()
            current.ping()
        except Exception as e:
            logger.warning("health check failed: %s", e)
            return JSONResponse(status_code=503, content={"ok": False, "error": str(e)})
        return JSONResponse(status_code=200, content={"ok": True, "store": current.backend})

    return app


def run_server(config: dict) -> None:
    """Start the relay server (host/port from config). The store is opened by the app lifespan."""
    import uvicorn

    server_cfg = get_server_config(config)
    app = create_app(config=config)
    host = server_cfg["host"]
    port = server_cfg["port"]
    logger.info("Color relay on %s:%s%s", host, port, server_cfg["api_path"])
    uvicorn.run(app, host=host, port=int(port), log_level=get_logging_config(config)["level"].lower())
