"""
Dapp portal HTTP app.

Every request goes through a single catch-all route:
  - /explorer-api/<rest>  -> relayed to the explorer API (any method)
  - /dapps.json           -> JSON config file (GET/HEAD)
  - anything else         -> index.html (GET/HEAD)

Run with `python run_server.py`, or with uvicorn directly:

    uvicorn dapp_portal.main:get_app --factory --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from urllib.parse import urlsplit

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import PlainTextResponse, Response
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config.settings import Settings, load_settings
from .proxy import relay_to_explorer

logger = logging.getLogger(__name__)

DAPPS_ROUTE = "/dapps.json"
READ_METHODS = ("GET", "HEAD")
# Methods the catch-all accepts; the router itself answers 405 for non-proxy paths
ROUTED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE"]

HTML_CONTENT_TYPE = "text/html; charset=utf-8"
JSON_CONTENT_TYPE = "application/json; charset=utf-8"


def parse_request_path(target: str) -> str:
    """Path component of a request target; the raw target if it won't parse."""
    try:
        return urlsplit(target).path
    except ValueError:
        return target


def _raw_target(request: Request) -> str:
    raw_path = request.scope.get("raw_path")
    if raw_path:
        return raw_path.decode("latin-1")
    return request.scope.get("path") or "/"


async def serve_static_file(path: Path, label: str, content_type: str, method: str) -> Response:
    """
    Read a file fresh from disk and return it.
    HEAD gets headers only, with content-length set to the file size.
    """
    try:
        content = await run_in_threadpool(path.read_bytes)
    except OSError as e:
        logger.warning(f"Failed to read {path}: {e}")
        return PlainTextResponse(f"Failed to read {label}: {e}\n", status_code=500)

    headers = {"content-type": content_type, "cache-control": "no-store"}
    if method == "HEAD":
        headers["content-length"] = str(len(content))
        return Response(content=b"", status_code=200, headers=headers)
    return Response(content=content, status_code=200, headers=headers)


async def route_request(request: Request) -> Response:
    settings: Settings = request.app.state.settings
    method = request.method.upper()
    path = parse_request_path(_raw_target(request))

    if path.startswith(settings.proxy_prefix):
        sub_path = path[len(settings.proxy_prefix):]
        query = request.scope.get("query_string", b"").decode("latin-1")
        body = await request.body()
        return await run_in_threadpool(
            relay_to_explorer, settings, method, sub_path, body, query
        )

    if method not in READ_METHODS:
        return PlainTextResponse("Method Not Allowed", status_code=405)

    if path == DAPPS_ROUTE:
        return await serve_static_file(
            settings.dapps_path, "dapps.json", JSON_CONTENT_TYPE, method
        )

    return await serve_static_file(
        settings.index_path, "index.html", HTML_CONTENT_TYPE, method
    )


async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Methods outside ROUTED_METHODS get the same plain-text 405 as the router."""
    if exc.status_code == 405:
        return PlainTextResponse("Method Not Allowed", status_code=405, headers=exc.headers)
    return await http_exception_handler(request, exc)


def create_app(settings: Settings) -> FastAPI:
    """Build the app around an already-resolved Settings value."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Serving {settings.index_path}")
        logger.info(f"Serving {settings.dapps_path} at {DAPPS_ROUTE}")
        logger.info(f"Listening on http://localhost:{settings.port}")
        yield

    # Docs routes would shadow the catch-all
    app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None, lifespan=lifespan)
    app.state.settings = settings
    app.add_route(
        "/{full_path:path}", route_request, methods=ROUTED_METHODS, include_in_schema=False
    )
    app.add_exception_handler(StarletteHTTPException, method_not_allowed_handler)
    return app


def get_app() -> FastAPI:
    """uvicorn --factory entrypoint; reads .env and the environment, no CLI flags."""
    return create_app(load_settings(argv=[]))
