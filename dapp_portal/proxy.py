"""
Explorer API relay.

Forwards a single request to the upstream explorer over HTTPS and relays the
status, body and content-type back. Bodies are buffered in full both ways;
no timeout, retry or streaming.
"""

import logging
from typing import Optional

import requests
from fastapi.responses import PlainTextResponse, Response

from .config.settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/json"


def build_upstream_url(settings: Settings, sub_path: str, query: str = "") -> str:
    url = f"https://{settings.explorer_host}{settings.explorer_base_path}/{sub_path}"
    if query:
        url = f"{url}?{query}"
    return url


def relay_to_explorer(
    settings: Settings,
    method: str,
    sub_path: str,
    body: bytes = b"",
    query: str = "",
) -> Response:
    """
    Relay one request to the explorer API and build the client response.

    Transport failures become a 502; upstream error statuses pass through.
    """
    url = build_upstream_url(settings, sub_path, query)
    headers = {}
    data: Optional[bytes] = None
    if body:
        headers = {
            "content-type": "application/json",
            "accept": "application/json",
            "content-length": str(len(body)),
        }
        data = body

    try:
        upstream = requests.request(method, url, headers=headers, data=data)
    except requests.RequestException as e:
        logger.error(f"Explorer proxy error for {method} {url}: {e}")
        return PlainTextResponse(f"Explorer proxy error: {e}\n", status_code=502)

    logger.info(f"{method} {url} -> {upstream.status_code}")
    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        headers={
            "content-type": upstream.headers.get("content-type") or DEFAULT_CONTENT_TYPE,
            "access-control-allow-origin": "*",
        },
    )
