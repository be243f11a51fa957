from __future__ import annotations

import httpx

from authcode.constants import LOGGER

MAX_LOGGED_BODY = 1000


async def log_request(request: httpx.Request) -> None:
    # Form bodies carry codes and refresh tokens; only the request line is logged.
    LOGGER.info("Token endpoint request %s %s", request.method, request.url)


async def log_response(response: httpx.Response) -> None:
    LOGGER.info(
        "Token endpoint response %s %s -> %s",
        response.request.method,
        response.request.url,
        response.status_code,
    )
    if response.status_code >= 400:
        body = await response.aread()
        text = body.decode("utf-8", errors="replace")
        if len(text) > MAX_LOGGED_BODY:
            text = text[:MAX_LOGGED_BODY] + "...<truncated>"
        LOGGER.warning("Token endpoint error body: %s", text)


def build_http_client(*, timeout: float, debug: bool = False) -> httpx.AsyncClient:
    event_hooks: dict[str, list] = {"request": [], "response": []}
    if debug:
        event_hooks["request"].append(log_request)
        event_hooks["response"].append(log_response)
    return httpx.AsyncClient(timeout=timeout, event_hooks=event_hooks)
