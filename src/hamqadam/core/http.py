"""
HTTP helpers.

This module centralizes the minimal HTTP client logic used by the directions clients.

Design goals:
- Small surface area (async GET JSON).
- Deterministic defaults (timeout + User-Agent).
- Raise on non-2xx so callers can map failures onto their own error types.
"""

from __future__ import annotations

from typing import Any

import httpx


DEFAULT_USER_AGENT = "hamqadam/0.1.0 (+https://local)"


async def get_json(
    url: str,
    *,
    params: dict[str, Any] | list[tuple[str, Any]] | None = None,
    headers: dict[str, str] | None = None,
    timeout_seconds: float = 15,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Any:
    """GET `url` and return the decoded JSON response.

    `params` may be a list of pairs for repeated query keys (GraphHopper `point=`).
    `transport` is a test seam for `httpx.MockTransport`, not part of the public API;
    production callers leave it unset.

    Raises:
        httpx.HTTPError: On transport errors or non-2xx status codes.
        ValueError: If the response body is not valid JSON.
    """
    request_headers = {"User-Agent": DEFAULT_USER_AGENT}
    if headers:
        request_headers.update(headers)

    async with httpx.AsyncClient(timeout=timeout_seconds, transport=transport) as client:
        resp = await client.get(url, params=params, headers=request_headers)
        resp.raise_for_status()
        return resp.json()
