"""
Shared pieces of the directions clients.

A route client turns two coordinates into a normalized `Route`:
- coordinates latitude first,
- duration as numeric seconds.

Every provider-specific quirk (axis order, duration units, error statuses) is handled
inside the provider module. Failures are raised as `RouteError` subclasses; the
interaction machine is the only caller and catches them.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from typing import Any, Protocol

import httpx

from hamqadam.core.http import get_json
from hamqadam.domain.models import Coordinate, Route
from hamqadam.errors import ProviderError, RouteError, RouteErrorReason, TransportError

logger = logging.getLogger(__name__)

StatusHandler = Callable[[httpx.Response], RouteError | None]


class RouteClient(Protocol):
    """Anything that can fetch one walking route between two points."""

    provider: str

    async def fetch_route(self, start: Coordinate, end: Coordinate) -> Route: ...


def format_lat_lng(coord: Coordinate) -> str:
    """Render `lat,lng` with enough digits for the 1e-5 polyline precision."""
    return f"{coord.lat:.6f},{coord.lng:.6f}"


async def request_json(
    provider: str,
    url: str,
    *,
    params: dict[str, Any] | list[tuple[str, Any]],
    timeout_seconds: float,
    on_status_error: StatusHandler | None = None,
) -> Any:
    """Issue exactly one GET and map transport-level failures to `TransportError`.

    Providers that report routing failures through a non-2xx status (GraphHopper answers
    400 with a `message`) pass `on_status_error` to turn such a response into their own
    error; anything it does not claim becomes `TransportError`.
    """
    try:
        return await get_json(url, params=params, timeout_seconds=timeout_seconds)
    except httpx.HTTPStatusError as exc:
        status_code = exc.response.status_code
        if on_status_error is not None:
            claimed = on_status_error(exc.response)
            if claimed is not None:
                raise claimed from exc
        logger.warning("%s directions request failed with HTTP %s", provider, status_code)
        raise TransportError(
            f"{provider} answered HTTP {status_code}", provider=provider, status_code=status_code
        ) from exc
    except httpx.HTTPError as exc:
        logger.warning("%s directions request failed: %s", provider, exc)
        raise TransportError(f"{provider} unreachable: {exc}", provider=provider) from exc
    except ValueError as exc:
        raise ProviderError(
            RouteErrorReason.MALFORMED_RESPONSE,
            f"{provider} returned a non-JSON body",
            provider=provider,
        ) from exc


def build_route(
    provider: str,
    coordinates: list[Coordinate],
    duration_seconds: float,
    duration_text: str | None = None,
) -> Route:
    """Construct a `Route`, rejecting geometries that cannot be walked."""
    if len(coordinates) < 2:
        raise ProviderError(
            RouteErrorReason.NO_ROUTE_FOUND,
            f"{provider} returned a route with {len(coordinates)} point(s)",
            provider=provider,
        )
    if not math.isfinite(duration_seconds) or duration_seconds < 0:
        raise ProviderError(
            RouteErrorReason.MALFORMED_RESPONSE,
            f"{provider} returned an unusable duration: {duration_seconds!r}",
            provider=provider,
        )
    return Route(
        coordinates=tuple(coordinates),
        duration_seconds=float(duration_seconds),
        provider=provider,
        duration_text=duration_text,
    )
