"""
GraphHopper Routing API client (foot profile).

Axis order:
- request: `point=lat,lng`, repeated once per waypoint
- response geometry (with `points_encoded=false`): GeoJSON `[lng, lat]` pairs, swapped
  here into latitude-first `Coordinate`s

Duration: `paths[0].time` is milliseconds.

GraphHopper reports routing failures ("Cannot find point 0") as HTTP 400 with a JSON
`message`; those are provider errors, not transport errors.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from hamqadam.config.settings import Settings
from hamqadam.directions.base import build_route, format_lat_lng, request_json
from hamqadam.domain.models import Coordinate, Route
from hamqadam.errors import ConfigError, ProviderError, RouteError, RouteErrorReason

logger = logging.getLogger(__name__)

PROVIDER = "graphhopper"


def _status_error(response: httpx.Response) -> RouteError | None:
    """Claim 400 answers that carry a routing message."""
    if response.status_code != 400:
        return None
    try:
        body = response.json()
    except ValueError:
        return None
    message = body.get("message") if isinstance(body, dict) else None
    if not message:
        return None
    logger.warning("GraphHopper could not route: %s", message)
    return ProviderError(RouteErrorReason.NO_ROUTE_FOUND, str(message), provider=PROVIDER, status="400")


class GraphHopperClient:
    """Fetches one walking route from the GraphHopper Routing API."""

    provider = PROVIDER

    def __init__(self, settings: Settings):
        self._settings = settings

    def _params(self, start: Coordinate, end: Coordinate, api_key: str) -> list[tuple[str, Any]]:
        return [
            ("point", format_lat_lng(start)),
            ("point", format_lat_lng(end)),
            ("profile", self._settings.directions.graphhopper.profile),
            ("points_encoded", "false"),
            ("instructions", "false"),
            ("key", api_key),
        ]

    async def fetch_route(self, start: Coordinate, end: Coordinate) -> Route:
        """Return the first GraphHopper path between `start` and `end`."""
        api_key = self._settings.directions.graphhopper.api_key
        if not api_key:
            logger.error("GraphHopper API key is missing.")
            raise ConfigError("directions.graphhopper.api_key", provider=PROVIDER)

        logger.info("Fetching %s route %s -> %s", PROVIDER, format_lat_lng(start), format_lat_lng(end))
        data = await request_json(
            PROVIDER,
            self._settings.directions.graphhopper.base_url,
            params=self._params(start, end, api_key),
            timeout_seconds=self._settings.directions.timeout_seconds,
            on_status_error=_status_error,
        )
        return parse_route_response(data)


def parse_route_response(data: Any) -> Route:
    """Normalize a GraphHopper `/route` JSON payload into a `Route`."""
    if not isinstance(data, dict):
        raise ProviderError(
            RouteErrorReason.MALFORMED_RESPONSE, "GraphHopper payload is not an object", provider=PROVIDER
        )
    if data.get("message") and not data.get("paths"):
        raise ProviderError(RouteErrorReason.PROVIDER_ERROR, str(data["message"]), provider=PROVIDER)

    paths = data.get("paths") or []
    if not isinstance(paths, list):
        raise ProviderError(RouteErrorReason.MALFORMED_RESPONSE, "GraphHopper paths is not a list", provider=PROVIDER)
    if not paths:
        raise ProviderError(RouteErrorReason.NO_ROUTE_FOUND, "GraphHopper returned no paths", provider=PROVIDER)

    try:
        path = paths[0]
        raw_points = path["points"]["coordinates"]
        duration_ms = float(path["time"])
        # GeoJSON order is [lng, lat] (an optional elevation may follow).
        coordinates = [Coordinate(lat=float(p[1]), lng=float(p[0])) for p in raw_points]
    except (KeyError, TypeError, ValueError, IndexError) as exc:
        raise ProviderError(
            RouteErrorReason.MALFORMED_RESPONSE, f"GraphHopper path is unusable: {exc}", provider=PROVIDER
        ) from exc

    return build_route(PROVIDER, coordinates, duration_ms / 1000.0)
