"""
Google Directions API client (walking mode).

Axis order:
- request: `origin=lat,lng` and `destination=lat,lng`
- response geometry: `routes[0].overview_polyline.points`, an encoded polyline that
  `hamqadam.geometry.polyline.decode` turns into latitude-first coordinates.

Duration: `legs[*].duration.value` is seconds (summed over legs); the localized
`duration.text` label is kept on the route for provenance.
"""

from __future__ import annotations

import logging
from typing import Any

from hamqadam.config.settings import Settings
from hamqadam.directions.base import build_route, format_lat_lng, request_json
from hamqadam.domain.models import Coordinate, Route
from hamqadam.errors import ConfigError, DecodeError, ProviderError, RouteErrorReason
from hamqadam.geometry.polyline import decode

logger = logging.getLogger(__name__)

PROVIDER = "google"

# Statuses meaning "the request was fine but there is no walkable route".
_NO_ROUTE_STATUSES = {"ZERO_RESULTS", "NOT_FOUND"}


class GoogleDirectionsClient:
    """Fetches one walking route from the Google Directions API."""

    provider = PROVIDER

    def __init__(self, settings: Settings):
        self._settings = settings

    def _params(self, start: Coordinate, end: Coordinate, api_key: str) -> dict[str, Any]:
        return {
            "origin": format_lat_lng(start),
            "destination": format_lat_lng(end),
            "mode": self._settings.directions.mode,
            "key": api_key,
        }

    async def fetch_route(self, start: Coordinate, end: Coordinate) -> Route:
        """Return the first route Google suggests between `start` and `end`.

        Raises:
            ConfigError: No API key configured (checked before any I/O).
            TransportError: Network failure or non-2xx status.
            ProviderError: Google reported a non-OK status or the payload is unusable.
        """
        api_key = self._settings.directions.google.api_key
        if not api_key:
            logger.error("Google Maps API key is missing.")
            raise ConfigError("directions.google.api_key", provider=PROVIDER)

        logger.info("Fetching %s route %s -> %s", PROVIDER, format_lat_lng(start), format_lat_lng(end))
        data = await request_json(
            PROVIDER,
            self._settings.directions.google.base_url,
            params=self._params(start, end, api_key),
            timeout_seconds=self._settings.directions.timeout_seconds,
        )
        return parse_directions_response(data)


def parse_directions_response(data: Any) -> Route:
    """Normalize a Directions API JSON payload into a `Route`."""
    if not isinstance(data, dict):
        raise ProviderError(
            RouteErrorReason.MALFORMED_RESPONSE, "Directions payload is not an object", provider=PROVIDER
        )

    status = data.get("status")
    if status != "OK":
        message = data.get("error_message") or f"Directions status {status}"
        logger.warning("Directions API error: %s %s", status, data.get("error_message"))
        reason = (
            RouteErrorReason.NO_ROUTE_FOUND
            if status in _NO_ROUTE_STATUSES
            else RouteErrorReason.PROVIDER_ERROR
        )
        raise ProviderError(reason, message, provider=PROVIDER, status=status)

    routes = data.get("routes") or []
    if not isinstance(routes, list):
        raise ProviderError(RouteErrorReason.MALFORMED_RESPONSE, "Directions routes is not a list", provider=PROVIDER)
    if not routes:
        raise ProviderError(
            RouteErrorReason.NO_ROUTE_FOUND, "Directions returned no routes", provider=PROVIDER, status=status
        )

    try:
        route = routes[0]
        encoded = route["overview_polyline"]["points"]
        legs = route["legs"]
        if not legs:
            raise IndexError("legs")
        duration_seconds = sum(float(leg["duration"]["value"]) for leg in legs)
        duration_text = legs[0]["duration"].get("text") if len(legs) == 1 else None
    except (KeyError, TypeError, ValueError, IndexError) as exc:
        raise ProviderError(
            RouteErrorReason.MALFORMED_RESPONSE, f"Directions route is missing {exc}", provider=PROVIDER
        ) from exc

    if not isinstance(encoded, str):
        raise ProviderError(
            RouteErrorReason.MALFORMED_RESPONSE, "overview_polyline.points is not a string", provider=PROVIDER
        )
    try:
        coordinates = decode(encoded)
    except DecodeError as exc:
        logger.warning("Could not decode Directions polyline: %s", exc)
        raise ProviderError(RouteErrorReason.MALFORMED_RESPONSE, str(exc), provider=PROVIDER) from exc

    return build_route(PROVIDER, coordinates, duration_seconds, duration_text)
