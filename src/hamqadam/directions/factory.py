"""Pick the configured directions provider."""

from __future__ import annotations

from hamqadam.config.settings import Settings
from hamqadam.directions.base import RouteClient
from hamqadam.directions.google import GoogleDirectionsClient
from hamqadam.directions.graphhopper import GraphHopperClient


def build_route_client(settings: Settings) -> RouteClient:
    """Return a route client for `settings.directions.provider`."""
    provider = settings.directions.provider
    if provider == "google":
        return GoogleDirectionsClient(settings)
    if provider == "graphhopper":
        return GraphHopperClient(settings)
    raise ValueError(f"Unknown directions provider: {provider!r}")
