"""
Domain models (Pydantic).

These types are the stable "contract" between layers:
- the polyline codec and directions clients produce `Coordinate` / `Route`,
- the interaction machine owns them for one selection episode,
- the API serializes them (`SessionSnapshot`) for the map front end.

All models are frozen: a route never changes after a client builds it.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Coordinate(BaseModel):
    """A geographic point in decimal degrees, latitude first."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

    def as_pair(self) -> tuple[float, float]:
        return (self.lat, self.lng)


class Route(BaseModel):
    """A normalized walking route: lat-first coordinates plus a numeric duration."""

    model_config = ConfigDict(frozen=True)

    coordinates: tuple[Coordinate, ...] = Field(..., min_length=2)
    duration_seconds: float = Field(..., ge=0, allow_inf_nan=False)
    provider: str
    # Label as the provider phrased it (Google `duration.text`); kept for provenance only.
    duration_text: str | None = None

    @property
    def duration_minutes(self) -> int:
        """Whole minutes, rounded half up; never 0 for a non-zero duration."""
        if self.duration_seconds <= 0:
            return 0
        return max(1, math.floor(self.duration_seconds / 60 + 0.5))

    @property
    def start(self) -> Coordinate:
        return self.coordinates[0]

    @property
    def end(self) -> Coordinate:
        return self.coordinates[-1]


class Phase(str, Enum):
    """The single active state of the selection/matching machine."""

    SELECTING_START = "selecting_start"
    SELECTING_END = "selecting_end"
    PATH_CONFIRMED = "path_confirmed"
    SEARCHING_FOR_MATCH = "searching_for_match"
    MATCH_FOUND = "match_found"


class Marker(BaseModel):
    """A placed selection point as exposed to the view."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["start", "end"]
    coordinate: Coordinate


class SessionSnapshot(BaseModel):
    """Read-only projection of the machine, rendered by the view binder."""

    model_config = ConfigDict(frozen=True)

    phase: Phase
    generation: int
    loading: bool
    markers: tuple[Marker, ...] = ()
    route: Route | None = None
    duration_label: str | None = None
    match_count: int = 0
    match_threshold: int
    match_label: str | None = None
    instruction: str
    alert: str | None = None
