from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from hamqadam.domain.models import Coordinate

"""
Bounding boxes for "fit view to route".

We keep a tiny geometry layer here instead of pulling in a GIS dependency; the map
front end only needs south/west/north/east plus padding.
"""


@dataclass(frozen=True)
class Bounds:
    """An axis-aligned lat/lng box in decimal degrees."""

    south: float
    west: float
    north: float
    east: float

    @classmethod
    def of(cls, coordinates: Iterable[Coordinate]) -> Bounds:
        """Smallest box containing every coordinate."""
        points = list(coordinates)
        if not points:
            raise ValueError("Cannot compute bounds of an empty coordinate sequence.")
        lats = [p.lat for p in points]
        lngs = [p.lng for p in points]
        return cls(south=min(lats), west=min(lngs), north=max(lats), east=max(lngs))

    def pad(self, ratio: float) -> Bounds:
        """Grow each side by `ratio` of the box's height/width, clamped to valid degrees."""
        lat_buffer = (self.north - self.south) * ratio
        lng_buffer = (self.east - self.west) * ratio
        return Bounds(
            south=max(-90.0, self.south - lat_buffer),
            west=max(-180.0, self.west - lng_buffer),
            north=min(90.0, self.north + lat_buffer),
            east=min(180.0, self.east + lng_buffer),
        )

    def center(self) -> Coordinate:
        return Coordinate(lat=(self.south + self.north) / 2, lng=(self.west + self.east) / 2)

    def contains(self, point: Coordinate) -> bool:
        return self.south <= point.lat <= self.north and self.west <= point.lng <= self.east
