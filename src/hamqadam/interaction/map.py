"""
Map capability.

The interaction machine never talks to a tile renderer directly. It needs six
operations (place a marker, remove a layer, draw a polyline, fit the view to a
layer, subscribe to clicks, set the view), described by `MapCapability`.

`OverlayBoard` is the in-process implementation: it records overlays and the current
view so the API can serialize them for a Leaflet front end, and it dispatches clicks
coming back from that front end to the subscribed handlers.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable, Sequence
from typing import Literal, Protocol, Union

from pydantic import BaseModel, ConfigDict

from hamqadam.config.settings import RouteStyle
from hamqadam.domain.models import Coordinate
from hamqadam.geometry.bounds import Bounds

logger = logging.getLogger(__name__)

LayerHandle = int
MarkerKind = Literal["start", "end"]
ClickHandler = Callable[[Coordinate], object]


class MapCapability(Protocol):
    def place_marker(self, coordinate: Coordinate, kind: MarkerKind) -> LayerHandle: ...

    def remove_layer(self, handle: LayerHandle) -> None: ...

    def draw_polyline(self, coordinates: Sequence[Coordinate], style: RouteStyle) -> LayerHandle: ...

    def fit_bounds(self, handle: LayerHandle, padding: float) -> None: ...

    def on_click(self, handler: ClickHandler) -> None: ...

    def set_view(self, coordinate: Coordinate, zoom: int) -> None: ...


class MarkerLayer(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["marker"] = "marker"
    handle: LayerHandle
    kind: MarkerKind
    coordinate: Coordinate


class PolylineLayer(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["polyline"] = "polyline"
    handle: LayerHandle
    coordinates: tuple[Coordinate, ...]
    style: RouteStyle


Layer = Union[MarkerLayer, PolylineLayer]


class MapView(BaseModel):
    """What the front end should show: a center/zoom, or bounds to fit."""

    model_config = ConfigDict(frozen=True)

    center: Coordinate
    zoom: int
    bounds: tuple[float, float, float, float] | None = None  # south, west, north, east


class OverlayBoard:
    """In-memory `MapCapability` that the API projects to the browser."""

    def __init__(self, center: Coordinate, zoom: int):
        self._layers: dict[LayerHandle, Layer] = {}
        self._handles = itertools.count(1)
        self._click_handlers: list[ClickHandler] = []
        self._view = MapView(center=center, zoom=zoom)

    # ── MapCapability ─────────────────────────────────────────────

    def place_marker(self, coordinate: Coordinate, kind: MarkerKind) -> LayerHandle:
        handle = next(self._handles)
        self._layers[handle] = MarkerLayer(handle=handle, kind=kind, coordinate=coordinate)
        return handle

    def remove_layer(self, handle: LayerHandle) -> None:
        if self._layers.pop(handle, None) is None:
            logger.debug("remove_layer(%s): no such layer", handle)

    def draw_polyline(self, coordinates: Sequence[Coordinate], style: RouteStyle) -> LayerHandle:
        handle = next(self._handles)
        self._layers[handle] = PolylineLayer(handle=handle, coordinates=tuple(coordinates), style=style)
        return handle

    def fit_bounds(self, handle: LayerHandle, padding: float) -> None:
        layer = self._layers.get(handle)
        if layer is None:
            raise KeyError(f"Unknown layer handle: {handle}")
        points = layer.coordinates if isinstance(layer, PolylineLayer) else (layer.coordinate,)
        box = Bounds.of(points).pad(padding)
        self._view = MapView(
            center=box.center(),
            zoom=self._view.zoom,
            bounds=(box.south, box.west, box.north, box.east),
        )

    def on_click(self, handler: ClickHandler) -> None:
        self._click_handlers.append(handler)

    def set_view(self, coordinate: Coordinate, zoom: int) -> None:
        self._view = MapView(center=coordinate, zoom=zoom)

    # ── Front-end side ───────────────────────────────────────────

    def click(self, coordinate: Coordinate) -> bool:
        """Deliver a map click; True if any handler accepted it."""
        accepted = False
        for handler in list(self._click_handlers):
            if handler(coordinate):
                accepted = True
        return accepted

    @property
    def view(self) -> MapView:
        return self._view

    def layers(self) -> list[Layer]:
        """Current overlays, oldest first."""
        return [self._layers[h] for h in sorted(self._layers)]

    def markers(self) -> list[MarkerLayer]:
        return [layer for layer in self.layers() if isinstance(layer, MarkerLayer)]

    def polylines(self) -> list[PolylineLayer]:
        return [layer for layer in self.layers() if isinstance(layer, PolylineLayer)]
