"""
One interactive map session: an `OverlayBoard` plus the machine that drives it.

The API keeps a single session per process (the app is single-user and ephemeral).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from hamqadam.config.settings import Settings
from hamqadam.directions.base import RouteClient
from hamqadam.directions.factory import build_route_client
from hamqadam.domain.models import Coordinate
from hamqadam.interaction.machine import SelectionMachine
from hamqadam.interaction.map import OverlayBoard


@dataclass
class MapSession:
    board: OverlayBoard
    machine: SelectionMachine

    def state(self) -> dict[str, Any]:
        """JSON-ready payload for the front end: machine snapshot + overlays to draw."""
        return {
            "session": self.machine.snapshot().model_dump(mode="json"),
            "map": {
                "view": self.board.view.model_dump(mode="json"),
                "layers": [layer.model_dump(mode="json") for layer in self.board.layers()],
            },
        }


def build_session(settings: Settings, route_client: RouteClient | None = None) -> MapSession:
    """Wire a board, the configured route client and a machine together."""
    home = settings.map.home
    board = OverlayBoard(center=Coordinate(lat=home.lat, lng=home.lng), zoom=home.zoom)
    machine = SelectionMachine(
        board,
        route_client or build_route_client(settings),
        settings=settings,
    )
    return MapSession(board=board, machine=machine)
