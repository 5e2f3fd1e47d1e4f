"""
Selection state machine.

This module owns the interaction flow of one map session:

    SELECTING_START --click--> SELECTING_END --click--> PATH_CONFIRMED (route fetch starts)
    PATH_CONFIRMED --confirm--> SEARCHING_FOR_MATCH --threshold--> MATCH_FOUND

and every way back to SELECTING_START (reset, cancel, end, route failure).

Rules:
- exactly one `Phase` is active; transitions are looked up in `TRANSITIONS`;
- at most one route fetch and one match timer exist per episode;
- an episode ends on every return to SELECTING_START, which bumps `generation`;
  async results tagged with an older generation are discarded;
- overlays (markers, route line) belong to the episode and are all removed when it ends.

Events are plain method calls and must be delivered from inside the running event loop.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from enum import Enum

from hamqadam.config.settings import Settings, get_settings
from hamqadam.directions.base import RouteClient
from hamqadam.domain.models import Coordinate, Marker, Phase, Route, SessionSnapshot
from hamqadam.errors import InvalidTransition, RouteError
from hamqadam.interaction.map import LayerHandle, MapCapability, MarkerKind
from hamqadam.interaction.messages import Messages
from hamqadam.interaction.simulator import MatchSimulator

logger = logging.getLogger(__name__)

AlertCallback = Callable[[str], object]


class Event(str, Enum):
    MAP_CLICKED = "map_clicked"
    ROUTE_SUCCEEDED = "route_succeeded"
    ROUTE_FAILED = "route_failed"
    CONFIRMED = "confirmed"
    MATCH_FOUND = "match_found"
    CANCELLED = "cancelled"
    ENDED = "ended"
    RESET = "reset"


TRANSITIONS: dict[tuple[Phase, Event], Phase] = {
    (Phase.SELECTING_START, Event.MAP_CLICKED): Phase.SELECTING_END,
    (Phase.SELECTING_END, Event.MAP_CLICKED): Phase.PATH_CONFIRMED,
    (Phase.PATH_CONFIRMED, Event.ROUTE_SUCCEEDED): Phase.PATH_CONFIRMED,
    (Phase.PATH_CONFIRMED, Event.ROUTE_FAILED): Phase.SELECTING_START,
    (Phase.PATH_CONFIRMED, Event.CONFIRMED): Phase.SEARCHING_FOR_MATCH,
    (Phase.SEARCHING_FOR_MATCH, Event.MATCH_FOUND): Phase.MATCH_FOUND,
    (Phase.SEARCHING_FOR_MATCH, Event.CANCELLED): Phase.SELECTING_START,
    (Phase.MATCH_FOUND, Event.ENDED): Phase.SELECTING_START,
    **{(phase, Event.RESET): Phase.SELECTING_START for phase in Phase},
}


class SelectionMachine:
    """Drives point selection, route acquisition and the simulated match for one map."""

    def __init__(
        self,
        map_: MapCapability,
        route_client: RouteClient,
        *,
        settings: Settings | None = None,
        simulator: MatchSimulator | None = None,
        messages: Messages | None = None,
        alert: AlertCallback | None = None,
    ):
        self._settings = settings or get_settings()
        self._map = map_
        self._route_client = route_client
        self._simulator = simulator or MatchSimulator(
            self._settings.matching.tick_interval_seconds,
            self._settings.matching.threshold,
        )
        self._messages = messages or Messages.for_settings(self._settings)
        self._alert_callback = alert

        self._phase = Phase.SELECTING_START
        self._generation = 0
        self._markers: list[tuple[Marker, LayerHandle]] = []
        self._route: Route | None = None
        self._route_handle: LayerHandle | None = None
        self._fetch_task: asyncio.Task[None] | None = None
        self._match_count = 0
        self._alert: str | None = None

        map_.on_click(self.click)
        self._show_home()

    # ── State ─────────────────────────────────────────────────────

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def loading(self) -> bool:
        return self._fetch_task is not None

    @property
    def markers(self) -> tuple[Marker, ...]:
        return tuple(marker for marker, _ in self._markers)

    @property
    def route(self) -> Route | None:
        return self._route

    @property
    def match_count(self) -> int:
        return self._match_count

    @property
    def alert(self) -> str | None:
        return self._alert

    def snapshot(self) -> SessionSnapshot:
        instruction = self._messages.loading() if self.loading else self._messages.instruction(self._phase)
        match_label = None
        if self._phase in (Phase.SEARCHING_FOR_MATCH, Phase.MATCH_FOUND):
            match_label = self._messages.match_progress(self._match_count, self._simulator.threshold)
        return SessionSnapshot(
            phase=self._phase,
            generation=self._generation,
            loading=self.loading,
            markers=self.markers,
            route=self._route,
            duration_label=self._messages.duration(self._route.duration_minutes) if self._route else None,
            match_count=self._match_count,
            match_threshold=self._simulator.threshold,
            match_label=match_label,
            instruction=instruction,
            alert=self._alert,
        )

    # ── Events ────────────────────────────────────────────────────

    def click(self, coordinate: Coordinate) -> bool:
        """A map click. Defines the start, then the end point; ignored otherwise."""
        if self.loading or not self._accepts(Event.MAP_CLICKED):
            logger.debug("Ignoring map click in %s (loading=%s)", self._phase.value, self.loading)
            return False

        if self._phase is Phase.SELECTING_START:
            self._alert = None
            self._place_marker(coordinate, "start")
            self._transition(Event.MAP_CLICKED)
        else:
            self._place_marker(coordinate, "end")
            self._transition(Event.MAP_CLICKED)
            self._begin_fetch()
        return True

    def confirm(self) -> bool:
        """User accepts the route and asks for a walking companion."""
        if self.loading or self._route is None or not self._accepts(Event.CONFIRMED):
            return False
        if not self._settings.matching.enabled:
            self._notify(self._messages.matching_disabled())
            return True

        self._transition(Event.CONFIRMED)
        self._match_count = 0
        generation = self._generation
        self._simulator.start(
            on_tick=lambda count: self._on_match_tick(generation, count),
            on_complete=lambda: self._on_match_complete(generation),
        )
        return True

    def cancel(self) -> bool:
        """Abort the companion search."""
        if not self._accepts(Event.CANCELLED):
            return False
        self._transition(Event.CANCELLED)
        self._end_episode()
        return True

    def end(self) -> bool:
        """Dismiss a found match and start over."""
        if not self._accepts(Event.ENDED):
            return False
        self._transition(Event.ENDED)
        self._end_episode()
        return True

    def reset(self) -> bool:
        """Start over from any phase, dropping anything still in flight."""
        self._alert = None
        self._transition(Event.RESET)
        self._end_episode()
        return True

    async def wait_idle(self) -> None:
        """Wait until no route fetch is in flight."""
        task = self._fetch_task
        if task is not None:
            await asyncio.wait({task})

    def shutdown(self) -> None:
        """Cancel background work without touching the phase (app teardown)."""
        self._cancel_fetch()
        self._simulator.stop()

    # ── Transitions ───────────────────────────────────────────────

    def _accepts(self, event: Event) -> bool:
        return (self._phase, event) in TRANSITIONS

    def _transition(self, event: Event) -> Phase:
        target = TRANSITIONS.get((self._phase, event))
        if target is None:
            raise InvalidTransition(self._phase.value, event.value)
        if target is not self._phase:
            logger.info("Phase %s -> %s (%s)", self._phase.value, target.value, event.value)
        self._phase = target
        return target

    def _end_episode(self) -> None:
        """Release everything the episode owns; the machine is back at SELECTING_START."""
        self._cancel_fetch()
        self._simulator.stop()
        for _, handle in self._markers:
            self._map.remove_layer(handle)
        self._markers.clear()
        if self._route_handle is not None:
            self._map.remove_layer(self._route_handle)
        self._route_handle = None
        self._route = None
        self._match_count = 0
        self._generation += 1
        self._show_home()

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    # ── Side effects ──────────────────────────────────────────────

    def _show_home(self) -> None:
        home = self._settings.map.home
        self._map.set_view(Coordinate(lat=home.lat, lng=home.lng), home.zoom)

    def _place_marker(self, coordinate: Coordinate, kind: MarkerKind) -> None:
        handle = self._map.place_marker(coordinate, kind)
        self._markers.append((Marker(kind=kind, coordinate=coordinate), handle))

    def _notify(self, message: str) -> None:
        self._alert = message
        if self._alert_callback is not None:
            self._alert_callback(message)

    def _begin_fetch(self) -> None:
        start, end = (marker.coordinate for marker, _ in self._markers)
        generation = self._generation
        self._fetch_task = asyncio.get_running_loop().create_task(self._fetch(generation, start, end))

    def _cancel_fetch(self) -> None:
        task, self._fetch_task = self._fetch_task, None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def _fetch(self, generation: int, start: Coordinate, end: Coordinate) -> None:
        try:
            route = await self._route_client.fetch_route(start, end)
        except RouteError as exc:
            if not self._is_current(generation):
                logger.info("Discarding route failure from stale episode %s: %s", generation, exc)
                return
            logger.warning("Route fetch failed (%s): %s", exc.reason.value, exc)
            self._fail(exc.reason.value)
            return
        except Exception:
            logger.exception("Unexpected error while fetching route")
            if self._is_current(generation):
                self._fail("unexpected")
            return

        if not self._is_current(generation):
            logger.info("Discarding route from stale episode %s (current %s)", generation, self._generation)
            return
        self._fetch_task = None
        self._show_route(route)

    def _fail(self, reason: str) -> None:
        self._fetch_task = None
        self._transition(Event.ROUTE_FAILED)
        self._end_episode()
        self._notify(self._messages.error(reason))

    def _show_route(self, route: Route) -> None:
        style = self._settings.map.route_style
        self._route_handle = self._map.draw_polyline(route.coordinates, style)
        self._route = route
        self._transition(Event.ROUTE_SUCCEEDED)
        self._map.fit_bounds(self._route_handle, self._settings.map.fit_padding)
        logger.info(
            "Route ready: %s points, %s min (%s)", len(route.coordinates), route.duration_minutes, route.provider
        )

    def _on_match_tick(self, generation: int, count: int) -> None:
        if not self._is_current(generation) or self._phase is not Phase.SEARCHING_FOR_MATCH:
            return
        self._match_count = count
        logger.debug("Match progress %s/%s", count, self._simulator.threshold)

    def _on_match_complete(self, generation: int) -> None:
        if not self._is_current(generation) or self._phase is not Phase.SEARCHING_FOR_MATCH:
            return
        self._transition(Event.MATCH_FOUND)
        self._simulator.stop()
