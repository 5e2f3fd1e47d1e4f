import pytest

from hamqadam.config.settings import RouteStyle
from hamqadam.domain.models import Coordinate, Route
from hamqadam.geometry.bounds import Bounds
from hamqadam.interaction.map import OverlayBoard

HOME = Coordinate(lat=35.6892, lng=51.389)


def test_markers_and_polylines_get_distinct_handles():
    board = OverlayBoard(center=HOME, zoom=13)

    a = board.place_marker(Coordinate(lat=35.7, lng=51.4), "start")
    b = board.place_marker(Coordinate(lat=35.71, lng=51.42), "end")
    line = board.draw_polyline([Coordinate(lat=35.7, lng=51.4), Coordinate(lat=35.71, lng=51.42)], RouteStyle())

    assert len({a, b, line}) == 3
    assert [layer.type for layer in board.layers()] == ["marker", "marker", "polyline"]

    board.remove_layer(a)
    board.remove_layer(a)  # already gone: no error
    assert [m.kind for m in board.markers()] == ["end"]


def test_fit_bounds_pads_route_box():
    board = OverlayBoard(center=HOME, zoom=13)
    line = board.draw_polyline(
        [Coordinate(lat=35.0, lng=51.0), Coordinate(lat=36.0, lng=52.0)],
        RouteStyle(),
    )

    board.fit_bounds(line, 0.2)

    assert board.view.bounds == pytest.approx((34.8, 50.8, 36.2, 52.2))
    assert board.view.center.lat == pytest.approx(35.5)
    assert board.view.center.lng == pytest.approx(51.5)

    board.set_view(HOME, 13)
    assert board.view.bounds is None
    assert board.view.center == HOME


def test_fit_bounds_unknown_handle_raises():
    board = OverlayBoard(center=HOME, zoom=13)
    with pytest.raises(KeyError):
        board.fit_bounds(99, 0.2)


def test_click_dispatches_to_handlers():
    board = OverlayBoard(center=HOME, zoom=13)
    seen = []
    board.on_click(lambda c: seen.append(c) or False)
    point = Coordinate(lat=1, lng=2)

    assert board.click(point) is False
    board.on_click(lambda c: True)
    assert board.click(point) is True
    assert seen == [point, point]


def test_bounds_pad_clamps_to_valid_degrees():
    box = Bounds(south=-89.0, west=-179.0, north=89.0, east=179.0).pad(0.5)
    assert (box.south, box.west, box.north, box.east) == (-90.0, -180.0, 90.0, 180.0)
    assert box.contains(Coordinate(lat=0, lng=0))


def test_bounds_of_empty_sequence_raises():
    with pytest.raises(ValueError):
        Bounds.of([])


def test_route_requires_two_points_and_rounds_minutes():
    a = Coordinate(lat=1, lng=1)
    b = Coordinate(lat=2, lng=2)

    with pytest.raises(ValueError):
        Route(coordinates=(a,), duration_seconds=60, provider="x")

    assert Route(coordinates=(a, b), duration_seconds=89, provider="x").duration_minutes == 1
    assert Route(coordinates=(a, b), duration_seconds=90, provider="x").duration_minutes == 2
    assert Route(coordinates=(a, b), duration_seconds=10, provider="x").duration_minutes == 1
    assert Route(coordinates=(a, b), duration_seconds=0, provider="x").duration_minutes == 0


def test_coordinate_rejects_out_of_range_and_non_finite():
    with pytest.raises(ValueError):
        Coordinate(lat=91, lng=0)
    with pytest.raises(ValueError):
        Coordinate(lat=0, lng=-181)
    with pytest.raises(ValueError):
        Coordinate(lat=float("nan"), lng=0)
