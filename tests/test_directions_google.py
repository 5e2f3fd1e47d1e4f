import asyncio
import json

import httpx
import pytest

from hamqadam.config.settings import get_settings
from hamqadam.core.http import get_json
from hamqadam.directions.google import GoogleDirectionsClient, parse_directions_response
from hamqadam.domain.models import Coordinate
from hamqadam.errors import ConfigError, ProviderError, RouteErrorReason, TransportError
from hamqadam.geometry.polyline import encode

START = Coordinate(lat=35.7, lng=51.4)
END = Coordinate(lat=35.71, lng=51.42)


def _settings(api_key: str | None = "test-key"):
    settings = get_settings()
    google = settings.directions.google.model_copy(update={"api_key": api_key})
    directions = settings.directions.model_copy(update={"google": google, "provider": "google"})
    return settings.model_copy(update={"directions": directions})


def _ok_payload(points=((35.7, 51.4), (35.705, 51.41), (35.71, 51.42)), seconds=1234, text="21 mins"):
    return {
        "status": "OK",
        "routes": [
            {
                "overview_polyline": {"points": encode(points)},
                "legs": [{"duration": {"value": seconds, "text": text}}],
            }
        ],
    }


def test_fetch_route_builds_walking_request_and_normalizes(monkeypatch):
    calls = []

    async def fake_get_json(url, *, params=None, headers=None, timeout_seconds=15):  # noqa: ARG001
        calls.append((url, params, timeout_seconds))
        return _ok_payload()

    monkeypatch.setattr("hamqadam.directions.base.get_json", fake_get_json)

    route = asyncio.run(GoogleDirectionsClient(_settings()).fetch_route(START, END))

    assert len(calls) == 1
    url, params, timeout = calls[0]
    assert url == "https://maps.googleapis.com/maps/api/directions/json"
    assert params == {
        "origin": "35.700000,51.400000",
        "destination": "35.710000,51.420000",
        "mode": "walking",
        "key": "test-key",
    }
    assert timeout == 10

    assert route.provider == "google"
    assert route.duration_seconds == 1234
    assert route.duration_minutes == 21
    assert route.duration_text == "21 mins"
    assert route.start.lat == pytest.approx(35.7)
    assert route.end.lng == pytest.approx(51.42)
    assert len(route.coordinates) == 3


def test_missing_api_key_raises_config_error_without_io(monkeypatch):
    async def fail_get_json(*_a, **_k):
        raise AssertionError("no request expected")

    monkeypatch.setattr("hamqadam.directions.base.get_json", fail_get_json)

    with pytest.raises(ConfigError) as excinfo:
        asyncio.run(GoogleDirectionsClient(_settings(api_key=None)).fetch_route(START, END))
    assert excinfo.value.reason is RouteErrorReason.MISSING_CREDENTIAL


def test_http_error_status_is_transport_error(monkeypatch):
    async def fake_get_json(url, **_kwargs):
        request = httpx.Request("GET", url)
        response = httpx.Response(503, request=request)
        raise httpx.HTTPStatusError("503", request=request, response=response)

    monkeypatch.setattr("hamqadam.directions.base.get_json", fake_get_json)

    with pytest.raises(TransportError) as excinfo:
        asyncio.run(GoogleDirectionsClient(_settings()).fetch_route(START, END))
    assert excinfo.value.status_code == 503
    assert excinfo.value.reason is RouteErrorReason.TRANSPORT


def test_network_failure_is_transport_error(monkeypatch):
    async def fake_get_json(url, **_kwargs):
        raise httpx.ConnectError("connection refused", request=httpx.Request("GET", url))

    monkeypatch.setattr("hamqadam.directions.base.get_json", fake_get_json)

    with pytest.raises(TransportError):
        asyncio.run(GoogleDirectionsClient(_settings()).fetch_route(START, END))


@pytest.mark.parametrize(
    ("status", "reason"),
    [
        ("ZERO_RESULTS", RouteErrorReason.NO_ROUTE_FOUND),
        ("NOT_FOUND", RouteErrorReason.NO_ROUTE_FOUND),
        ("REQUEST_DENIED", RouteErrorReason.PROVIDER_ERROR),
        ("OVER_QUERY_LIMIT", RouteErrorReason.PROVIDER_ERROR),
    ],
)
def test_non_ok_status_is_provider_error(status, reason):
    with pytest.raises(ProviderError) as excinfo:
        parse_directions_response({"status": status, "error_message": "nope", "routes": []})
    assert excinfo.value.reason is reason
    assert excinfo.value.status == status


def test_single_point_route_is_no_route_found():
    with pytest.raises(ProviderError) as excinfo:
        parse_directions_response(_ok_payload(points=((35.7, 51.4),)))
    assert excinfo.value.reason is RouteErrorReason.NO_ROUTE_FOUND


def test_broken_polyline_is_malformed_response():
    payload = _ok_payload()
    payload["routes"][0]["overview_polyline"]["points"] = "_p~iF~ps|U_ulLnnqC_mqNvxq`"

    with pytest.raises(ProviderError) as excinfo:
        parse_directions_response(payload)
    assert excinfo.value.reason is RouteErrorReason.MALFORMED_RESPONSE


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"status": "OK", "routes": [{"legs": []}]},
        {"status": "OK", "routes": [{"overview_polyline": {"points": "??"}, "legs": []}]},
        {"status": "OK", "routes": [{"overview_polyline": {"points": 5}, "legs": [{"duration": {"value": 1}}]}]},
    ],
)
def test_unusable_payload_is_malformed_response(payload):
    with pytest.raises(ProviderError) as excinfo:
        parse_directions_response(payload)
    assert excinfo.value.reason is RouteErrorReason.MALFORMED_RESPONSE


def test_ok_without_routes_is_no_route_found():
    with pytest.raises(ProviderError) as excinfo:
        parse_directions_response({"status": "OK", "routes": []})
    assert excinfo.value.reason is RouteErrorReason.NO_ROUTE_FOUND


def test_multi_leg_durations_are_summed():
    payload = _ok_payload()
    payload["routes"][0]["legs"] = [
        {"duration": {"value": 600, "text": "10 mins"}},
        {"duration": {"value": 330, "text": "6 mins"}},
    ]

    route = parse_directions_response(payload)

    assert route.duration_seconds == 930
    assert route.duration_minutes == 16
    assert route.duration_text is None


@pytest.mark.parametrize("value", [float("nan"), float("inf"), -1])
def test_unusable_duration_is_malformed_response(value):
    with pytest.raises(ProviderError) as excinfo:
        parse_directions_response(_ok_payload(seconds=value))
    assert excinfo.value.reason is RouteErrorReason.MALFORMED_RESPONSE


def test_routes_object_instead_of_list_is_malformed_response():
    payload = _ok_payload()
    payload["routes"] = {"0": payload["routes"][0]}

    with pytest.raises(ProviderError) as excinfo:
        parse_directions_response(payload)
    assert excinfo.value.reason is RouteErrorReason.MALFORMED_RESPONSE


def test_nan_duration_in_raw_body_surfaces_as_provider_error(monkeypatch):
    # json.dumps writes a bare NaN literal, which the response decoder accepts.
    body = json.dumps(_ok_payload(seconds=float("nan")))
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text=body))

    async def get_json_via_mock(url, **kwargs):
        return await get_json(url, transport=transport, **kwargs)

    monkeypatch.setattr("hamqadam.directions.base.get_json", get_json_via_mock)

    with pytest.raises(ProviderError) as excinfo:
        asyncio.run(GoogleDirectionsClient(_settings()).fetch_route(START, END))
    assert excinfo.value.reason is RouteErrorReason.MALFORMED_RESPONSE
