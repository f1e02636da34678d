"""Unit tests for the openrouteservice client: coordinate order, parsing, failures."""
import asyncio
import json

import httpx
import pytest

from housing.data.geo import GeoPoint
from housing.errors import RoutingError
from housing.routing.client import (
    OpenRouteServiceClient,
    _normalize_route_response,
    from_provider_coordinate,
    to_provider_coordinate,
)

UNIVERSITY = GeoPoint(latitude=36.8000, longitude=10.1800)
LISTING = GeoPoint(latitude=36.8100, longitude=10.1900)


def _geojson(coords, distance_m=1530.0, duration_s=245.0):
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "geometry": {"type": "LineString", "coordinates": coords},
                "properties": {"segments": [{"distance": distance_m, "duration": duration_s}]},
            }
        ],
    }


def _client(handler) -> OpenRouteServiceClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OpenRouteServiceClient(api_key="test-key", http_client=http)


# --- Coordinate order adapter ---


def test_to_provider_coordinate_is_lng_lat():
    assert to_provider_coordinate(UNIVERSITY) == [10.18, 36.80]


def test_from_provider_coordinate_swaps_back():
    assert from_provider_coordinate([10.18, 36.80]) == UNIVERSITY
    # Elevation is ignored
    assert from_provider_coordinate([10.18, 36.80, 12.5]) == UNIVERSITY


@pytest.mark.parametrize("raw", [None, [], [10.18], "10.18,36.8", [0, 0], [200.0, 36.8]])
def test_from_provider_coordinate_undecodable(raw):
    assert from_provider_coordinate(raw) is None


def test_round_trip_fixture_coordinates():
    for point in (UNIVERSITY, LISTING, GeoPoint(latitude=34.74, longitude=10.76)):
        assert from_provider_coordinate(to_provider_coordinate(point)) == point


# --- Response parsing ---


def test_normalize_route_response():
    raw = _geojson([[10.18, 36.80], [10.185, 36.805], [10.19, 36.81]], distance_m=1530.0, duration_s=245.0)
    route = _normalize_route_response(raw)
    assert route.coordinates[0] == UNIVERSITY
    assert route.coordinates[-1] == LISTING
    assert len(route.coordinates) == 3
    assert route.distance_km == 1.5
    assert route.duration_minutes == 4


def test_normalize_route_response_drops_bad_points():
    raw = _geojson([[10.18, 36.80], [0, 0], "junk", [10.19, 36.81]])
    route = _normalize_route_response(raw)
    assert route.coordinates == [UNIVERSITY, LISTING]


@pytest.mark.parametrize(
    "raw",
    [
        {},
        {"features": []},
        {"features": [{"geometry": None}]},
        _geojson([]),
        _geojson([[0, 0]]),
        {"features": [{"geometry": {"coordinates": [[10.18, 36.8]]}, "properties": {}}]},
        {"features": [{"geometry": {"coordinates": [[10.18, 36.8]]}, "properties": {"segments": [{}]}}]},
        ["not", "a", "dict"],
    ],
)
def test_normalize_route_response_malformed(raw):
    with pytest.raises(RoutingError):
        _normalize_route_response(raw)


# --- HTTP ---


def test_get_route_request_shape():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_geojson([[10.18, 36.80], [10.19, 36.81]]))

    client = _client(handler)
    route = asyncio.run(client.get_route(UNIVERSITY, LISTING, "walking"))
    assert seen["url"] == "https://api.openrouteservice.org/v2/directions/foot-walking/geojson"
    assert seen["auth"] == "test-key"
    assert seen["body"]["coordinates"] == [[10.18, 36.80], [10.19, 36.81]]
    assert seen["body"]["instructions"] is False
    assert route.coordinates == [UNIVERSITY, LISTING]


def test_get_route_driving_profile():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        return httpx.Response(200, json=_geojson([[10.18, 36.80], [10.19, 36.81]]))

    asyncio.run(_client(handler).get_route(UNIVERSITY, LISTING, "driving"))
    assert seen["path"] == "/v2/directions/driving-car/geojson"


def test_get_route_http_error_raises_routing_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, json={"error": "Access to this API has been disallowed"})

    with pytest.raises(RoutingError):
        asyncio.run(_client(handler).get_route(UNIVERSITY, LISTING, "driving"))


def test_get_route_timeout_raises_routing_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(RoutingError):
        asyncio.run(_client(handler).get_route(UNIVERSITY, LISTING, "driving"))


def test_get_route_invalid_json_raises_routing_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>bad gateway</html>")

    with pytest.raises(RoutingError):
        asyncio.run(_client(handler).get_route(UNIVERSITY, LISTING, "driving"))
