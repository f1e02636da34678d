"""
openrouteservice.org directions client (async).
Bounded timeout per request; every failure is raised as RoutingError so the
caller can fall back to a straight line.

The provider speaks [lng, lat]; the rest of the package uses GeoPoint. The
two *_provider_coordinate functions are the only place the order is swapped.
"""
import logging
from typing import Any, NamedTuple

import httpx

from housing.data.geo import GeoPoint, parse_geo_point, round_half_up
from housing.errors import RoutingError
from housing.routing.models import TravelMode

logger = logging.getLogger(__name__)

ORS_BASE = "https://api.openrouteservice.org"
ROUTE_REQUEST_TIMEOUT_SECONDS = 5.0
PROFILES = {
    TravelMode.DRIVING: "driving-car",
    TravelMode.WALKING: "foot-walking",
}


class ProviderRoute(NamedTuple):
    coordinates: list[GeoPoint]
    distance_km: float
    duration_minutes: int


def to_provider_coordinate(point: GeoPoint) -> list[float]:
    return [point.longitude, point.latitude]


def from_provider_coordinate(raw: Any) -> GeoPoint | None:
    """[lng, lat] (optionally with elevation) -> GeoPoint, or None if undecodable."""
    if not isinstance(raw, (list, tuple)) or len(raw) < 2:
        return None
    return parse_geo_point(raw[1], raw[0])


def _normalize_route_response(raw: Any) -> ProviderRoute:
    """Parse a GeoJSON directions response into path, km and minutes."""
    features = raw.get("features") if isinstance(raw, dict) else None
    if not isinstance(features, list) or not features or not isinstance(features[0], dict):
        raise RoutingError("Route response has no features.")
    feature = features[0]

    geometry = feature.get("geometry")
    raw_coords = geometry.get("coordinates") if isinstance(geometry, dict) else None
    if not isinstance(raw_coords, list):
        raise RoutingError("Route response has no geometry.")
    coordinates = [p for p in (from_provider_coordinate(c) for c in raw_coords) if p is not None]
    if not coordinates:
        raise RoutingError("Route geometry is empty.")

    properties = feature.get("properties")
    segments = properties.get("segments") if isinstance(properties, dict) else None
    if not isinstance(segments, list) or not segments or not isinstance(segments[0], dict):
        raise RoutingError("Route response has no segments.")
    try:
        distance_m = float(segments[0]["distance"])
        duration_s = float(segments[0]["duration"])
    except (KeyError, TypeError, ValueError) as e:
        raise RoutingError("Route segment has no distance/duration.") from e

    return ProviderRoute(
        coordinates=coordinates,
        distance_km=round_half_up(distance_m / 1000.0, 1),
        duration_minutes=int(round_half_up(duration_s / 60.0)),
    )


class OpenRouteServiceClient:
    """Directions client for openrouteservice.org. One POST per route, no retries."""

    def __init__(
        self,
        api_key: str,
        base_url: str = ORS_BASE,
        timeout_seconds: float = ROUTE_REQUEST_TIMEOUT_SECONDS,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._api_key = api_key
        self._base = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout_seconds)

    async def get_route(self, start: GeoPoint, end: GeoPoint, mode: TravelMode | str) -> ProviderRoute:
        profile = PROFILES[TravelMode(mode)]
        url = f"{self._base}/v2/directions/{profile}/geojson"
        body = {
            "coordinates": [to_provider_coordinate(start), to_provider_coordinate(end)],
            "instructions": False,
            "preference": "recommended",
        }
        headers = {"Authorization": self._api_key, "Accept": "application/geo+json, application/json"}
        try:
            resp = await self._http.post(url, json=body, headers=headers, timeout=self._timeout)
            resp.raise_for_status()
            data = resp.json()
        except httpx.TimeoutException as e:
            logger.warning("telemetry ors_timeout profile=%s", profile, extra={"profile": profile})
            raise RoutingError("Routing provider timed out.") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(
                "telemetry ors_api_error profile=%s error=%s",
                profile,
                str(e),
                extra={"profile": profile, "error": str(e)},
            )
            raise RoutingError(f"Routing provider request failed: {e}") from e

        route = _normalize_route_response(data)
        logger.info(
            "telemetry ors_route_fetched profile=%s points=%s distance_km=%s",
            profile,
            len(route.coordinates),
            route.distance_km,
            extra={"profile": profile, "points": len(route.coordinates)},
        )
        return route

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()
