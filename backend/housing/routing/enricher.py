"""
Route enrichment: travel path, distance and duration from a reference point to
each destination.

Prefers a routed path from the provider; falls back to a straight line when
there is no credential, the provider fails, or the path lies outside the
configured region. Destinations are sent in fixed-size batches with a delay
between batches (provider rate limits). enrich_batch never raises for
provider failures.
"""
import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, Protocol

from housing.data.geo import GeoPoint, RegionBBox, distance_km, is_known_point, round_half_up
from housing.errors import ImplausibleRouteError, RoutingError
from housing.proximity.service import listing_id, listing_point
from housing.routing.client import OpenRouteServiceClient, ProviderRoute
from housing.routing.models import RouteKind, RouteResult, RoutingConfig, TravelMode

logger = logging.getLogger(__name__)

# Fallback speeds for straight-line duration estimates
DRIVING_SPEED_KMH = 40.0
WALKING_SPEED_KMH = 5.0


class RouteProvider(Protocol):
    async def get_route(self, start: GeoPoint, end: GeoPoint, mode: TravelMode | str) -> ProviderRoute: ...


def estimate_duration_minutes(distance: float, mode: TravelMode | str) -> int:
    speed = DRIVING_SPEED_KMH if TravelMode(mode) == TravelMode.DRIVING else WALKING_SPEED_KMH
    return int(round_half_up(distance / speed * 60.0))


def straight_line_route(
    destination_id: Any,
    reference: GeoPoint,
    destination: GeoPoint,
    mode: TravelMode | str,
) -> RouteResult:
    d = distance_km(reference, destination)
    return RouteResult(
        listing_id=destination_id,
        coordinates=[reference, destination],
        distance_km=d,
        duration_minutes=estimate_duration_minutes(d, mode),
        kind=RouteKind.STRAIGHT,
    )


def is_plausible(route: ProviderRoute, region: RegionBBox) -> bool:
    """First and last path points must lie in the region (catches lat/lng swaps)."""
    if not route.coordinates:
        return False
    return region.contains(route.coordinates[0]) and region.contains(route.coordinates[-1])


def _cancelled(cancel: asyncio.Event | None) -> bool:
    return cancel is not None and cancel.is_set()


def format_duration(minutes: int) -> str:
    """Display form: "45 min", "1h 30min", "2h"."""
    if minutes < 60:
        return f"{minutes} min"
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins}min" if mins else f"{hours}h"


class RouteEnricher:
    """Batch route lookup with straight-line fallback."""

    def __init__(
        self,
        config: RoutingConfig,
        client: RouteProvider | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self._config = config
        self._owns_client = False
        if client is None and config.credential:
            client = OpenRouteServiceClient(
                api_key=config.credential,
                base_url=config.base_url,
                timeout_seconds=config.timeout_seconds,
            )
            self._owns_client = True
        self._client = client
        self._sleep = sleep

    @property
    def road_routing_enabled(self) -> bool:
        return self._client is not None

    async def __aenter__(self) -> "RouteEnricher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client and isinstance(self._client, OpenRouteServiceClient):
            await self._client.aclose()

    async def enrich_batch(
        self,
        reference: GeoPoint | None,
        destinations: Iterable[Any],
        mode: TravelMode | str = TravelMode.DRIVING,
        batch_size: int | None = None,
        cancel: asyncio.Event | None = None,
    ) -> dict[Any, RouteResult]:
        """
        Return {destination id: RouteResult}, one entry per destination with an id
        and known coordinates. Destinations are dicts or objects with
        id/latitude/longitude; a repeated id is routed once (first occurrence).

        Batches of batch_size (default from config) run concurrently and must all
        settle before the inter-batch delay and the next batch. When cancel is set,
        no further batches are dispatched and the results so far are returned.
        """
        mode = TravelMode(mode)
        size = max(1, batch_size or self._config.batch_size)
        results: dict[Any, RouteResult] = {}

        if not is_known_point(reference):
            logger.info("telemetry routes_no_reference")
            return results

        valid: list[tuple[Any, GeoPoint]] = []
        seen: set[Any] = set()
        for destination in destinations:
            dest_id = listing_id(destination)
            if dest_id is None:
                logger.info("telemetry routes_missing_id")
                continue
            point = listing_point(destination)
            if point is None:
                logger.info(
                    "telemetry routes_invalid_coordinates listing_id=%s",
                    dest_id,
                    extra={"listing_id": dest_id},
                )
                continue
            if dest_id in seen:
                # First occurrence wins; each id is routed once
                logger.info(
                    "telemetry routes_duplicate_id listing_id=%s",
                    dest_id,
                    extra={"listing_id": dest_id},
                )
                continue
            seen.add(dest_id)
            valid.append((dest_id, point))

        batches = [valid[i : i + size] for i in range(0, len(valid), size)]
        logger.info(
            "telemetry routes_requested count=%s batches=%s mode=%s road_enabled=%s",
            len(valid),
            len(batches),
            mode.value,
            self.road_routing_enabled,
        )
        for index, batch in enumerate(batches):
            if index and not _cancelled(cancel):
                await self._sleep(self._config.batch_delay_seconds)
            if _cancelled(cancel):
                logger.info("telemetry routes_cancelled completed_batches=%s", index)
                break
            routes = await asyncio.gather(
                *(self._route_one(reference, dest_id, point, mode) for dest_id, point in batch)
            )
            for route in routes:
                results[route.listing_id] = route

        road = sum(1 for r in results.values() if r.kind == RouteKind.ROAD)
        logger.info(
            "telemetry routes_computed road=%s straight=%s",
            road,
            len(results) - road,
            extra={"road": road, "straight": len(results) - road},
        )
        return results

    async def _route_one(
        self,
        reference: GeoPoint,
        dest_id: Any,
        destination: GeoPoint,
        mode: TravelMode,
    ) -> RouteResult:
        if self._client is None:
            return straight_line_route(dest_id, reference, destination, mode)
        try:
            route = await self._client.get_route(reference, destination, mode)
            if not is_plausible(route, self._config.region_bbox):
                raise ImplausibleRouteError(
                    f"Route endpoints {route.coordinates[0]} -> {route.coordinates[-1]} outside region."
                    if route.coordinates
                    else "Route has no coordinates."
                )
            return RouteResult(
                listing_id=dest_id,
                coordinates=route.coordinates,
                distance_km=route.distance_km,
                duration_minutes=route.duration_minutes,
                kind=RouteKind.ROAD,
            )
        except RoutingError as e:
            logger.info(
                "telemetry route_fallback listing_id=%s reason=%s",
                dest_id,
                str(e),
                extra={"listing_id": dest_id, "reason": str(e)},
            )
            return straight_line_route(dest_id, reference, destination, mode)
        except Exception as e:
            # Provider bug: must not cancel the other routes in the batch
            logger.warning(
                "telemetry route_provider_error listing_id=%s error=%s",
                dest_id,
                str(e),
                extra={"listing_id": dest_id, "error": str(e)},
            )
            return straight_line_route(dest_id, reference, destination, mode)
