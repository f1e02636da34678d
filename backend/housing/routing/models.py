"""Pydantic models for route results, routing config and POST /routes."""
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from housing.data.geo import GeoPoint, RegionBBox
from housing.location.models import ReferencePoint, ReferenceSelection
from housing.proximity.models import ListingLocation


class TravelMode(str, Enum):
    DRIVING = "driving"
    WALKING = "walking"


class RouteKind(str, Enum):
    ROAD = "road"  # path returned by the routing provider
    STRAIGHT = "straight"  # two-point fallback


class RouteResult(BaseModel):
    listing_id: Any  # caller-owned id: int, str, UUID, ...
    coordinates: list[GeoPoint]  # reference -> destination
    distance_km: float
    duration_minutes: int
    kind: RouteKind


class RoutingConfig(BaseModel):
    """
    Explicit routing configuration. credential=None disables road routing
    (every destination gets a straight-line result). region_bbox has no default:
    the plausibility bounds depend on the deployment.
    """

    credential: str | None = None
    region_bbox: RegionBBox
    base_url: str = "https://api.openrouteservice.org"
    batch_size: int = Field(default=2, ge=1)
    batch_delay_seconds: float = Field(default=1.0, ge=0)
    timeout_seconds: float = Field(default=5.0, gt=0)


class RoutesRequest(ReferenceSelection):
    mode: TravelMode = TravelMode.DRIVING
    batch_size: int | None = Field(default=None, ge=1, le=10)
    destinations: list[ListingLocation] = Field(default_factory=list, max_length=200)


class RoutesResponse(BaseModel):
    reference: ReferencePoint
    mode: TravelMode
    routes: list[RouteResult]
