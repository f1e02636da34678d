"""Pydantic models for proximity annotations and POST /listings/nearby."""
from typing import Any, Literal

from pydantic import BaseModel, Field

from housing.location.models import ReferencePoint, ReferenceSelection


class DistanceAnnotation(BaseModel):
    listing_id: Any  # caller-owned id: int, str, UUID, ...
    distance_km: float
    within_radius: bool


class ListingLocation(BaseModel):
    """Only the fields the proximity search reads; coordinates may be strings from the listings DB."""

    id: int | str
    latitude: float | str | None = None
    longitude: float | str | None = None


class NearbyListingsRequest(ReferenceSelection):
    radius_km: float | None = Field(default=None, gt=0, le=500)
    listings: list[ListingLocation] = Field(default_factory=list, max_length=1000)
    sort: Literal["input", "nearest"] = "input"
    only_within_radius: bool = False


class NearbyListingsResponse(BaseModel):
    reference: ReferencePoint | None
    radius_km: float
    annotations: list[DistanceAnnotation]
