"""
Proximity filter: straight-line distance from a reference point to each listing,
classified against a search radius.

Listings are owned by the caller; only their id and coordinates are read.
Listings with unknown coordinates are skipped and logged, never raised.
"""
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from housing.data.geo import GeoPoint, distance_km, is_known_point, parse_geo_point
from housing.data.universities import University
from housing.proximity.models import DistanceAnnotation

logger = logging.getLogger(__name__)

DEFAULT_RADIUS_KM = 15.0
NEAREST_UNIVERSITY_MAX_KM = 50.0


def _field(listing: Any, name: str) -> Any:
    if isinstance(listing, Mapping):
        return listing.get(name)
    return getattr(listing, name, None)


def listing_id(listing: Any) -> Any:
    """The caller's id for a listing, or None when it is missing or unhashable."""
    value = _field(listing, "id")
    try:
        hash(value)
    except TypeError:
        return None
    return value


def listing_point(listing: Any) -> GeoPoint | None:
    """Coordinates of a listing (dict, model or ORM row), or None if unknown."""
    return parse_geo_point(_field(listing, "latitude"), _field(listing, "longitude"))


def annotate(
    reference: GeoPoint | None,
    candidates: Iterable[Any],
    radius_km: float,
) -> list[DistanceAnnotation]:
    """
    Return one DistanceAnnotation per listing with an id and known coordinates, in input order.
    An unknown reference means "no reference selected" and yields an empty list.
    """
    if not is_known_point(reference):
        logger.info("telemetry proximity_no_reference")
        return []

    annotations: list[DistanceAnnotation] = []
    for listing in candidates:
        lid = listing_id(listing)
        if lid is None:
            logger.info("telemetry proximity_missing_id")
            continue
        point = listing_point(listing)
        if point is None:
            logger.info(
                "telemetry proximity_invalid_coordinates listing_id=%s",
                lid,
                extra={"listing_id": lid},
            )
            continue
        d = distance_km(reference, point)
        annotations.append(
            DistanceAnnotation(
                listing_id=lid,
                distance_km=d,
                within_radius=d <= radius_km,
            )
        )
    return annotations


def nearest_first(annotations: Iterable[DistanceAnnotation]) -> list[DistanceAnnotation]:
    # sorted() is stable: equal distances keep input order
    return sorted(annotations, key=lambda a: a.distance_km)


def within_radius(annotations: Iterable[DistanceAnnotation]) -> list[DistanceAnnotation]:
    return [a for a in annotations if a.within_radius]


def find_nearest_university(
    point: GeoPoint | None,
    universities: Iterable[University],
    max_km: float = NEAREST_UNIVERSITY_MAX_KM,
) -> University | None:
    """Closest university to point, if one lies within max_km."""
    if not is_known_point(point):
        return None
    nearest: University | None = None
    nearest_km = float("inf")
    for university in universities:
        d = distance_km(point, university.point)
        if d < nearest_km:
            nearest_km = d
            nearest = university
    if nearest is None or nearest_km > max_km:
        return None
    return nearest


class ProximityFilter:
    """Proximity annotation with a configured default radius."""

    def __init__(self, default_radius_km: float = DEFAULT_RADIUS_KM):
        self.default_radius_km = default_radius_km

    def annotate(
        self,
        reference: GeoPoint | None,
        candidates: Iterable[Any],
        radius_km: float | None = None,
    ) -> list[DistanceAnnotation]:
        radius = self.default_radius_km if radius_km is None else radius_km
        return annotate(reference, candidates, radius)
