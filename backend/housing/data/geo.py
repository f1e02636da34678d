"""
Geographic points, Haversine distance and region bounds for proximity queries.

Points are always {latitude, longitude} named fields inside this package;
provider-specific orderings are handled at the service boundary.
"""
import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Earth radius in km (mean radius)
EARTH_RADIUS_KM = 6371.0

LAT_MIN, LAT_MAX = -90.0, 90.0
LNG_MIN, LNG_MAX = -180.0, 180.0


class GeoPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=LAT_MIN, le=LAT_MAX)
    longitude: float = Field(ge=LNG_MIN, le=LNG_MAX)


def _to_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def parse_geo_point(latitude: Any, longitude: Any) -> GeoPoint | None:
    """
    Build a GeoPoint from raw coordinates (floats, ints or numeric strings).
    Returns None when the point is unknown: unparseable, non-finite, out of
    range, or the (0, 0) placeholder.
    """
    lat = _to_float(latitude)
    lng = _to_float(longitude)
    if lat is None or lng is None:
        return None
    if lat == 0 and lng == 0:
        return None
    if not (LAT_MIN <= lat <= LAT_MAX) or not (LNG_MIN <= lng <= LNG_MAX):
        return None
    return GeoPoint(latitude=lat, longitude=lng)


def is_known_point(point: GeoPoint | None) -> bool:
    return point is not None and parse_geo_point(point.latitude, point.longitude) is not None


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round like the map UI does (half away from zero for positive values)."""
    factor = 10**ndigits
    return math.floor(value * factor + 0.5) / factor


def haversine_distance_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Return great-circle distance between two points in kilometers.
    Arguments in degrees.
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlng / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """Haversine distance between two points, rounded to 0.1 km for display."""
    return round_half_up(haversine_distance_km(a.latitude, a.longitude, b.latitude, b.longitude), 1)


class RegionBBox(BaseModel):
    """Geographic rectangle used to sanity-check routed paths."""

    model_config = ConfigDict(frozen=True)

    min_latitude: float = Field(ge=LAT_MIN, le=LAT_MAX)
    max_latitude: float = Field(ge=LAT_MIN, le=LAT_MAX)
    min_longitude: float = Field(ge=LNG_MIN, le=LNG_MAX)
    max_longitude: float = Field(ge=LNG_MIN, le=LNG_MAX)

    @model_validator(mode="after")
    def check_order(self):
        if self.min_latitude > self.max_latitude:
            raise ValueError("min_latitude must not exceed max_latitude")
        if self.min_longitude > self.max_longitude:
            raise ValueError("min_longitude must not exceed max_longitude")
        return self

    @classmethod
    def parse(cls, text: str) -> "RegionBBox":
        """Parse "min_lat,max_lat,min_lng,max_lng"."""
        parts = [p.strip() for p in (text or "").split(",") if p.strip()]
        if len(parts) != 4:
            raise ValueError(f"region bbox needs 4 comma-separated numbers, got {text!r}")
        min_lat, max_lat, min_lng, max_lng = (float(p) for p in parts)
        return cls(
            min_latitude=min_lat,
            max_latitude=max_lat,
            min_longitude=min_lng,
            max_longitude=max_lng,
        )

    def contains(self, point: GeoPoint) -> bool:
        return (
            self.min_latitude <= point.latitude <= self.max_latitude
            and self.min_longitude <= point.longitude <= self.max_longitude
        )
