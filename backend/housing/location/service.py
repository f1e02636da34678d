"""
Reference point acquisition: catalog universities or the user's device location.

Location failures are surfaced as GeolocationError for the caller to show;
there is no retry and no default location.
"""
import logging
from typing import Protocol

from housing.data.geo import GeoPoint, parse_geo_point
from housing.data.universities import UNIVERSITIES, University, get_university
from housing.errors import GeolocationError, UnknownUniversityError
from housing.location.models import ReferencePoint, ReferenceSource

logger = logging.getLogger(__name__)

LOCATION_UNAVAILABLE_MESSAGE = "Unable to get your current location. Please select a university manually."


class GeolocationProvider(Protocol):
    def locate(self) -> GeoPoint:
        """One-shot location query. Raises on denied/unavailable."""
        ...


class StaticGeolocation:
    """Location the client device already resolved and sent with the request."""

    def __init__(self, latitude: object, longitude: object):
        self.latitude = latitude
        self.longitude = longitude

    def locate(self) -> GeoPoint:
        point = parse_geo_point(self.latitude, self.longitude)
        if point is None:
            raise GeolocationError(LOCATION_UNAVAILABLE_MESSAGE)
        return point


def resolve_user_location(provider: GeolocationProvider) -> ReferencePoint:
    try:
        point = provider.locate()
    except GeolocationError:
        logger.warning("telemetry geolocation_failed")
        raise
    except Exception as e:
        logger.warning("telemetry geolocation_failed error=%s", str(e))
        raise GeolocationError(LOCATION_UNAVAILABLE_MESSAGE) from e
    if parse_geo_point(point.latitude, point.longitude) is None:
        logger.warning("telemetry geolocation_failed reason=unknown_point")
        raise GeolocationError(LOCATION_UNAVAILABLE_MESSAGE)
    return ReferencePoint(source=ReferenceSource.USER_LOCATION, point=point, label="Your location")


def resolve_university(
    university_id: int,
    catalog: tuple[University, ...] = UNIVERSITIES,
) -> ReferencePoint:
    university = get_university(university_id, catalog)
    if university is None:
        raise UnknownUniversityError(f"University {university_id} not found.")
    return ReferencePoint(source=ReferenceSource.UNIVERSITY, point=university.point, label=university.name)
