"""Reference point models: where proximity and routes are measured from."""
from enum import Enum

from pydantic import BaseModel

from housing.data.geo import GeoPoint


class ReferenceSource(str, Enum):
    UNIVERSITY = "university"
    USER_LOCATION = "user_location"


class ReferencePoint(BaseModel):
    source: ReferenceSource
    point: GeoPoint
    label: str = ""


class ReferenceSelection(BaseModel):
    """
    Request fields selecting a reference point: a catalog university_id, or the
    device location the client obtained (latitude/longitude). university_id wins.
    """

    university_id: int | None = None
    latitude: float | None = None
    longitude: float | None = None

    @property
    def has_user_location(self) -> bool:
        return self.latitude is not None or self.longitude is not None
