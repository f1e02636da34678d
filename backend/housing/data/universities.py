"""
Static university catalog used as proximity reference points.
"""
from typing import NamedTuple

from housing.data.geo import GeoPoint


class University(NamedTuple):
    id: int
    name: str
    latitude: float
    longitude: float
    address: str

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(latitude=self.latitude, longitude=self.longitude)


UNIVERSITIES: tuple[University, ...] = (
    University(1, "University of Tunis", 36.8000, 10.1800, "Tunis, Tunisia"),
    University(2, "University of Carthage", 36.8500, 10.3300, "Carthage, Tunisia"),
    University(3, "University of Sfax", 34.7400, 10.7600, "Sfax, Tunisia"),
)


def list_universities() -> list[University]:
    return list(UNIVERSITIES)


def get_university(university_id: int, catalog: tuple[University, ...] = UNIVERSITIES) -> University | None:
    for university in catalog:
        if university.id == university_id:
            return university
    return None
