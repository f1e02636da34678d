"""Tests for Haversine distance helpers."""
import math

from housing.data.geo import EARTH_RADIUS_KM, GeoPoint, distance_km, haversine_distance_km


def test_same_point_zero_distance():
    assert haversine_distance_km(36.80, 10.18, 36.80, 10.18) == 0.0
    tunis = GeoPoint(latitude=36.80, longitude=10.18)
    assert distance_km(tunis, tunis) == 0.0


def test_antipodal_roughly_half_circumference():
    d = haversine_distance_km(0.0, 0.0, 0.0, 180.0)
    expected = math.pi * EARTH_RADIUS_KM
    assert abs(d - expected) < 1.0


def test_known_distance_tunis_carthage():
    # University of Tunis to University of Carthage, ~14 km apart
    d = haversine_distance_km(36.8000, 10.1800, 36.8500, 10.3300)
    assert 13.0 < d < 15.0


def test_symmetry():
    d1 = haversine_distance_km(36.8065, 10.1815, 34.74, 10.76)
    d2 = haversine_distance_km(34.74, 10.76, 36.8065, 10.1815)
    assert d1 == d2
    a = GeoPoint(latitude=36.8065, longitude=10.1815)
    b = GeoPoint(latitude=34.74, longitude=10.76)
    assert distance_km(a, b) == distance_km(b, a)


def test_distance_km_rounds_to_one_decimal():
    a = GeoPoint(latitude=36.8065, longitude=10.1815)
    b = GeoPoint(latitude=36.8500, longitude=10.3300)
    raw = haversine_distance_km(a.latitude, a.longitude, b.latitude, b.longitude)
    d = distance_km(a, b)
    assert d == round(d, 1)
    assert abs(d - raw) <= 0.05 + 1e-9
