"""Tests for distance calculation and distance scoring."""

import math

import pytest

from hotelmatch.config import DistanceBands
from hotelmatch.geo import bounding_box, distance_score, haversine_distance


def test_haversine_same_point():
    assert haversine_distance(51.5074, -0.1278, 51.5074, -0.1278) == 0.0


def test_haversine_paris_london():
    d = haversine_distance(48.8566, 2.3522, 51.5074, -0.1278)
    assert 340_000 < d < 347_000


def test_haversine_small_offset():
    d = haversine_distance(51.5074, -0.1278, 51.5075, -0.1279)
    assert 10 < d < 16


@pytest.mark.parametrize("distance,expected", [
    (0, 1.0),
    (50, 1.0),
    (75, 0.95),
    (100, 0.95),
    (150, 0.85),
    (200, 0.85),
    (300, 0.70),
    (500, 0.70),
])
def test_distance_score_bands(distance, expected):
    assert distance_score(distance) == expected


def test_distance_score_decay():
    assert distance_score(1500) == pytest.approx(0.70 * math.exp(-1))
    assert distance_score(100_000) == pytest.approx(0.0, abs=1e-12)


def test_distance_score_infinite():
    assert distance_score(math.inf) == 0.0


def test_distance_score_monotonic():
    distances = [0, 10, 49, 50, 51, 99, 100, 101, 199, 200, 201, 499, 500, 501, 1000, 5000, 50_000]
    scores = [distance_score(d) for d in distances]
    assert all(a >= b for a, b in zip(scores, scores[1:]))


def test_distance_score_custom_bands():
    bands = DistanceBands(exact=10, high_confidence=20, medium_confidence=30, low_confidence=40)
    assert distance_score(15, bands) == 0.95
    assert distance_score(45, bands) < 0.70


def test_bounding_box_contains_point():
    min_lat, max_lat, min_lon, max_lon = bounding_box(51.5074, -0.1278, 5000)
    assert min_lat < 51.5074 < max_lat
    assert min_lon < -0.1278 < max_lon
    # ~5 km of latitude is ~0.045 degrees
    assert max_lat - 51.5074 == pytest.approx(0.045, abs=0.001)


def test_bounding_box_near_pole_spans_all_longitudes():
    _, max_lat, min_lon, max_lon = bounding_box(89.99, 10.0, 5000)
    assert max_lat == 90.0
    assert (min_lon, max_lon) == (-180.0, 180.0)


def test_bounding_box_antimeridian_spans_all_longitudes():
    _, _, min_lon, max_lon = bounding_box(-17.7, 179.99, 5000)
    assert (min_lon, max_lon) == (-180.0, 180.0)
