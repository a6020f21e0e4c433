"""Great-circle distance and the distance-to-confidence mapping."""

from __future__ import annotations

import math

from hotelmatch.config import DistanceBands

EARTH_RADIUS_M = 6_371_000.0


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance in meters between two (lat, lon) points in decimal degrees."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def distance_score(distance_m: float, bands: DistanceBands | None = None) -> float:
    """Map a distance in meters to a confidence contribution in [0, 1].

    Stepped bands up to ``low_confidence``, then exponential decay from 0.70.
    """
    bands = bands or DistanceBands()

    if math.isinf(distance_m) or math.isnan(distance_m):
        return 0.0
    if distance_m <= bands.exact:
        return 1.0
    if distance_m <= bands.high_confidence:
        return 0.95
    if distance_m <= bands.medium_confidence:
        return 0.85
    if distance_m <= bands.low_confidence:
        return 0.70
    return max(0.0, 0.70 * math.exp(-(distance_m - bands.low_confidence) / bands.decay_meters))


def bounding_box(lat: float, lon: float, radius_m: float) -> tuple[float, float, float, float]:
    """Approximate (min_lat, max_lat, min_lon, max_lon) around a point.

    Longitude span widens toward the poles and falls back to the full
    range when the box would cover a pole or cross the antimeridian.
    """
    d_lat = math.degrees(radius_m / EARTH_RADIUS_M)
    min_lat = max(-90.0, lat - d_lat)
    max_lat = min(90.0, lat + d_lat)

    cos_lat = math.cos(math.radians(lat))
    if max_lat >= 90.0 or min_lat <= -90.0 or cos_lat < 1e-9:
        return min_lat, max_lat, -180.0, 180.0

    d_lon = math.degrees(radius_m / (EARTH_RADIUS_M * cos_lat))
    min_lon, max_lon = lon - d_lon, lon + d_lon
    if min_lon < -180.0 or max_lon > 180.0:
        return min_lat, max_lat, -180.0, 180.0
    return min_lat, max_lat, min_lon, max_lon
