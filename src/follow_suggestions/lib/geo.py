"""Great-circle distance helpers."""

import math

from ..models import Location

EARTH_RADIUS_M = 6_371_000
METERS_PER_DEGREE_LAT = 111_000


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return the great-circle distance between two points in meters."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    # Rounding can push ``a`` marginally past 1 for antipodal points.
    a = min(1.0, max(0.0, a))
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def distance_between(a: Location, b: Location) -> float:
    return haversine(a.latitude, a.longitude, b.latitude, b.longitude)


def bounding_box(location: Location, radius_m: float) -> tuple[float, float, float, float]:
    """Return ``(min_lat, max_lat, min_lon, max_lon)`` enclosing *radius_m*.

    This is a coarse prefilter; callers still check the exact distance.
    """
    lat_delta = radius_m / METERS_PER_DEGREE_LAT
    cos_lat = max(math.cos(math.radians(location.latitude)), 1e-6)
    lon_delta = min(radius_m / (METERS_PER_DEGREE_LAT * cos_lat), 180.0)
    return (
        location.latitude - lat_delta,
        location.latitude + lat_delta,
        location.longitude - lon_delta,
        location.longitude + lon_delta,
    )
