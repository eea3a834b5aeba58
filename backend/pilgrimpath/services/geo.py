"""Great-circle helpers for proximity queries on [longitude, latitude] points."""

from math import asin, cos, degrees, radians, sin, sqrt
from typing import Optional, Tuple

# Equatorial radius in meters
EARTH_RADIUS_M = 6378100.0


def haversine_m(lng1: float, lat1: float, lng2: float, lat2: float) -> float:
    dlat = radians(lat2 - lat1)
    dlng = radians(lng2 - lng1)
    a = sin(dlat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_M * asin(min(1.0, sqrt(a)))


def bounding_box(lng: float, lat: float, radius_m: float) -> Tuple[float, float, Optional[float], Optional[float]]:
    """
    Smallest lat/lng box containing every point within ``radius_m`` of the
    center. Longitude bounds are None when the circle reaches a pole or
    crosses the antimeridian.
    """
    angular = radius_m / EARTH_RADIUS_M
    # Slack keeps points exactly on the circle inside the box
    dlat = degrees(angular) + 1e-9
    min_lat, max_lat = lat - dlat, lat + dlat
    if max_lat >= 90 or min_lat <= -90:
        return min_lat, max_lat, None, None

    ratio = sin(angular) / cos(radians(lat))
    if ratio >= 1:
        return min_lat, max_lat, None, None
    dlng = degrees(asin(ratio)) + 1e-9
    min_lng, max_lng = lng - dlng, lng + dlng
    if min_lng < -180 or max_lng > 180:
        return min_lat, max_lat, None, None
    return min_lat, max_lat, min_lng, max_lng


def box_conditions(lng_col, lat_col, lng: float, lat: float, radius_m: float) -> list:
    """SQL prefilter for ``radius_m`` around a point; exact distance is checked after."""
    min_lat, max_lat, min_lng, max_lng = bounding_box(lng, lat, radius_m)
    conditions = [lat_col >= min_lat, lat_col <= max_lat]
    if min_lng is not None:
        conditions += [lng_col >= min_lng, lng_col <= max_lng]
    return conditions
