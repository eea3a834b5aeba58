from math import isfinite
from typing import List

def check_point(coordinates: List[float]) -> List[float]:
    """Validate a ``[longitude, latitude]`` pair in degrees."""
    lng, lat = coordinates
    if not (isfinite(lng) and isfinite(lat)):
        raise ValueError("Coordinates must be finite numbers")
    if not -180 <= lng <= 180:
        raise ValueError("Longitude must be between -180 and 180")
    if not -90 <= lat <= 90:
        raise ValueError("Latitude must be between -90 and 90")
    return coordinates
