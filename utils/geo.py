#geo.py
"""
Geodesic helpers used for reporting ranges from the simulation center.

The simulator itself moves aircraft on a flat-earth approximation; these
functions only describe the result on the WGS84 ellipsoid.
"""
import logging
import math
from typing import Iterable, Optional

from geopy.distance import geodesic

logger = logging.getLogger(__name__)

KM_PER_NM = 1.852


def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculates the geodesic distance between two points using the WGS84 ellipsoid.
    Returns distance in kilometers.
    """
    try:
        return geodesic((lat1, lon1), (lat2, lon2)).km
    except ValueError as e:
        # geopy rejects latitudes outside [-90, 90]; aircraft can drift past the pole
        logger.debug(f"Geodesic distance failed ({e}); using spherical approximation.")
        return _haversine_distance_km_spherical(lat1, lon1, lat2, lon2)


def _haversine_distance_km_spherical(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    R = 6371.0
    p1, p2 = math.radians(lat1), math.radians(lat2)
    dp = p2 - p1
    dl = math.radians(lon2 - lon1)
    a = math.sin(dp / 2) ** 2 + math.cos(p1) * math.cos(p2) * math.sin(dl / 2) ** 2
    return 2 * R * math.asin(min(1.0, math.sqrt(a)))


def distance_nm(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    return distance_km(lat1, lon1, lat2, lon2) / KM_PER_NM


def max_range_km(center_lat: float, center_lng: float, aircraft: Iterable) -> Optional[float]:
    """Largest distance from the center over ``aircraft``, or None when empty."""
    ranges = [distance_km(center_lat, center_lng, a.lat, a.lng) for a in aircraft]
    return max(ranges) if ranges else None
