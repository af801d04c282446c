# generator.py
"""
Builds the initial aircraft population around a center point.

Aircraft ``i`` sits at ``i`` times the golden angle around the center, which
spreads any number of aircraft without the clustering or spiral arms that
equal slicing produces. Every other field comes from its own integer hash of
``i``, so the output is a pure function of ``(center, count)``.
"""
import logging
import math
from typing import List

from adsb.aircraft import Aircraft, ALTITUDE_MAX_FT, ALTITUDE_MIN_FT

logger = logging.getLogger(__name__)

AIRLINES = ("CZ", "CA", "MU", "BZ", "FM", "ZH", "HU", "SC", "3U", "GS")

GOLDEN_ANGLE_RAD = math.pi * (3.0 - math.sqrt(5.0))  # ~137.5 degrees

MIN_DISTANCE_DEG = 0.15
MAX_DISTANCE_DEG = 0.6

BASE_ADDRESS = 0x780000
ADDRESS_STEP = 0x1111
MAX_ADDRESS = 0xFFFFFF


def _distance_deg(i: int) -> float:
    """Distance from the center for index ``i``, in [0.15, 0.6) degrees."""
    seed = (i * 7919 + 104729) % 10000
    return MIN_DISTANCE_DEG + (seed / 10000.0) * (MAX_DISTANCE_DEG - MIN_DISTANCE_DEG)


def make_callsign(i: int) -> str:
    airline = AIRLINES[i % len(AIRLINES)]
    return f"{airline}{1000 + (i * 111) % 9000}"


def make_address(i: int) -> str:
    # Not clamped: past index ~2040 this exceeds 24 bits and renders 7+ digits.
    return f"{BASE_ADDRESS + i * ADDRESS_STEP:06X}"


def make_aircraft(center_lat: float, center_lng: float, i: int) -> Aircraft:
    """Derives aircraft ``i`` of a population centered on (center_lat, center_lng)."""
    angle = i * GOLDEN_ANGLE_RAD
    distance = _distance_deg(i)

    altitude = 5000.0 + float((i * 2749) % 10000)
    altitude = min(max(altitude, ALTITUDE_MIN_FT), ALTITUDE_MAX_FT)

    return Aircraft(
        id=make_address(i),
        callsign=make_callsign(i),
        lat=center_lat + distance * math.sin(angle),
        lng=center_lng + distance * math.cos(angle),
        altitude=altitude,
        speed=400.0 + float((i * 3571) % 250),
        heading=float((i * 6997 + 99991) % 360),
        nic=5 + i % 7,
    )


def generate_aircraft(center_lat: float, center_lng: float, count: int) -> List[Aircraft]:
    """
    Generates ``count`` aircraft spread around the given center.

    Args:
        center_lat: Center latitude in degrees.
        center_lng: Center longitude in degrees.
        count: Number of aircraft to create (>= 0).

    Returns:
        A new list of aircraft, ordered by index. Identical inputs always
        produce identical output.

    Raises:
        ValueError: if ``count`` is negative.
    """
    if count < 0:
        raise ValueError(f"Aircraft count must be >= 0, got {count}")

    aircraft = [make_aircraft(center_lat, center_lng, i) for i in range(count)]

    oversized = sum(1 for a in aircraft if int(a.id, 16) > MAX_ADDRESS)
    if oversized:
        logger.warning(
            f"{oversized} of {count} generated addresses exceed 24 bits; "
            f"they will be masked when encoded.")

    logger.debug(f"Generated {count} aircraft around ({center_lat:.4f}, {center_lng:.4f}).")
    return aircraft
