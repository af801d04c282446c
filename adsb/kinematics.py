# kinematics.py
"""
Per-tick kinematic update of simulated aircraft.

Positions advance on a flat-earth approximation (1 degree ~ 111 km, no
cos(latitude) contraction of longitude), and altitude, heading and NIC pick up
small random perturbations. The displacement is expressed per call; the tick
interval chosen by the host does not enter the formulas.
"""
import logging
import math
import random
import time
from typing import Iterable, Optional

from adsb.aircraft import (
    Aircraft,
    ALTITUDE_MAX_FT,
    ALTITUDE_MIN_FT,
    NIC_MAX,
    NIC_MIN,
)

logger = logging.getLogger(__name__)

KM_PER_DEG = 111.0
NIC_CHANGE_THRESHOLD = 0.9
ALTITUDE_JITTER_FT = 20
HEADING_JITTER_DEG = 1


class ClockNoise:
    """
    Noise drawn from the sub-second nanosecond component of the wall clock.

    Not a PRNG: consecutive draws within the same call are strongly
    correlated and runs cannot be replayed.
    """

    def _nanos(self) -> int:
        return time.time_ns() % 1_000_000_000

    def uniform(self) -> float:
        """Returns a value in [0, 1) with millisecond-ish granularity."""
        return (self._nanos() % 1000) / 1000.0

    def randint(self, lo: int, hi: int) -> int:
        """Returns an integer in [lo, hi]."""
        return lo + self._nanos() % (hi - lo + 1)


class SeededNoise:
    """Reproducible noise from an explicitly seeded ``random.Random``."""

    def __init__(self, seed: int):
        self.seed = seed
        self._rng = random.Random(seed)

    def uniform(self) -> float:
        return self._rng.random()

    def randint(self, lo: int, hi: int) -> int:
        return self._rng.randint(lo, hi)


def make_noise(seed: Optional[int] = None):
    """Returns ``SeededNoise(seed)`` when a seed is given, else ``ClockNoise()``."""
    if seed is None:
        return ClockNoise()
    logger.info(f"Using seeded per-tick noise (seed={seed}).")
    return SeededNoise(int(seed))


def _clamp(x, lo, hi):
    return lo if x < lo else hi if x > hi else x


def wrap_heading(heading: float) -> float:
    """Wraps ``heading`` into [0, 360), including negative inputs."""
    wrapped = heading % 360.0
    # -1e-15 % 360.0 rounds up to 360.0
    return 0.0 if wrapped >= 360.0 else wrapped


def displacement_deg(speed: float, heading: float):
    """
    Returns the (d_lat, d_lng) displacement in degrees for one call.

    Heading (0 = north, clockwise) becomes the math angle ``90 - heading``;
    latitude takes its sine and longitude its cosine.
    """
    step = speed / 3600.0 / KM_PER_DEG
    math_rad = math.radians(90.0 - heading)
    return step * math.sin(math_rad), step * math.cos(math_rad)


def update_aircraft(aircraft: Aircraft, noise) -> None:
    """Advances ``aircraft`` in place by one tick."""
    d_lat, d_lng = displacement_deg(aircraft.speed, aircraft.heading)
    aircraft.lat += d_lat
    aircraft.lng += d_lng

    # GNSS quality drifts occasionally
    if noise.uniform() > NIC_CHANGE_THRESHOLD:
        change = noise.randint(-1, 1)
        aircraft.nic = int(_clamp(aircraft.nic + change, NIC_MIN, NIC_MAX))

    aircraft.altitude = _clamp(
        aircraft.altitude + noise.randint(-ALTITUDE_JITTER_FT, ALTITUDE_JITTER_FT),
        ALTITUDE_MIN_FT, ALTITUDE_MAX_FT)

    aircraft.heading = wrap_heading(
        aircraft.heading + noise.randint(-HEADING_JITTER_DEG, HEADING_JITTER_DEG))


def update_all(aircraft: Iterable[Aircraft], noise=None) -> None:
    """Advances every aircraft in place by one tick."""
    noise = noise or ClockNoise()
    for a in aircraft:
        update_aircraft(a, noise)
