# simulator.py
"""
The simulator core: generate a population, advance it, encode it.

``AdsbSimulator`` holds no process-wide state; the host owns an instance and
drives it from its own scheduler.
"""
import logging
from typing import List, Optional, Tuple

from adsb.aircraft import Aircraft
from adsb.encoder import BroadcastMessage, encode_all
from adsb.generator import generate_aircraft
from adsb.kinematics import ClockNoise, update_aircraft, update_all
from adsb.population import Population

logger = logging.getLogger(__name__)


class AdsbSimulator:
    """Generator, updater and encoder bound to one aircraft population."""

    def __init__(self, center_lat: float, center_lng: float, noise=None,
                 lock_timeout_s: Optional[float] = None):
        self.center_lat = center_lat
        self.center_lng = center_lng
        self.noise = noise or ClockNoise()
        self.population = Population(lock_timeout_s=lock_timeout_s)

    def generate(self, center_lat: float, center_lng: float, count: int) -> None:
        """Replaces the population with ``count`` aircraft around the given center."""
        self.center_lat = center_lat
        self.center_lng = center_lng
        self.population.replace_all(generate_aircraft(center_lat, center_lng, count))
        logger.info(f"Generated {count} aircraft around ({center_lat:.4f}, {center_lng:.4f}).")

    def tick(self) -> None:
        """Advances every aircraft by one tick."""
        self.population.mutate_all(lambda a: update_aircraft(a, self.noise))

    def snapshot(self) -> List[Aircraft]:
        return self.population.snapshot()

    def encode_all(self) -> List[BroadcastMessage]:
        """Position then velocity message for each aircraft, in population order."""
        return encode_all(self.population.snapshot())

    def tick_and_encode(self) -> Tuple[List[BroadcastMessage], List[Aircraft]]:
        """
        Runs one full tick as a single exclusive unit.

        Returns:
            The message batch and the aircraft snapshot it was encoded from.
        """
        with self.population.exclusive() as aircraft:
            update_all(aircraft, self.noise)
            snapshot = [a.copy() for a in aircraft]
        return encode_all(snapshot), snapshot
