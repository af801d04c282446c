# aircraft.py
"""
The simulated aircraft record shared by the generator, updater and encoder.
"""
import dataclasses
from typing import Any, Dict

# Field bounds maintained by the generator and the kinematics updater
ALTITUDE_MIN_FT = 3000.0
ALTITUDE_MAX_FT = 12000.0
NIC_MIN = 0
NIC_MAX = 11


@dataclasses.dataclass
class Aircraft:
    """
    One simulated flight.

    ``id`` and ``callsign`` are fixed at creation; every other field is
    advanced in place by the kinematics updater each tick.
    """
    id: str           # ICAO address, uppercase hex
    callsign: str
    lat: float        # degrees
    lng: float        # degrees
    altitude: float   # feet
    speed: float      # knots
    heading: float    # degrees, 0 = north, clockwise
    nic: int          # signal-quality indicator (0-11)

    def copy(self) -> "Aircraft":
        return dataclasses.replace(self)

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)
