# encoder.py
"""
Packs aircraft state into 112-bit DF17 extended squitter frames.

Frame layout (most significant bit first)::

    DF(5) | CA(3) | ICAO(24) | ME payload(56) | PI(24)

The parity field is the fixed placeholder ``0xA5A5A5``; frames are
format-shaped, not wire-valid. Every field is truncated and masked to its
width instead of being range-checked, so encoding never fails.
"""
import dataclasses
import logging
import math
import re
from typing import Any, Dict, Iterable, List

from adsb.aircraft import Aircraft

logger = logging.getLogger(__name__)

DOWNLINK_FORMAT = 17
CAPABILITY = 5
PARITY_PLACEHOLDER = 0xA5A5A5

TC_AIRBORNE_POSITION = 11
TC_AIRBORNE_VELOCITY = 19
VELOCITY_SUBTYPE_GROUND_SPEED = 1

FRAME_HEX_LEN = 28

MESSAGE_POSITION = "position"
MESSAGE_VELOCITY = "velocity"

_HEX_ADDRESS = re.compile(r"[0-9A-Fa-f]+")


@dataclasses.dataclass(frozen=True)
class BroadcastMessage:
    """One encoded frame and the aircraft it was built from."""
    hex_message: str
    aircraft_id: str
    message_type: str  # "position" | "velocity"

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


def _mask(bits: int) -> int:
    return (1 << bits) - 1


def _field(value: float, bits: int) -> int:
    """
    Truncates ``value`` toward zero and masks it to ``bits`` bits.

    Negative values and NaN saturate to 0, +inf to the all-ones field.
    """
    if math.isnan(value):
        return 0
    if math.isinf(value):
        return _mask(bits) if value > 0 else 0
    return max(int(value), 0) & _mask(bits)


def parse_address(address: str) -> int:
    """Parses a hex ICAO address; anything but bare hex digits yields address 0."""
    if isinstance(address, str) and _HEX_ADDRESS.fullmatch(address):
        return int(address, 16)
    logger.warning(f"Malformed ICAO address {address!r}; encoding with address 000000.")
    return 0


def assemble_frame(df: int, ca: int, icao: int, payload: int) -> str:
    """Builds the 112-bit frame and renders it as 28 uppercase hex digits."""
    msg = 0
    msg |= (df & _mask(5)) << 107
    msg |= (ca & _mask(3)) << 104
    msg |= (icao & _mask(24)) << 80
    msg |= (payload & _mask(56)) << 24
    msg |= PARITY_PLACEHOLDER
    return f"{msg:0{FRAME_HEX_LEN}X}"


def position_payload(aircraft: Aircraft) -> int:
    """
    Airborne position ME field (type code 11).

    ``TC(5) | NIC(4) | ALT(12) | LAT(17) | LON(17)`` where altitude is
    ``(ft + 1000) / 25`` and lat/lon are linear maps of their full range onto
    0..131071. This is not CPR.
    """
    nic = int(aircraft.nic) & 0xF
    alt = _field((aircraft.altitude + 1000.0) / 25.0, 12)
    lat = _field(((aircraft.lat + 90.0) / 180.0) * 131071.0, 17)
    lng = _field(((aircraft.lng + 180.0) / 360.0) * 131071.0, 17)

    payload = 0
    payload |= TC_AIRBORNE_POSITION << 51
    payload |= nic << 47
    payload |= alt << 35
    payload |= lat << 16
    payload |= lng
    return payload


def velocity_payload(aircraft: Aircraft) -> int:
    """
    Airborne velocity ME field (type code 19, subtype 1).

    ``TC(5) | ST(3) | .. | SPD(10) @30 | HDG(7) @20``; remaining bits are zero.
    Heading is scaled so 360 degrees spans 0..127.
    """
    speed = _field(aircraft.speed, 10)
    heading = _field((aircraft.heading / 360.0) * 127.0, 7)

    payload = 0
    payload |= TC_AIRBORNE_VELOCITY << 51
    payload |= VELOCITY_SUBTYPE_GROUND_SPEED << 48
    payload |= speed << 30
    payload |= heading << 20
    return payload


def encode_position(aircraft: Aircraft) -> str:
    return assemble_frame(DOWNLINK_FORMAT, CAPABILITY,
                          parse_address(aircraft.id), position_payload(aircraft))


def encode_velocity(aircraft: Aircraft) -> str:
    return assemble_frame(DOWNLINK_FORMAT, CAPABILITY,
                          parse_address(aircraft.id), velocity_payload(aircraft))


def encode_aircraft(aircraft: Aircraft) -> List[BroadcastMessage]:
    """Returns the position and velocity messages for one aircraft, in that order."""
    return [
        BroadcastMessage(encode_position(aircraft), aircraft.id, MESSAGE_POSITION),
        BroadcastMessage(encode_velocity(aircraft), aircraft.id, MESSAGE_VELOCITY),
    ]


def encode_all(aircraft: Iterable[Aircraft]) -> List[BroadcastMessage]:
    """Encodes every aircraft, preserving population order (position, then velocity)."""
    messages: List[BroadcastMessage] = []
    for a in aircraft:
        messages.extend(encode_aircraft(a))
    return messages
