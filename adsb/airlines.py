# airlines.py
"""
Operator and registration-country lookups for display.

Callsigns are matched on their 3-letter ICAO designator first, then on a
2-character IATA prefix (which is what the generator emits). Countries come
from the ICAO 24-bit address block an address falls in.
"""
from typing import NamedTuple, Optional


class Airline(NamedTuple):
    icao: str
    iata: str
    name: str
    country: str


_AIRLINE_LIST = (
    Airline("CCA", "CA", "Air China", "China"),
    Airline("CSN", "CZ", "China Southern Airlines", "China"),
    Airline("CES", "MU", "China Eastern Airlines", "China"),
    Airline("CHH", "HU", "Hainan Airlines", "China"),
    Airline("CSZ", "ZH", "Shenzhen Airlines", "China"),
    Airline("CXA", "MF", "Xiamen Airlines", "China"),
    Airline("CSH", "FM", "Shanghai Airlines", "China"),
    Airline("CDG", "SC", "Shandong Airlines", "China"),
    Airline("CSC", "3U", "Sichuan Airlines", "China"),
    Airline("GCR", "GS", "Tianjin Airlines", "China"),
    Airline("CBJ", "JD", "Beijing Capital Airlines", "China"),
    Airline("QDA", "QW", "Qingdao Airlines", "China"),
    Airline("CQH", "9C", "Spring Airlines", "China"),
    Airline("DKH", "HO", "Juneyao Air", "China"),
    Airline("CPA", "CX", "Cathay Pacific", "Hong Kong"),
    Airline("HKE", "UO", "HK Express", "Hong Kong"),
    Airline("CAL", "CI", "China Airlines", "Taiwan"),
    Airline("EVA", "BR", "EVA Air", "Taiwan"),
    Airline("SIA", "SQ", "Singapore Airlines", "Singapore"),
    Airline("JAL", "JL", "Japan Airlines", "Japan"),
    Airline("ANA", "NH", "All Nippon Airways", "Japan"),
    Airline("KAL", "KE", "Korean Air", "South Korea"),
    Airline("THA", "TG", "Thai Airways", "Thailand"),
    Airline("UAE", "EK", "Emirates", "United Arab Emirates"),
    Airline("BAW", "BA", "British Airways", "United Kingdom"),
    Airline("DLH", "LH", "Lufthansa", "Germany"),
    Airline("AFR", "AF", "Air France", "France"),
    Airline("UAL", "UA", "United Airlines", "United States"),
    Airline("AAL", "AA", "American Airlines", "United States"),
    Airline("DAL", "DL", "Delta Air Lines", "United States"),
    Airline("QFA", "QF", "Qantas", "Australia"),
)

AIRLINES_BY_ICAO = {a.icao: a for a in _AIRLINE_LIST}
AIRLINES_BY_IATA = {a.iata: a for a in _AIRLINE_LIST}

# Narrower blocks come before the blocks that contain them; first match wins.
ADDRESS_BLOCKS = (
    (0x780500, 0x780FFF, "Hong Kong"),
    (0x780000, 0x7BFFFF, "China"),
    (0x899000, 0x899FFF, "Taiwan"),
    (0x896000, 0x896FFF, "United Arab Emirates"),
    (0x880000, 0x887FFF, "Thailand"),
    (0x888000, 0x88FFFF, "Vietnam"),
    (0x840000, 0x87FFFF, "Japan"),
    (0x800000, 0x83FFFF, "India"),
    (0x7C0000, 0x7FFFFF, "Australia"),
    (0x76C000, 0x76FFFF, "Singapore"),
    (0x750000, 0x75FFFF, "Malaysia"),
    (0x718000, 0x71FFFF, "South Korea"),
    (0xA00000, 0xAFFFFF, "United States"),
    (0x400000, 0x43FFFF, "United Kingdom"),
    (0x3C0000, 0x3FFFFF, "Germany"),
    (0x380000, 0x3BFFFF, "France"),
    (0x140000, 0x15FFFF, "Russia"),
)


def lookup_airline(callsign: Optional[str]) -> Optional[Airline]:
    """Returns the operator for a callsign such as ``CSN3101`` or ``CZ1000``, or None."""
    if not callsign:
        return None
    callsign = callsign.strip().upper()
    airline = AIRLINES_BY_ICAO.get(callsign[:3])
    if airline is None:
        airline = AIRLINES_BY_IATA.get(callsign[:2])
    return airline


def country_for_address(address: int) -> Optional[str]:
    """Registration country of a 24-bit ICAO address; None outside the known blocks."""
    for start, end, country in ADDRESS_BLOCKS:
        if start <= address <= end:
            return country
    return None
