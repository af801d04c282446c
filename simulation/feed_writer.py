# simulation/feed_writer.py
"""
Writes a dump1090-style aircraft.json once per tick.

Lets tools that already read dump1090's JSON feed (map front ends,
trackers) consume the simulated traffic. Writes are
atomic so readers never see a partial file.
"""
import logging
import time
from typing import Any, Dict, Optional

from adsb.airlines import country_for_address, lookup_airline
from adsb.encoder import parse_address
from config_loader import CONFIG
from utils.geo import distance_nm
from utils.storage import write_json_atomic

logger = logging.getLogger(__name__)


class FeedWriter:
    """Batch sink producing ``{"now", "messages", "aircraft": [...]}`` documents."""

    def __init__(self, out_path: Optional[str] = None, center=None, clock=time.time):
        self.out_path = out_path or CONFIG['feed']['json_file_path']
        self.center = center  # (lat, lng) used for r_dst; None omits it
        self._clock = clock
        self.total_messages = 0

    def compose(self, batch) -> Dict[str, Any]:
        """Builds the aircraft.json document for one batch."""
        self.total_messages += len(batch.messages)
        aircraft_list = []
        for a in batch.aircraft:
            entry = {
                "hex": a.id.lower(),
                "flight": f"{a.callsign:<8}",
                "alt_baro": int(round(a.altitude)),
                "gs": round(float(a.speed), 1),
                "track": round(float(a.heading), 1),
                "lat": round(a.lat, 6),
                "lon": round(a.lng, 6),
                "nic": a.nic,
                "mlat": [], "tisb": [],
                "seen_pos": 0.0,
                "seen": 0.0,
            }
            if self.center is not None:
                entry["r_dst"] = round(distance_nm(self.center[0], self.center[1], a.lat, a.lng), 3)
            airline = lookup_airline(a.callsign)
            if airline is not None:
                entry["airline"] = airline.name
            country = country_for_address(parse_address(a.id))
            if country is not None:
                entry["country"] = country
            aircraft_list.append(entry)

        return {
            "now": round(self._clock(), 1),
            "messages": self.total_messages,
            "aircraft": aircraft_list,
        }

    def on_batch(self, batch):
        """Sink entry point."""
        doc = self.compose(batch)
        if not write_json_atomic(doc, self.out_path, indent=None, durable=False):
            logger.warning(f"Feed write to {self.out_path} failed; will retry next tick.")
