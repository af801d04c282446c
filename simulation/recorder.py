# simulation/recorder.py
"""
Records emitted ADS-B messages into a session that can be saved and reloaded.

A session is a JSON document::

    {
      "version": "1.0.0",
      "recordedAt": "<ISO-8601 start time>",
      "duration": <ms>,
      "mapConfig": {"center": [lat, lng], "zoom": <int>},
      "events": [
        {"timestamp": 0, "type": "init", "data": {"truthStates": [...]}},
        {"timestamp": <ms>, "type": "message", "data": {"hexMessage": "..."}},
        ...
      ],
      "metadata": {"description": "...", "tags": [...]}
    }
"""
import datetime
import logging
import os
import threading
import time
from typing import Any, Dict, Iterable, List, Optional

from adsb.aircraft import Aircraft
from config_loader import CONFIG
from utils.storage import read_json, write_json_atomic

logger = logging.getLogger(__name__)

SESSION_VERSION = "1.0.0"
RECORDING_PREFIX = "adsb-recording-"


class SessionRecorder:
    """
    Batch sink that captures every emitted message while recording is on.

    ``clock`` returns seconds since the epoch; tests inject a fake one.
    """

    def __init__(self, clock=time.time):
        self._clock = clock
        self._lock = threading.Lock()
        self._recording = False
        self._start_time = 0.0
        self._events: List[Dict[str, Any]] = []
        self._map_config: Dict[str, Any] = {"center": [0.0, 0.0], "zoom": 10}

    def _elapsed_ms(self) -> int:
        return int(round((self._clock() - self._start_time) * 1000))

    def start_recording(self, center, zoom: Optional[int] = None,
                        truth_aircraft: Optional[Iterable[Aircraft]] = None):
        """
        Starts a new session, discarding any unsaved one.

        Args:
            center: (lat, lng) of the map view.
            zoom: Map zoom level (defaults to ``recording.map_zoom``).
            truth_aircraft: Aircraft states recorded as the ``init`` event.
        """
        if zoom is None:
            zoom = int(CONFIG.get('recording', {}).get('map_zoom', 10))
        with self._lock:
            self._recording = True
            self._start_time = self._clock()
            self._events = []
            self._map_config = {"center": [float(center[0]), float(center[1])], "zoom": zoom}

            truth_states = [a.to_dict() for a in (truth_aircraft or [])]
            if truth_states:
                self._events.append({
                    "timestamp": 0,
                    "type": "init",
                    "data": {"truthStates": truth_states},
                })
        logger.info(f"Recording started at {datetime.datetime.now(datetime.timezone.utc).isoformat()}")

    def record_message(self, hex_message: str):
        with self._lock:
            if not self._recording:
                return
            self._events.append({
                "timestamp": self._elapsed_ms(),
                "type": "message",
                "data": {"hexMessage": hex_message},
            })

    def on_batch(self, batch):
        """Sink entry point: records every message of the batch."""
        if not self._recording:
            return
        for message in batch.messages:
            self.record_message(message.hex_message)

    def stop_recording(self) -> Optional[Dict[str, Any]]:
        """Stops recording and returns the session, or None when not recording."""
        with self._lock:
            if not self._recording:
                logger.warning("Stop requested but not currently recording.")
                return None
            self._recording = False
            duration = self._elapsed_ms()
            started = datetime.datetime.fromtimestamp(self._start_time, tz=datetime.timezone.utc)
            session = {
                "version": SESSION_VERSION,
                "recordedAt": started.isoformat().replace("+00:00", "Z"),
                "duration": duration,
                "mapConfig": self._map_config,
                "events": self._events,
                "metadata": {
                    "description": f"ADS-B Recording - {len(self._events)} events",
                    "tags": ["adsb", "simulation"],
                },
            }
            self._events = []

        logger.info(
            f"Recording stopped. Duration: {duration / 1000:.1f}s, Events: {len(session['events'])}")
        return session

    def get_status(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "isRecording": self._recording,
                "eventCount": len(self._events),
                "duration": self._elapsed_ms() if self._recording else 0,
            }


# --- Persistence ---

def save_session(session: Dict[str, Any], directory: Optional[str] = None,
                 filename: Optional[str] = None) -> Optional[str]:
    """
    Writes ``session`` as JSON into ``directory`` (defaults to ``recording.directory``).

    Returns:
        The written path, or None if the write failed.
    """
    directory = directory or CONFIG['recording']['directory']
    filename = filename or f"{RECORDING_PREFIX}{int(time.time() * 1000)}.json"
    path = os.path.join(directory, os.path.basename(filename))
    if not write_json_atomic(session, path):
        return None
    logger.info(f"Saved recording to {path} ({len(session.get('events', []))} events)")
    return path


def load_session(path: str) -> Optional[Dict[str, Any]]:
    """Loads a session file; returns None when it is unreadable or malformed."""
    session = read_json(path)
    if not isinstance(session, dict):
        return None
    if not session.get('version') or not isinstance(session.get('events'), list):
        logger.error(f"Invalid session format in {path}")
        return None
    logger.info(f"Loaded session {path}: {len(session['events'])} events, "
                f"duration: {session.get('duration', 0) / 1000:.1f}s")
    return session


def list_recordings(directory: Optional[str] = None) -> List[str]:
    """Returns recording file names in ``directory``, newest first."""
    directory = directory or CONFIG['recording']['directory']
    if not os.path.isdir(directory):
        return []
    names = [n for n in os.listdir(directory)
             if n.startswith(RECORDING_PREFIX) and n.endswith('.json')]
    names.sort(key=lambda n: os.path.getmtime(os.path.join(directory, n)), reverse=True)
    return names


def delete_recording(filename: str, directory: Optional[str] = None) -> bool:
    directory = directory or CONFIG['recording']['directory']
    path = os.path.join(directory, os.path.basename(filename))
    try:
        os.remove(path)
        logger.info(f"Deleted recording {path}")
        return True
    except OSError as e:
        logger.error(f"Failed to delete recording {path}: {e}")
        return False
