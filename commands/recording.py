# commands/recording.py
import logging
from typing import Any, Dict

from adsb.errors import AdsbSimError
from .base import Command

logger = logging.getLogger(__name__)


class StartRecordingCommand(Command):
    """Begins capturing emitted messages into a new session."""

    def execute(self, params: Dict[str, Any]) -> bool:
        logger.info("=== START RECORDING COMMAND RECEIVED ===")
        try:
            self.context.start_recording(zoom=params.get("zoom"))
        except AdsbSimError as e:
            logger.warning(f"  Cannot start recording: {e}")
            return False
        return True


class StopRecordingCommand(Command):
    """Ends the current session and saves it to the recordings directory."""

    def execute(self, params: Dict[str, Any]) -> bool:
        """
        Returns:
            True when a session was stopped and saved; False if nothing was
            being recorded or the file could not be written.
        """
        logger.info("=== STOP RECORDING COMMAND RECEIVED ===")
        result = self.context.stop_recording(save=True)
        if result is None:
            return False
        if not result["path"]:
            logger.error("  Recording stopped but could not be saved.")
            return False
        logger.info(f"  Recording saved to {result['path']}")
        return True
