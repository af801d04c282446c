# commands/start.py
import logging
from typing import Any, Dict

from adsb.errors import AdsbSimError
from config_loader import ConfigError
from .base import Command

logger = logging.getLogger(__name__)


class StartSimulationCommand(Command):
    """Generates a fresh population and starts ticking."""

    def execute(self, params: Dict[str, Any]) -> bool:
        """
        Start a run.

        Args:
            params: Optional ``config`` object with ``center_lat``, ``center_lng``,
                ``aircraft_count`` and ``update_interval_ms`` overrides.

        Returns:
            True once the tick thread is running; False if a run is already
            active or the overrides are invalid.
        """
        logger.info("=== START SIMULATION COMMAND RECEIVED ===")
        try:
            result = self.context.start_simulation(params.get("config"))
        except ConfigError as e:
            logger.warning(f"  Invalid simulation config: {e}")
            return False
        except AdsbSimError as e:
            logger.warning(f"  Cannot start simulation: {e}")
            return False
        logger.info(f"  {result}")
        return True
