import logging
import math
from typing import Any, Dict

from .base import Command

logger = logging.getLogger(__name__)


class StopSimulationCommand(Command):
    """Clears the run flag; the tick thread exits after its current cycle."""

    def execute(self, params: Dict[str, Any]) -> bool:
        """
        Stop the active run. Stopping an idle simulator still succeeds.

        Args:
            params: Optional ``join_timeout_s`` to wait for the tick thread.

        Returns:
            True once the stop was requested; False if ``join_timeout_s`` is
            not a non-negative number.
        """
        logger.info("=== STOP SIMULATION COMMAND RECEIVED ===")
        raw = params.get("join_timeout_s")
        join_timeout = None
        if raw is not None:
            try:
                join_timeout = float(raw)
            except (TypeError, ValueError):
                join_timeout = None
            if isinstance(raw, bool) or join_timeout is None or not math.isfinite(join_timeout) or join_timeout < 0:
                logger.warning(f"  Invalid join_timeout_s: {raw!r}")
                return False
        result = self.context.stop_simulation(join_timeout=join_timeout)
        logger.info(f"  {result}")
        return True
