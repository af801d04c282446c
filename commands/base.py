# commands/base.py

from abc import ABC, abstractmethod
from typing import Any, Dict
import logging

logger = logging.getLogger(__name__)

class Command(ABC):
    """Base class for all simulator commands."""

    def __init__(self, context: Any):
        """Inject the shared ``SimulatorHost`` (state, runner, recorder)."""
        self.context = context

    @abstractmethod
    def execute(self, params: Dict[str, Any]) -> bool:
        """
        Run the command with the provided parameters.

        Args:
            params: Command-specific options (may be empty).

        Returns:
            True when the simulator reached the intended state; False otherwise.
        """
        pass
