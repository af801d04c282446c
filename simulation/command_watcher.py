import json
import logging
import os
from typing import Any, Dict, Optional

from watchdog.events import FileSystemEventHandler

from config_loader import CONFIG, LOG_DIR
from commands.base import Command
from commands.recording import StartRecordingCommand, StopRecordingCommand
from commands.start import StartSimulationCommand
from commands.stop import StopSimulationCommand

logger = logging.getLogger(__name__)

COMMAND_MAP = {
    'start_simulation': StartSimulationCommand,
    'stop_simulation': StopSimulationCommand,
    'start_recording': StartRecordingCommand,
    'stop_recording': StopRecordingCommand,
}


def command_file_path() -> str:
    command_filename = CONFIG.get('commands', {}).get('command_file', 'command.json')
    return os.path.normpath(os.path.join(LOG_DIR, command_filename))


class CommandHandler(FileSystemEventHandler):
    """Watches the command file and dispatches simulator commands."""

    def __init__(self, host, command_file: Optional[str] = None):
        """
        Initializes the CommandHandler.

        Args:
            host: The SimulatorHost commands act on.
            command_file: Path to watch (defaults to ``commands.command_file`` under LOG_DIR).
        """
        self.host = host
        self.command_file = os.path.normpath(command_file or command_file_path())

    def on_modified(self, event):
        if os.path.normpath(event.src_path) == self.command_file:
            self.process_command()

    def on_created(self, event):
        if os.path.normpath(event.src_path) == self.command_file:
            self.process_command()

    def on_moved(self, event):
        # Atomic writes (os.replace) arrive as a move onto the command file
        if os.path.normpath(event.dest_path) == self.command_file:
            self.process_command()

    def _resolve_command_class(self, data: Dict[str, Any]):
        """Returns the command class for the given payload, or None if unknown."""
        cmd_key = data.get('command')
        if not isinstance(cmd_key, str):
            return None
        return COMMAND_MAP.get(cmd_key)

    def dispatch(self, data: Dict[str, Any]) -> bool:
        """Runs the command described by ``data``."""
        cmd_class = self._resolve_command_class(data)
        if not cmd_class:
            logger.warning(f"Unknown command received: {data}")
            return False
        command: Command = cmd_class(self.host)
        success = command.execute(data)
        logger.info(f"Command executed -> {'SUCCESS' if success else 'FAILED'}")
        return success

    def process_command(self) -> Optional[bool]:
        """Reads, removes and executes the command file. Returns None if nothing was run."""
        logger.info("--- Command file detected ---")
        try:
            with open(self.command_file, 'r', encoding='utf-8') as f:
                data = json.load(f)

            # Fails if another event already consumed the file
            os.remove(self.command_file)
            logger.info("Processed and removed command file.")
        except FileNotFoundError:
            logger.info("  Command file not found (likely already processed). Ignoring.")
            return None
        except json.JSONDecodeError as e:
            logger.warning(f"  Could not read command file (invalid JSON): {e}")
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"  Could not read command file: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"  Command file must contain a JSON object, got: {data!r}")
            return None
        try:
            return self.dispatch(data)
        except Exception as e:
            # Keeps the watchdog dispatcher thread alive for later commands
            logger.error(f"  Unexpected error processing command: {e}")
            return False
