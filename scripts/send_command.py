# send_command.py
"""
Drops a command file for a running simulator to pick up.

Examples:
  python scripts/send_command.py start_simulation --count 20 --interval-ms 500
  python scripts/send_command.py start_recording --zoom 9
  python scripts/send_command.py stop_recording
  python scripts/send_command.py stop_simulation
"""
import argparse
import logging
import os
import sys
from pathlib import Path

# Ensure imports/config work when run from scripts/ by resolving the repo root
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))
os.environ.setdefault("ADSB_SIM_CONFIG_FILE", str(REPO_ROOT / "config.yaml"))

from logger_config import setup_logging
from simulation.command_watcher import COMMAND_MAP, command_file_path
from utils.storage import write_json_atomic

logger = logging.getLogger(__name__)


def build_command(args) -> dict:
    command = {"command": args.command}
    if args.command == "start_simulation":
        config = {}
        if args.count is not None:
            config["aircraft_count"] = args.count
        if args.center is not None:
            config["center_lat"], config["center_lng"] = args.center
        if args.interval_ms is not None:
            config["update_interval_ms"] = args.interval_ms
        if config:
            command["config"] = config
    elif args.command == "start_recording" and args.zoom is not None:
        command["zoom"] = args.zoom
    elif args.command == "stop_simulation" and args.join_timeout is not None:
        command["join_timeout_s"] = args.join_timeout
    return command


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Send a command to a running ADS-B simulator")
    ap.add_argument("command", choices=sorted(COMMAND_MAP))
    ap.add_argument("--count", type=int, default=None)
    ap.add_argument("--center", type=float, nargs=2, metavar=("LAT", "LNG"), default=None)
    ap.add_argument("--interval-ms", type=int, default=None)
    ap.add_argument("--zoom", type=int, default=None)
    ap.add_argument("--join-timeout", type=float, default=None)
    args = ap.parse_args(argv)

    command = build_command(args)
    path = command_file_path()
    # Written via rename so the watcher never reads a partial file
    if not write_json_atomic(command, path, indent=None):
        return 1
    logger.info(f"Command written to {path}: {command}")
    return 0


if __name__ == "__main__":
    setup_logging()
    sys.exit(main())
