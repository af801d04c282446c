# main.py
"""
Main entry point: runs the ADS-B simulator with its dashboard and command-file watcher.

Usage:
  python main.py                       # dashboard + command watcher
  python main.py --no-dashboard --autostart --count 20
"""

import argparse
import logging
import os
import time
import traceback

from watchdog.observers import Observer

from config_loader import CONFIG, LOG_DIR
from logger_config import setup_logging
from simulation.command_watcher import CommandHandler
from simulation.host import SimulatorHost
from utils.storage import ensure_log_dir

logger = logging.getLogger(__name__)


def process_startup_command(command_handler: CommandHandler):
    """Executes a command file left behind before startup, if any."""
    if not os.path.exists(command_handler.command_file):
        return
    logger.info(f"Found existing command file '{command_handler.command_file}' at startup. Processing...")
    command_handler.process_command()


def parse_args(argv=None):
    sim_cfg = CONFIG['simulation']
    ap = argparse.ArgumentParser(description="ADS-B signal simulator")
    ap.add_argument("--no-dashboard", action="store_true",
                    help="Run without the HTTP/WebSocket dashboard")
    ap.add_argument("--autostart", action="store_true", default=bool(sim_cfg.get('autostart')),
                    help="Start a simulation run immediately")
    ap.add_argument("--count", type=int, default=None, help="Aircraft count for the autostarted run")
    ap.add_argument("--center", type=float, nargs=2, metavar=("LAT", "LNG"), default=None,
                    help="Center of the autostarted run")
    ap.add_argument("--interval-ms", type=int, default=None, help="Tick interval of the autostarted run")
    return ap.parse_args(argv)


def _autostart_params(args) -> dict:
    params = {}
    if args.count is not None:
        params['aircraft_count'] = args.count
    if args.center is not None:
        params['center_lat'], params['center_lng'] = args.center
    if args.interval_ms is not None:
        params['update_interval_ms'] = args.interval_ms
    return params


def _wait_forever(command_observer: Observer):
    while True:
        if not command_observer.is_alive():
            logger.critical("Error: Command observer thread died. Exiting.")
            break
        time.sleep(2)


def main(argv=None):
    args = parse_args(argv)
    ensure_log_dir()

    host = SimulatorHost()
    command_handler = CommandHandler(host)
    command_observer = Observer()
    command_observer.schedule(command_handler, path=LOG_DIR, recursive=False)

    try:
        process_startup_command(command_handler)
        command_observer.start()
        logger.info(f"Monitoring '{LOG_DIR}' for command file '{os.path.basename(command_handler.command_file)}'...")

        if args.autostart:
            host.start_simulation(_autostart_params(args))

        if args.no_dashboard:
            _wait_forever(command_observer)
        else:
            from dashboard.server import serve
            serve(host)
    except KeyboardInterrupt:
        logger.info("Shutdown requested (Ctrl+C)...")
    except Exception as e:
        logger.critical(f"FATAL: Unhandled exception in main loop: {e}")
        traceback.print_exc()
    finally:
        host.shutdown()
        if command_observer.is_alive():
            command_observer.stop()
            command_observer.join(timeout=2.0)
        logger.info("Program terminated.")


if __name__ == "__main__":
    setup_logging()
    main()
