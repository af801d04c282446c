#config_loader.py
"""
Loads and provides the application configuration from a YAML file.

Exposes a global ``CONFIG`` dictionary and a ``LOG_DIR`` string. The
configuration is loaded from ``config.yaml`` next to this module by default,
but can be overridden via the ``ADSB_SIM_CONFIG_FILE`` environment variable.
Sections missing from the file fall back to ``DEFAULTS``. After loading, the
log and recording directories are expanded to absolute paths and created.
"""

import copy
import logging
import os
import sys

import yaml


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be loaded or is invalid."""
    pass


DEFAULTS = {
    'simulation': {
        'center_lat': 22.5431,
        'center_lng': 114.0579,
        'aircraft_count': 12,
        'update_interval_ms': 1000,
        'seed': None,
        'lock_timeout_s': 2.0,
        'autostart': False,
    },
    'logging': {
        'level': 'INFO',
        'log_dir': 'logs',
        'log_file': 'adsb_sim.log',
        'log_max_size_mb': 25,
        'log_backup_count': 5,
    },
    'commands': {
        'command_file': 'command.json',
    },
    'recording': {
        'directory': 'logs/recordings',
        'map_zoom': 10,
    },
    'feed': {
        'enabled': False,
        'json_file_path': 'logs/aircraft.json',
    },
    'dashboard': {
        'host': '0.0.0.0',
        'port': 8000,
    },
}


def _merge_defaults(defaults: dict, loaded: dict) -> dict:
    """Returns a copy of ``defaults`` with values from ``loaded`` layered on top."""
    merged = copy.deepcopy(defaults)
    for key, value in (loaded or {}).items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = _merge_defaults(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_file: str) -> dict:
    """
    Reads ``config_file`` and returns the merged, path-expanded configuration.

    Raises:
        ConfigError: if the file is missing, is not valid YAML, or its top
            level is not a mapping.
    """
    if not os.path.exists(config_file):
        raise ConfigError(f"Config file '{config_file}' not found.")

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            loaded = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file '{config_file}' is not valid YAML: {e}") from e

    if not isinstance(loaded, dict):
        raise ConfigError(f"Config file '{config_file}' must contain a mapping at the top level.")

    config = _merge_defaults(DEFAULTS, loaded)
    base_dir = os.path.dirname(os.path.abspath(config_file))

    # --- Path Expansions ---
    config['logging']['log_dir'] = os.path.abspath(
        os.path.join(base_dir, config['logging']['log_dir']))
    config['recording']['directory'] = os.path.abspath(
        os.path.join(base_dir, config['recording']['directory']))
    config['feed']['json_file_path'] = os.path.abspath(
        os.path.join(base_dir, config['feed']['json_file_path']))
    return config


# --- Load Configuration ---
try:
    CONFIG_FILE = os.environ.get(
        'ADSB_SIM_CONFIG_FILE',
        os.path.join(os.path.dirname(os.path.abspath(__file__)), 'config.yaml'))
    CONFIG = load_config(CONFIG_FILE)

    # Export absolute log directory for convenience
    LOG_DIR: str = CONFIG['logging']['log_dir']
    os.makedirs(LOG_DIR, exist_ok=True)

except ConfigError as e:
    logging.critical(f"FATAL: {e}")
    sys.exit(1)
except Exception as e:
    logging.critical(f"FATAL: An unexpected error occurred while loading the configuration: {e}")
    sys.exit(1)
