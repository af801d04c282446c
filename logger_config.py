# logger_config.py
"""
Centralized logging configuration for the simulator.
"""
import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from config_loader import CONFIG, LOG_DIR


def setup_logging():
    """
    Configures the root logger: console output plus a rotating log file in LOG_DIR.
    """
    log_cfg = CONFIG.get('logging', {})
    log_level_str = str(log_cfg.get('level', 'INFO')).upper()
    log_level = getattr(logging, log_level_str, logging.INFO)

    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(threadName)s - %(levelname)s - %(message)s'
    )
    console_formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s'
    )

    logger = logging.getLogger()
    logger.setLevel(log_level)

    # Remove any existing handlers to avoid duplicate logs
    if logger.hasHandlers():
        logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    os.makedirs(LOG_DIR, exist_ok=True)
    log_file_path = os.path.join(LOG_DIR, log_cfg.get('log_file', 'adsb_sim.log'))
    file_handler = RotatingFileHandler(
        log_file_path,
        maxBytes=int(log_cfg.get('log_max_size_mb', 25)) * 1024 * 1024,
        backupCount=int(log_cfg.get('log_backup_count', 5))
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(file_formatter)
    logger.addHandler(file_handler)

    # uvicorn installs its own handlers; let its records flow to ours instead
    for name in ('uvicorn', 'uvicorn.error', 'uvicorn.access'):
        logging.getLogger(name).handlers.clear()
        logging.getLogger(name).propagate = True

    # Redirect uncaught exceptions to the logger
    def handle_exception(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        logger.critical("Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback))

    sys.excepthook = handle_exception
