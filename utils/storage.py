# storage.py
"""
Atomic JSON file helpers shared by the recorder, feed writer and command files.
"""
import json
import logging
import os
import threading
import time
from collections import defaultdict
from typing import Any, Optional

from config_loader import LOG_DIR

logger = logging.getLogger(__name__)

_file_locks = defaultdict(threading.Lock)


def ensure_log_dir():
    """Creates the log directory if it doesn't exist."""
    os.makedirs(LOG_DIR, exist_ok=True)


def rel_to_logs_url(path: str) -> Optional[str]:
    """Map an absolute path under LOG_DIR to a /logs/... URL for UI links."""
    if not path:
        return None
    try:
        abs_path = os.path.abspath(path)
        abs_root = os.path.abspath(LOG_DIR)
        if os.path.commonpath([abs_path, abs_root]) != abs_root:
            return None
        rel = os.path.relpath(abs_path, abs_root).replace(os.sep, "/")
        return f"/logs/{rel}"
    except ValueError:
        # Different drives on Windows
        return None


def _fsync_dir(dir_path: str):
    """Fsync the containing directory to make a rename operation durable on disk."""
    if os.name == 'nt':
        return
    try:
        dir_fd = os.open(dir_path, os.O_RDONLY | getattr(os, 'O_DIRECTORY', 0))
        try:
            os.fsync(dir_fd)
        finally:
            os.close(dir_fd)
    except OSError as e:
        logger.warning(f"Failed to fsync directory {dir_path}: {e}")


def write_json_atomic(obj: Any, file_path: str, indent: Optional[int] = 2, durable: bool = True) -> bool:
    """
    Writes ``obj`` as JSON to ``file_path`` through a temp file + rename.

    Args:
        obj: JSON-serializable payload.
        file_path: Destination path; its directory is created if needed.
        indent: Passed to ``json.dump``; None writes compact JSON.
        durable: fsync the file and directory. Per-tick writers turn this off.

    Returns:
        True when the file was replaced, False on any error (which is logged).
    """
    dir_path = os.path.dirname(file_path) or "."
    try:
        os.makedirs(dir_path, exist_ok=True)
    except OSError as e:
        logger.error(f"Error: Could not create directory {dir_path} for {file_path}: {e}")
        return False

    separators = None if indent is not None else (',', ':')
    base_name = os.path.basename(file_path)
    tmp_path = os.path.join(dir_path, f".{base_name}.{os.getpid()}.{time.time_ns()}.tmp")

    with _file_locks[file_path]:
        try:
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(obj, f, indent=indent, separators=separators,
                          ensure_ascii=False, allow_nan=False)
                f.flush()
                if durable:
                    os.fsync(f.fileno())
            os.replace(tmp_path, file_path)
            if durable:
                _fsync_dir(dir_path)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error writing JSON file {file_path}: {e}")
            return False
        finally:
            if os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError:
                    pass


def read_json(file_path: str) -> Optional[Any]:
    """Reads a JSON file, returning None (with a warning) when missing or unreadable."""
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except FileNotFoundError:
        logger.warning(f"JSON file not found: {file_path}")
        return None
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning(f"Error reading JSON file {file_path}: {e}")
        return None
