"""Logging helpers built on top of loguru."""

from __future__ import annotations

import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional

from loguru import logger as _logger

MODULE_W = 9

LOG_FORMAT = (
    "<green>{time:MM-DD HH:mm:ss}</green>"
    "[<level>{level:.3}</level>]"
    f"[<cyan>{{extra[module]:<{MODULE_W}.{MODULE_W}}}</cyan>] "
    "<level>{message}</level>"
)

_logger.configure(extra={"module": "guidedepth"})

_lock = threading.Lock()
_log_file: Optional[Path] = None


def configure(level: str = "INFO", log_dir: Optional[Path] = None) -> Optional[Path]:
    """Replace the default sinks with a console sink and an optional JSON file sink.

    Returns the log file path when ``log_dir`` is given.
    """
    global _log_file
    with _lock:
        _logger.remove()
        _logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)
        _log_file = None
        if log_dir is not None:
            log_dir = Path(log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)
            ts = datetime.now().strftime("%Y%m%d_%H%M%S")
            _log_file = log_dir / f"{ts}.log.json"
            _logger.add(_log_file, level=level.upper(), serialize=True)
    return _log_file


def get_logger(name: str):
    """Return the shared loguru logger bound to ``name`` (in extra[module])."""
    return _logger.bind(module=name)
