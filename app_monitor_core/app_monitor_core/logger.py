"""
Logging setup for the app monitor.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from loguru import logger as _logger

_LOG_INITIALISED = False
LOG_DIR = Path.home() / "Library" / "Logs" / "App Monitor"
DEFAULT_LOG_PATH = LOG_DIR / "monitor.log"


def configure(log_path: Optional[Path] = None, *, verbose: bool = False) -> None:
    """
    Configure loguru for the monitor process.

    Called once by the entry point. Console output follows the verbose flag;
    the file sink always records debug detail.
    """
    global _LOG_INITIALISED
    if _LOG_INITIALISED:
        return
    target = log_path or DEFAULT_LOG_PATH

    _logger.remove()
    if sys.stderr is not None:
        _logger.add(sys.stderr, level="DEBUG" if verbose else "INFO", enqueue=True)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        _logger.warning("Cannot create log directory {}: {}", target.parent, exc)
    else:
        _logger.add(
            target,
            level="DEBUG",
            rotation="10 MB",
            retention=5,
            encoding="utf-8",
            enqueue=True,
            backtrace=True,
            diagnose=False,
        )
    _LOG_INITIALISED = True


def get_logger():
    """Return the shared logger instance."""
    return _logger
