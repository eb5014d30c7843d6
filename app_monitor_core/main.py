"""
Entry point for the app monitor.
"""

from __future__ import annotations

import argparse
import fcntl
import signal
import sys
from pathlib import Path
from typing import IO, Optional, Sequence

from PySide6.QtCore import QCoreApplication, QTimer

from app_monitor_core.app_monitor_core import logger as app_logger
from core.app import APP_NAME, MonitorCoordinator
from core.directory_watcher import WatchSetupError

_LOGGER = app_logger.get_logger()
_LOCK_PATH = Path("/tmp/app_monitor.lock")
# Lets the interpreter run signal handlers while Qt owns the main loop.
_SIGNAL_POLL_MS = 500


class _InstanceGuard:
    """Advisory file lock preventing concurrent instances."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._handle: Optional[IO[str]] = None

    def acquire(self) -> bool:
        try:
            handle = self._path.open("a")
        except OSError:
            # If the lock file cannot be created we allow the instance.
            return True
        try:
            fcntl.flock(handle, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError:
            handle.close()
            return False
        self._handle = handle
        return True

    def release(self) -> None:
        if self._handle is None:
            return
        fcntl.flock(self._handle, fcntl.LOCK_UN)
        self._handle.close()
        self._handle = None


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="app-monitor",
        description="Notify users about managed app installs and add finished apps to the Dock.",
    )
    parser.add_argument("-d", "--debug", action="store_true", help="enable verbose diagnostic logging")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    app_logger.configure(verbose=args.debug)

    guard = _InstanceGuard(_LOCK_PATH)
    if not guard.acquire():
        _LOGGER.debug("{} instance already running; exiting silently.", APP_NAME)
        return 0

    try:
        app = QCoreApplication.instance() or QCoreApplication([sys.argv[0]])
        coordinator = MonitorCoordinator()
        try:
            coordinator.start()
        except WatchSetupError as exc:
            _LOGGER.critical("{}", exc)
            coordinator.shutdown()
            return 1

        signal.signal(signal.SIGINT, lambda *_: app.quit())
        signal.signal(signal.SIGTERM, lambda *_: app.quit())
        ticker = QTimer()
        ticker.start(_SIGNAL_POLL_MS)
        ticker.timeout.connect(lambda: None)  # type: ignore[arg-type]

        exit_code = app.exec()
        ticker.stop()
        coordinator.shutdown()
        return exit_code
    finally:
        guard.release()


if __name__ == "__main__":
    raise SystemExit(main())
