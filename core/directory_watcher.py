"""
Directory watcher turning kernel change notifications into marker ingestion.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional

from PySide6.QtCore import QFileSystemWatcher, QObject, QTimer

from app_monitor_core.app_monitor_core import logger as app_logger
from shared.install_marker import SourceDirectory

_LOGGER = app_logger.get_logger()

DEFAULT_MARKER_SUFFIX = ".plist"

IngestCallback = Callable[[Path, SourceDirectory], object]


class WatchSetupError(RuntimeError):
    """Raised when a required directory cannot be watched."""


class DirectoryWatcher(QObject):
    """
    Watches one directory and hands every marker file to ``ingest`` whenever
    the directory is written to.

    Notifications are delivered on the thread owning this object (the main
    thread in production), which serialises ingestion across watchers.
    A non-zero ``debounce_ms`` coalesces bursts of writes into one scan.
    """

    def __init__(
        self,
        directory: Path,
        source: SourceDirectory,
        ingest: IngestCallback,
        *,
        suffix: str = DEFAULT_MARKER_SUFFIX,
        debounce_ms: int = 0,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self.directory = Path(directory)
        self.source = source
        self.suffix = suffix
        self._ingest = ingest
        self._watcher: Optional[QFileSystemWatcher] = None

        self._debounce = QTimer(self)
        self._debounce.setSingleShot(True)
        self._debounce.setInterval(max(0, debounce_ms))
        self._debounce.timeout.connect(self.scan)  # type: ignore[arg-type]

    def start(self) -> None:
        if self._watcher is not None:
            return
        if not self.directory.is_dir():
            raise WatchSetupError(f"Failed to open directory: {self.directory}")

        watcher = QFileSystemWatcher(self)
        if not watcher.addPath(str(self.directory)):
            watcher.deleteLater()
            raise WatchSetupError(f"Failed to watch directory: {self.directory}")
        watcher.directoryChanged.connect(self._on_directory_changed)  # type: ignore[arg-type]
        self._watcher = watcher
        _LOGGER.info("Watching {} ({})", self.directory, self.source.name)

    def close(self) -> None:
        """Stop watching and release the underlying descriptor."""
        self._debounce.stop()
        if self._watcher is None:
            return
        self._watcher.directoryChanged.disconnect(self._on_directory_changed)  # type: ignore[arg-type]
        directories = self._watcher.directories()
        if directories:
            self._watcher.removePaths(directories)
        self._watcher.deleteLater()
        self._watcher = None
        _LOGGER.debug("Stopped watching {}", self.directory)

    @property
    def is_watching(self) -> bool:
        return self._watcher is not None and bool(self._watcher.directories())

    def _on_directory_changed(self, path: str) -> None:
        _LOGGER.debug("Change notification for {}", path)
        if self._debounce.interval() > 0:
            self._debounce.start()
        else:
            self.scan()

    def marker_files(self) -> List[Path]:
        """List marker files currently present, in directory listing order."""
        seen: set[str] = set()
        markers: List[Path] = []
        for entry in self.directory.iterdir():
            if not entry.name.endswith(self.suffix) or entry.name in seen:
                continue
            seen.add(entry.name)
            if entry.is_file():
                markers.append(entry)
        return markers

    def scan(self) -> int:
        """Ingest every marker file in the directory. Returns how many were handed over."""
        try:
            markers = self.marker_files()
        except OSError as exc:
            _LOGGER.warning("Cannot list {}: {}", self.directory, exc)
            return 0

        for marker in markers:
            _LOGGER.debug("Marker detected in {}: {}", self.directory, marker.name)
            try:
                self._ingest(marker, self.source)
            except Exception:
                _LOGGER.exception("Ingesting {} failed", marker)
        return len(markers)
