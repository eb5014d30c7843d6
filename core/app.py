"""
Application coordinator wiring watchers, dedup state, lookups and reactions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from app_monitor_core.app_monitor_core import logger as app_logger
from core.catalog_client import CatalogClient
from core.commands import (
    CommandRunner,
    ConsoleUserResolver,
    DialogNotifier,
    DockRegistrar,
    DockutilRegistrar,
    Notifier,
    ShellCommandRunner,
    UserResolver,
)
from core.dedup_state import DedupState
from core.directory_watcher import DirectoryWatcher
from core.path_resolver import PathResolver
from core.pipeline import InstallPipeline
from core.reactions import ReactionDispatcher
from core.settings import MonitorSettings, MonitorSettingsManager
from shared.install_marker import SourceDirectory

APP_NAME = "App Monitor"
APP_VERSION = "1.0.0"


@dataclass
class MonitorCoordinator:
    settings: MonitorSettings = field(default_factory=lambda: MonitorSettingsManager().read_settings())
    state: DedupState = field(default_factory=DedupState)
    runner: CommandRunner = field(default_factory=ShellCommandRunner)
    notifier: Optional[Notifier] = None
    dock: Optional[DockRegistrar] = None
    user_resolver: Optional[UserResolver] = None
    catalog: Optional[CatalogClient] = None

    def __post_init__(self) -> None:
        self._logger = app_logger.get_logger()
        settings = self.settings

        if self.notifier is None:
            self.notifier = DialogNotifier(runner=self.runner, dialog_path=settings.dialog_path)
        if self.dock is None:
            self.dock = DockutilRegistrar(runner=self.runner, dockutil_path=settings.dockutil_path)
        if self.user_resolver is None:
            self.user_resolver = ConsoleUserResolver(runner=self.runner)
        if self.catalog is None:
            self.catalog = CatalogClient(
                lookup_url=settings.lookup_url,
                timeout=float(settings.lookup_timeout_seconds),
            )

        self.dispatcher = ReactionDispatcher(
            notifier=self.notifier,
            dock=self.dock,
            user_resolver=self.user_resolver,
            path_resolver=PathResolver(settings.device_dir),
            icon_fetcher=self.catalog.download_icon,
            icon_dir=settings.icon_dir,
            notifications_enabled=settings.notifications_enabled,
            dock_enabled=settings.dock_enabled,
        )
        self.pipeline = InstallPipeline(
            state=self.state,
            catalog=self.catalog,
            dispatcher=self.dispatcher,
            max_workers=settings.max_workers,
        )
        self.watchers: List[DirectoryWatcher] = [
            self._make_watcher(settings.in_progress_dir, SourceDirectory.IN_PROGRESS),
            self._make_watcher(settings.completed_dir, SourceDirectory.COMPLETED),
        ]

    def _make_watcher(self, directory: Path, source: SourceDirectory) -> DirectoryWatcher:
        return DirectoryWatcher(
            directory,
            source,
            self.pipeline.ingest,
            suffix=self.settings.marker_suffix,
            debounce_ms=self.settings.debounce_ms,
        )

    def start(self) -> None:
        """Start both watchers. Raises WatchSetupError if either cannot be watched."""
        self._logger.info("Starting {} v{}. Monitoring {}", APP_NAME, APP_VERSION, self.settings.device_dir)
        try:
            for watcher in self.watchers:
                watcher.start()
        except Exception:
            self._close_watchers()
            raise

    def shutdown(self) -> None:
        self._logger.info("Shutting down {}.", APP_NAME)
        self._close_watchers()
        self.pipeline.close()
        self.catalog.close()

    def _close_watchers(self) -> None:
        for watcher in self.watchers:
            watcher.close()
