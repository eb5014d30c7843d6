"""
User-visible reactions to accepted install transitions.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Tuple

from app_monitor_core.app_monitor_core import logger as app_logger
from core.catalog_client import AppMetadata
from core.commands import DockRegistrar, Notifier, UserResolver
from core.dedup_state import InstallPhase
from core.path_resolver import PathResolver

_LOGGER = app_logger.get_logger()

DEFAULT_ICON_DIR = Path("/tmp/app_monitor")

IconFetcher = Callable[[str, Path], Optional[Path]]


def format_notification(phase: InstallPhase, metadata: AppMetadata) -> Tuple[str, str]:
    """Return the (title, body) pair shown for a transition."""
    if phase is InstallPhase.COMPLETED:
        return (
            "Installation Completed",
            f"Installation of {metadata.display_name} is now finished.",
        )
    return (
        "Installation in Progress",
        f"Installation for {metadata.display_name} is now in progress.",
    )


@dataclass
class ReactionDispatcher:
    """Fires the notification and, for completions, the Dock registration."""

    notifier: Notifier
    dock: DockRegistrar
    user_resolver: UserResolver
    path_resolver: PathResolver
    icon_fetcher: Optional[IconFetcher] = None
    icon_dir: Path = DEFAULT_ICON_DIR
    notifications_enabled: bool = True
    dock_enabled: bool = True

    def dispatch(self, phase: InstallPhase, metadata: AppMetadata) -> None:
        user = self.user_resolver.current_user()
        if user is None:
            _LOGGER.warning(
                "No logged-in user; skipping {} reaction for {}",
                phase.value,
                metadata.catalog_id,
            )
            return

        if self.notifications_enabled:
            self._notify(user, phase, metadata)
        else:
            _LOGGER.debug("Notifications disabled; not notifying for {}", metadata.catalog_id)

        if phase is InstallPhase.COMPLETED:
            self._register_in_dock(user, metadata)

    def _notify(self, user: str, phase: InstallPhase, metadata: AppMetadata) -> None:
        title, body = format_notification(phase, metadata)
        self.notifier.notify(
            user,
            title=title,
            body=body,
            subtitle=metadata.vendor_name,
            icon_path=self._fetch_icon(metadata),
        )
        _LOGGER.info("Notified {}: {}", user, body)

    def _fetch_icon(self, metadata: AppMetadata) -> Optional[Path]:
        if not metadata.icon_url or self.icon_fetcher is None:
            return None
        destination = self.icon_dir / f"{metadata.catalog_id}.png"
        return self.icon_fetcher(metadata.icon_url, destination)

    def _register_in_dock(self, user: str, metadata: AppMetadata) -> None:
        if not self.dock_enabled:
            _LOGGER.debug("Dock registration disabled; skipping {}", metadata.catalog_id)
            return
        app_path = self.path_resolver.resolve(metadata.package_id)
        if app_path is None:
            return
        self.dock.register(user, app_path)
        _LOGGER.info("Added {} to the Dock for {}", app_path, user)
