"""
Installed-app detection from package receipts, /Applications and Spotlight.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from app_monitor_core.app_monitor_core import logger as app_logger
from core.commands import CommandRunner, ShellCommandRunner

_LOGGER = app_logger.get_logger()

PKGUTIL = "/usr/sbin/pkgutil"
MDFIND = "/usr/bin/mdfind"
APPLICATIONS_DIR = Path("/Applications")


def extract_app_name(path: str) -> Optional[str]:
    """Return the last path component, e.g. ``Foo.app`` for ``Applications/Foo.app``."""
    parts = [part for part in path.split("/") if part]
    return parts[-1] if parts else None


def _first_app_bundle(file_listing: str) -> Optional[str]:
    for line in file_listing.splitlines():
        parts = line.strip().split("/")
        for index, part in enumerate(parts):
            if part.endswith(".app"):
                return "/".join(parts[: index + 1])
    return None


@dataclass
class InstalledAppFinder:
    runner: CommandRunner = field(default_factory=ShellCommandRunner)
    applications_dir: Path = APPLICATIONS_DIR

    def correct_package_id(self, package_id: str) -> Optional[str]:
        """Return the receipt identifier matching ``package_id`` case-insensitively."""
        listing = self.runner.run([PKGUTIL, "--pkgs"])
        if listing is None:
            return None
        wanted = package_id.lower()
        receipts = [line.strip() for line in listing.splitlines() if line.strip()]
        for receipt in receipts:
            if receipt.lower() == wanted:
                return receipt
        for receipt in receipts:
            if wanted in receipt.lower():
                return receipt
        return None

    def app_path_in_applications(self, app_name: str) -> Optional[Path]:
        app_path = self.applications_dir / app_name
        return app_path if app_path.exists() else None

    def find_with_spotlight(self, app_name: str) -> Optional[str]:
        query = (
            "kMDItemContentType == 'com.apple.application-bundle' "
            f"&& kMDItemFSName == '{app_name}'"
        )
        result = self.runner.run([MDFIND, query])
        if result is None:
            return None
        return result.splitlines()[0]

    def installed_app_path(self, package_id: str) -> Optional[str]:
        """Return the path of the app installed by ``package_id``, if any."""
        receipt = self.correct_package_id(package_id)
        if receipt is None:
            _LOGGER.warning("No package found for identifier: {}", package_id)
            return None
        _LOGGER.info("Found package receipt: {}", receipt)

        listing = self.runner.run([PKGUTIL, "--files", receipt])
        bundle = _first_app_bundle(listing) if listing else None
        app_name = extract_app_name(bundle) if bundle else None
        if app_name is None:
            _LOGGER.warning("No .app file found for package {}", receipt)
            return None
        _LOGGER.debug("Extracted app name: {}", app_name)

        app_path = self.app_path_in_applications(app_name)
        if app_path is not None:
            _LOGGER.info("App is installed in: {}", app_path)
            return str(app_path)

        spotlight_path = self.find_with_spotlight(app_name)
        if spotlight_path is not None:
            _LOGGER.info("App found with Spotlight at: {}", spotlight_path)
            return spotlight_path

        _LOGGER.info("App {} is not installed.", app_name)
        return None
