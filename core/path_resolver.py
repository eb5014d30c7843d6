"""
Resolution of the on-disk install path recorded by the management agent.

The agent writes ``<device_dir>/<package_id>.plist`` for each managed app.
The key holding the install records is not stable across agent versions, so
the record is scanned for the first value shaped like a list of
dictionaries whose first entry carries a ``Path`` string.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from app_monitor_core.app_monitor_core import logger as app_logger
from shared.marker_schema import MarkerValidationError, read_plist

_LOGGER = app_logger.get_logger()

PATH_KEY = "Path"


class InstallPathNotFound(LookupError):
    """Raised when no install path can be derived for a package identifier."""


def find_install_path(record: Dict[str, Any]) -> Optional[str]:
    """Return ``Path`` of the first entry of the first list-of-dictionaries value that has one."""
    for value in record.values():
        if not isinstance(value, list) or not value or not isinstance(value[0], dict):
            continue
        path = value[0].get(PATH_KEY)
        if isinstance(path, str) and path.strip():
            return path.strip()
    return None


class PathResolver:
    def __init__(self, device_dir: Path) -> None:
        self.device_dir = Path(device_dir)

    def record_path(self, package_id: str) -> Path:
        if not package_id or "/" in package_id or package_id.startswith("."):
            raise InstallPathNotFound(f"Invalid package identifier {package_id!r}.")
        return self.device_dir / f"{package_id}.plist"

    def lookup(self, package_id: str) -> str:
        """Return the install path for ``package_id`` or raise InstallPathNotFound."""
        record_path = self.record_path(package_id)
        try:
            record = read_plist(record_path)
        except MarkerValidationError as exc:
            raise InstallPathNotFound(f"No usable record for {package_id}: {exc}") from exc

        path = find_install_path(record)
        if path is None:
            raise InstallPathNotFound(f"No '{PATH_KEY}' entry in record for {package_id}.")
        return path

    def resolve(self, package_id: str) -> Optional[str]:
        try:
            path = self.lookup(package_id)
        except InstallPathNotFound as exc:
            _LOGGER.warning("{}", exc)
            return None
        _LOGGER.debug("App path found for {}: {}", package_id, path)
        return path
