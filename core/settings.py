"""
Managed-preferences configuration for the app monitor runtime.
"""

from __future__ import annotations

import os
import plistlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from app_monitor_core.app_monitor_core import logger as app_logger
from core.catalog_client import DEFAULT_LOOKUP_URL
from core.commands import DEFAULT_DIALOG_PATH, DEFAULT_DOCKUTIL_PATH
from core.pipeline import DEFAULT_MAX_WORKERS
from core.reactions import DEFAULT_ICON_DIR
from shared.install_marker import COMPLETED_DIR_NAME, IN_PROGRESS_DIR_NAME

_LOGGER = app_logger.get_logger()

PREFERENCES_DOMAIN = "com.github.appmonitor"
DEFAULT_PREFERENCES_PATH = Path("/Library/Managed Preferences") / f"{PREFERENCES_DOMAIN}.plist"
DEFAULT_DEVICE_DIR = Path(
    os.environ.get(
        "APP_MONITOR_DEVICE_DIR",
        "/private/var/db/ConfigurationProfiles/Settings/Managed Applications/Device",
    )
)

_MIN_TIMEOUT, _MAX_TIMEOUT = 1, 120
_MIN_WORKERS, _MAX_WORKERS = 1, 16
_MIN_DEBOUNCE_MS, _MAX_DEBOUNCE_MS = 0, 5000


@dataclass(eq=True)
class MonitorSettings:
    device_dir: Path = field(default_factory=lambda: DEFAULT_DEVICE_DIR)
    marker_suffix: str = ".plist"
    lookup_url: str = DEFAULT_LOOKUP_URL
    lookup_timeout_seconds: int = 10
    max_workers: int = DEFAULT_MAX_WORKERS
    debounce_ms: int = 200
    notifications_enabled: bool = True
    dock_enabled: bool = True
    dialog_path: Path = DEFAULT_DIALOG_PATH
    dockutil_path: Path = DEFAULT_DOCKUTIL_PATH
    icon_dir: Path = DEFAULT_ICON_DIR

    @property
    def in_progress_dir(self) -> Path:
        return self.device_dir / IN_PROGRESS_DIR_NAME

    @property
    def completed_dir(self) -> Path:
        return self.device_dir / COMPLETED_DIR_NAME


class MonitorSettingsManager:
    """Loads managed preferences and clamps invalid data to safe values."""

    def __init__(
        self,
        *,
        preferences_path: Optional[Path] = None,
        loader: Callable[[Any], Dict[str, Any]] = plistlib.load,
    ) -> None:
        self.preferences_path = preferences_path or Path(
            os.environ.get("APP_MONITOR_PREFERENCES", str(DEFAULT_PREFERENCES_PATH))
        )
        self._load = loader

    def read_settings(self) -> MonitorSettings:
        prefs = self._read_preferences()
        defaults = MonitorSettings()
        if not prefs:
            return defaults

        return MonitorSettings(
            device_dir=self._read_path(prefs, "DeviceDirectory", defaults.device_dir),
            marker_suffix=self._read_string(prefs, "MarkerSuffix", defaults.marker_suffix),
            lookup_url=self._read_string(prefs, "LookupURL", defaults.lookup_url),
            lookup_timeout_seconds=self._read_int(
                prefs, "LookupTimeoutSeconds", defaults.lookup_timeout_seconds, _MIN_TIMEOUT, _MAX_TIMEOUT
            ),
            max_workers=self._read_int(prefs, "MaxWorkers", defaults.max_workers, _MIN_WORKERS, _MAX_WORKERS),
            debounce_ms=self._read_int(
                prefs, "DebounceMilliseconds", defaults.debounce_ms, _MIN_DEBOUNCE_MS, _MAX_DEBOUNCE_MS
            ),
            notifications_enabled=self._read_bool(prefs, "NotificationsEnabled", True),
            dock_enabled=self._read_bool(prefs, "DockEnabled", True),
            dialog_path=self._read_path(prefs, "DialogPath", defaults.dialog_path),
            dockutil_path=self._read_path(prefs, "DockutilPath", defaults.dockutil_path),
            icon_dir=self._read_path(prefs, "IconDirectory", defaults.icon_dir),
        )

    def _read_preferences(self) -> Dict[str, Any]:
        try:
            with self.preferences_path.open("rb") as handle:
                prefs = self._load(handle)
        except FileNotFoundError:
            return {}
        except (OSError, plistlib.InvalidFileException, ValueError) as exc:
            _LOGGER.warning("Ignoring unreadable preferences {}: {}", self.preferences_path, exc)
            return {}
        if not isinstance(prefs, dict):
            _LOGGER.warning("Ignoring preferences {}: root is not a dictionary.", self.preferences_path)
            return {}
        return prefs

    def _read_bool(self, prefs: Dict[str, Any], name: str, default: bool) -> bool:
        raw = prefs.get(name)
        if raw is None:
            return default
        if not isinstance(raw, bool):
            _LOGGER.warning("Preference {} has unexpected type {}.", name, type(raw).__name__)
            return default
        return raw

    def _read_int(self, prefs: Dict[str, Any], name: str, default: int, low: int, high: int) -> int:
        raw = prefs.get(name)
        if raw is None:
            return default
        if isinstance(raw, bool) or not isinstance(raw, int):
            _LOGGER.warning("Preference {} has unexpected type {}.", name, type(raw).__name__)
            return default
        if raw < low or raw > high:
            _LOGGER.warning("Invalid {} value {}. Clamping to {}..{}.", name, raw, low, high)
        return max(low, min(high, raw))

    def _read_string(self, prefs: Dict[str, Any], name: str, default: str) -> str:
        raw = prefs.get(name)
        if raw is None:
            return default
        if not isinstance(raw, str) or not raw.strip():
            _LOGGER.warning("Preference {} must be a non-empty string.", name)
            return default
        return raw.strip()

    def _read_path(self, prefs: Dict[str, Any], name: str, default: Path) -> Path:
        value = self._read_string(prefs, name, "")
        return Path(value) if value else default
