"""Shared fixtures and recording fakes for the monitor tests."""

from __future__ import annotations

import plistlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
from loguru import logger

from core.catalog_client import AppMetadata, CatalogLookupError


@pytest.fixture(scope="session")
def qt_app():
    from PySide6.QtCore import QCoreApplication

    return QCoreApplication.instance() or QCoreApplication([])


@pytest.fixture
def log_records():
    """Capture loguru records emitted during the test."""
    records: List[Dict[str, Any]] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


def write_plist(path: Path, payload: Dict[str, Any]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as handle:
        plistlib.dump(payload, handle)
    return path


def marker_payload(catalog_id: Any) -> Dict[str, Any]:
    return {"MDMOptions": {"iTunesStoreID": catalog_id}, "BundleIdentifier": "com.example.app"}


def make_metadata(catalog_id: int, **overrides: Any) -> AppMetadata:
    values = {
        "catalog_id": catalog_id,
        "display_name": f"App {catalog_id}",
        "vendor_name": "Example Vendor",
        "icon_url": None,
        "package_id": f"com.example.app{catalog_id}",
    }
    values.update(overrides)
    return AppMetadata(**values)


@dataclass
class FakeCatalog:
    failing: set = field(default_factory=set)
    overrides: Dict[int, AppMetadata] = field(default_factory=dict)
    calls: List[int] = field(default_factory=list)
    closed: bool = False

    def lookup(self, catalog_id: int) -> AppMetadata:
        self.calls.append(catalog_id)
        if catalog_id in self.failing:
            raise CatalogLookupError(f"lookup failed for {catalog_id}")
        return self.overrides.get(catalog_id) or make_metadata(catalog_id)

    def download_icon(self, url: str, destination: Path) -> Optional[Path]:
        return None

    def close(self) -> None:
        self.closed = True


@dataclass
class RecordingNotifier:
    calls: List[Dict[str, Any]] = field(default_factory=list)

    def notify(self, user, *, title, body, subtitle, icon_path=None) -> None:
        self.calls.append(
            {"user": user, "title": title, "body": body, "subtitle": subtitle, "icon_path": icon_path}
        )


@dataclass
class RecordingDock:
    calls: List[tuple] = field(default_factory=list)

    def register(self, user: str, app_path: str) -> None:
        self.calls.append((user, app_path))


@dataclass
class StaticUserResolver:
    user: Optional[str] = "alice"

    def current_user(self) -> Optional[str]:
        return self.user


@dataclass
class RecordingRunner:
    outputs: Dict[str, Optional[str]] = field(default_factory=dict)
    calls: List[List[str]] = field(default_factory=list)

    def run(self, argv) -> Optional[str]:
        argv = [str(part) for part in argv]
        self.calls.append(argv)
        return self.outputs.get(" ".join(argv))
