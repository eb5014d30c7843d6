"""
Property-list decoding for marker files and per-package records.
"""

from __future__ import annotations

import plistlib
from xml.parsers.expat import ExpatError
from pathlib import Path
from typing import Any, Dict

from .install_marker import InstallMarker, SourceDirectory

OPTIONS_KEY = "MDMOptions"
CATALOG_ID_KEY = "iTunesStoreID"


class MarkerValidationError(ValueError):
    """Raised when a marker file is unreadable or lacks the catalog identifier."""


def read_plist(path: Path) -> Dict[str, Any]:
    """
    Read and decode a property list whose root must be a dictionary.

    Both XML and binary formats are accepted.
    """
    try:
        with path.open("rb") as handle:
            record = plistlib.load(handle)
    except FileNotFoundError as exc:
        raise MarkerValidationError(f"Property list not found: {path}") from exc
    except OSError as exc:
        raise MarkerValidationError(f"Unable to read property list: {path}") from exc
    except (plistlib.InvalidFileException, ValueError, ExpatError) as exc:
        raise MarkerValidationError(f"Malformed property list {path}: {exc}") from exc

    if not isinstance(record, dict):
        raise MarkerValidationError(f"Property list root must be a dictionary: {path}")
    return record


def extract_catalog_id(record: Dict[str, Any]) -> int:
    """Return the integer catalog identifier nested under MDMOptions."""
    options = record.get(OPTIONS_KEY)
    if not isinstance(options, dict):
        raise MarkerValidationError(f"{OPTIONS_KEY} missing or not a dictionary.")

    value = options.get(CATALOG_ID_KEY)
    if value is None:
        raise MarkerValidationError(f"{OPTIONS_KEY}.{CATALOG_ID_KEY} is missing.")
    # bool is an int subclass; a <true/> here is never an identifier.
    if isinstance(value, bool) or not isinstance(value, int):
        raise MarkerValidationError(f"{OPTIONS_KEY}.{CATALOG_ID_KEY} must be an integer.")
    if value <= 0:
        raise MarkerValidationError(f"{OPTIONS_KEY}.{CATALOG_ID_KEY} must be positive.")
    return value


def load_and_validate_marker(path: Path, source: SourceDirectory) -> InstallMarker:
    """Decode the marker file at ``path`` into an InstallMarker."""
    record = read_plist(path)
    return InstallMarker.from_record(record, source=source, path=path)
