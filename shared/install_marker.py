"""
Typed representation of a marker file dropped by the device-management agent.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict

IN_PROGRESS_DIR_NAME = "_In Progress"
COMPLETED_DIR_NAME = "_Completed"


class SourceDirectory(Enum):
    IN_PROGRESS = IN_PROGRESS_DIR_NAME
    COMPLETED = COMPLETED_DIR_NAME


@dataclass(frozen=True, slots=True)
class InstallMarker:
    """
    One observed marker file: the catalog identifier it names and which
    watched directory produced it.
    """

    catalog_id: int
    source: SourceDirectory
    file_name: str

    @property
    def catalog_key(self) -> str:
        return str(self.catalog_id)

    @property
    def is_completed(self) -> bool:
        return self.source is SourceDirectory.COMPLETED

    @classmethod
    def from_record(cls, record: Dict[str, Any], *, source: SourceDirectory, path: Path) -> "InstallMarker":
        from .marker_schema import extract_catalog_id

        return cls(catalog_id=extract_catalog_id(record), source=source, file_name=path.name)
