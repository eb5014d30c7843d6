"""
In-memory record of installs currently known to be in progress.
"""

from __future__ import annotations

import threading
from enum import Enum
from typing import FrozenSet, Set, Union

CatalogId = Union[int, str]


class InstallPhase(Enum):
    STARTED = "started"
    COMPLETED = "completed"


class DedupState:
    """
    Set of catalog identifiers that have an accepted "started" marker and no
    accepted "completed" marker yet.

    A single instance is shared by both directory watchers; every decision is
    taken under one lock so a start and a completion for the same identifier
    can never interleave.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._in_progress: Set[str] = set()

    def accept_started(self, catalog_id: CatalogId) -> bool:
        """Record a start. Returns False when the identifier is already tracked."""
        key = str(catalog_id)
        with self._lock:
            if key in self._in_progress:
                return False
            self._in_progress.add(key)
            return True

    def accept_completed(self, catalog_id: CatalogId) -> bool:
        """Record a completion. Returns False when no start was accepted for it."""
        key = str(catalog_id)
        with self._lock:
            if key not in self._in_progress:
                return False
            self._in_progress.remove(key)
            return True

    def accept(self, phase: InstallPhase, catalog_id: CatalogId) -> bool:
        if phase is InstallPhase.STARTED:
            return self.accept_started(catalog_id)
        return self.accept_completed(catalog_id)

    def snapshot(self) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._in_progress)

    def __contains__(self, catalog_id: object) -> bool:
        with self._lock:
            return str(catalog_id) in self._in_progress

    def __len__(self) -> int:
        with self._lock:
            return len(self._in_progress)
