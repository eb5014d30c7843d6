"""
Marker ingestion and sequencing of lookups and reactions.
"""

from __future__ import annotations

import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Dict, Optional

from app_monitor_core.app_monitor_core import logger as app_logger
from core.catalog_client import CatalogClient, CatalogLookupError
from core.dedup_state import DedupState, InstallPhase
from core.reactions import ReactionDispatcher
from shared.install_marker import InstallMarker, SourceDirectory
from shared.marker_schema import MarkerValidationError, load_and_validate_marker

_LOGGER = app_logger.get_logger()

DEFAULT_MAX_WORKERS = 4


class InstallPipeline:
    """
    Turns marker files into accepted transitions and runs lookup + reaction
    for each accepted transition on a worker pool.

    Work for one catalog identifier is chained: a task waits for the previous
    task of the same identifier, so a start always reacts before its
    completion even when both are accepted in quick succession.
    """

    def __init__(
        self,
        *,
        state: DedupState,
        catalog: CatalogClient,
        dispatcher: ReactionDispatcher,
        executor: Executor | None = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        self.state = state
        self.catalog = catalog
        self.dispatcher = dispatcher
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="app-monitor"
        )
        self._lock = threading.Lock()
        self._pending: Dict[str, Future] = {}

    def ingest(self, path: Path, source: SourceDirectory) -> Optional[Future]:
        """
        Process one marker file. Returns the scheduled task for an accepted
        transition, or None when the marker is rejected or not actionable.
        """
        try:
            marker = load_and_validate_marker(path, source)
        except MarkerValidationError as exc:
            _LOGGER.warning("Skipping marker {}: {}", path, exc)
            return None
        return self.submit(marker)

    def submit(self, marker: InstallMarker) -> Optional[Future]:
        phase = InstallPhase.COMPLETED if marker.is_completed else InstallPhase.STARTED
        key = marker.catalog_key

        with self._lock:
            if not self.state.accept(phase, key):
                if phase is InstallPhase.STARTED:
                    _LOGGER.info("Skipping already tracked app {}", key)
                else:
                    _LOGGER.info("Skipping {}: not seen in '_In Progress'", key)
                return None

            if phase is InstallPhase.STARTED:
                _LOGGER.info("New install detected for catalog id {}", key)
            else:
                _LOGGER.info("Install completed for catalog id {}", key)

            predecessor = self._pending.get(key)
            future = self._executor.submit(self._react, phase, marker.catalog_id, predecessor)
            self._pending[key] = future
        future.add_done_callback(lambda done, key=key: self._forget(key, done))
        return future

    def _react(self, phase: InstallPhase, catalog_id: int, predecessor: Optional[Future]) -> None:
        if predecessor is not None:
            wait([predecessor])

        try:
            metadata = self.catalog.lookup(catalog_id)
        except CatalogLookupError as exc:
            _LOGGER.warning("Dropping {} event for {}: {}", phase.value, catalog_id, exc)
            return

        try:
            self.dispatcher.dispatch(phase, metadata)
        except Exception:
            _LOGGER.exception("Reaction for {} event of {} failed", phase.value, catalog_id)

    def _forget(self, key: str, done: Future) -> None:
        with self._lock:
            if self._pending.get(key) is done:
                del self._pending[key]

    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def close(self, *, drain: bool = True) -> None:
        self._executor.shutdown(wait=drain)
