"""Tests for the in-progress dedup state."""

import threading

from core.dedup_state import DedupState, InstallPhase


def test_started_is_tracked_until_completed():
    state = DedupState()

    assert state.accept_started(409183694)
    assert "409183694" in state
    assert 409183694 in state
    assert state.snapshot() == frozenset({"409183694"})


def test_duplicate_start_is_idempotent():
    state = DedupState()

    assert state.accept_started(1)
    assert not state.accept_started(1)
    assert not state.accept_started("1")
    assert len(state) == 1


def test_completion_removes_tracked_id():
    state = DedupState()
    state.accept_started(5)

    assert state.accept_completed(5)
    assert len(state) == 0


def test_orphan_completion_is_noop():
    state = DedupState()
    state.accept_started(1)

    assert not state.accept_completed(2)
    assert state.snapshot() == frozenset({"1"})


def test_accept_dispatches_on_phase():
    state = DedupState()

    assert state.accept(InstallPhase.STARTED, 3)
    assert state.accept(InstallPhase.COMPLETED, 3)
    assert not state.accept(InstallPhase.COMPLETED, 3)


def test_concurrent_starts_never_lose_entries():
    state = DedupState()
    per_thread = 500
    barrier = threading.Barrier(4)

    def worker(offset):
        barrier.wait()
        for index in range(per_thread):
            state.accept_started(offset + index)
            state.accept_started(offset + index)

    threads = [threading.Thread(target=worker, args=(n * per_thread,)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(state) == 4 * per_thread
