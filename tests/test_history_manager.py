"""Tests for the bounded undo history."""

from __future__ import annotations

import pytest

from chatorg.organization.history import DEFAULT_HISTORY_LIMIT, HistoryManager
from chatorg.state.defaults import default_store
from chatorg.state.models import EntityStore, FolderRecord


def _store(count: int) -> EntityStore:
    return EntityStore(folders=[FolderRecord(id=f"f{index}", name=f"F{index}") for index in range(count)])


def test_defaults() -> None:
    history = HistoryManager()

    assert history.limit == DEFAULT_HISTORY_LIMIT == 20
    assert len(history) == 0
    assert not history
    assert history.pop() is None


def test_push_drops_oldest_at_capacity() -> None:
    history = HistoryManager(limit=3)
    for count in range(5):
        history.push(_store(count))

    assert len(history) == 3
    assert [len(snapshot.folders) for snapshot in history.snapshots] == [2, 3, 4]


def test_pop_returns_most_recent() -> None:
    history = HistoryManager()
    history.push(_store(1))
    history.push(_store(2))

    assert len(history.pop().folders) == 2
    assert len(history.pop().folders) == 1
    assert history.pop() is None


def test_snapshots_are_independent_of_live_store() -> None:
    store = default_store()
    history = HistoryManager()
    history.push(store)

    store.folders[0].name = "Changed"
    store.files[0].folder = "media"

    snapshot = history.pop()
    assert snapshot.folders[0].name == "Images"
    assert snapshot.files[0].folder is None


def test_copy_is_independent() -> None:
    history = HistoryManager([_store(1)], limit=5)
    clone = history.copy()

    clone.push(_store(2))

    assert len(history) == 1
    assert len(clone) == 2
    assert clone.limit == 5


def test_initial_snapshots_are_trimmed() -> None:
    history = HistoryManager([_store(index) for index in range(30)])

    assert len(history) == 20
    assert len(history.snapshots[0].folders) == 10


def test_clear() -> None:
    history = HistoryManager([_store(1)])
    history.clear()

    assert len(history) == 0


def test_invalid_limit() -> None:
    with pytest.raises(ValueError):
        HistoryManager(limit=0)
