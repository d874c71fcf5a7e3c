"""Bounded undo history of entity store snapshots."""

from __future__ import annotations

from typing import Iterable, Optional

from chatorg.state.models import EntityStore, Snapshot

DEFAULT_HISTORY_LIMIT = 20


class HistoryManager:
    """Keep the most recent store snapshots for undo.

    Snapshots are deep copies, so later changes to a live store never reach
    an entry already recorded here.
    """

    def __init__(
        self,
        snapshots: Iterable[Snapshot] | None = None,
        *,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        """Initialize the history.

        Args:
            snapshots: Existing snapshots, oldest first (e.g. loaded from disk).
            limit: Maximum number of snapshots retained.
        """
        if limit < 1:
            raise ValueError("History limit must be at least 1.")
        self._limit = limit
        self._snapshots: list[Snapshot] = [snapshot.clone() for snapshot in snapshots or []]
        self._trim()

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def snapshots(self) -> list[Snapshot]:
        """Return copies of the stored snapshots, oldest first."""
        return [snapshot.clone() for snapshot in self._snapshots]

    def __len__(self) -> int:
        return len(self._snapshots)

    def __bool__(self) -> bool:
        return bool(self._snapshots)

    def push(self, store: EntityStore) -> None:
        """Record a copy of ``store``, dropping the oldest entry when full."""
        self._snapshots.append(store.clone())
        self._trim()

    def pop(self) -> Optional[Snapshot]:
        """Remove and return the most recent snapshot, or None when empty."""
        if not self._snapshots:
            return None
        return self._snapshots.pop()

    def clear(self) -> None:
        self._snapshots.clear()

    def copy(self) -> "HistoryManager":
        """Return an independent history with the same snapshots and limit."""
        return HistoryManager(self._snapshots, limit=self._limit)

    def _trim(self) -> None:
        overflow = len(self._snapshots) - self._limit
        if overflow > 0:
            del self._snapshots[:overflow]


__all__ = ["HistoryManager", "DEFAULT_HISTORY_LIMIT"]
