"""Bounded undo/redo history of waypoint-list snapshots."""

from __future__ import annotations

import time
from dataclasses import replace
from typing import Callable, Iterable, List

from .config import PLANNER_MAX_HISTORY_SIZE
from .models import HistoryAction, HistoryEntry, Waypoint


class HistoryManager:
    """List of snapshots plus a cursor (``-1`` when empty).

    Index 0 is the oldest retained snapshot and cannot itself be undone past,
    so undo needs at least two entries. Snapshots are deep copies and never
    alias the caller's waypoint objects: each waypoint is rebuilt
    field by field when captured.
    """

    def __init__(
        self,
        max_size: int = PLANNER_MAX_HISTORY_SIZE,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_size < 1:
            raise ValueError("max_size must be >= 1")
        self._max_size = max_size
        self._clock = clock
        self._entries: List[HistoryEntry] = []
        self._cursor = -1

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def cursor(self) -> int:
        return self._cursor

    def push(self, waypoints: Iterable[Waypoint], action: HistoryAction | str) -> None:
        """Record a snapshot, discarding the redo tail and the oldest overflow."""

        del self._entries[self._cursor + 1 :]
        self._entries.append(
            HistoryEntry(
                waypoints=tuple(replace(wp) for wp in waypoints),
                timestamp=self._clock(),
                action=HistoryAction(action),
            )
        )
        if len(self._entries) > self._max_size:
            del self._entries[: len(self._entries) - self._max_size]
        self._cursor = len(self._entries) - 1

    def undo(self) -> HistoryEntry | None:
        if not self.can_undo():
            return None
        self._cursor -= 1
        return self._entries[self._cursor]

    def redo(self) -> HistoryEntry | None:
        if not self.can_redo():
            return None
        self._cursor += 1
        return self._entries[self._cursor]

    def can_undo(self) -> bool:
        return self._cursor > 0

    def can_redo(self) -> bool:
        return self._cursor < len(self._entries) - 1

    def size(self) -> int:
        return len(self._entries)

    def entries(self) -> List[HistoryEntry]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries = []
        self._cursor = -1


__all__ = ["HistoryManager"]
