"""Tests for the bounded undo/redo history."""

from __future__ import annotations

import pytest

from route_planner.history import HistoryManager
from route_planner.models import HistoryAction, Waypoint


def _wp(wp_id: str, index: int = 0, lon: float = 0.0) -> Waypoint:
    return Waypoint(id=wp_id, index=index, longitude=lon, latitude=0.0)


def test_empty_history() -> None:
    history = HistoryManager(max_size=5)

    assert history.cursor == -1
    assert history.size() == 0
    assert not history.can_undo()
    assert not history.can_redo()
    assert history.undo() is None
    assert history.redo() is None


def test_single_entry_cannot_be_undone() -> None:
    history = HistoryManager(max_size=5)
    history.push([], HistoryAction.ADD)

    assert history.cursor == 0
    assert not history.can_undo()
    assert history.undo() is None


def test_undo_and_redo_walk_the_cursor() -> None:
    history = HistoryManager(max_size=5, clock=lambda: 42.0)
    history.push([], "add")
    history.push([_wp("a")], "add")
    history.push([_wp("a"), _wp("b", 1)], "reorder")

    entry = history.undo()
    assert entry is not None
    assert [wp.id for wp in entry.waypoints] == ["a"]
    assert entry.action is HistoryAction.ADD
    assert entry.timestamp == 42.0
    assert history.can_redo()

    entry = history.undo()
    assert entry is not None
    assert entry.waypoints == ()
    assert not history.can_undo()

    entry = history.redo()
    assert entry is not None
    assert [wp.id for wp in entry.waypoints] == ["a"]
    entry = history.redo()
    assert entry is not None
    assert entry.action is HistoryAction.REORDER
    assert history.redo() is None


def test_push_discards_redo_tail() -> None:
    history = HistoryManager(max_size=5)
    for name in ("a", "b", "c"):
        history.push([_wp(name)], "update")
    history.undo()
    history.undo()

    history.push([_wp("d")], "remove")

    assert history.size() == 2
    assert not history.can_redo()
    assert [e.waypoints[0].id for e in history.entries()] == ["a", "d"]


def test_capacity_evicts_oldest_entries() -> None:
    history = HistoryManager(max_size=3)
    for i in range(3 + 4):
        history.push([_wp(f"wp{i}")], "add")

    assert history.size() == 3
    assert [e.waypoints[0].id for e in history.entries()] == ["wp4", "wp5", "wp6"]

    undone = 0
    while history.undo() is not None:
        undone += 1
    assert undone == 2
    assert history.cursor == 0


def test_snapshots_do_not_alias_input() -> None:
    history = HistoryManager(max_size=5)
    live = [_wp("a"), _wp("b", 1)]
    history.push(live, "add")
    live.append(_wp("c", 2))

    entry = history.entries()[0]
    assert len(entry.waypoints) == 2
    assert entry.waypoints[0] == live[0]
    assert entry.waypoints[0] is not live[0]


def test_unknown_action_is_rejected() -> None:
    history = HistoryManager(max_size=5)
    with pytest.raises(ValueError):
        history.push([], "teleport")


def test_clear_resets_cursor() -> None:
    history = HistoryManager(max_size=5)
    history.push([], "add")
    history.push([_wp("a")], "add")

    history.clear()

    assert history.cursor == -1
    assert history.size() == 0
    assert not history.can_undo()


def test_max_size_must_be_positive() -> None:
    with pytest.raises(ValueError):
        HistoryManager(max_size=0)
