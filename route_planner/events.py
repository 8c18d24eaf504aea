"""Planner event names, payloads and the synchronous event bus."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Tuple

from .models import (
    Coordinate,
    NavigationStep,
    Route,
    RouteStats,
    Waypoint,
)

LOGGER = logging.getLogger(__name__)

WAYPOINT_ADDED = "waypoint:added"
WAYPOINT_REMOVED = "waypoint:removed"
WAYPOINT_UPDATED = "waypoint:updated"
WAYPOINT_REORDERED = "waypoint:reordered"
ROUTE_CALCULATING = "route:calculating"
ROUTE_CALCULATED = "route:calculated"
ROUTE_ERROR = "route:error"
ROUTE_CLEARED = "route:cleared"
HISTORY_CHANGE = "history:change"
STATS_UPDATED = "stats:updated"

EVENT_NAMES = frozenset(
    {
        WAYPOINT_ADDED,
        WAYPOINT_REMOVED,
        WAYPOINT_UPDATED,
        WAYPOINT_REORDERED,
        ROUTE_CALCULATING,
        ROUTE_CALCULATED,
        ROUTE_ERROR,
        ROUTE_CLEARED,
        HISTORY_CHANGE,
        STATS_UPDATED,
    }
)

Listener = Callable[[Any], Any]
Unsubscribe = Callable[[], None]


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class WaypointAddedEvent:
    waypoint: Waypoint
    index: int
    all_waypoints: Tuple[Waypoint, ...]


@dataclass(frozen=True, slots=True)
class WaypointRemovedEvent:
    waypoint: Waypoint
    index: int
    all_waypoints: Tuple[Waypoint, ...]


@dataclass(frozen=True, slots=True)
class WaypointUpdatedEvent:
    waypoint: Waypoint
    previous_coordinate: Coordinate
    all_waypoints: Tuple[Waypoint, ...]


@dataclass(frozen=True, slots=True)
class WaypointReorderedEvent:
    from_index: int
    to_index: int
    all_waypoints: Tuple[Waypoint, ...]


@dataclass(frozen=True, slots=True)
class RouteCalculatingEvent:
    waypoint_count: int


@dataclass(frozen=True, slots=True)
class RouteCalculatedEvent:
    route: Route
    stats: RouteStats
    steps: Tuple[NavigationStep, ...]


@dataclass(frozen=True, slots=True)
class RouteErrorEvent:
    error: BaseException
    waypoint_count: int


@dataclass(frozen=True, slots=True)
class RouteClearedEvent:
    previous_waypoint_count: int


@dataclass(frozen=True, slots=True)
class HistoryChangeEvent:
    action: str  # "undo" | "redo"
    can_undo: bool
    can_redo: bool
    history_size: int
    all_waypoints: Tuple[Waypoint, ...] = ()


@dataclass(frozen=True, slots=True)
class StatsUpdatedEvent:
    stats: RouteStats
    previous_stats: RouteStats | None


# ---------------------------------------------------------------------------
# Bus
# ---------------------------------------------------------------------------


class EventBus:
    """Per-instance publish/subscribe hub.

    Dispatch is synchronous and in registration order. A listener that raises
    is logged and skipped; the exception never reaches the emitter. Listeners
    may subscribe, unsubscribe or trigger new emits while being dispatched.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._listeners: Dict[str, List[Listener]] = {}
        self._log = logger or LOGGER

    def on(self, event: str, listener: Listener) -> Unsubscribe:
        listeners = self._listeners.setdefault(event, [])
        if listener not in listeners:
            listeners.append(listener)
        return lambda: self.off(event, listener)

    def once(self, event: str, listener: Listener) -> Unsubscribe:
        def _once(payload: Any) -> Any:
            self.off(event, _once)
            return listener(payload)

        return self.on(event, _once)

    def off(self, event: str, listener: Listener) -> None:
        listeners = self._listeners.get(event)
        if not listeners:
            return
        try:
            listeners.remove(listener)
        except ValueError:
            return
        if not listeners:
            del self._listeners[event]

    def emit(self, event: str, payload: Any) -> None:
        # Iterate over a snapshot; skip listeners removed mid-dispatch.
        for listener in list(self._listeners.get(event, ())):
            if listener not in self._listeners.get(event, ()):
                continue
            try:
                listener(payload)
            except Exception as exc:
                self._log.error(
                    "Error in event listener for %r: %s", event, exc, exc_info=True
                )

    def remove_all_listeners(self, event: str | None = None) -> None:
        if event is None:
            self._listeners.clear()
        else:
            self._listeners.pop(event, None)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))


__all__ = [
    "EVENT_NAMES",
    "EventBus",
    "HISTORY_CHANGE",
    "HistoryChangeEvent",
    "Listener",
    "ROUTE_CALCULATED",
    "ROUTE_CALCULATING",
    "ROUTE_CLEARED",
    "ROUTE_ERROR",
    "RouteCalculatedEvent",
    "RouteCalculatingEvent",
    "RouteClearedEvent",
    "RouteErrorEvent",
    "STATS_UPDATED",
    "StatsUpdatedEvent",
    "Unsubscribe",
    "WAYPOINT_ADDED",
    "WAYPOINT_REMOVED",
    "WAYPOINT_REORDERED",
    "WAYPOINT_UPDATED",
    "WaypointAddedEvent",
    "WaypointRemovedEvent",
    "WaypointReorderedEvent",
    "WaypointUpdatedEvent",
]
