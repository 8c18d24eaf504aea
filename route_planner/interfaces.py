"""Capability interfaces the planner depends on.

Each collaborator is a structural ``Protocol``; any object with matching
methods can be injected in place of the default in-process implementation.
"""

from __future__ import annotations

from typing import (
    Any,
    Awaitable,
    Iterable,
    List,
    Protocol,
    Sequence,
    Union,
    runtime_checkable,
)

from .events import Listener, Unsubscribe
from .models import (
    CalculationResult,
    Coordinate,
    HistoryAction,
    HistoryEntry,
    NearestPointResult,
    Position,
    Waypoint,
)
from .providers.base import DirectionsRequest, DirectionsResponse


@runtime_checkable
class DirectionsProvider(Protocol):
    """External directions source.

    ``get_directions`` may be a coroutine or a plain function, and may return
    a :class:`DirectionsResponse`, an equivalent mapping, or ``None`` when no
    route exists. ``is_available`` and ``cancel`` are optional.
    """

    name: str

    def get_directions(
        self, request: DirectionsRequest
    ) -> Union[
        Awaitable[DirectionsResponse | None], DirectionsResponse, dict, None
    ]: ...


class WaypointRepositoryProtocol(Protocol):
    def get_all(self) -> List[Waypoint]: ...

    def get_by_id(self, waypoint_id: str) -> Waypoint | None: ...

    def get_by_index(self, index: int) -> Waypoint | None: ...

    def add(self, coordinate: Coordinate, name: str | None = None) -> Waypoint: ...

    def insert(
        self, coordinate: Coordinate, index: int, name: str | None = None
    ) -> Waypoint: ...

    def remove(self, waypoint_id: str) -> Waypoint | None: ...

    def update(self, waypoint_id: str, coordinate: Coordinate) -> Coordinate | None: ...

    def reorder(self, from_index: int, to_index: int) -> bool: ...

    def set_all(self, waypoints: Iterable[Waypoint]) -> None: ...

    def count(self) -> int: ...

    def clear(self) -> None: ...


class HistoryManagerProtocol(Protocol):
    def push(self, waypoints: Iterable[Waypoint], action: HistoryAction | str) -> None: ...

    def undo(self) -> HistoryEntry | None: ...

    def redo(self) -> HistoryEntry | None: ...

    def can_undo(self) -> bool: ...

    def can_redo(self) -> bool: ...

    def size(self) -> int: ...

    def clear(self) -> None: ...


class RouteCalculatorProtocol(Protocol):
    async def calculate(
        self, waypoints: Sequence[Waypoint]
    ) -> CalculationResult | None: ...

    def cancel(self) -> None: ...


class GeoServiceProtocol(Protocol):
    def distance(self, a: Coordinate, b: Coordinate) -> float: ...

    def line_length(self, positions: Sequence[Position]) -> float: ...

    def nearest_point_on_line(
        self, point: Coordinate, positions: Sequence[Position]
    ) -> NearestPointResult | None: ...

    def is_off_route(
        self, point: Coordinate, positions: Sequence[Position], threshold_m: float = ...
    ) -> bool: ...

    def remaining_distance(
        self, positions: Sequence[Position], from_index: int, from_fraction: float
    ) -> float: ...


class EventBusProtocol(Protocol):
    def on(self, event: str, listener: Listener) -> Unsubscribe: ...

    def once(self, event: str, listener: Listener) -> Unsubscribe: ...

    def off(self, event: str, listener: Listener) -> None: ...

    def emit(self, event: str, payload: Any) -> None: ...

    def remove_all_listeners(self, event: str | None = None) -> None: ...


__all__ = [
    "DirectionsProvider",
    "EventBusProtocol",
    "GeoServiceProtocol",
    "HistoryManagerProtocol",
    "RouteCalculatorProtocol",
    "WaypointRepositoryProtocol",
]
