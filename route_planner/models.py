"""Dataclasses describing waypoints, routes and planner options."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Tuple

from .config import (
    PLANNER_AUTO_RECALCULATE,
    PLANNER_MAX_HISTORY_SIZE,
    PLANNER_OFF_ROUTE_THRESHOLD_M,
)

# [lon, lat] or [lon, lat, altitude], GeoJSON order.
Position = Tuple[float, ...]
# (min_lon, min_lat, max_lon, max_lat)
BoundingBox = Tuple[float, float, float, float]

EMPTY_BOUNDS: BoundingBox = (0.0, 0.0, 0.0, 0.0)


def as_position(value: Sequence[float]) -> Position:
    """Convert a raw ``[lon, lat(, alt)]`` sequence to a typed tuple."""

    if len(value) not in (2, 3):
        raise ValueError("Expected a [lon, lat] or [lon, lat, alt] position")
    return tuple(float(v) for v in value)


@dataclass(frozen=True, slots=True)
class Coordinate:
    """Geographic coordinate in decimal degrees (WGS84). Not range checked."""

    longitude: float
    latitude: float

    @classmethod
    def from_position(cls, position: Sequence[float]) -> "Coordinate":
        return cls(longitude=float(position[0]), latitude=float(position[1]))

    def to_position(self) -> Position:
        return (self.longitude, self.latitude)


class ManeuverType(str, Enum):
    """Normalized maneuver vocabulary shared by every directions provider."""

    DEPART = "depart"
    ARRIVE = "arrive"
    TURN_LEFT = "turn-left"
    TURN_RIGHT = "turn-right"
    TURN_SLIGHT_LEFT = "turn-slight-left"
    TURN_SLIGHT_RIGHT = "turn-slight-right"
    TURN_SHARP_LEFT = "turn-sharp-left"
    TURN_SHARP_RIGHT = "turn-sharp-right"
    UTURN = "uturn"
    CONTINUE = "continue"
    MERGE = "merge"
    FORK_LEFT = "fork-left"
    FORK_RIGHT = "fork-right"
    ROUNDABOUT = "roundabout"
    EXIT_ROUNDABOUT = "exit-roundabout"
    NOTIFICATION = "notification"
    UNKNOWN = "unknown"


def parse_maneuver(value: str | ManeuverType) -> ManeuverType | str:
    """Return the matching :class:`ManeuverType`, or the raw string if unmapped.

    Unmapped vendor values are passed through unchanged; consumers must treat
    them as opaque.
    """

    if isinstance(value, ManeuverType):
        return value
    try:
        return ManeuverType(value)
    except ValueError:
        return value


class HistoryAction(str, Enum):
    ADD = "add"
    REMOVE = "remove"
    UPDATE = "update"
    REORDER = "reorder"
    CLEAR = "clear"


@dataclass(frozen=True, slots=True)
class Waypoint:
    """A user-placed stop.

    ``id`` is stable for the waypoint's lifetime. ``index`` is a cached view of
    the waypoint's position, recomputed by the repository after every
    structural change.
    """

    id: str
    index: int
    longitude: float
    latitude: float
    name: str | None = None
    created_at: float = 0.0

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(longitude=self.longitude, latitude=self.latitude)


@dataclass(frozen=True, slots=True)
class NavigationStep:
    """One instructed maneuver segment of a route."""

    id: str
    index: int
    instruction: str
    maneuver_type: ManeuverType | str
    distance_meters: float
    duration_seconds: float
    geometry: Tuple[Position, ...] = ()


@dataclass(frozen=True, slots=True)
class Route:
    """The last successfully calculated route."""

    geometry: Tuple[Position, ...]
    waypoints: Tuple[Waypoint, ...]
    steps: Tuple[NavigationStep, ...]
    bounds: BoundingBox = EMPTY_BOUNDS


@dataclass(frozen=True, slots=True)
class RouteStats:
    distance_meters: float
    duration_seconds: float
    waypoint_count: int
    step_count: int


@dataclass(frozen=True, slots=True)
class CalculationResult:
    """Normalized output of a single route calculation."""

    route: Route
    stats: RouteStats
    steps: Tuple[NavigationStep, ...]


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """Snapshot of the waypoint list tagged with the action that produced it."""

    waypoints: Tuple[Waypoint, ...]
    timestamp: float
    action: HistoryAction


@dataclass(frozen=True, slots=True)
class NearestPointResult:
    """Projection of a coordinate onto the closest segment of a polyline."""

    point: Coordinate
    distance: float
    segment_index: int
    segment_fraction: float


@dataclass(slots=True)
class PlannerOptions:
    """Tunable planner behaviour; defaults come from :mod:`route_planner.config`."""

    max_history_size: int = PLANNER_MAX_HISTORY_SIZE
    off_route_threshold: float = PLANNER_OFF_ROUTE_THRESHOLD_M
    auto_recalculate: bool = PLANNER_AUTO_RECALCULATE

    def __post_init__(self) -> None:
        if self.max_history_size < 1:
            raise ValueError("max_history_size must be >= 1")
        if self.off_route_threshold < 0:
            raise ValueError("off_route_threshold must be >= 0")


__all__ = [
    "BoundingBox",
    "CalculationResult",
    "Coordinate",
    "EMPTY_BOUNDS",
    "HistoryAction",
    "HistoryEntry",
    "ManeuverType",
    "NavigationStep",
    "NearestPointResult",
    "PlannerOptions",
    "Position",
    "Route",
    "RouteStats",
    "Waypoint",
    "as_position",
    "parse_maneuver",
]
