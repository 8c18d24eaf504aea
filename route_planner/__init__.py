"""Waypoint route planner with undo/redo, pluggable directions and navigation queries."""

from .calculator import RouteCalculatorAdapter
from .errors import (
    DirectionsAuthError,
    DirectionsProviderError,
    PlannerDisposedError,
    RouteCalculationError,
    RoutePlannerError,
)
from .events import EventBus
from .geometry import GeoService
from .history import HistoryManager
from .models import (
    CalculationResult,
    Coordinate,
    HistoryAction,
    HistoryEntry,
    ManeuverType,
    NavigationStep,
    NearestPointResult,
    PlannerOptions,
    Route,
    RouteStats,
    Waypoint,
)
from .planner import PlannerDependencies, RoutePlanner
from .waypoints import InMemoryWaypointRepository

__all__ = [
    "CalculationResult",
    "Coordinate",
    "DirectionsAuthError",
    "DirectionsProviderError",
    "EventBus",
    "GeoService",
    "HistoryAction",
    "HistoryEntry",
    "HistoryManager",
    "InMemoryWaypointRepository",
    "ManeuverType",
    "NavigationStep",
    "NearestPointResult",
    "PlannerDependencies",
    "PlannerDisposedError",
    "PlannerOptions",
    "Route",
    "RouteCalculationError",
    "RouteCalculatorAdapter",
    "RoutePlanner",
    "RoutePlannerError",
    "RouteStats",
    "Waypoint",
]
