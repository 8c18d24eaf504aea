"""Central error types used across the route planner."""

from __future__ import annotations


class RoutePlannerError(RuntimeError):
    """Base error for route planner failures."""


class PlannerDisposedError(RoutePlannerError):
    """Raised when a disposed planner is used."""


class RouteCalculationError(RoutePlannerError):
    """Raised when the directions source produces no route for the waypoints."""


class DirectionsProviderError(RoutePlannerError):
    """Raised when a directions service request fails or returns bad data."""


class DirectionsAuthError(DirectionsProviderError):
    """Raised when a directions service rejects the configured credentials."""


__all__ = [
    "RoutePlannerError",
    "PlannerDisposedError",
    "RouteCalculationError",
    "DirectionsProviderError",
    "DirectionsAuthError",
]
