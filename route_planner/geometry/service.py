"""Default geometry service used by the planner."""

from __future__ import annotations

from typing import Sequence

from ..models import Coordinate, NearestPointResult, Position
from .distance import distance, line_length, remaining_distance
from .nearest import DEFAULT_OFF_ROUTE_THRESHOLD_M, is_off_route, nearest_point_on_line


class GeoService:
    """Thin object wrapper over the pure geometry functions.

    Exists so the planner depends on an injectable object rather than module
    functions; substitute any object with the same methods.
    """

    def distance(self, a: Coordinate, b: Coordinate) -> float:
        return distance(a, b)

    def line_length(self, positions: Sequence[Position]) -> float:
        return line_length(positions)

    def nearest_point_on_line(
        self, point: Coordinate, positions: Sequence[Position]
    ) -> NearestPointResult | None:
        return nearest_point_on_line(point, positions)

    def is_off_route(
        self,
        point: Coordinate,
        positions: Sequence[Position],
        threshold_m: float = DEFAULT_OFF_ROUTE_THRESHOLD_M,
    ) -> bool:
        return is_off_route(point, positions, threshold_m)

    def remaining_distance(
        self, positions: Sequence[Position], from_index: int, from_fraction: float
    ) -> float:
        return remaining_distance(positions, from_index, from_fraction)


__all__ = ["GeoService"]
