"""In-memory waypoint repository with automatic position reindexing."""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import replace
from typing import Callable, Iterable, List

from .models import Coordinate, Waypoint

LOGGER = logging.getLogger(__name__)


def _new_waypoint_id() -> str:
    return uuid.uuid4().hex


class InMemoryWaypointRepository:
    """Ordered, id-addressed waypoint list.

    Waypoints are frozen; every change replaces the affected record. After each
    structural operation (add, insert, remove, reorder, set_all) the ``index``
    of every waypoint equals its list position.
    """

    def __init__(
        self,
        id_factory: Callable[[], str] = _new_waypoint_id,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._waypoints: List[Waypoint] = []
        self._id_factory = id_factory
        self._clock = clock

    def get_all(self) -> List[Waypoint]:
        return list(self._waypoints)

    def get_by_id(self, waypoint_id: str) -> Waypoint | None:
        for waypoint in self._waypoints:
            if waypoint.id == waypoint_id:
                return waypoint
        return None

    def get_by_index(self, index: int) -> Waypoint | None:
        if 0 <= index < len(self._waypoints):
            return self._waypoints[index]
        return None

    def add(self, coordinate: Coordinate, name: str | None = None) -> Waypoint:
        self._waypoints.append(self._create(coordinate, len(self._waypoints), name))
        self._reindex()
        return self._waypoints[-1]

    def insert(
        self, coordinate: Coordinate, index: int, name: str | None = None
    ) -> Waypoint:
        """Insert at ``index`` clamped into ``[0, count]``."""

        clamped = max(0, min(index, len(self._waypoints)))
        self._waypoints.insert(clamped, self._create(coordinate, clamped, name))
        self._reindex()
        return self._waypoints[clamped]

    def remove(self, waypoint_id: str) -> Waypoint | None:
        """Remove and return the waypoint (with its pre-removal index)."""

        position = self._position_of(waypoint_id)
        if position is None:
            return None
        removed = self._waypoints.pop(position)
        self._reindex()
        return removed

    def update(self, waypoint_id: str, coordinate: Coordinate) -> Coordinate | None:
        """Move a waypoint, keeping its id, name and creation time.

        Returns the previous coordinate, or ``None`` for an unknown id.
        """

        position = self._position_of(waypoint_id)
        if position is None:
            return None
        current = self._waypoints[position]
        self._waypoints[position] = replace(
            current, longitude=coordinate.longitude, latitude=coordinate.latitude
        )
        return current.coordinate

    def reorder(self, from_index: int, to_index: int) -> bool:
        count = len(self._waypoints)
        if not (0 <= from_index < count and 0 <= to_index < count):
            LOGGER.debug(
                "Ignoring reorder %s -> %s with %d waypoints", from_index, to_index, count
            )
            return False
        waypoint = self._waypoints.pop(from_index)
        self._waypoints.insert(to_index, waypoint)
        self._reindex()
        return True

    def set_all(self, waypoints: Iterable[Waypoint]) -> None:
        self._waypoints = list(waypoints)
        self._reindex()

    def count(self) -> int:
        return len(self._waypoints)

    def clear(self) -> None:
        self._waypoints = []

    def _create(
        self, coordinate: Coordinate, index: int, name: str | None
    ) -> Waypoint:
        return Waypoint(
            id=self._id_factory(),
            index=index,
            longitude=coordinate.longitude,
            latitude=coordinate.latitude,
            name=name,
            created_at=self._clock(),
        )

    def _position_of(self, waypoint_id: str) -> int | None:
        for position, waypoint in enumerate(self._waypoints):
            if waypoint.id == waypoint_id:
                return position
        return None

    def _reindex(self) -> None:
        self._waypoints = [
            wp if wp.index == position else replace(wp, index=position)
            for position, wp in enumerate(self._waypoints)
        ]


__all__ = ["InMemoryWaypointRepository"]
