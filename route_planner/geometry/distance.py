"""Great-circle distance and polyline length helpers.

Pure functions with no side effects. Coordinates are degrees; results are
metres on a sphere of radius :data:`route_planner.config.EARTH_RADIUS_M`.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from ..config import EARTH_RADIUS_M
from ..models import EMPTY_BOUNDS, BoundingBox, Coordinate, Position


def haversine(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
    """Haversine distance in metres between two lon/lat pairs."""

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = (
        math.sin(d_phi / 2) * math.sin(d_phi / 2)
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) * math.sin(d_lambda / 2)
    )
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def distance(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates in metres.

    Symmetric, and exactly zero for coincident points. Any object exposing
    ``longitude``/``latitude`` attributes (e.g. a ``Waypoint``) is accepted.
    """

    return haversine(a.longitude, a.latitude, b.longitude, b.latitude)


def segment_length(start: Sequence[float], end: Sequence[float]) -> float:
    """Length in metres of the segment between two ``[lon, lat]`` positions."""

    return haversine(start[0], start[1], end[0], end[1])


def line_length(positions: Sequence[Position]) -> float:
    """Sum of consecutive segment lengths; 0 for fewer than two positions."""

    if len(positions) < 2:
        return 0.0
    total = 0.0
    for i in range(len(positions) - 1):
        total += segment_length(positions[i], positions[i + 1])
    return total


def remaining_distance(
    positions: Sequence[Position], from_index: int, from_fraction: float
) -> float:
    """Distance left along a polyline from a point on segment ``from_index``.

    The point sits ``from_fraction`` of the way along that segment. Returns 0
    when the line has fewer than two positions or ``from_index`` is at or past
    the last segment. A negative index is treated as the first segment.
    """

    if len(positions) < 2 or from_index >= len(positions) - 1:
        return 0.0
    from_index = max(0, from_index)

    total = segment_length(positions[from_index], positions[from_index + 1]) * (
        1 - from_fraction
    )
    for i in range(from_index + 1, len(positions) - 1):
        total += segment_length(positions[i], positions[i + 1])
    return total


def bounding_box(positions: Sequence[Position]) -> BoundingBox:
    """Return ``(min_lon, min_lat, max_lon, max_lat)``; all zeros when empty."""

    if len(positions) == 0:
        return EMPTY_BOUNDS
    array = np.asarray([(p[0], p[1]) for p in positions], dtype=float)
    min_lon, min_lat = array.min(axis=0)
    max_lon, max_lat = array.max(axis=0)
    return (float(min_lon), float(min_lat), float(max_lon), float(max_lat))


__all__ = [
    "bounding_box",
    "distance",
    "haversine",
    "line_length",
    "remaining_distance",
    "segment_length",
]
