"""Nearest-point projection and off-route checks against a route polyline.

Segments are parameterised in plain lon/lat space (planar projection), which
is accurate at route scale but not across the antimeridian or near the poles.
Distances to the projected point are still great-circle distances.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from ..models import Coordinate, NearestPointResult, Position
from .distance import haversine

PositionArray = NDArray[np.float64]

DEFAULT_OFF_ROUTE_THRESHOLD_M = 50.0


def project_onto_segments(
    point: Coordinate, line: PositionArray
) -> tuple[PositionArray, PositionArray]:
    """Project ``point`` onto every segment of an ``(n, 2)`` lon/lat array.

    Returns the clamped interpolation parameters (``n - 1`` values in
    ``[0, 1]``) and the projected lon/lat pairs. Zero-length segments project
    onto their start point with a fraction of 0.
    """

    starts = line[:-1]
    deltas = line[1:] - starts
    length_sq = deltas[:, 0] * deltas[:, 0] + deltas[:, 1] * deltas[:, 1]
    rel_lon = point.longitude - starts[:, 0]
    rel_lat = point.latitude - starts[:, 1]
    dot = rel_lon * deltas[:, 0] + rel_lat * deltas[:, 1]
    with np.errstate(divide="ignore", invalid="ignore"):
        raw = np.where(length_sq > 0, dot / length_sq, 0.0)
    fractions = np.clip(np.nan_to_num(raw, nan=0.0), 0.0, 1.0)
    projected = starts + fractions[:, None] * deltas
    return fractions, projected


def nearest_point_on_line(
    point: Coordinate, positions: Sequence[Position]
) -> NearestPointResult | None:
    """Closest point on a polyline to ``point``, or ``None`` for < 2 positions.

    Ties are resolved in favour of the lowest segment index.
    """

    if len(positions) < 2:
        return None
    line = np.asarray([(p[0], p[1]) for p in positions], dtype=float)
    fractions, projected = project_onto_segments(point, line)

    best_index = 0
    best_distance = float("inf")
    for i in range(len(projected)):
        d = haversine(
            point.longitude, point.latitude, float(projected[i, 0]), float(projected[i, 1])
        )
        if d < best_distance:
            best_distance = d
            best_index = i

    return NearestPointResult(
        point=Coordinate(
            longitude=float(projected[best_index, 0]),
            latitude=float(projected[best_index, 1]),
        ),
        distance=best_distance,
        segment_index=best_index,
        segment_fraction=float(fractions[best_index]),
    )


def is_off_route(
    point: Coordinate,
    positions: Sequence[Position],
    threshold_m: float = DEFAULT_OFF_ROUTE_THRESHOLD_M,
) -> bool:
    """True when ``point`` is strictly farther than ``threshold_m`` from the line.

    A line with fewer than two positions is not a route, so nothing is
    off-route against it.
    """

    nearest = nearest_point_on_line(point, positions)
    if nearest is None:
        return False
    return nearest.distance > threshold_m


__all__ = [
    "DEFAULT_OFF_ROUTE_THRESHOLD_M",
    "is_off_route",
    "nearest_point_on_line",
    "project_onto_segments",
]
