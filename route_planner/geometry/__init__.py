"""Pure geometry helpers: distances, projections and off-route checks."""

from .distance import (
    bounding_box,
    distance,
    haversine,
    line_length,
    remaining_distance,
    segment_length,
)
from .nearest import DEFAULT_OFF_ROUTE_THRESHOLD_M, is_off_route, nearest_point_on_line
from .service import GeoService

__all__ = [
    "DEFAULT_OFF_ROUTE_THRESHOLD_M",
    "GeoService",
    "bounding_box",
    "distance",
    "haversine",
    "is_off_route",
    "line_length",
    "nearest_point_on_line",
    "remaining_distance",
    "segment_length",
]
