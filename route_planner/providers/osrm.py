"""OSRM directions provider (``/route/v1`` service)."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from polyline import decode as polyline_decode

from ..config import OSRM_BASE_URL
from ..errors import DirectionsProviderError
from ..models import Position
from .base import (
    DirectionsRequest,
    DirectionsResponse,
    DirectionsStep,
    HttpDirectionsProvider,
    format_lon_lat,
    normalize_osrm_maneuver,
)

_NO_ROUTE_CODES = {"NoRoute", "NoSegment"}


def decode_polyline6(encoded: str) -> List[Position]:
    """Decode a precision-6 polyline into ``(lon, lat)`` positions."""

    if not encoded:
        return []
    try:
        decoded = polyline_decode(encoded, 6)
    except (ValueError, TypeError, IndexError) as exc:
        raise DirectionsProviderError("Unable to decode OSRM polyline") from exc
    return [(float(lon), float(lat)) for lat, lon in decoded]


def compose_instruction(kind: str, modifier: str | None, road: str | None) -> str:
    """Build a readable instruction; OSRM itself only returns maneuver codes."""

    onto = f" onto {road}" if road else ""
    if kind == "depart":
        on = f" on {road}" if road else ""
        return f"Head {modifier}{on}" if modifier else f"Depart{on}"
    if kind == "arrive":
        return "You have arrived at your destination"
    if kind in ("roundabout", "rotary"):
        return f"Enter the roundabout{onto}"
    if kind in ("exit roundabout", "exit rotary"):
        return f"Exit the roundabout{onto}"
    if modifier == "uturn":
        return f"Make a U-turn{onto}"
    if modifier == "straight" or kind in ("continue", "new name"):
        return f"Continue straight{onto}"
    if kind == "merge":
        return f"Merge {modifier}{onto}" if modifier else f"Merge{onto}"
    if kind == "fork":
        return f"Keep {modifier or 'ahead'} at the fork{onto}"
    if modifier:
        return f"Turn {modifier}{onto}"
    return f"{kind.capitalize()}{onto}" if kind else "Continue"


class OSRMDirectionsProvider(HttpDirectionsProvider):
    """Directions from an OSRM server (self-hosted or the public demo)."""

    name = "osrm"
    default_profile = "driving"

    def __init__(self, base_url: str = OSRM_BASE_URL, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.base_url = base_url.rstrip("/")

    async def is_available(self) -> bool:
        return bool(self.base_url)

    def build_request(self, request: DirectionsRequest) -> tuple[str, Dict[str, Any]]:
        profile = self.resolve_profile(request)
        url = f"{self.base_url}/route/v1/{profile}/{format_lon_lat(request.waypoints)}"
        params: Dict[str, Any] = {
            "overview": "full",
            "geometries": "polyline6",
            "steps": "true",
        }
        params.update(request.options)
        return url, params

    def check_payload(self, payload: Mapping[str, Any]) -> bool:
        code = payload.get("code")
        if code in _NO_ROUTE_CODES:
            return False
        if code != "Ok" and payload.get("routes") is None:
            message = payload.get("message") or "Unknown error"
            raise DirectionsProviderError(f"OSRM error {code}: {message}")
        return True

    def parse(self, payload: Mapping[str, Any]) -> DirectionsResponse | None:
        routes = payload.get("routes") or []
        if not routes:
            return None
        route = routes[0]
        steps: List[DirectionsStep] = []
        for leg in route.get("legs", []):
            for step in leg.get("steps", []):
                maneuver = step.get("maneuver", {})
                kind = str(maneuver.get("type", ""))
                modifier = maneuver.get("modifier")
                steps.append(
                    DirectionsStep(
                        instruction=compose_instruction(kind, modifier, step.get("name")),
                        maneuver_type=normalize_osrm_maneuver(kind, modifier),
                        distance_meters=float(step.get("distance", 0.0)),
                        duration_seconds=float(step.get("duration", 0.0)),
                        geometry=decode_polyline6(step.get("geometry", "")),
                    )
                )
        return DirectionsResponse(
            geometry=decode_polyline6(route.get("geometry", "")),
            distance_meters=float(route.get("distance", 0.0)),
            duration_seconds=float(route.get("duration", 0.0)),
            steps=steps,
        )


__all__ = ["OSRMDirectionsProvider", "compose_instruction", "decode_polyline6"]
