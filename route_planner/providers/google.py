"""Google Directions (JSON web service) provider."""

from __future__ import annotations

import html
import re
from typing import Any, Dict, List, Mapping

from polyline import decode as polyline_decode

from ..config import GOOGLE_DIRECTIONS_URL, GOOGLE_MAPS_API_KEY
from ..errors import DirectionsAuthError, DirectionsProviderError
from ..models import Coordinate, Position
from .base import (
    DirectionsRequest,
    DirectionsResponse,
    DirectionsStep,
    HttpDirectionsProvider,
    normalize_google_maneuver,
)

_TAG_RE = re.compile(r"<[^>]+>")
_NO_ROUTE_STATUSES = {"ZERO_RESULTS", "NOT_FOUND"}
_PROFILE_MODES = {
    "driving": "driving",
    "walking": "walking",
    "cycling": "bicycling",
    "bicycling": "bicycling",
    "transit": "transit",
}


def strip_html(text: str) -> str:
    """Turn Google's ``html_instructions`` into plain text."""

    return " ".join(html.unescape(_TAG_RE.sub(" ", text or "")).split())


def decode_google_polyline(encoded: str) -> List[Position]:
    """Decode a precision-5 polyline into ``(lon, lat)`` positions."""

    if not encoded:
        return []
    try:
        decoded = polyline_decode(encoded)
    except (ValueError, TypeError, IndexError) as exc:
        raise DirectionsProviderError("Unable to decode Google polyline") from exc
    return [(float(lon), float(lat)) for lat, lon in decoded]


def _lat_lng(coordinate: Coordinate) -> str:
    return f"{coordinate.latitude},{coordinate.longitude}"


class GoogleDirectionsProvider(HttpDirectionsProvider):
    """Directions from the Google Maps Directions API."""

    name = "google"
    default_profile = "walking"

    def __init__(
        self,
        api_key: str = GOOGLE_MAPS_API_KEY,
        *,
        url: str = GOOGLE_DIRECTIONS_URL,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._api_key = api_key
        self.url = url

    async def is_available(self) -> bool:
        return bool(self._api_key)

    def build_request(self, request: DirectionsRequest) -> tuple[str, Dict[str, Any]]:
        if not self._api_key:
            raise DirectionsAuthError("Google API key not set (GOOGLE_MAPS_API_KEY)")
        waypoints = list(request.waypoints)
        profile = self.resolve_profile(request)
        params: Dict[str, Any] = {
            "key": self._api_key,
            "origin": _lat_lng(waypoints[0]),
            "destination": _lat_lng(waypoints[-1]),
            "mode": _PROFILE_MODES.get(profile, profile),
        }
        intermediates = waypoints[1:-1]
        if intermediates:
            params["waypoints"] = "|".join(_lat_lng(wp) for wp in intermediates)
        params.update(request.options)
        return self.url, params

    def check_payload(self, payload: Mapping[str, Any]) -> bool:
        status = payload.get("status")
        if status in _NO_ROUTE_STATUSES:
            return False
        if status == "REQUEST_DENIED":
            message = payload.get("error_message") or "check the API key"
            raise DirectionsAuthError(f"Google request denied: {message}")
        if status != "OK":
            message = payload.get("error_message") or "Unknown error"
            raise DirectionsProviderError(f"Google error {status}: {message}")
        return True

    def parse(self, payload: Mapping[str, Any]) -> DirectionsResponse | None:
        routes = payload.get("routes") or []
        if not routes:
            return None
        route = routes[0]
        legs = route.get("legs", [])
        raw_steps = [step for leg in legs for step in leg.get("steps", [])]
        steps: List[DirectionsStep] = []
        for position, step in enumerate(raw_steps):
            steps.append(
                DirectionsStep(
                    instruction=strip_html(step.get("html_instructions", "")),
                    maneuver_type=normalize_google_maneuver(
                        step.get("maneuver"),
                        first=position == 0,
                    ),
                    distance_meters=float(step.get("distance", {}).get("value", 0.0)),
                    duration_seconds=float(step.get("duration", {}).get("value", 0.0)),
                    geometry=decode_google_polyline(
                        step.get("polyline", {}).get("points", "")
                    ),
                )
            )
        return DirectionsResponse(
            geometry=decode_google_polyline(
                route.get("overview_polyline", {}).get("points", "")
            ),
            distance_meters=float(
                sum(leg.get("distance", {}).get("value", 0.0) for leg in legs)
            ),
            duration_seconds=float(
                sum(leg.get("duration", {}).get("value", 0.0) for leg in legs)
            ),
            steps=steps,
        )


__all__ = ["GoogleDirectionsProvider", "decode_google_polyline", "strip_html"]
