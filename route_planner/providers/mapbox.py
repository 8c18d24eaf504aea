"""Mapbox Directions v5 provider."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

from ..config import MAPBOX_ACCESS_TOKEN, MAPBOX_BASE_URL
from ..errors import DirectionsAuthError, DirectionsProviderError
from ..models import Position, as_position
from .base import (
    DirectionsRequest,
    DirectionsResponse,
    DirectionsStep,
    HttpDirectionsProvider,
    format_lon_lat,
    normalize_osrm_maneuver,
)


def _geojson_positions(geometry: Mapping[str, Any] | None) -> List[Position]:
    if not geometry:
        return []
    coordinates: Sequence[Sequence[float]] = geometry.get("coordinates") or []
    return [as_position(p) for p in coordinates]


class MapboxDirectionsProvider(HttpDirectionsProvider):
    """Directions from the Mapbox Directions API (GeoJSON geometries)."""

    name = "mapbox"
    default_profile = "walking"

    def __init__(
        self,
        access_token: str = MAPBOX_ACCESS_TOKEN,
        *,
        base_url: str = MAPBOX_BASE_URL,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._access_token = access_token
        self.base_url = base_url.rstrip("/")

    async def is_available(self) -> bool:
        return bool(self._access_token)

    def build_request(self, request: DirectionsRequest) -> tuple[str, Dict[str, Any]]:
        if not self._access_token:
            raise DirectionsAuthError("Mapbox access token not set (MAPBOX_ACCESS_TOKEN)")
        profile = self.resolve_profile(request)
        url = f"{self.base_url}/{profile}/{format_lon_lat(request.waypoints)}"
        params: Dict[str, Any] = {
            "access_token": self._access_token,
            "geometries": "geojson",
            "overview": "full",
            "steps": "true",
        }
        params.update(request.options)
        return url, params

    def check_payload(self, payload: Mapping[str, Any]) -> bool:
        code = payload.get("code")
        if code in ("NoRoute", "NoSegment"):
            return False
        if code is not None and code != "Ok":
            raise DirectionsProviderError(
                f"Mapbox error {code}: {payload.get('message', 'Unknown error')}"
            )
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
                steps.append(
                    DirectionsStep(
                        instruction=str(maneuver.get("instruction", "")),
                        maneuver_type=normalize_osrm_maneuver(
                            str(maneuver.get("type", "")), maneuver.get("modifier")
                        ),
                        distance_meters=float(step.get("distance", 0.0)),
                        duration_seconds=float(step.get("duration", 0.0)),
                        geometry=_geojson_positions(step.get("geometry")),
                    )
                )
        return DirectionsResponse(
            geometry=_geojson_positions(route.get("geometry")),
            distance_meters=float(route.get("distance", 0.0)),
            duration_seconds=float(route.get("duration", 0.0)),
            steps=steps,
        )


__all__ = ["MapboxDirectionsProvider"]
