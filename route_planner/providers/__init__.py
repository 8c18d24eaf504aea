"""Directions source contract and bundled vendor providers."""

from .base import (
    DirectionsRequest,
    DirectionsResponse,
    DirectionsStep,
    HttpDirectionsProvider,
    normalize_google_maneuver,
    normalize_osrm_maneuver,
)
from .google import GoogleDirectionsProvider
from .mapbox import MapboxDirectionsProvider
from .osrm import OSRMDirectionsProvider

PROVIDERS = {
    OSRMDirectionsProvider.name: OSRMDirectionsProvider,
    MapboxDirectionsProvider.name: MapboxDirectionsProvider,
    GoogleDirectionsProvider.name: GoogleDirectionsProvider,
}

__all__ = [
    "DirectionsRequest",
    "DirectionsResponse",
    "DirectionsStep",
    "GoogleDirectionsProvider",
    "HttpDirectionsProvider",
    "MapboxDirectionsProvider",
    "OSRMDirectionsProvider",
    "PROVIDERS",
    "normalize_google_maneuver",
    "normalize_osrm_maneuver",
]
