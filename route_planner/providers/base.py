"""Directions source contract and shared HTTP provider plumbing."""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

import requests
from requests import Session

from ..config import DIRECTIONS_DEFAULT_PROFILE, DIRECTIONS_REQUEST_TIMEOUT
from ..errors import DirectionsAuthError, DirectionsProviderError
from ..models import Coordinate, ManeuverType, Position, as_position
from .session import get_default_session

LOGGER = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Contract
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DirectionsRequest:
    """Ordered coordinates plus an optional travel profile and vendor options."""

    waypoints: Sequence[Coordinate]
    profile: Optional[str] = None
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class DirectionsStep:
    instruction: str
    maneuver_type: str
    distance_meters: float
    duration_seconds: float
    geometry: List[Position] = field(default_factory=list)

    @staticmethod
    def from_mapping(data: Mapping[str, Any]) -> "DirectionsStep":
        return DirectionsStep(
            instruction=str(data.get("instruction", "")),
            maneuver_type=str(data.get("maneuver_type", ManeuverType.UNKNOWN.value)),
            distance_meters=float(data.get("distance_meters", 0.0)),
            duration_seconds=float(data.get("duration_seconds", 0.0)),
            geometry=[as_position(p) for p in data.get("geometry", ())],
        )


@dataclass(slots=True)
class DirectionsResponse:
    geometry: List[Position]
    distance_meters: float
    duration_seconds: float
    steps: List[DirectionsStep] = field(default_factory=list)

    @staticmethod
    def from_mapping(data: Mapping[str, Any]) -> "DirectionsResponse":
        """Build a response from a plain dict using the snake_case field names."""

        return DirectionsResponse(
            geometry=[as_position(p) for p in data.get("geometry", ())],
            distance_meters=float(data.get("distance_meters", 0.0)),
            duration_seconds=float(data.get("duration_seconds", 0.0)),
            steps=[
                step if isinstance(step, DirectionsStep) else DirectionsStep.from_mapping(step)
                for step in data.get("steps", ())
            ],
        )


# ---------------------------------------------------------------------------
# Maneuver vocabularies
# ---------------------------------------------------------------------------

_OSRM_MODIFIERS = {
    "left": ManeuverType.TURN_LEFT,
    "right": ManeuverType.TURN_RIGHT,
    "slight left": ManeuverType.TURN_SLIGHT_LEFT,
    "slight right": ManeuverType.TURN_SLIGHT_RIGHT,
    "sharp left": ManeuverType.TURN_SHARP_LEFT,
    "sharp right": ManeuverType.TURN_SHARP_RIGHT,
    "uturn": ManeuverType.UTURN,
    "straight": ManeuverType.CONTINUE,
}

_OSRM_TYPES = {
    "depart": ManeuverType.DEPART,
    "arrive": ManeuverType.ARRIVE,
    "merge": ManeuverType.MERGE,
    "roundabout": ManeuverType.ROUNDABOUT,
    "rotary": ManeuverType.ROUNDABOUT,
    "exit roundabout": ManeuverType.EXIT_ROUNDABOUT,
    "exit rotary": ManeuverType.EXIT_ROUNDABOUT,
    "notification": ManeuverType.NOTIFICATION,
    "continue": ManeuverType.CONTINUE,
    "new name": ManeuverType.CONTINUE,
    # Legacy Mapbox spellings where the modifier is folded into the type.
    "turn left": ManeuverType.TURN_LEFT,
    "turn right": ManeuverType.TURN_RIGHT,
    "slight left": ManeuverType.TURN_SLIGHT_LEFT,
    "slight right": ManeuverType.TURN_SLIGHT_RIGHT,
    "sharp left": ManeuverType.TURN_SHARP_LEFT,
    "sharp right": ManeuverType.TURN_SHARP_RIGHT,
    "uturn": ManeuverType.UTURN,
    "straight": ManeuverType.CONTINUE,
    "fork left": ManeuverType.FORK_LEFT,
    "fork right": ManeuverType.FORK_RIGHT,
}

# Types whose direction is carried by the modifier.
_OSRM_TURN_TYPES = {"turn", "end of road", "on ramp", "off ramp", "roundabout turn"}

_GOOGLE_MANEUVERS = {
    "turn-left": ManeuverType.TURN_LEFT,
    "turn-right": ManeuverType.TURN_RIGHT,
    "turn-slight-left": ManeuverType.TURN_SLIGHT_LEFT,
    "turn-slight-right": ManeuverType.TURN_SLIGHT_RIGHT,
    "turn-sharp-left": ManeuverType.TURN_SHARP_LEFT,
    "turn-sharp-right": ManeuverType.TURN_SHARP_RIGHT,
    "uturn-left": ManeuverType.UTURN,
    "uturn-right": ManeuverType.UTURN,
    "straight": ManeuverType.CONTINUE,
    "keep-left": ManeuverType.FORK_LEFT,
    "keep-right": ManeuverType.FORK_RIGHT,
    "fork-left": ManeuverType.FORK_LEFT,
    "fork-right": ManeuverType.FORK_RIGHT,
    "merge": ManeuverType.MERGE,
    "ramp-left": ManeuverType.TURN_SLIGHT_LEFT,
    "ramp-right": ManeuverType.TURN_SLIGHT_RIGHT,
    "roundabout-left": ManeuverType.ROUNDABOUT,
    "roundabout-right": ManeuverType.ROUNDABOUT,
}


def normalize_osrm_maneuver(maneuver_type: str, modifier: str | None = None) -> str:
    """Translate an OSRM/Mapbox ``type``/``modifier`` pair into the shared vocabulary.

    Unmapped values come back unchanged.
    """

    kind = (maneuver_type or "").strip().lower()
    mod = (modifier or "").strip().lower()
    if kind == "fork" and mod:
        return (
            ManeuverType.FORK_LEFT.value if "left" in mod else ManeuverType.FORK_RIGHT.value
        )
    if kind in _OSRM_TURN_TYPES and mod in _OSRM_MODIFIERS:
        return _OSRM_MODIFIERS[mod].value
    if kind in _OSRM_TYPES:
        return _OSRM_TYPES[kind].value
    return maneuver_type


def normalize_google_maneuver(maneuver: str | None, *, first: bool = False) -> str:
    """Translate a Google ``maneuver`` tag. Google omits tags on straight legs."""

    if first:
        return ManeuverType.DEPART.value
    if not maneuver:
        return ManeuverType.CONTINUE.value
    mapped = _GOOGLE_MANEUVERS.get(maneuver.strip().lower())
    return mapped.value if mapped else maneuver


# ---------------------------------------------------------------------------
# HTTP base
# ---------------------------------------------------------------------------


class HttpDirectionsProvider:
    """Base class for providers backed by a blocking ``requests`` call.

    The request runs in a worker thread so the planner's event loop keeps
    serving other calls. ``cancel()`` is cooperative: the HTTP call is not
    interrupted, but its response is discarded and ``None`` is returned.
    Starting a new request cancels the previous one.
    """

    name = "http"
    default_profile = "driving"

    def __init__(
        self,
        *,
        session: Session | None = None,
        timeout: float = DIRECTIONS_REQUEST_TIMEOUT,
    ) -> None:
        self._session = session or get_default_session()
        self._timeout = timeout
        self._cancel_event: threading.Event | None = None
        self._log = logging.getLogger(self.__class__.__name__)

    async def get_directions(self, request: DirectionsRequest) -> DirectionsResponse | None:
        if len(request.waypoints) < 2:
            return None
        self.cancel()
        cancelled = threading.Event()
        self._cancel_event = cancelled
        payload = await asyncio.to_thread(self._fetch, request)
        if cancelled.is_set():
            self._log.debug("%s response discarded after cancel", self.name)
            return None
        if self._cancel_event is cancelled:
            self._cancel_event = None
        if payload is None:
            return None
        return self.parse(payload)

    async def is_available(self) -> bool:
        return True

    def cancel(self) -> None:
        if self._cancel_event is not None:
            self._cancel_event.set()
            self._cancel_event = None

    def resolve_profile(self, request: DirectionsRequest) -> str:
        return request.profile or DIRECTIONS_DEFAULT_PROFILE or self.default_profile

    # Subclass hooks ------------------------------------------------------

    def build_request(self, request: DirectionsRequest) -> tuple[str, Dict[str, Any]]:
        """Return ``(url, params)`` for the vendor call."""

        raise NotImplementedError

    def check_payload(self, payload: Mapping[str, Any]) -> bool:
        """Return False when the payload means "no route"; raise on vendor errors."""

        return True

    def parse(self, payload: Mapping[str, Any]) -> DirectionsResponse | None:
        raise NotImplementedError

    # Transport -----------------------------------------------------------

    def _fetch(self, request: DirectionsRequest) -> Mapping[str, Any] | None:
        url, params = self.build_request(request)
        self._log.debug("GET %s (%d waypoints)", url, len(request.waypoints))
        try:
            response = self._session.get(url, params=params, timeout=self._timeout)
        except requests.RequestException as exc:
            raise DirectionsProviderError(f"{self.name} request failed: {exc}") from exc

        status = response.status_code
        if status in (401, 403):
            message = f"{self.name} rejected credentials (status {status})"
            self._log.warning(message)
            raise DirectionsAuthError(message)
        try:
            payload = response.json()
        except ValueError as exc:
            if status >= 400:
                raise DirectionsProviderError(
                    f"{self.name} request failed (status {status})"
                ) from exc
            raise DirectionsProviderError(f"{self.name} returned invalid JSON") from exc
        if not isinstance(payload, Mapping):
            raise DirectionsProviderError(f"{self.name} returned unexpected payload")
        if not self.check_payload(payload):
            self._log.info("%s found no route (status %s)", self.name, status)
            return None
        if status >= 400:
            detail = payload.get("message") or payload.get("error_message") or ""
            message = f"{self.name} request failed (status {status})"
            if detail:
                message = f"{message} | {detail}"
            self._log.error(message)
            raise DirectionsProviderError(message)
        return payload


def format_lon_lat(waypoints: Sequence[Coordinate]) -> str:
    """Format coordinates as ``lon,lat;lon,lat`` for OSRM-style URLs."""

    return ";".join(f"{wp.longitude},{wp.latitude}" for wp in waypoints)


__all__ = [
    "DirectionsRequest",
    "DirectionsResponse",
    "DirectionsStep",
    "HttpDirectionsProvider",
    "format_lon_lat",
    "normalize_google_maneuver",
    "normalize_osrm_maneuver",
]
