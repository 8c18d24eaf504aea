"""Adapter turning a directions provider into normalized route results."""

from __future__ import annotations

import inspect
import logging
import uuid
from typing import Any, Dict, Mapping, Optional, Sequence

from .geometry import bounding_box
from .interfaces import DirectionsProvider
from .models import (
    CalculationResult,
    Coordinate,
    NavigationStep,
    Route,
    RouteStats,
    Waypoint,
    as_position,
    parse_maneuver,
)
from .providers.base import DirectionsRequest, DirectionsResponse

LOGGER = logging.getLogger(__name__)


def _new_step_id() -> str:
    return uuid.uuid4().hex


def _coerce_response(raw: Any) -> DirectionsResponse:
    if isinstance(raw, DirectionsResponse):
        return raw
    if isinstance(raw, Mapping):
        return DirectionsResponse.from_mapping(raw)
    raise TypeError(f"Unsupported directions response type: {type(raw).__name__}")


class RouteCalculatorAdapter:
    """Calls the injected provider and assembles route, steps and stats.

    The provider can be swapped at runtime with :meth:`set_provider`.
    """

    def __init__(
        self,
        provider: DirectionsProvider,
        *,
        profile: Optional[str] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._provider = provider
        self.profile = profile
        self.options = dict(options or {})

    @property
    def provider(self) -> DirectionsProvider:
        return self._provider

    def set_provider(self, provider: DirectionsProvider) -> None:
        LOGGER.info(
            "Switching directions provider %s -> %s",
            getattr(self._provider, "name", "?"),
            getattr(provider, "name", "?"),
        )
        self._provider = provider

    async def is_available(self) -> bool:
        check = getattr(self._provider, "is_available", None)
        if not callable(check):
            return True
        result = check()
        if inspect.isawaitable(result):
            result = await result
        return bool(result)

    async def calculate(self, waypoints: Sequence[Waypoint]) -> CalculationResult | None:
        """Return the normalized result, or ``None`` for < 2 waypoints / no route.

        Exceptions raised by the provider propagate to the caller.
        """

        if len(waypoints) < 2:
            return None

        request = DirectionsRequest(
            waypoints=[Coordinate(wp.longitude, wp.latitude) for wp in waypoints],
            profile=self.profile,
            options=dict(self.options),
        )
        raw = self._provider.get_directions(request)
        if inspect.isawaitable(raw):
            raw = await raw
        if raw is None:
            return None
        response = _coerce_response(raw)

        steps = tuple(
            NavigationStep(
                id=_new_step_id(),
                index=index,
                instruction=step.instruction,
                maneuver_type=parse_maneuver(step.maneuver_type),
                distance_meters=float(step.distance_meters),
                duration_seconds=float(step.duration_seconds),
                geometry=tuple(as_position(p) for p in step.geometry),
            )
            for index, step in enumerate(response.steps)
        )
        geometry = tuple(as_position(p) for p in response.geometry)
        route = Route(
            geometry=geometry,
            waypoints=tuple(waypoints),
            steps=steps,
            bounds=bounding_box(geometry),
        )
        stats = RouteStats(
            distance_meters=float(response.distance_meters),
            duration_seconds=float(response.duration_seconds),
            waypoint_count=len(waypoints),
            step_count=len(steps),
        )
        return CalculationResult(route=route, stats=stats, steps=steps)

    def cancel(self) -> None:
        cancel = getattr(self._provider, "cancel", None)
        if callable(cancel):
            cancel()


__all__ = ["RouteCalculatorAdapter"]
