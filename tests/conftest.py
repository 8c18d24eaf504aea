"""Global pytest fixtures & helpers.

Adds project root to path and provides a scriptable fake directions provider
plus planner factories shared by the planner tests.
"""
from __future__ import annotations

import asyncio
import os
import sys
from typing import Any, Callable, List, Optional

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from route_planner.events import EVENT_NAMES
from route_planner.models import PlannerOptions
from route_planner.planner import RoutePlanner
from route_planner.providers.base import DirectionsRequest, DirectionsResponse, DirectionsStep


# --- Fakes -----------------------------------------------------------
class FakeDirectionsProvider:
    """Directions source returning a fixed 1000 m / 600 s route.

    ``fail_with`` makes the next calls raise, ``no_route`` makes them return
    ``None`` and ``gates`` lets a test hold individual calls open until it sets
    the matching ``asyncio.Event``.
    """

    name = "fake"

    def __init__(
        self,
        distance_meters: float = 1000.0,
        duration_seconds: float = 600.0,
        steps: Optional[List[DirectionsStep]] = None,
    ) -> None:
        self.distance_meters = distance_meters
        self.duration_seconds = duration_seconds
        self.steps = list(steps or [])
        self.requests: List[DirectionsRequest] = []
        self.fail_with: BaseException | None = None
        self.no_route = False
        self.gates: List[asyncio.Event] = []
        self.cancel_calls = 0

    async def get_directions(self, request: DirectionsRequest) -> DirectionsResponse | None:
        self.requests.append(request)
        call_number = len(self.requests) - 1
        if call_number < len(self.gates):
            await self.gates[call_number].wait()
        if self.fail_with is not None:
            raise self.fail_with
        if self.no_route:
            return None
        return DirectionsResponse(
            geometry=[wp.to_position() for wp in request.waypoints],
            distance_meters=self.distance_meters,
            duration_seconds=self.duration_seconds,
            steps=list(self.steps),
        )

    def cancel(self) -> None:
        self.cancel_calls += 1

    @property
    def call_count(self) -> int:
        return len(self.requests)


class EventRecorder:
    """Subscribes to every planner event and records ``(name, payload)``."""

    def __init__(self, planner: RoutePlanner) -> None:
        self.events: List[tuple[str, Any]] = []
        for name in sorted(EVENT_NAMES):
            planner.on(name, self._recorder(name))

    def _recorder(self, name: str) -> Callable[[Any], None]:
        def _record(payload: Any) -> None:
            self.events.append((name, payload))

        return _record

    def names(self) -> List[str]:
        return [name for name, _ in self.events]

    def payloads(self, name: str) -> List[Any]:
        return [payload for event, payload in self.events if event == name]

    def clear(self) -> None:
        self.events.clear()


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def make_provider() -> Callable[..., FakeDirectionsProvider]:
    """Factory for extra fake providers with custom totals or steps."""

    return FakeDirectionsProvider


@pytest.fixture
def make_recorder() -> Callable[[RoutePlanner], EventRecorder]:
    return EventRecorder


@pytest.fixture
def fake_provider() -> FakeDirectionsProvider:
    return FakeDirectionsProvider()


@pytest.fixture
def planner(fake_provider: FakeDirectionsProvider) -> RoutePlanner:
    return RoutePlanner(fake_provider, PlannerOptions())


@pytest.fixture
def manual_planner(fake_provider: FakeDirectionsProvider) -> RoutePlanner:
    return RoutePlanner(fake_provider, PlannerOptions(auto_recalculate=False))


@pytest.fixture
def recorder(planner: RoutePlanner) -> EventRecorder:
    return EventRecorder(planner)
