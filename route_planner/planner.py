"""Route planner facade.

Sequences every waypoint mutation as: history snapshot, store mutation, domain
event, then (when auto-recalculation is on) an awaited route recalculation.
Calculations are not fenced against out-of-order completion: if two overlap,
whichever finishes last overwrites the current route.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .calculator import RouteCalculatorAdapter
from .errors import PlannerDisposedError, RouteCalculationError
from .events import (
    HISTORY_CHANGE,
    ROUTE_CALCULATED,
    ROUTE_CALCULATING,
    ROUTE_CLEARED,
    ROUTE_ERROR,
    STATS_UPDATED,
    WAYPOINT_ADDED,
    WAYPOINT_REMOVED,
    WAYPOINT_REORDERED,
    WAYPOINT_UPDATED,
    EventBus,
    HistoryChangeEvent,
    Listener,
    RouteCalculatedEvent,
    RouteCalculatingEvent,
    RouteClearedEvent,
    RouteErrorEvent,
    StatsUpdatedEvent,
    Unsubscribe,
    WaypointAddedEvent,
    WaypointRemovedEvent,
    WaypointReorderedEvent,
    WaypointUpdatedEvent,
)
from .geometry import GeoService, distance
from .history import HistoryManager
from .interfaces import (
    DirectionsProvider,
    EventBusProtocol,
    GeoServiceProtocol,
    HistoryManagerProtocol,
    RouteCalculatorProtocol,
    WaypointRepositoryProtocol,
)
from .models import (
    Coordinate,
    HistoryAction,
    NavigationStep,
    NearestPointResult,
    PlannerOptions,
    Route,
    RouteStats,
    Waypoint,
)
from .waypoints import InMemoryWaypointRepository

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class PlannerDependencies:
    """Optional collaborator overrides; ``None`` fields use the defaults."""

    waypoint_repository: Optional[WaypointRepositoryProtocol] = None
    history_manager: Optional[HistoryManagerProtocol] = None
    route_calculator: Optional[RouteCalculatorProtocol] = None
    geo_service: Optional[GeoServiceProtocol] = None
    event_bus: Optional[EventBusProtocol] = None


class RoutePlanner:
    """Facade owning the waypoint list, undo history and current route.

    Usage:
        planner = RoutePlanner(OSRMDirectionsProvider())
        planner.on("route:calculated", lambda event: print(event.stats))
        await planner.add_waypoint(Coordinate(13.38, 52.51))
        await planner.add_waypoint(Coordinate(13.45, 52.52))

    Args:
        provider: Directions source used by the default route calculator.
        options: Planner options; defaults from :mod:`route_planner.config`.
        dependencies: Collaborator overrides, mainly for tests.
    """

    def __init__(
        self,
        provider: DirectionsProvider | None = None,
        options: PlannerOptions | None = None,
        dependencies: PlannerDependencies | None = None,
    ) -> None:
        self.options = options or PlannerOptions()
        deps = dependencies or PlannerDependencies()
        if deps.route_calculator is None and provider is None:
            raise ValueError("RoutePlanner needs a provider or a route_calculator")

        self._waypoints: WaypointRepositoryProtocol = (
            deps.waypoint_repository or InMemoryWaypointRepository()
        )
        self._history: HistoryManagerProtocol = deps.history_manager or HistoryManager(
            self.options.max_history_size
        )
        self._calculator: RouteCalculatorProtocol = (
            deps.route_calculator or RouteCalculatorAdapter(provider)
        )
        self._geo: GeoServiceProtocol = deps.geo_service or GeoService()
        self._events: EventBusProtocol = deps.event_bus or EventBus()

        self._route: Route | None = None
        self._stats: RouteStats | None = None
        self._in_flight = 0
        self._disposed = False

    # ------------------------------------------------------------------
    # Event subscription
    # ------------------------------------------------------------------

    def on(self, event: str, listener: Listener) -> Unsubscribe:
        self._ensure_not_disposed()
        return self._events.on(event, listener)

    def once(self, event: str, listener: Listener) -> Unsubscribe:
        self._ensure_not_disposed()
        return self._events.once(event, listener)

    def off(self, event: str, listener: Listener) -> None:
        self._ensure_not_disposed()
        self._events.off(event, listener)

    # ------------------------------------------------------------------
    # Waypoint management
    # ------------------------------------------------------------------

    async def add_waypoint(self, coordinate: Coordinate, name: str | None = None) -> Waypoint:
        """Append a waypoint and return it."""

        self._ensure_not_disposed()
        self._history.push(self._waypoints.get_all(), HistoryAction.ADD)
        waypoint = self._waypoints.add(coordinate, name)
        LOGGER.debug("Added waypoint %s at index %d", waypoint.id, waypoint.index)
        self._events.emit(
            WAYPOINT_ADDED,
            WaypointAddedEvent(
                waypoint=waypoint, index=waypoint.index, all_waypoints=self._snapshot()
            ),
        )
        await self._after_mutation()
        return waypoint

    async def insert_waypoint(
        self, coordinate: Coordinate, index: int, name: str | None = None
    ) -> Waypoint:
        """Insert a waypoint; ``index`` is clamped into ``[0, count]``."""

        self._ensure_not_disposed()
        self._history.push(self._waypoints.get_all(), HistoryAction.ADD)
        waypoint = self._waypoints.insert(coordinate, index, name)
        LOGGER.debug("Inserted waypoint %s at index %d", waypoint.id, waypoint.index)
        self._events.emit(
            WAYPOINT_ADDED,
            WaypointAddedEvent(
                waypoint=waypoint, index=waypoint.index, all_waypoints=self._snapshot()
            ),
        )
        await self._after_mutation()
        return waypoint

    async def remove_waypoint(self, waypoint_id: str) -> Waypoint | None:
        """Remove a waypoint by id. Unknown ids are a silent no-op (``None``)."""

        self._ensure_not_disposed()
        waypoint = self._waypoints.get_by_id(waypoint_id)
        if waypoint is None:
            return None
        self._history.push(self._waypoints.get_all(), HistoryAction.REMOVE)
        removed = self._waypoints.remove(waypoint_id) or waypoint
        LOGGER.debug("Removed waypoint %s from index %d", removed.id, waypoint.index)
        self._events.emit(
            WAYPOINT_REMOVED,
            WaypointRemovedEvent(
                waypoint=removed, index=waypoint.index, all_waypoints=self._snapshot()
            ),
        )
        await self._after_mutation()
        return removed

    async def update_waypoint(
        self, waypoint_id: str, coordinate: Coordinate
    ) -> Waypoint | None:
        """Move a waypoint. Unknown ids are a silent no-op (``None``)."""

        self._ensure_not_disposed()
        if self._waypoints.get_by_id(waypoint_id) is None:
            return None
        self._history.push(self._waypoints.get_all(), HistoryAction.UPDATE)
        previous = self._waypoints.update(waypoint_id, coordinate)
        updated = self._waypoints.get_by_id(waypoint_id)
        if previous is None or updated is None:
            return None
        self._events.emit(
            WAYPOINT_UPDATED,
            WaypointUpdatedEvent(
                waypoint=updated,
                previous_coordinate=previous,
                all_waypoints=self._snapshot(),
            ),
        )
        await self._after_mutation()
        return updated

    async def reorder_waypoints(self, from_index: int, to_index: int) -> bool:
        """Move the waypoint at ``from_index`` to ``to_index``.

        Out-of-range indices return False without touching history or state.
        """

        self._ensure_not_disposed()
        count = self._waypoints.count()
        if not (0 <= from_index < count and 0 <= to_index < count):
            return False
        self._history.push(self._waypoints.get_all(), HistoryAction.REORDER)
        if not self._waypoints.reorder(from_index, to_index):
            return False
        self._events.emit(
            WAYPOINT_REORDERED,
            WaypointReorderedEvent(
                from_index=from_index, to_index=to_index, all_waypoints=self._snapshot()
            ),
        )
        await self._after_mutation()
        return True

    def get_waypoints(self) -> List[Waypoint]:
        self._ensure_not_disposed()
        return self._waypoints.get_all()

    async def clear(self) -> None:
        """Remove every waypoint and drop the current route."""

        self._ensure_not_disposed()
        previous_count = self._waypoints.count()
        if previous_count > 0:
            self._history.push(self._waypoints.get_all(), HistoryAction.CLEAR)
        self._waypoints.clear()
        self._route = None
        self._stats = None
        self._events.emit(
            ROUTE_CLEARED, RouteClearedEvent(previous_waypoint_count=previous_count)
        )
        await self._after_mutation()

    # ------------------------------------------------------------------
    # Route information
    # ------------------------------------------------------------------

    def get_route(self) -> Route | None:
        self._ensure_not_disposed()
        return self._route

    def get_stats(self) -> RouteStats | None:
        self._ensure_not_disposed()
        return self._stats

    def get_navigation_steps(self) -> Tuple[NavigationStep, ...]:
        self._ensure_not_disposed()
        return self._route.steps if self._route is not None else ()

    def is_calculating(self) -> bool:
        self._ensure_not_disposed()
        return self._in_flight > 0

    # ------------------------------------------------------------------
    # Undo / redo
    # ------------------------------------------------------------------

    async def undo(self) -> bool:
        self._ensure_not_disposed()
        entry = self._history.undo()
        if entry is None:
            return False
        self._waypoints.set_all(entry.waypoints)
        self._emit_history_change("undo")
        await self._after_mutation()
        return True

    async def redo(self) -> bool:
        self._ensure_not_disposed()
        entry = self._history.redo()
        if entry is None:
            return False
        self._waypoints.set_all(entry.waypoints)
        self._emit_history_change("redo")
        await self._after_mutation()
        return True

    def can_undo(self) -> bool:
        self._ensure_not_disposed()
        return self._history.can_undo()

    def can_redo(self) -> bool:
        self._ensure_not_disposed()
        return self._history.can_redo()

    def get_history_size(self) -> int:
        self._ensure_not_disposed()
        return self._history.size()

    # ------------------------------------------------------------------
    # Geometry queries against the current route
    # ------------------------------------------------------------------

    @staticmethod
    def calculate_distance(a: Coordinate, b: Coordinate) -> float:
        """Great-circle distance in metres between two coordinates."""

        return distance(a, b)

    def get_nearest_point_on_route(self, coordinate: Coordinate) -> NearestPointResult | None:
        geometry = self._route_geometry()
        if geometry is None:
            return None
        return self._geo.nearest_point_on_line(coordinate, geometry)

    def is_off_route(self, coordinate: Coordinate, threshold: float | None = None) -> bool:
        """True when ``coordinate`` is farther than the threshold from the route.

        Without a route nothing is off-route.
        """

        geometry = self._route_geometry()
        if geometry is None:
            return False
        if threshold is None:
            threshold = self.options.off_route_threshold
        return self._geo.is_off_route(coordinate, geometry, threshold)

    def get_remaining_distance(self, coordinate: Coordinate) -> float | None:
        """Metres left along the route from the point nearest to ``coordinate``."""

        geometry = self._route_geometry()
        if geometry is None:
            return None
        nearest = self._geo.nearest_point_on_line(coordinate, geometry)
        if nearest is None:
            return None
        return self._geo.remaining_distance(
            geometry, nearest.segment_index, nearest.segment_fraction
        )

    # ------------------------------------------------------------------
    # Route calculation
    # ------------------------------------------------------------------

    async def recalculate(self) -> None:
        """Recalculate the route for the current waypoints.

        With fewer than two waypoints the route and stats are cleared without
        calling the provider. Failures are reported via ``route:error`` and
        leave the last good route in place.
        """

        self._ensure_not_disposed()
        waypoints = self._waypoints.get_all()

        if len(waypoints) < 2:
            self._route = None
            previous_stats = self._stats
            self._stats = None
            if previous_stats is not None:
                self._events.emit(
                    STATS_UPDATED,
                    StatsUpdatedEvent(
                        stats=RouteStats(
                            distance_meters=0.0,
                            duration_seconds=0.0,
                            waypoint_count=len(waypoints),
                            step_count=0,
                        ),
                        previous_stats=previous_stats,
                    ),
                )
            return

        self._in_flight += 1
        self._events.emit(
            ROUTE_CALCULATING, RouteCalculatingEvent(waypoint_count=len(waypoints))
        )
        try:
            result = await self._calculator.calculate(waypoints)
            if result is None:
                raise RouteCalculationError("Failed to calculate directions")
        except Exception as exc:
            if self._disposed:
                return
            LOGGER.warning(
                "Route calculation failed for %d waypoints: %s", len(waypoints), exc
            )
            self._events.emit(
                ROUTE_ERROR, RouteErrorEvent(error=exc, waypoint_count=len(waypoints))
            )
            return
        finally:
            # Runs on cancellation too.
            self._in_flight -= 1

        if self._disposed:
            LOGGER.debug("Discarding route calculated after dispose")
            return
        previous_stats = self._stats
        self._route = result.route
        self._stats = result.stats
        LOGGER.info(
            "Route calculated: %.0f m, %.0f s, %d steps",
            result.stats.distance_meters,
            result.stats.duration_seconds,
            result.stats.step_count,
        )
        self._events.emit(
            ROUTE_CALCULATED,
            RouteCalculatedEvent(route=result.route, stats=result.stats, steps=result.steps),
        )
        self._events.emit(
            STATS_UPDATED, StatsUpdatedEvent(stats=result.stats, previous_stats=previous_stats)
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def dispose(self) -> None:
        """Tear down listeners, waypoints and history. Safe to call twice."""

        if self._disposed:
            return
        self._disposed = True
        self._events.remove_all_listeners()
        self._waypoints.clear()
        self._history.clear()
        self._route = None
        self._stats = None
        self._calculator.cancel()
        LOGGER.debug("Route planner disposed")

    def is_disposed(self) -> bool:
        return self._disposed

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ensure_not_disposed(self) -> None:
        if self._disposed:
            raise PlannerDisposedError("RoutePlanner has been disposed")

    def _snapshot(self) -> Tuple[Waypoint, ...]:
        return tuple(self._waypoints.get_all())

    def _route_geometry(self) -> Sequence | None:
        self._ensure_not_disposed()
        if self._route is None or len(self._route.geometry) < 2:
            return None
        return self._route.geometry

    def _emit_history_change(self, action: str) -> None:
        self._events.emit(
            HISTORY_CHANGE,
            HistoryChangeEvent(
                action=action,
                can_undo=self._history.can_undo(),
                can_redo=self._history.can_redo(),
                history_size=self._history.size(),
                all_waypoints=self._snapshot(),
            ),
        )

    async def _after_mutation(self) -> None:
        if self.options.auto_recalculate:
            await self.recalculate()


__all__ = ["PlannerDependencies", "RoutePlanner"]
