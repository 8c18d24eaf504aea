"""Command line entry point: ``python -m route_planner``.

Examples:
    python -m route_planner route 13.388,52.517 13.397,52.529 --probe 13.39,52.52
    python -m route_planner distance 0,0 1,1
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional, Sequence, TextIO

from .calculator import RouteCalculatorAdapter
from .events import ROUTE_ERROR, RouteErrorEvent
from .geometry import distance
from .models import Coordinate, PlannerOptions
from .planner import PlannerDependencies, RoutePlanner
from .providers import PROVIDERS

LOGGER = logging.getLogger(__name__)


def _setup_logging(level: str = "WARNING") -> None:
    root = logging.getLogger()
    if not root.hasHandlers():
        logging.basicConfig(
            level=getattr(logging, level),
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )
    else:
        # Handlers installed by a wrapper script; --log-level still applies.
        root.setLevel(getattr(logging, level))


def parse_coordinate(value: str) -> Coordinate:
    """Parse ``LON,LAT`` into a :class:`Coordinate` (argparse ``type``)."""

    parts = [p.strip() for p in value.split(",")]
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"expected LON,LAT but got {value!r}")
    try:
        lon, lat = float(parts[0]), float(parts[1])
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid coordinate {value!r}") from None
    return Coordinate(longitude=lon, latitude=lat)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="route_planner",
        description="Plan a route through waypoints using a directions provider",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Python logging level",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    route = sub.add_parser("route", help="Calculate a route through waypoints")
    route.add_argument(
        "waypoints",
        nargs="+",
        type=parse_coordinate,
        metavar="LON,LAT",
        help="Waypoints in travel order (at least two)",
    )
    route.add_argument(
        "--provider",
        choices=sorted(PROVIDERS),
        default="osrm",
        help="Directions provider (default: osrm)",
    )
    route.add_argument("--profile", help="Travel profile, e.g. driving or walking")
    route.add_argument(
        "--probe",
        type=parse_coordinate,
        metavar="LON,LAT",
        help="Report off-route status and remaining distance for this point",
    )
    route.add_argument(
        "--threshold",
        type=float,
        help="Off-route threshold in metres (default from PLANNER_OFF_ROUTE_THRESHOLD_M)",
    )

    dist = sub.add_parser("distance", help="Great-circle distance between two points")
    dist.add_argument("start", type=parse_coordinate, metavar="LON,LAT")
    dist.add_argument("end", type=parse_coordinate, metavar="LON,LAT")
    return parser


async def _plan_route(
    args: argparse.Namespace, options: PlannerOptions, out: TextIO
) -> int:
    provider = PROVIDERS[args.provider]()
    planner = RoutePlanner(
        options=options,
        dependencies=PlannerDependencies(
            route_calculator=RouteCalculatorAdapter(provider, profile=args.profile)
        ),
    )
    errors: List[BaseException] = []

    def _on_error(event: RouteErrorEvent) -> None:
        errors.append(event.error)

    planner.on(ROUTE_ERROR, _on_error)
    try:
        for coordinate in args.waypoints:
            await planner.add_waypoint(coordinate)

        stats = planner.get_stats()
        if stats is None:
            reason = errors[-1] if errors else "at least two waypoints are required"
            print(f"No route: {reason}", file=sys.stderr)
            return 1

        print(
            f"Distance: {stats.distance_meters:.0f} m  "
            f"Duration: {stats.duration_seconds / 60:.1f} min  "
            f"Waypoints: {stats.waypoint_count}  Steps: {stats.step_count}",
            file=out,
        )
        for step in planner.get_navigation_steps():
            print(
                f"{step.index + 1:3d}. {step.instruction} ({step.distance_meters:.0f} m)",
                file=out,
            )

        if args.probe is not None:
            off_route = planner.is_off_route(args.probe)
            remaining = planner.get_remaining_distance(args.probe)
            print(f"Off route: {'yes' if off_route else 'no'}", file=out)
            if remaining is not None:
                print(f"Remaining: {remaining:.0f} m", file=out)
        return 0
    finally:
        planner.dispose()


def main(argv: Optional[Sequence[str]] = None, out: TextIO | None = None) -> int:
    """Run the CLI and return the process exit status."""

    parser = _build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.log_level)
    out = out or sys.stdout

    if args.command == "distance":
        print(f"{distance(args.start, args.end):.1f} m", file=out)
        return 0

    if len(args.waypoints) < 2:
        parser.error("route needs at least two waypoints")
    LOGGER.info(
        "Planning route through %d waypoints via %s", len(args.waypoints), args.provider
    )
    try:
        options = (
            PlannerOptions()
            if args.threshold is None
            else PlannerOptions(off_route_threshold=args.threshold)
        )
    except ValueError as exc:
        parser.error(str(exc))
    return asyncio.run(_plan_route(args, options, out))


__all__ = ["main", "parse_coordinate"]
