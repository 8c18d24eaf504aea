"""Central configuration for the route planner.

All values are constants imported by the rest of the package. Defaults can be
overridden through environment variables (optionally via a local `.env`).
Vendor credentials are only ever read from the environment.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


# Load .env from the current directory or any parent folder.
load_dotenv()


# ---------------------------------------------------------------------------
# Planner defaults
# ---------------------------------------------------------------------------
# Maximum number of undo/redo snapshots retained per planner.
PLANNER_MAX_HISTORY_SIZE = _env_int("PLANNER_MAX_HISTORY_SIZE", 50)

# Distance (metres) from the route beyond which a probe counts as off-route.
PLANNER_OFF_ROUTE_THRESHOLD_M = _env_float("PLANNER_OFF_ROUTE_THRESHOLD_M", 50.0)

# Recalculate the route automatically after every waypoint mutation.
PLANNER_AUTO_RECALCULATE = _env_bool("PLANNER_AUTO_RECALCULATE", True)


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------
# Mean Earth radius (IUGG) used by the haversine distance.
EARTH_RADIUS_M = 6_371_008.8


# ---------------------------------------------------------------------------
# Bundled directions providers
# ---------------------------------------------------------------------------
# Request timeout in seconds.
DIRECTIONS_REQUEST_TIMEOUT = _env_float("DIRECTIONS_REQUEST_TIMEOUT", 15.0)

# HTTP session pool sizes.
HTTP_POOL_CONNECTIONS = 10
HTTP_POOL_MAXSIZE = 10

# Transport-level retries applied by the provider HTTP adapter (5xx only).
# The planner itself never retries a failed calculation.
DIRECTIONS_HTTP_MAX_RETRIES = _env_int("DIRECTIONS_HTTP_MAX_RETRIES", 3)

# Travel profile used when a request does not name one. Empty means each
# provider falls back to its own default.
DIRECTIONS_DEFAULT_PROFILE = os.getenv("DIRECTIONS_DEFAULT_PROFILE", "")

# OSRM server (the public demo server is rate limited; run your own for load).
OSRM_BASE_URL = os.getenv("OSRM_BASE_URL", "https://router.project-osrm.org")

# Vendor credentials. Do not hardcode secrets.
MAPBOX_ACCESS_TOKEN = os.getenv("MAPBOX_ACCESS_TOKEN", "")
MAPBOX_BASE_URL = "https://api.mapbox.com/directions/v5/mapbox"
GOOGLE_MAPS_API_KEY = os.getenv("GOOGLE_MAPS_API_KEY", "")
GOOGLE_DIRECTIONS_URL = "https://maps.googleapis.com/maps/api/directions/json"
