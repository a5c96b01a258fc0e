"""Central configuration for the trackline pipeline.

All values are constants imported by the rest of the package. Adjust as needed
for your environment. Endpoints, credentials and tuning parameters are read from
environment variables (optionally via a local `.env`).
"""

from __future__ import annotations

import importlib
import os


def _env_str(key: str, default: str) -> str:
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip()


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


# Load .env variables when python-dotenv is available.
_load_dotenv = None
try:
    _dotenv_mod = importlib.import_module("dotenv")
    _load_dotenv = getattr(_dotenv_mod, "load_dotenv", None)
except Exception:
    _load_dotenv = None

if callable(_load_dotenv):
    # Load .env from the current directory or any parent folder.
    _load_dotenv()


# ---------------------------------------------------------------------------
# Trajectory source
# ---------------------------------------------------------------------------
# Base URL of the service returning a day's fixes. Left empty on purpose: the
# source client refuses to run until it is configured.
TRACKING_BASE_URL = _env_str("TRACKLINE_TRACKING_BASE_URL", "")

# Path template appended to the base URL. ``{entity_id}`` and ``{date}``
# (YYYY-MM-DD) are substituted per request.
TRACKING_DAY_PATH = _env_str(
    "TRACKLINE_TRACKING_DAY_PATH",
    "/route/map/debug/full-day-tracking/{entity_id}/{date}",
)

# Optional bearer token sent to the trajectory source.
TRACKING_API_TOKEN = os.getenv("TRACKLINE_TRACKING_API_TOKEN", "")


# ---------------------------------------------------------------------------
# Snap-to-road service (openrouteservice compatible)
# ---------------------------------------------------------------------------
SNAP_BASE_URL = _env_str("TRACKLINE_SNAP_BASE_URL", "https://api.openrouteservice.org")
SNAP_PROFILE = _env_str("TRACKLINE_SNAP_PROFILE", "driving-car")

# Sent as the Authorization header when set. Self-hosted instances usually
# need no key.
SNAP_API_KEY = os.getenv("TRACKLINE_SNAP_API_KEY", "")

# Search radius (metres) around each location.
SNAP_RADIUS_M = _env_float("TRACKLINE_SNAP_RADIUS_M", 50.0)


# ---------------------------------------------------------------------------
# Directions service (Mapbox Directions v5 compatible)
# ---------------------------------------------------------------------------
DIRECTIONS_BASE_URL = _env_str("TRACKLINE_DIRECTIONS_BASE_URL", "https://api.mapbox.com")
DIRECTIONS_PROFILE = _env_str("TRACKLINE_DIRECTIONS_PROFILE", "walking")

# Access token pulled from the environment. Do not hardcode secrets.
DIRECTIONS_ACCESS_TOKEN = os.getenv("TRACKLINE_DIRECTIONS_ACCESS_TOKEN", "")

# Geometry encoding requested from the service: "polyline" (1e5) or
# "polyline6" (1e6).
DIRECTIONS_GEOMETRIES = _env_str("TRACKLINE_DIRECTIONS_GEOMETRIES", "polyline")

# Level of detail of the returned geometry: "simplified", "full" or "false".
DIRECTIONS_OVERVIEW = _env_str("TRACKLINE_DIRECTIONS_OVERVIEW", "simplified")

# Provider limit on waypoints per request; also the chunk size.
DIRECTIONS_MAX_WAYPOINTS = _env_int("TRACKLINE_DIRECTIONS_MAX_WAYPOINTS", 25)


# ---------------------------------------------------------------------------
# Trajectory refinement parameters
# ---------------------------------------------------------------------------
# Fixes whose reported accuracy radius is not strictly below this value are
# dropped before any processing.
ACCURACY_THRESHOLD_M = _env_float("TRACKLINE_ACCURACY_THRESHOLD_M", 15.0)

# Kalman filter noise terms (degrees squared) and initial error covariance.
KALMAN_PROCESS_NOISE = _env_float("TRACKLINE_KALMAN_PROCESS_NOISE", 0.00001)
KALMAN_MEASUREMENT_NOISE = _env_float("TRACKLINE_KALMAN_MEASUREMENT_NOISE", 0.0001)
KALMAN_INITIAL_COVARIANCE = _env_float("TRACKLINE_KALMAN_INITIAL_COVARIANCE", 1.0)

# Decimal places kept on smoothed coordinates (7 places is roughly 1 cm).
COORDINATE_PRECISION = _env_int("TRACKLINE_COORDINATE_PRECISION", 7)

# Interior points whose heading changes by this many degrees or more are
# treated as zigzags. Pedestrian traces may need a larger value.
ZIGZAG_THRESHOLD_DEG = _env_float("TRACKLINE_ZIGZAG_THRESHOLD_DEG", 60.0)

# Minimum spacing (metres) between consecutive points after thinning.
THIN_MIN_DISTANCE_M = _env_float("TRACKLINE_THIN_MIN_DISTANCE_M", 40.0)


# ---------------------------------------------------------------------------
# HTTP settings
# ---------------------------------------------------------------------------
# Request timeout in seconds.
REQUEST_TIMEOUT = _env_float("TRACKLINE_REQUEST_TIMEOUT", 15.0)

# HTTP session pool sizes.
HTTP_POOL_CONNECTIONS = 10
HTTP_POOL_MAXSIZE = 10

# Transport-level retries for 5xx responses. Failures are reported to the
# caller without retrying unless this is raised above zero.
HTTP_MAX_RETRIES = _env_int("TRACKLINE_HTTP_MAX_RETRIES", 0)
HTTP_BACKOFF_FACTOR = _env_float("TRACKLINE_HTTP_BACKOFF_FACTOR", 1.0)


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------
# Write an HTML map next to the CLI output when no explicit path is given.
MAP_EXPORT_ENABLED = _env_bool("TRACKLINE_MAP_EXPORT_ENABLED", False)
MAP_OUTPUT_DIR = _env_str("TRACKLINE_MAP_OUTPUT_DIR", "trackline_maps")
