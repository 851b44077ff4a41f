"""Central configuration for the field journey engine.

All values are constants imported by the rest of the package. Adjust as needed
for your environment. Secrets are read from environment variables (optionally
via a local `.env`).
"""

from __future__ import annotations

import importlib
import os


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
# Backend settings
# ---------------------------------------------------------------------------
# Base URL of the admin backend serving users, clients, logs and meetings.
FIELD_API_BASE_URL = os.getenv(
    "FIELD_API_BASE_URL", "http://localhost:5000/api"
).rstrip("/")

# Bearer token for the admin API. Do not hardcode secrets.
FIELD_API_TOKEN = os.getenv("FIELD_API_TOKEN", "")

# Request timeout in seconds.
REQUEST_TIMEOUT = _env_int("REQUEST_TIMEOUT", 15)

# HTTP session pool sizes for concurrent requests.
HTTP_POOL_CONNECTIONS = 10
HTTP_POOL_MAXSIZE = 10

# BACKEND_MAX_RETRIES covers network failures, 429s, 5xx, or bad payloads.
BACKEND_MAX_RETRIES = _env_int("BACKEND_MAX_RETRIES", 3)
# BACKEND_BACKOFF_MAX_SECONDS caps the exponential backoff per attempt.
BACKEND_BACKOFF_MAX_SECONDS = _env_float("BACKEND_BACKOFF_MAX_SECONDS", 4.0)

# Page sizes requested from the list endpoints.
PING_FETCH_LIMIT = _env_int("PING_FETCH_LIMIT", 10000)
MEETING_FETCH_LIMIT = _env_int("MEETING_FETCH_LIMIT", 1000)
CLIENT_FETCH_LIMIT = _env_int("CLIENT_FETCH_LIMIT", 15000)
EXPENSE_FETCH_LIMIT = _env_int("EXPENSE_FETCH_LIMIT", 1000)
USER_FETCH_LIMIT = _env_int("USER_FETCH_LIMIT", 1000)


# ---------------------------------------------------------------------------
# Refresh / caching
# ---------------------------------------------------------------------------
# Threads used to fetch the four source collections in parallel.
MAX_FETCH_WORKERS = _env_int("MAX_FETCH_WORKERS", 4)

# Seconds between automatic refresh cycles.
POLL_INTERVAL_SECONDS = _env_float("POLL_INTERVAL_SECONDS", 30.0)

# Lifetime of the cached client list between poll cycles. A manual refresh
# always bypasses the cache. Set to 0 to disable caching.
CLIENT_CACHE_TTL_SECONDS = _env_int("CLIENT_CACHE_TTL_SECONDS", 15 * 60)


# ---------------------------------------------------------------------------
# Engine constants
# ---------------------------------------------------------------------------
# Mean Earth radius used by the haversine distance.
EARTH_RADIUS_KM = 6371.0

# A visit counts as verified when the matched ping is closer than this to the
# client's recorded location.
VERIFICATION_RADIUS_KM = _env_float("VERIFICATION_RADIUS_KM", 0.5)

# Decimal places used when grouping co-located markers (~1.1 m at 5).
COORDINATE_KEY_PRECISION = 5

# Ring radius (degrees) used to spread overlapping markers. Doubled for
# groups larger than DECLUSTER_LARGE_GROUP_SIZE.
DECLUSTER_BASE_RADIUS_DEG = _env_float("DECLUSTER_BASE_RADIUS_DEG", 0.0001)
DECLUSTER_LARGE_GROUP_SIZE = 5

# Dashboard summaries.
TREND_MONTHS = 6
DISTRIBUTION_TOP_N = 5
UNKNOWN_LABEL = "Unknown"


# ---------------------------------------------------------------------------
# Journey report
# ---------------------------------------------------------------------------
# Exported visit table columns, in this exact order.
REPORT_COLUMN_ORDER = [
    "Client Name",
    "Check-In Time",
    "Check-Out Time",
    "Duration (mins)",
    "Status",
    "Location Verified",
]

# strftime pattern used for check-in / check-out cells.
REPORT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
