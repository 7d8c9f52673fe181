"""
Configuration for the media asset console search engine.

Every knob reads an environment variable once at import time. The
`MAC_SEARCH_*` names are canonical; the shorter `MAC_*` names are accepted
as aliases.
"""
import os
import logging

from .utils import env_bool

logger = logging.getLogger(__name__)


def _env_raw(*names: str, default: str | None = None) -> str | None:
    for name in names:
        if not name:
            continue
        val = os.getenv(name)
        if val is not None and str(val).strip() != "":
            return str(val).strip()
    return default


def _env_int(default: int, *names: str, min_value: int | None = None, max_value: int | None = None) -> int:
    raw = _env_raw(*names)
    if raw is None:
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid integer for %s=%r, using default=%s", names[0] if names else "<unknown>", raw, default)
        return default
    if min_value is not None and value < min_value:
        logger.warning("Value too small for %s=%s, clamped to %s", names[0] if names else "<unknown>", value, min_value)
        value = min_value
    if max_value is not None and value > max_value:
        logger.warning("Value too large for %s=%s, clamped to %s", names[0] if names else "<unknown>", value, max_value)
        value = max_value
    return value


def _env_float(default: float, *names: str, min_value: float | None = None, max_value: float | None = None) -> float:
    raw = _env_raw(*names)
    if raw is None:
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid float for %s=%r, using default=%s", names[0] if names else "<unknown>", raw, default)
        return default
    if min_value is not None and value < min_value:
        logger.warning("Value too small for %s=%s, clamped to %s", names[0] if names else "<unknown>", value, min_value)
        value = min_value
    if max_value is not None and value > max_value:
        logger.warning("Value too large for %s=%s, clamped to %s", names[0] if names else "<unknown>", value, max_value)
        value = max_value
    return value


def _env_bool(default: bool, *names: str) -> bool:
    for name in names:
        if name and name in os.environ:
            return env_bool(name, default)
    return default


# Fuzzy matching
# Fraction of the query length that may be edited (insert/delete/substitute/transpose).
SEARCH_FUZZY_THRESHOLD = _env_float(0.34, "MAC_SEARCH_FUZZY_THRESHOLD", "MAC_FUZZY_THRESHOLD", min_value=0.0, max_value=1.0)
# Queries shorter than this only match by literal containment.
SEARCH_MIN_FUZZY_LENGTH = _env_int(2, "MAC_SEARCH_MIN_FUZZY_LENGTH", "MAC_MIN_FUZZY_LENGTH", min_value=1, max_value=64)
SEARCH_FUZZY_ENABLED = _env_bool(True, "MAC_SEARCH_FUZZY_ENABLED", "MAC_FUZZY_ENABLED")

# Field weights used to combine per-field match quality.
SEARCH_WEIGHT_NAME = _env_float(0.4, "MAC_SEARCH_WEIGHT_NAME", min_value=0.01, max_value=1.0)
SEARCH_WEIGHT_CREATOR = _env_float(0.2, "MAC_SEARCH_WEIGHT_CREATOR", min_value=0.01, max_value=1.0)
SEARCH_WEIGHT_TAGS = _env_float(0.4, "MAC_SEARCH_WEIGHT_TAGS", min_value=0.01, max_value=1.0)

# Search limits
SEARCH_MAX_QUERY_LENGTH = _env_int(256, "MAC_SEARCH_MAX_QUERY_LENGTH", "MAC_MAX_QUERY_LENGTH", min_value=16, max_value=8192)
SEARCH_MAX_TOKENS = _env_int(16, "MAC_SEARCH_MAX_TOKENS", "MAC_MAX_TOKENS", min_value=1, max_value=128)

# Simulated backend latency for the async session (milliseconds).
SEARCH_LATENCY_MIN_MS = _env_int(200, "MAC_SEARCH_LATENCY_MIN_MS", "MAC_LATENCY_MIN_MS", min_value=0, max_value=60_000)
SEARCH_LATENCY_MAX_MS = _env_int(600, "MAC_SEARCH_LATENCY_MAX_MS", "MAC_LATENCY_MAX_MS", min_value=0, max_value=60_000)
if SEARCH_LATENCY_MAX_MS < SEARCH_LATENCY_MIN_MS:
    logger.warning(
        "MAC_SEARCH_LATENCY_MAX_MS=%s is below MAC_SEARCH_LATENCY_MIN_MS=%s, using the minimum for both",
        SEARCH_LATENCY_MAX_MS,
        SEARCH_LATENCY_MIN_MS,
    )
    SEARCH_LATENCY_MAX_MS = SEARCH_LATENCY_MIN_MS

# Typeahead
SEARCH_SUGGESTION_LIMIT = _env_int(8, "MAC_SEARCH_SUGGESTION_LIMIT", min_value=1, max_value=100)
SEARCH_SUGGESTION_MIN_LENGTH = _env_int(1, "MAC_SEARCH_SUGGESTION_MIN_LENGTH", min_value=1, max_value=32)
RECENT_SEARCHES_MAX = _env_int(5, "MAC_RECENT_SEARCHES_MAX", min_value=1, max_value=100)
