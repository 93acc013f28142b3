"""Package-level default configuration values."""

from __future__ import annotations

from pathlib import Path
from typing import Any

# Default cache settings
DEFAULT_CACHE_RESULTS = True
DEFAULT_MAX_CACHE_AGE_HOURS = 24.0
DEFAULT_MAX_CACHE_ENTRIES = 200
DEFAULT_DATA_PATH = Path.home() / ".vision-insights" / "data.json"

# Default request pacing
DEFAULT_RATE_LIMIT_DELAY_MS = 500

# Log level
DEFAULT_LOG_LEVEL = "WARNING"


def get_defaults() -> dict[str, Any]:
    """Return all defaults as a flat dictionary for merging."""
    return {
        "cache_results": DEFAULT_CACHE_RESULTS,
        "max_cache_age_hours": DEFAULT_MAX_CACHE_AGE_HOURS,
        "max_cache_entries": DEFAULT_MAX_CACHE_ENTRIES,
        "data_path": str(DEFAULT_DATA_PATH),
        "rate_limit_delay_ms": DEFAULT_RATE_LIMIT_DELAY_MS,
        "log_level": DEFAULT_LOG_LEVEL,
    }
