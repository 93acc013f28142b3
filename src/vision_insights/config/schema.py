"""Pydantic model for resolved settings."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from vision_insights.config.defaults import (
    DEFAULT_CACHE_RESULTS,
    DEFAULT_DATA_PATH,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_CACHE_AGE_HOURS,
    DEFAULT_MAX_CACHE_ENTRIES,
    DEFAULT_RATE_LIMIT_DELAY_MS,
)


class Settings(BaseModel):
    cache_results: bool = DEFAULT_CACHE_RESULTS
    max_cache_age_hours: float = Field(default=DEFAULT_MAX_CACHE_AGE_HOURS, ge=0)
    max_cache_entries: int = DEFAULT_MAX_CACHE_ENTRIES  # <= 0 disables LRU eviction
    data_path: Path = DEFAULT_DATA_PATH
    rate_limit_delay_ms: int = Field(default=DEFAULT_RATE_LIMIT_DELAY_MS, ge=0)
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def max_age_ms(self) -> int:
        return int(self.max_cache_age_hours * 60 * 60 * 1000)
