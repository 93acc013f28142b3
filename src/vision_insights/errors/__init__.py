"""Error handling — exception hierarchy."""

from vision_insights.errors.exceptions import (
    ConfigError,
    MetadataError,
    PersistenceError,
    ResolutionError,
    VisionInsightsError,
)

__all__ = [
    "VisionInsightsError",
    "ResolutionError",
    "PersistenceError",
    "MetadataError",
    "ConfigError",
]
