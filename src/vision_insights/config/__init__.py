"""Configuration — defaults, layered YAML/env loading, validated settings."""

from vision_insights.config.hierarchy import load_config_hierarchy, load_settings
from vision_insights.config.schema import Settings

__all__ = ["Settings", "load_config_hierarchy", "load_settings"]
