"""Concurrency control — request serialization and pacing."""

from vision_insights.concurrency.rate_limiter import RequestThrottle

__all__ = ["RequestThrottle"]
