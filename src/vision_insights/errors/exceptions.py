"""Custom exception hierarchy for vision-insights."""

from __future__ import annotations

from typing import Any


class VisionInsightsError(Exception):
    """Base exception for all vision-insights errors."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message


class ResolutionError(VisionInsightsError):
    """A wiki link could not be resolved to a vault file."""

    def __init__(self, message: str = "", label: str = "", source: str = "") -> None:
        super().__init__(message)
        self.label = label
        self.source = source


class PersistenceError(VisionInsightsError):
    """Blob store read or write failed.

    In-memory cache state stays authoritative when this is raised.
    """

    def __init__(
        self,
        message: str = "",
        operation: str = "save",
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.original = original


class MetadataError(VisionInsightsError):
    """Tags or frontmatter could not be parsed."""

    def __init__(self, message: str = "", path: str = "") -> None:
        super().__init__(message)
        self.path = path


class ConfigError(VisionInsightsError):
    """Invalid configuration value or file."""

    def __init__(self, message: str = "", key: str | None = None) -> None:
        super().__init__(message)
        self.key = key
