"""Collaborator interfaces consumed by the context extractor."""

from __future__ import annotations

from typing import Any, Protocol


class FileHandle(Protocol):
    @property
    def path(self) -> str: ...

    @property
    def name(self) -> str: ...

    @property
    def basename(self) -> str: ...


class LinkResolver(Protocol):
    def resolve(self, label: str, source_id: str) -> FileHandle | None: ...


class MetadataCache(Protocol):
    def get_tags(self, file: FileHandle) -> list[Any]: ...

    def get_frontmatter(self, file: FileHandle) -> dict[str, Any] | None: ...

    def get_first_heading(self, file: FileHandle) -> str | None: ...
