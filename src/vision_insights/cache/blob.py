"""Blob stores that persist the serialized cache map."""

from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Protocol

from vision_insights.errors.exceptions import PersistenceError

logger = logging.getLogger(__name__)

_DEFAULT_SECTION = "cache"


class BlobStore(Protocol):
    """Loads and saves the whole cache map in one piece."""

    def load(self) -> dict[str, Any] | None: ...

    async def save(self, data: dict[str, Any]) -> None: ...


class MemoryBlobStore:
    """In-process blob store, mainly for tests and throwaway caches."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data = copy.deepcopy(initial) if initial is not None else None
        self.save_count = 0

    def load(self) -> dict[str, Any] | None:
        return copy.deepcopy(self._data)

    async def save(self, data: dict[str, Any]) -> None:
        self._data = copy.deepcopy(data)
        self.save_count += 1

    @property
    def data(self) -> dict[str, Any] | None:
        return self._data


class JsonFileBlobStore:
    """Stores the cache under one key of a JSON data file.

    Other top-level keys in the file (plugin settings, for instance) are
    left untouched on save.
    """

    def __init__(self, path: Path | str, section: str = _DEFAULT_SECTION) -> None:
        self._path = Path(path)
        self._section = section

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, Any] | None:
        document = self._read_document()
        section = document.get(self._section)
        if section is None:
            return None
        if not isinstance(section, dict):
            logger.warning(
                "Ignoring '%s' in %s: expected a mapping, got %s",
                self._section,
                self._path,
                type(section).__name__,
            )
            return None
        return section

    async def save(self, data: dict[str, Any]) -> None:
        document = self._read_document()
        document[self._section] = data
        self._write_document(document)

    def _read_document(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as exc:
            raise PersistenceError(
                f"Cannot read cache file {self._path}: {exc}",
                operation="load",
                original=exc,
            ) from exc
        if not isinstance(raw, dict):
            raise PersistenceError(
                f"Cache file {self._path} does not contain a JSON object",
                operation="load",
            )
        return raw

    def _write_document(self, document: dict[str, Any]) -> None:
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(document, indent=2), encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as exc:
            raise PersistenceError(
                f"Cannot write cache file {self._path}: {exc}",
                operation="save",
                original=exc,
            ) from exc
