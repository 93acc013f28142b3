"""Result cache with TTL-on-read expiry and LRU-on-write bounding."""

from __future__ import annotations

import asyncio
import logging
import time
from collections import OrderedDict
from collections.abc import Callable, Iterator
from typing import Any

from pydantic import ValidationError

from vision_insights.cache.blob import BlobStore, JsonFileBlobStore
from vision_insights.config.schema import Settings
from vision_insights.types import CacheEntry, CacheStats

logger = logging.getLogger(__name__)

_DEFAULT_MAX_AGE_MS = 24 * 60 * 60 * 1000
_DEFAULT_MAX_ENTRIES = 200


def _now_ms() -> int:
    return int(time.time() * 1000)


class ResultCache:
    """Fingerprint → analysis result map, written through to a blob store.

    Memory is updated synchronously on every mutation and is authoritative;
    persistence is best-effort. Recency is tracked by the order of the
    underlying ``OrderedDict`` (oldest first), independently of ``created_at``.
    A disabled cache misses every lookup and ignores writes; stored
    entries can still be inspected, invalidated and cleared.
    """

    def __init__(
        self,
        blob_store: BlobStore,
        max_age_ms: int = _DEFAULT_MAX_AGE_MS,
        max_entries: int = _DEFAULT_MAX_ENTRIES,
        clock: Callable[[], int] | None = None,
        enabled: bool = True,
    ) -> None:
        self._blob = blob_store
        self._max_age_ms = max_age_ms
        self._max_entries = max_entries
        self._clock = clock or _now_ms
        self._enabled = enabled
        self._store: OrderedDict[str, CacheEntry] = OrderedDict()
        self._pending: set[asyncio.Task[None]] = set()
        self._load()

    @classmethod
    def from_settings(cls, settings: Settings) -> ResultCache:
        """Cache persisted to the settings' data file."""
        return cls(
            JsonFileBlobStore(settings.data_path),
            max_age_ms=settings.max_age_ms,
            max_entries=settings.max_cache_entries,
            enabled=settings.cache_results,
        )

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def max_age_ms(self) -> int:
        return self._max_age_ms

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def get(self, key: str) -> str | None:
        if not self._enabled:
            return None
        entry = self._store.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock(), self._max_age_ms):
            logger.debug("Cache entry %s expired", key)
            del self._store[key]
            self._persist()
            return None
        # Move to end (most recently used)
        self._store.move_to_end(key)
        return entry.result

    def put(self, key: str, result: str, action: str = "", image_hash: str = "") -> None:
        if not self._enabled:
            return
        self._store[key] = CacheEntry(
            result=result,
            created_at=self._clock(),
            action=str(action),
            image_hash=image_hash,
        )
        self._store.move_to_end(key)
        self._evict_overflow()
        self._persist()

    def invalidate(self, key: str) -> None:
        if self._store.pop(key, None) is not None:
            self._persist()

    def clear(self) -> None:
        self._store.clear()
        self._persist()

    def stats(self) -> CacheStats:
        now = self._clock()
        expired = sum(1 for e in self._store.values() if e.is_expired(now, self._max_age_ms))
        return CacheStats(
            valid=len(self._store) - expired,
            expired=expired,
            total=len(self._store),
        )

    def keys(self) -> list[str]:
        """Keys from least to most recently used."""
        return list(self._store)

    async def flush(self) -> None:
        """Wait for scheduled persistence writes to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: object) -> bool:
        return key in self._store

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._store))

    def _evict_overflow(self) -> None:
        if self._max_entries <= 0:
            return
        while len(self._store) > self._max_entries:
            key, _ = self._store.popitem(last=False)
            logger.debug("Evicted least recently used cache entry %s", key)

    def _load(self) -> None:
        try:
            raw = self._blob.load()
        except Exception as e:
            logger.warning("Failed to load cache, starting empty: %s", e)
            return
        if not raw:
            return

        entries: list[tuple[str, CacheEntry]] = []
        for key, value in raw.items():
            try:
                entries.append((key, CacheEntry.model_validate(value)))
            except ValidationError:
                logger.debug("Skipping malformed cache entry %s", key)

        # Only creation time survives a restart, so it stands in for recency
        entries.sort(key=lambda item: item[1].created_at)
        self._store = OrderedDict(entries)
        logger.debug("Loaded %d cache entries", len(self._store))

    def _serialize(self) -> dict[str, Any]:
        return {key: entry.to_blob() for key, entry in self._store.items()}

    def _persist(self) -> None:
        snapshot = self._serialize()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self._save(snapshot))
            return
        task = loop.create_task(self._save(snapshot))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _save(self, snapshot: dict[str, Any]) -> None:
        try:
            await self._blob.save(snapshot)
        except Exception as e:
            logger.warning("Failed to persist cache (%d entries): %s", len(snapshot), e)
