"""Cache subsystem — deterministic fingerprints and a TTL/LRU result store."""

from vision_insights.cache.blob import BlobStore, JsonFileBlobStore, MemoryBlobStore
from vision_insights.cache.keys import (
    fingerprint,
    hash_context,
    hash_image,
    hash_prompt,
    rolling_hash,
)
from vision_insights.cache.store import ResultCache

__all__ = [
    "BlobStore",
    "JsonFileBlobStore",
    "MemoryBlobStore",
    "ResultCache",
    "fingerprint",
    "hash_context",
    "hash_image",
    "hash_prompt",
    "rolling_hash",
]
