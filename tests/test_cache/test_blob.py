"""Tests for blob stores."""

import asyncio
import json

import pytest

from vision_insights.cache.blob import JsonFileBlobStore, MemoryBlobStore
from vision_insights.cache.store import ResultCache
from vision_insights.errors.exceptions import PersistenceError


class TestMemoryBlobStore:
    def test_empty_load_returns_none(self):
        assert MemoryBlobStore().load() is None

    def test_save_then_load(self):
        store = MemoryBlobStore()
        asyncio.run(store.save({"k": {"result": "r"}}))
        assert store.load() == {"k": {"result": "r"}}
        assert store.save_count == 1

    def test_load_returns_copy(self):
        store = MemoryBlobStore({"k": {"result": "r"}})
        loaded = store.load()
        loaded["k"]["result"] = "mutated"
        assert store.load()["k"]["result"] == "r"


class TestJsonFileBlobStore:
    def test_missing_file_loads_none(self, tmp_path):
        assert JsonFileBlobStore(tmp_path / "data.json").load() is None

    def test_save_and_load(self, tmp_path):
        store = JsonFileBlobStore(tmp_path / "nested" / "data.json")
        asyncio.run(store.save({"k1": {"result": "r", "createdAt": 1}}))
        assert store.load() == {"k1": {"result": "r", "createdAt": 1}}

    def test_preserves_other_keys(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text(json.dumps({"settings": {"maxCacheAge": 24}}))
        store = JsonFileBlobStore(path)
        asyncio.run(store.save({"k1": {"result": "r"}}))
        document = json.loads(path.read_text())
        assert document["settings"] == {"maxCacheAge": 24}
        assert document["cache"] == {"k1": {"result": "r"}}

    def test_custom_section(self, tmp_path):
        path = tmp_path / "data.json"
        store = JsonFileBlobStore(path, section="results")
        asyncio.run(store.save({}))
        assert json.loads(path.read_text()) == {"results": {}}

    def test_non_mapping_section_ignored(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text(json.dumps({"cache": ["not", "a", "map"]}))
        assert JsonFileBlobStore(path).load() is None

    def test_corrupt_file_raises_persistence_error(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text("{not json")
        with pytest.raises(PersistenceError) as exc_info:
            JsonFileBlobStore(path).load()
        assert exc_info.value.operation == "load"

    def test_cache_survives_restart(self, tmp_path):
        path = tmp_path / "data.json"
        first = ResultCache(JsonFileBlobStore(path))
        first.put("k1", "persistent data", action="smart-summary", image_hash="7")

        second = ResultCache(JsonFileBlobStore(path))
        assert second.get("k1") == "persistent data"

    def test_corrupt_file_does_not_break_cache(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text("{not json")
        cache = ResultCache(JsonFileBlobStore(path))
        cache.put("k1", "r")
        assert cache.get("k1") == "r"
