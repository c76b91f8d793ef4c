"""Tests for the local directory cache backend."""

import json

import pytest

from selectest._internal.cache.local import ENTRY_FILENAME, LocalCacheStorage
from selectest.codes import CacheCategory, CacheSource
from selectest.errors import CacheStorageError
from selectest.kernel.cache_item import CacheItem, CacheStorableItem

A = CacheStorableItem(name="AUnitTests", hash="sha256:aaa")
B = CacheStorableItem(name="BUnitTests", hash="sha256:bbb")


def test_fetch_on_empty_cache_finds_nothing(tmp_path):
    storage = LocalCacheStorage(tmp_path)

    assert storage.fetch({A, B}, CacheCategory.SELECTIVE_TESTS) == {}


def test_stored_entries_are_fetched_as_local(tmp_path):
    storage = LocalCacheStorage(tmp_path)
    storage.store({A: []}, CacheCategory.SELECTIVE_TESTS)

    fetched = storage.fetch({A, B}, CacheCategory.SELECTIVE_TESTS)

    item = CacheItem(
        name="AUnitTests",
        hash="sha256:aaa",
        source=CacheSource.LOCAL,
        cache_category=CacheCategory.SELECTIVE_TESTS,
    )
    assert fetched == {item: storage.entry_directory(A, CacheCategory.SELECTIVE_TESTS)}


def test_entries_are_scoped_by_category_and_hash(tmp_path):
    storage = LocalCacheStorage(tmp_path)
    storage.store({A: []}, CacheCategory.SELECTIVE_TESTS)

    assert storage.fetch({A}, CacheCategory.BINARIES) == {}
    assert storage.fetch({CacheStorableItem(name="AUnitTests", hash="sha256:other")},
                         CacheCategory.SELECTIVE_TESTS) == {}


def test_entry_marker_content(tmp_path):
    storage = LocalCacheStorage(tmp_path)
    storage.store({A: []}, CacheCategory.SELECTIVE_TESTS)

    entry = json.loads(
        (storage.entry_directory(A, CacheCategory.SELECTIVE_TESTS) / ENTRY_FILENAME).read_text(encoding="utf-8")
    )

    assert entry["name"] == "AUnitTests"
    assert entry["hash"] == "sha256:aaa"
    assert entry["artifacts"] == []
    assert entry["cache_category"] == "selective_tests"


def test_artifacts_are_copied(tmp_path):
    artifact = tmp_path / "Result.xcresult.json"
    artifact.write_text("{}", encoding="utf-8")
    storage = LocalCacheStorage(tmp_path / "cache")

    storage.store({B: [artifact]}, CacheCategory.BINARIES)

    directory = storage.entry_directory(B, CacheCategory.BINARIES)
    assert (directory / "Result.xcresult.json").read_text(encoding="utf-8") == "{}"


def test_invalid_name_rejected(tmp_path):
    storage = LocalCacheStorage(tmp_path)

    with pytest.raises(CacheStorageError):
        storage.store({CacheStorableItem(name="../escape", hash="h"): []}, CacheCategory.SELECTIVE_TESTS)


def test_unwritable_root_raises_cache_storage_error(tmp_path):
    root = tmp_path / "file"
    root.write_text("not a directory", encoding="utf-8")
    storage = LocalCacheStorage(root)

    with pytest.raises(CacheStorageError):
        storage.store({A: []}, CacheCategory.SELECTIVE_TESTS)
