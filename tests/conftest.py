"""Pytest configuration and in-memory fakes for selectest collaborators.

No sys.path hacks - tests should import from installed selectest package.
"""

from pathlib import Path
from typing import Dict, List, Optional

import pytest
import structlog

from selectest.config import get_settings
from selectest.kernel.cache_item import CacheItem
from selectest.kernel.graph import (
    Graph,
    GraphTarget,
    Project,
    Scheme,
    Target,
    TargetReference,
    TestAction,
    TestableTarget,
)


class FakeGraphMapper:
    def __init__(self, graph: Optional[Graph] = None):
        self.graph = graph
        self.calls: List[Path] = []

    def map(self, path):
        self.calls.append(path)
        if self.graph is None:
            raise AssertionError("graph mapper called without a configured graph")
        return self.graph


class FakeHasher:
    def __init__(self, hashes: Optional[Dict[GraphTarget, str]] = None):
        self.hashes = hashes or {}
        self.calls: List[dict] = []

    def hash(self, graph, additional_strings):
        self.calls.append({"graph": graph, "additional_strings": list(additional_strings)})
        return dict(self.hashes)


class FakeSelectiveTestingService:
    def __init__(self, cached=None):
        self.cached = set(cached or ())
        self.calls: List[dict] = []

    def cached_tests(self, scheme, graph, selective_testing_hashes, selective_testing_cache_items):
        self.calls.append({
            "scheme": scheme,
            "graph": graph,
            "hashes": dict(selective_testing_hashes),
            "cache_items": set(selective_testing_cache_items),
        })
        return set(self.cached)


class FakeCacheStorage:
    def __init__(self, fetched: Optional[Dict[CacheItem, Path]] = None, error_on: Optional[dict] = None):
        self.fetched = fetched or {}
        self.error_on = error_on or {}
        self.fetch_calls: List[dict] = []
        self.store_calls: List[dict] = []

    def fetch(self, items, cache_category):
        self.fetch_calls.append({"items": set(items), "cache_category": cache_category})
        if "fetch" in self.error_on:
            raise self.error_on["fetch"]
        return dict(self.fetched)

    def store(self, items, cache_category):
        self.store_calls.append({
            "items": {key: list(value) for key, value in items.items()},
            "cache_category": cache_category,
        })
        if "store" in self.error_on:
            raise self.error_on["store"]


class FakeXcodeBuildController:
    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.calls: List[List[str]] = []

    def run(self, arguments):
        self.calls.append(list(arguments))
        if self.error is not None:
            raise self.error


def make_testable(project_path: Path, name: str, **kwargs) -> TestableTarget:
    return TestableTarget(target=TargetReference(project_path=project_path, name=name), **kwargs)


def app_project(path: Path, target_names=("AUnitTests", "BUnitTests"), scheme_name: str = "App") -> Project:
    """Project with one scheme testing every given target."""
    return Project(
        path=path,
        targets=tuple(Target(name=name) for name in target_names),
        schemes=(
            Scheme(
                name=scheme_name,
                test_action=TestAction(
                    targets=tuple(make_testable(path, name) for name in target_names)
                ),
            ),
        ),
    )


@pytest.fixture(autouse=True)
def reset_logging_and_settings():
    yield
    structlog.reset_defaults()
    get_settings.cache_clear()


@pytest.fixture
def graph_mapper():
    return FakeGraphMapper()


@pytest.fixture
def hasher():
    return FakeHasher()


@pytest.fixture
def selective_testing_service():
    return FakeSelectiveTestingService()


@pytest.fixture
def cache_storage():
    return FakeCacheStorage()


@pytest.fixture
def xcode_build_controller():
    return FakeXcodeBuildController()
