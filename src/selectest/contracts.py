"""Boundary contracts for the collaborators the dispatch flow drives.

Implementations are injected into XcodeBuildService; bundled defaults
live in selectest._internal and tests substitute in-memory fakes.
"""

from pathlib import Path
from typing import AbstractSet, Dict, Mapping, Protocol, Sequence, Set

from selectest.codes import CacheCategory
from selectest.kernel.cache_item import CacheItem, CacheStorableItem
from selectest.kernel.graph import Graph, GraphTarget, Scheme
from selectest.kernel.test_identifier import TestIdentifier


class GraphMapping(Protocol):
    """Loads the build description found at a path."""

    def map(self, path: Path) -> Graph:
        """Raises GraphMappingError on malformed descriptions."""
        ...


class SelectiveTestingGraphHashing(Protocol):
    """Computes a content hash for every target of a graph."""

    def hash(self, graph: Graph, additional_strings: Sequence[str]) -> Dict[GraphTarget, str]:
        ...


class SelectiveTestingServicing(Protocol):
    """Decides which test identifiers are verified as already passing."""

    def cached_tests(
        self,
        scheme: Scheme,
        graph: Graph,
        selective_testing_hashes: Mapping[GraphTarget, str],
        selective_testing_cache_items: AbstractSet[CacheItem],
    ) -> Set[TestIdentifier]:
        ...


class CacheStoring(Protocol):
    """Cache backend. Retries, if any, are the backend's concern."""

    def fetch(
        self, items: AbstractSet[CacheStorableItem], cache_category: CacheCategory
    ) -> Dict[CacheItem, Path]:
        """Return the available entries with their provenance and location."""
        ...

    def store(
        self, items: Mapping[CacheStorableItem, Sequence[Path]], cache_category: CacheCategory
    ) -> None:
        ...


class XcodeBuildControlling(Protocol):
    """Runs the underlying build tool; raises on a non-zero exit."""

    def run(self, arguments: Sequence[str]) -> None:
        ...
