"""Default selective testing service: a test target is verified when its
current (name, hash) pair is among the fetched cache entries."""

from typing import AbstractSet, List, Mapping, Set

from selectest.codes import CacheCategory
from selectest.kernel.cache_item import CacheItem
from selectest.kernel.graph import Graph, GraphTarget, Scheme, TestableTarget
from selectest.kernel.test_identifier import TestIdentifier


def _scheme_testables(scheme: Scheme) -> List[TestableTarget]:
    """Explicit targets plus the targets of every test plan."""
    test_action = scheme.test_action
    if test_action is None:
        return []
    testables = list(test_action.targets)
    for plan in test_action.test_plans or ():
        testables.extend(plan.test_targets)
    return testables


class HashMatchSelectiveTestingService:

    def cached_tests(
        self,
        scheme: Scheme,
        graph: Graph,
        selective_testing_hashes: Mapping[GraphTarget, str],
        selective_testing_cache_items: AbstractSet[CacheItem],
    ) -> Set[TestIdentifier]:
        available = {
            (item.name, item.hash)
            for item in selective_testing_cache_items
            if item.cache_category == CacheCategory.SELECTIVE_TESTS
        }
        cached: Set[TestIdentifier] = set()
        for testable in _scheme_testables(scheme):
            graph_target = graph.graph_target(testable.target)
            if graph_target is None:
                continue
            target_hash = selective_testing_hashes.get(graph_target)
            if target_hash is None:
                continue
            if (graph_target.target.name, target_hash) in available:
                cached.add(TestIdentifier(target=graph_target.target.name))
        return cached
