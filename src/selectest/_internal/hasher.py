"""Content hasher for selective testing.

A target's hash covers its identity, product, the bytes of its sources,
the hashes of its dependencies (transitively) and the additional strings
given by the caller. Any change below a test target therefore changes
the test target's hash.
"""

from pathlib import Path
from typing import Dict, List, Sequence, Set

from selectest.errors import HashingError
from selectest.kernel.graph import Graph, GraphTarget, TargetReference
from selectest.kernel.hash_utils import hash_file, hash_json

MISSING_SOURCE = "missing"


class ContentGraphHasher:
    """Hashes every target of a graph; results are memoised per call."""

    def hash(self, graph: Graph, additional_strings: Sequence[str]) -> Dict[GraphTarget, str]:
        seeds = list(additional_strings)
        memo: Dict[TargetReference, str] = {}
        hashes: Dict[GraphTarget, str] = {}
        for graph_target in graph.graph_targets():
            hashes[graph_target] = self._target_hash(graph, graph_target, seeds, memo, [])
        return hashes

    def _target_hash(
        self,
        graph: Graph,
        graph_target: GraphTarget,
        seeds: List[str],
        memo: Dict[TargetReference, str],
        stack: List[TargetReference],
    ) -> str:
        reference = graph_target.reference
        if reference in memo:
            return memo[reference]
        if reference in stack:
            cycle = " -> ".join(ref.name for ref in stack + [reference])
            raise HashingError(f"Dependency cycle detected while hashing: {cycle}")

        stack.append(reference)
        dependency_hashes = []
        for dependency in graph_target.target.dependencies:
            dependency_target = graph.graph_target(dependency)
            if dependency_target is None:
                raise HashingError(
                    f"{reference.name} depends on {dependency.name}, which is not part of the graph"
                )
            dependency_hashes.append(
                self._target_hash(graph, dependency_target, seeds, memo, stack)
            )
        stack.pop()

        payload = {
            "name": graph_target.target.name,
            "product": graph_target.target.product,
            "sources": self._source_hashes(graph_target),
            "dependencies": dependency_hashes,
            "additional_strings": seeds,
        }
        memo[reference] = hash_json(payload)
        return memo[reference]

    def _source_hashes(self, graph_target: GraphTarget) -> Dict[str, str]:
        """Map each project-relative source path to the hash of its content."""
        hashes: Dict[str, str] = {}
        seen: Set[str] = set()
        for source in graph_target.target.sources:
            if source in seen:
                continue
            seen.add(source)
            path = Path(source)
            if not path.is_absolute():
                path = graph_target.path / path
            try:
                hashes[source] = hash_file(path) if path.is_file() else MISSING_SOURCE
            except OSError as e:
                raise HashingError(f"Could not read {path}: {e}") from e
        return hashes
