"""Classify resolved test targets as cache hits or pending.

Two independent answers are combined:
- the cache backend fetch proves an entry exists and where it came from
  (local or remote),
- the selective testing service decides whether the identifier is
  verified for this run.

A target is a hit only when both agree. Everything else stays pending
until it has been executed; "miss" is assigned by the dispatch flow.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Mapping, Optional, Set, Tuple

from ..codes import CacheCategory, CacheSource
from ..errors import MissingHashError
from .cache_item import CacheItem, CacheStorableItem
from .graph import Graph, GraphTarget
from .resolve import Resolution, ResolvedTarget
from .test_identifier import TestIdentifier

if TYPE_CHECKING:
    from ..contracts import CacheStoring, SelectiveTestingServicing


@dataclass(frozen=True)
class TargetClassification:
    """Classification of one resolved target."""
    resolved: ResolvedTarget
    hash: str
    cache_item: Optional[CacheItem]  # None while pending

    @property
    def is_hit(self) -> bool:
        return self.cache_item is not None

    @property
    def name(self) -> str:
        return self.resolved.graph_target.target.name


@dataclass(frozen=True)
class Classification:
    """Per-target classification plus the raw fetch result."""
    entries: Tuple[TargetClassification, ...]
    fetched: Dict[CacheItem, Path]
    verified: Set[TestIdentifier]

    @property
    def hits(self) -> List[TargetClassification]:
        return [entry for entry in self.entries if entry.is_hit]

    @property
    def pending(self) -> List[TargetClassification]:
        return [entry for entry in self.entries if not entry.is_hit]

    @property
    def all_cached(self) -> bool:
        """True when there is at least one candidate and every candidate is a hit."""
        return bool(self.entries) and all(entry.is_hit for entry in self.entries)

    def skippable_identifiers(self) -> List[TestIdentifier]:
        """Identifiers to skip, in declaration order.

        An identifier shared by same-named targets of different projects is
        only skippable when every one of those targets is a hit.
        """
        pending_identifiers = {entry.resolved.identifier for entry in self.pending}
        skippable: List[TestIdentifier] = []
        for entry in self.hits:
            identifier = entry.resolved.identifier
            if identifier in pending_identifiers or identifier in skippable:
                continue
            skippable.append(identifier)
        return skippable


def target_hashes(
    resolution: Resolution, hashes: Mapping[GraphTarget, str]
) -> Dict[ResolvedTarget, str]:
    """Pick the hash of every resolved target.

    Raises:
        MissingHashError: if any resolved target has no hash
    """
    picked: Dict[ResolvedTarget, str] = {}
    missing: List[str] = []
    for resolved in resolution.targets:
        value = hashes.get(resolved.graph_target)
        if value is None:
            missing.append(resolved.graph_target.target.name)
            continue
        picked[resolved] = value
    if missing:
        raise MissingHashError(missing)
    return picked


def classify(
    graph: Graph,
    resolution: Resolution,
    hashes: Mapping[GraphTarget, str],
    cache_storage: "CacheStoring",
    selective_testing_service: "SelectiveTestingServicing",
) -> Classification:
    """Classify every resolved target against the cache.

    Fetch and store errors from the backend propagate unchanged.
    """
    picked = target_hashes(resolution, hashes)

    keys = {
        CacheStorableItem(name=resolved.graph_target.target.name, hash=value)
        for resolved, value in picked.items()
    }
    fetched: Dict[CacheItem, Path] = (
        cache_storage.fetch(keys, cache_category=CacheCategory.SELECTIVE_TESTS) if keys else {}
    )

    verified = set(
        selective_testing_service.cached_tests(
            scheme=resolution.scheme,
            graph=graph,
            selective_testing_hashes=hashes,
            selective_testing_cache_items=set(fetched.keys()),
        )
    )

    by_key: Dict[CacheStorableItem, CacheItem] = {}
    for item in fetched:
        if item.cache_category != CacheCategory.SELECTIVE_TESTS:
            continue
        # Local wins if the backend reports the same entry twice.
        existing = by_key.get(item.storable)
        if existing is None or existing.source != CacheSource.LOCAL:
            by_key[item.storable] = item

    entries = []
    for resolved in resolution.targets:
        value = picked[resolved]
        item = by_key.get(CacheStorableItem(name=resolved.graph_target.target.name, hash=value))
        if item is not None and resolved.identifier not in verified:
            item = None
        entries.append(TargetClassification(resolved=resolved, hash=value, cache_item=item))

    return Classification(entries=tuple(entries), fetched=fetched, verified=verified)
