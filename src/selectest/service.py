"""Selective testing around an xcodebuild test invocation.

Flow of XcodeBuildService.run:

1. Resolving: read -scheme/-testPlan from the passthrough arguments, map
   the graph and resolve the candidate test targets. Failures here leave
   the run ledger untouched.
2. Classifying: hash the graph, fetch cache entries and ask the selective
   testing service which identifiers are verified.
3. If every candidate is a hit, stop: xcodebuild is not invoked and nothing
   is stored. The ledger receives the hits with their provenance.
4. Otherwise invoke xcodebuild with a -skip-testing directive per hit.
   Invocation failures propagate; nothing is stored for a failed run.
5. Recording: store an entry for every pending target, then record the
   graph plus skipped hits and executed misses in the ledger. The ledger
   is only written once the run is done.
"""

from pathlib import Path
from typing import AbstractSet, Dict, List, Optional, Sequence

from selectest.codes import CacheCategory, CacheSource
from selectest.contracts import (
    CacheStoring,
    GraphMapping,
    SelectiveTestingGraphHashing,
    SelectiveTestingServicing,
    XcodeBuildControlling,
)
from selectest.kernel.arguments import graph_path, scheme_name, selected_test_plan
from selectest.kernel.cache_item import CacheItem, CacheStorableItem
from selectest.kernel.classify import Classification, TargetClassification, classify
from selectest.kernel.resolve import resolve
from selectest.kernel.run_metadata import RunMetadataStorage
from selectest.kernel.skip_args import compose_skip_arguments
from selectest.kernel.test_identifier import TestIdentifier
from selectest.logging import get_logger

logger = get_logger(__name__)


def ledger_entries(
    entries: Sequence[TargetClassification],
    skipped: AbstractSet[TestIdentifier],
) -> Dict[Path, Dict[str, CacheItem]]:
    """Group classifications by owning project path, then test name.

    Every entry that was executed is recorded as a miss. That includes hits
    whose identifier could not be skipped because a same-named target of
    another project was pending.
    """
    grouped: Dict[Path, Dict[str, CacheItem]] = {}
    for entry in entries:
        item = entry.cache_item
        if item is None or entry.resolved.identifier not in skipped:
            item = CacheItem(
                name=entry.name,
                hash=entry.hash,
                source=CacheSource.MISS,
                cache_category=CacheCategory.SELECTIVE_TESTS,
            )
        grouped.setdefault(entry.resolved.graph_target.path, {})[entry.name] = item
    return grouped


def store_executed(cache_storage: CacheStoring, executed: Sequence[TargetClassification]) -> None:
    """Store one selective testing entry per executed target.

    The entry records that the hash passed; it carries no artifacts.
    """
    items: Dict[CacheStorableItem, List[Path]] = {
        CacheStorableItem(name=entry.name, hash=entry.hash): [] for entry in executed
    }
    if not items:
        return
    cache_storage.store(items, cache_category=CacheCategory.SELECTIVE_TESTS)


class XcodeBuildService:
    """Runs xcodebuild test invocations, skipping test targets that already passed."""

    def __init__(
        self,
        xcode_graph_mapper: GraphMapping,
        xcode_build_controller: XcodeBuildControlling,
        cache_storage: CacheStoring,
        selective_testing_graph_hasher: SelectiveTestingGraphHashing,
        selective_testing_service: SelectiveTestingServicing,
        additional_hash_strings: Sequence[str] = (),
    ):
        self.xcode_graph_mapper = xcode_graph_mapper
        self.xcode_build_controller = xcode_build_controller
        self.cache_storage = cache_storage
        self.selective_testing_graph_hasher = selective_testing_graph_hasher
        self.selective_testing_service = selective_testing_service
        self.additional_hash_strings = list(additional_hash_strings)

    def run(
        self,
        passthrough_xcodebuild_arguments: Sequence[str],
        run_metadata_storage: RunMetadataStorage,
        path: Optional[Path] = None,
    ) -> Classification:
        """Run the invocation with cached test targets skipped.

        Args:
            passthrough_xcodebuild_arguments: Arguments as given to xcodebuild
            run_metadata_storage: Ledger for this run; filled once the run is done
            path: Working directory; defaults to the current directory

        Returns:
            The classification the run acted on

        Raises:
            SchemeNotPassedError: before any graph, hash or cache work
            SchemeNotFoundError, TestPlanNotFoundError, TargetNotFoundError
            MissingHashError: if the hasher did not cover a resolved target
            Any error raised by the cache backend or the build controller
        """
        arguments = list(passthrough_xcodebuild_arguments)
        scheme = scheme_name(arguments)
        test_plan = selected_test_plan(arguments)
        working_directory = path if path is not None else Path.cwd()

        graph = self.xcode_graph_mapper.map(graph_path(arguments, working_directory))
        resolution = resolve(graph, scheme, test_plan)
        logger.info(
            "Resolved test targets",
            scheme=scheme,
            test_plan=test_plan,
            targets=[str(identifier) for identifier in resolution.identifiers],
        )

        hashes = self.selective_testing_graph_hasher.hash(
            graph=graph, additional_strings=self.additional_hash_strings
        )
        classification = classify(
            graph,
            resolution,
            hashes,
            cache_storage=self.cache_storage,
            selective_testing_service=self.selective_testing_service,
        )
        logger.info(
            "Classified test targets",
            hits=[entry.name for entry in classification.hits],
            pending=[entry.name for entry in classification.pending],
        )

        if classification.all_cached:
            logger.info(
                "All tests are cached, skipping xcodebuild",
                scheme=scheme,
                cached=len(classification.entries),
            )
            run_metadata_storage.update_graph(graph)
            run_metadata_storage.update_selective_testing_cache_items(
                ledger_entries(classification.entries, skipped=set(classification.skippable_identifiers()))
            )
            return classification

        skippable = classification.skippable_identifiers()
        xcodebuild_arguments = compose_skip_arguments(arguments, skippable)
        logger.info(
            "Running xcodebuild",
            skipped=[str(identifier) for identifier in skippable],
            arguments=xcodebuild_arguments,
        )
        self.xcode_build_controller.run(arguments=xcodebuild_arguments)

        executed = classification.pending
        store_executed(self.cache_storage, executed)
        logger.info("Stored selective testing results", stored=[entry.name for entry in executed])

        run_metadata_storage.update_graph(graph)
        run_metadata_storage.update_selective_testing_cache_items(
            ledger_entries(classification.entries, skipped=set(skippable))
        )
        return classification
