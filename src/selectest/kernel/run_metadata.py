"""Run-scoped ledger of selective testing results.

A RunMetadataStorage is created once at the top of a run, handed to the
dispatch flow explicitly, and read by reporting afterwards. It is never
persisted beyond the process and is only complete once the run is done.
"""

from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from .cache_item import CacheItem
from .graph import Graph


class RunMetadataStorage(BaseModel):
    """Graph used by the run plus every classified cache item.

    selective_testing_cache_items: project path -> test name -> CacheItem
    """
    graph: Optional[Graph] = None
    selective_testing_cache_items: Dict[Path, Dict[str, CacheItem]] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")

    def update_graph(self, graph: Graph) -> None:
        self.graph = graph

    def update_selective_testing_cache_items(
        self, cache_items: Mapping[Path, Mapping[str, CacheItem]]
    ) -> None:
        """Merge items per project; other projects' entries are left untouched."""
        for project_path, items in cache_items.items():
            project_items = self.selective_testing_cache_items.setdefault(project_path, {})
            project_items.update(items)

    def to_report(self) -> Dict[str, Any]:
        """JSON-ready view: items sorted by project path, then test name."""
        items = {
            str(project_path): {
                name: self.selective_testing_cache_items[project_path][name].model_dump(mode="json")
                for name in sorted(self.selective_testing_cache_items[project_path])
            }
            for project_path in sorted(self.selective_testing_cache_items, key=str)
        }
        summary: Dict[str, int] = {}
        for project_items in self.selective_testing_cache_items.values():
            for item in project_items.values():
                summary[item.source.value] = summary.get(item.source.value, 0) + 1
        return {
            "graph": self.graph.model_dump(mode="json") if self.graph is not None else None,
            "selective_testing_cache_items": items,
            "summary": summary,
        }
