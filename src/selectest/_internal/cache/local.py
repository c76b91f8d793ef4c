"""Local directory cache backend.

Layout::

    <root>/<category>/<name>/<hash>/entry.json
    <root>/<category>/<name>/<hash>/<artifacts...>

Selective testing entries carry no artifacts; the presence of entry.json
records that the hash passed.
"""

import os
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import AbstractSet, Dict, Mapping, Sequence

from selectest._internal.canonical_json import canonical_dumps
from selectest.codes import CacheCategory, CacheSource
from selectest.errors import CacheStorageError
from selectest.kernel.cache_item import CacheItem, CacheStorableItem
from selectest.logging import get_logger

ENTRY_FILENAME = "entry.json"

logger = get_logger(__name__)


def _safe_component(value: str, what: str) -> str:
    if not value or value in (".", "..") or "/" in value or "\\" in value or "\0" in value:
        raise CacheStorageError(f"Invalid cache {what}: {value!r}")
    return value.replace(":", "-")


class LocalCacheStorage:
    """Cache backend rooted at a local directory."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def entry_directory(self, item: CacheStorableItem, cache_category: CacheCategory) -> Path:
        return (
            self.root
            / cache_category.value
            / _safe_component(item.name, "name")
            / _safe_component(item.hash, "hash")
        )

    def fetch(
        self, items: AbstractSet[CacheStorableItem], cache_category: CacheCategory
    ) -> Dict[CacheItem, Path]:
        found: Dict[CacheItem, Path] = {}
        for item in sorted(items, key=lambda i: (i.name, i.hash)):
            directory = self.entry_directory(item, cache_category)
            if not (directory / ENTRY_FILENAME).is_file():
                continue
            found[
                CacheItem(
                    name=item.name,
                    hash=item.hash,
                    source=CacheSource.LOCAL,
                    cache_category=cache_category,
                )
            ] = directory
        logger.debug("Fetched local cache entries", requested=len(items), found=len(found))
        return found

    def store(
        self, items: Mapping[CacheStorableItem, Sequence[Path]], cache_category: CacheCategory
    ) -> None:
        for item, artifacts in items.items():
            directory = self.entry_directory(item, cache_category)
            try:
                directory.mkdir(parents=True, exist_ok=True)
                stored = []
                for artifact in artifacts:
                    artifact = Path(artifact)
                    destination = directory / artifact.name
                    if artifact.is_dir():
                        shutil.copytree(artifact, destination, dirs_exist_ok=True)
                    else:
                        shutil.copy2(artifact, destination)
                    stored.append(artifact.name)
                self._write_entry(directory, {
                    "name": item.name,
                    "hash": item.hash,
                    "cache_category": cache_category.value,
                    "artifacts": sorted(stored),
                    "stored_at": datetime.now(timezone.utc).isoformat(),
                })
            except OSError as e:
                raise CacheStorageError(f"Could not store {item.name} in {directory}: {e}") from e
        logger.debug("Stored local cache entries", count=len(items), category=cache_category.value)

    def _write_entry(self, directory: Path, entry: dict) -> None:
        """Write entry.json atomically so a partial write never reads as a hit."""
        fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=".entry-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(canonical_dumps(entry) + "\n")
            os.replace(tmp_name, directory / ENTRY_FILENAME)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
