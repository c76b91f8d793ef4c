"""Cache entry models exchanged with the cache backend."""

from pydantic import BaseModel, ConfigDict

from ..codes import CacheCategory, CacheSource


class CacheStorableItem(BaseModel):
    """Key of an entry submitted for storage (and of a fetch request)."""
    name: str
    hash: str

    model_config = ConfigDict(frozen=True, extra="forbid")


class CacheItem(BaseModel):
    """A classified cache entry: identity triple plus provenance."""
    name: str
    hash: str
    source: CacheSource
    cache_category: CacheCategory = CacheCategory.SELECTIVE_TESTS

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def storable(self) -> CacheStorableItem:
        return CacheStorableItem(name=self.name, hash=self.hash)
