"""selectest: selective test caching for xcodebuild test invocations."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("selectest")
except PackageNotFoundError:
    __version__ = "dev"

# Public API exports
from selectest.service import XcodeBuildService
from selectest.kernel.run_metadata import RunMetadataStorage
from selectest.kernel.cache_item import CacheItem, CacheStorableItem
from selectest.kernel.test_identifier import TestIdentifier
from selectest.codes import CacheCategory, CacheSource
from selectest.errors import (
    SelectestError,
    SchemeNotPassedError,
    SchemeNotFoundError,
)

__all__ = [
    "__version__",
    "XcodeBuildService",
    "RunMetadataStorage",
    "CacheItem",
    "CacheStorableItem",
    "TestIdentifier",
    "CacheCategory",
    "CacheSource",
    "SelectestError",
    "SchemeNotPassedError",
    "SchemeNotFoundError",
]
