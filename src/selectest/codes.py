"""Cache constants for selectest.

These enums keep cache categories and provenance tags from being
stringly-typed across collaborators.
"""

from enum import Enum


class CacheCategory(str, Enum):
    """Namespace partitions of the cache backend."""

    BINARIES = "binaries"
    SELECTIVE_TESTS = "selective_tests"


class CacheSource(str, Enum):
    """Where a cache classification came from.

    LOCAL and REMOTE are reported by the backend on fetch. MISS is only
    assigned by the dispatch flow after a target was executed.
    """

    LOCAL = "local"
    REMOTE = "remote"
    MISS = "miss"
