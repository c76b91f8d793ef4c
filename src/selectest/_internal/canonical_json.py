"""Canonical JSON for files selectest writes.

Cache entry markers and run reports are written through canonical_dumps,
so files written for the same content are byte-identical across platforms.
"""

import json
from enum import Enum
from pathlib import PurePath
from typing import Any, Optional


def _encode(obj: Any) -> Any:
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, PurePath):
        return obj.as_posix()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def canonical_dumps(obj: Any, indent: Optional[int] = None) -> str:
    """
    Canonical JSON serialization: sorted keys, UTF-8, enums as values, paths as POSIX strings.

    Compact separators unless indent is given (reports are indented for reading).
    Lists are written in the order given; callers sort them when order is
    not meaningful.
    """
    return json.dumps(
        obj,
        sort_keys=True,
        indent=indent,
        separators=(",", ":") if indent is None else (",", ": "),
        ensure_ascii=False,
        default=_encode,
    )
