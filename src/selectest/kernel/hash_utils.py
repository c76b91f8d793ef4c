"""Hash utilities with explicit canonicalization rules for stable hashing.

Key rules:
- Object keys sorted recursively
- Arrays preserve order
- Floats BANNED (hard validation error)
- Strings normalized to NFC
- Non-JSON types forbidden
"""

import hashlib
import json
import unicodedata
from pathlib import Path
from typing import Any, Union

_CHUNK_SIZE = 1024 * 1024


class CanonicalizationError(ValueError):
    """Raised when an object cannot be canonicalized."""
    pass


def _canonicalize_value(obj: Any, path: str = "") -> Any:
    if obj is None or isinstance(obj, bool):
        return obj
    elif isinstance(obj, int):
        return obj
    elif isinstance(obj, float):
        raise CanonicalizationError(
            f"Floats are not allowed in hashed payloads (at {path or '<root>'}). Use strings instead."
        )
    elif isinstance(obj, str):
        return unicodedata.normalize("NFC", obj)
    elif isinstance(obj, dict):
        canonical = {}
        for key, value in obj.items():
            if not isinstance(key, str):
                raise CanonicalizationError(
                    f"Dictionary keys must be strings at {path or '<root>'}, got {type(key).__name__}"
                )
            child = f"{path}.{key}" if path else key
            canonical[unicodedata.normalize("NFC", key)] = _canonicalize_value(value, child)
        return canonical
    elif isinstance(obj, (list, tuple)):
        return [_canonicalize_value(item, f"{path}[{i}]") for i, item in enumerate(obj)]
    else:
        raise CanonicalizationError(
            f"Non-JSON type at {path or '<root>'}: {type(obj).__name__}. "
            f"Only None, bool, int, str, dict, and list are allowed."
        )


def canonicalize_json(obj: Any) -> str:
    """Canonicalize a JSON-compatible object to a stable string.

    Raises:
        CanonicalizationError: If object contains floats or non-JSON types
    """
    canonicalized = _canonicalize_value(obj)
    return json.dumps(canonicalized, sort_keys=True, ensure_ascii=False, separators=(",", ":"))


def hash_json(obj: Any) -> str:
    """SHA256 of the canonical JSON form, prefixed with "sha256:"."""
    digest = hashlib.sha256(canonicalize_json(obj).encode("utf-8")).hexdigest()
    return f"sha256:{digest}"


def hash_content(content: Union[str, bytes]) -> str:
    """SHA256 of raw content, prefixed with "sha256:"."""
    if isinstance(content, str):
        content = content.encode("utf-8")
    return f"sha256:{hashlib.sha256(content).hexdigest()}"


def hash_file(path: Union[str, Path]) -> str:
    """SHA256 of a file's bytes, read in chunks, prefixed with "sha256:"."""
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return f"sha256:{digest.hexdigest()}"
