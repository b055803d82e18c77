"""
Canonical serialization for root identifier digests.

Every structure that feeds a digest goes through canonical_json_bytes so the
same logical value yields the same bytes on every platform. Floats are refused:
their text form is not stable across encoders, and nothing hashed here needs
them.
"""

import json
from typing import Any


def canonicalize(obj: Any) -> Any:
    """
    Convert nested dict/list data to canonical form.

    Rules:
    - dict keys must be str, sorted by code point
    - tuples converted to lists
    - floats rejected

    Raises:
        ValueError: On float values or non-string keys
    """
    if isinstance(obj, dict):
        for k in obj:
            if not isinstance(k, str):
                raise ValueError(f"Canonical JSON keys must be str, got {type(k).__name__}")
        return {k: canonicalize(obj[k]) for k in sorted(obj)}
    if isinstance(obj, (list, tuple)):
        return [canonicalize(x) for x in obj]
    if isinstance(obj, float):
        raise ValueError("Canonical JSON does not allow floats")
    return obj


def canonical_json_bytes(obj: Any) -> bytes:
    """
    Deterministic UTF-8 JSON bytes for hashing.

    No whitespace between tokens, keys sorted, non-ASCII kept as UTF-8.
    """
    canon = canonicalize(obj)
    s = json.dumps(canon, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return s.encode("utf-8")


def canonical_json_str(obj: Any) -> str:
    """Deterministic JSON string (for display or storage)."""
    return canonical_json_bytes(obj).decode("utf-8")
