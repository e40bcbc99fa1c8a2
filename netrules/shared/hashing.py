"""
Canonical JSON for rule payloads.

Condition objects are compared structurally: two payloads are equal when their
canonical JSON is identical. Key order is normalized, list order is not.
"""

import hashlib
import json
from typing import Any

# Store-managed timestamps, left out of snapshot hashes
VOLATILE_FIELDS = frozenset([
    "created_at",
    "updated_at",
    "createdAt",
    "updatedAt",
])


def canonicalize(obj: Any, exclude_volatile: bool = True) -> str:
    """
    Convert object to canonical JSON string.
    Deterministic: same input always produces same output.
    """
    def _clean(o: Any) -> Any:
        if isinstance(o, dict):
            return {
                str(k): _clean(v)
                for k, v in sorted(o.items(), key=lambda item: str(item[0]))
                if not (exclude_volatile and k in VOLATILE_FIELDS)
            }
        elif isinstance(o, (list, tuple)):
            return [_clean(i) for i in o]
        elif isinstance(o, float):
            # Normalize floats to avoid precision issues
            return round(o, 10)
        return o

    cleaned = _clean(obj)
    return json.dumps(cleaned, sort_keys=True, separators=(',', ':'), ensure_ascii=True, default=str)


def canonicalize_and_hash(obj: Any, exclude_volatile: bool = True) -> str:
    """
    Returns: "sha256:<64-char-hex>"
    """
    canonical = canonicalize(obj, exclude_volatile)
    digest = hashlib.sha256(canonical.encode('utf-8')).hexdigest()
    return f"sha256:{digest}"


def structurally_equal(left: Any, right: Any) -> bool:
    """True when both payloads canonicalize to the same JSON."""
    return canonicalize(left, exclude_volatile=False) == canonicalize(right, exclude_volatile=False)
