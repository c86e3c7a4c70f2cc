"""Canonical JSON and hashing utilities."""

import hashlib
import json
import re
from decimal import Decimal
from typing import Any

HASH_SCHEME = "sha256"

_STRONG_HASH_RE = re.compile(r"^sha256:[0-9a-f]{64}$")


def _canonical_value(obj: Any) -> Any:
    """Convert value for canonical representation."""
    if obj is None:
        return None
    if isinstance(obj, bool):
        return obj
    if isinstance(obj, (int, float, Decimal)):
        return float(obj) if isinstance(obj, (float, Decimal)) else int(obj)
    if isinstance(obj, dict):
        return {str(k): _canonical_value(v) for k, v in sorted(obj.items())}
    if isinstance(obj, (list, tuple)):
        return [_canonical_value(v) for v in obj]
    if isinstance(obj, str):
        return obj
    return str(obj)


def canonical_json(obj: Any) -> str:
    """Produce canonical JSON string (sorted keys, consistent formatting)."""
    canonical = _canonical_value(obj)
    return json.dumps(canonical, sort_keys=True, separators=(",", ":"), ensure_ascii=True)


def sha256_digest(obj: Any) -> str:
    """SHA-256 of the canonical JSON of ``obj``, tagged with the scheme prefix."""
    digest = hashlib.sha256(canonical_json(obj).encode("utf-8")).hexdigest()
    return f"{HASH_SCHEME}:{digest}"


def is_strong_hash(value: str) -> bool:
    """True for ``sha256:`` followed by 64 lowercase hex digits."""
    return bool(_STRONG_HASH_RE.match(value or ""))
