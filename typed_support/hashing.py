"""Content hash / cache key for typed objects and arbitrary values.

Resolution order:
1. ``cache_key_with_version()`` or ``cache_key()`` when the item has one
2. SQLAlchemy records: ``<table>/<pk>[-<updated_at>]``
3. strings: SHA-1 hex digest of the UTF-8 text
4. anything else: SHA-1 hex digest of its canonical JSON
"""
from __future__ import annotations

import hashlib
import json
import math
from typing import Any

from typed_support import records
from typed_support.attributes.model import to_json_value


def _finite(value: Any) -> Any:
    # NaN and infinities have no JSON literal; hash them by their repr
    if isinstance(value, float) and not math.isfinite(value):
        return repr(value)
    if isinstance(value, dict):
        return {key: _finite(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_finite(item) for item in value]
    return value


def canonical_json_bytes(obj: Any) -> bytes:
    """Deterministic JSON bytes: sorted keys, compact separators.

    Non-finite floats are encoded as the strings ``"nan"``, ``"inf"`` and
    ``"-inf"``.
    """
    raw = json.dumps(
        _finite(to_json_value(obj)),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )
    return raw.encode("utf-8")


def sha1_hex(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


def hashed_key(item: Any) -> str:
    for method_name in ("cache_key_with_version", "cache_key"):
        method = getattr(item, method_name, None)
        if callable(method):
            return str(method())
    if records.is_record(item):
        return records.record_cache_key(item)
    if isinstance(item, str):
        return sha1_hex(item.encode("utf-8"))
    return sha1_hex(canonical_json_bytes(item))
