"""Reading values off external data sources.

A source is read either by attribute (``getattr``) or by key
(``source[key]``). Mappings default to keyed access and everything else
to attribute access; a mapping declaration can state the access
explicitly. A key the source does not expose reads as ``MISSING``, which
is distinct from a present ``None``.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from typed_support import records
from typed_support.attributes import MISSING, SourceAccess, TypedObject


def default_access(source: Any) -> SourceAccess:
    return SourceAccess.KEYED if isinstance(source, Mapping) else SourceAccess.ACCESSOR


def read(source: Any, key: str, access: SourceAccess | None = None) -> Any:
    """Value of ``key`` on ``source``, or MISSING when the source does not expose it."""
    access = access or default_access(source)
    if access is SourceAccess.KEYED:
        try:
            if key not in source:
                return MISSING
            return source[key]
        except TypeError:
            return MISSING
    if not hasattr(source, key):
        return MISSING
    return getattr(source, key)


def source_snapshot(model: Any) -> dict[str, Any]:
    """Flat name -> value view of a single source object."""
    if model is None:
        return {}
    if records.is_record(model):
        return records.record_attributes(model)
    if isinstance(model, TypedObject):
        return dict(model.attributes())
    if isinstance(model, Mapping):
        return {str(k): v for k, v in model.items()}
    if isinstance(model, BaseModel):
        return dict(model)
    snapshot = getattr(model, "attributes", None)
    if callable(snapshot):
        return dict(snapshot())
    if isinstance(snapshot, Mapping):
        return dict(snapshot)
    return {k: v for k, v in vars(model).items() if not k.startswith("_")}


def persisted_state(model: Any) -> bool:
    """Whether ``model`` stands for stored data."""
    if records.is_record(model):
        return records.is_persisted(model)
    return bool(getattr(model, "persisted", False))
