"""SQLAlchemy adapter for persisted domain records.

A "record" is an instance of a SQLAlchemy mapped class. Records satisfy
``model`` attributes, can be snapshotted by ``FormModel.from_model`` and
carry their own cache key.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.orm import InstanceState


def instance_state(obj: Any) -> InstanceState | None:
    if obj is None or isinstance(obj, type):
        return None
    try:
        state = inspect(obj)
    except NoInspectionAvailable:
        return None
    return state if isinstance(state, InstanceState) else None


def is_record(obj: Any) -> bool:
    return instance_state(obj) is not None


def is_persisted(obj: Any) -> bool:
    """True once the record has been flushed to the database."""
    state = instance_state(obj)
    return bool(state is not None and (state.persistent or state.detached))


def record_attributes(obj: Any) -> dict[str, Any]:
    """Column values of a record keyed by mapped attribute name."""
    state = instance_state(obj)
    if state is None:
        return {}
    return {prop.key: getattr(obj, prop.key) for prop in state.mapper.column_attrs}


def record_cache_key(obj: Any) -> str:
    """``<table>/<pk>`` or ``<table>/new``, suffixed with ``-<updated_at>`` when tracked."""
    state = instance_state(obj)
    if state is None:
        raise TypeError(f"{type(obj).__name__} is not a mapped record")
    table = getattr(state.mapper.local_table, "name", None) or type(obj).__name__.lower()
    identity = state.identity
    key = f"{table}/{'-'.join(str(part) for part in identity)}" if identity else f"{table}/new"
    updated_at = getattr(obj, "updated_at", None)
    if isinstance(updated_at, datetime):
        key = f"{key}-{updated_at.strftime('%Y%m%d%H%M%S%f')}"
    return key
