"""Request parameter shaping.

- ``nested_params``: flat bracketed keys (``user[address][city]``,
  ``tags[]``, ``items[][name]``) from a query string or form body become
  nested dicts and lists
- ``permit``: allow-list filtering against a permitted-key shape, as
  produced by ``FormModel.permitted_keys()``
"""
from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any
from uuid import UUID

from starlette.datastructures import UploadFile

from typed_support.core.logging import forms_logger

log = forms_logger()

_SEGMENT = re.compile(r"\[([^\[\]]*)\]")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")

PERMITTED_SCALARS = (str, int, float, bool, Decimal, date, datetime, time, UUID, UploadFile)

Shape = Sequence[Any]


def param_key(class_name: str) -> str:
    """``SignupForm`` -> ``signup_form``."""
    return _CAMEL_BOUNDARY.sub("_", class_name).lower()


def split_key(key: str) -> list[str]:
    """``a[b][]`` -> ``["a", "b", ""]``."""
    head, bracket, rest = key.partition("[")
    if not bracket:
        return [key]
    return [head, *_SEGMENT.findall(bracket + rest)]


def _pairs(params: Any) -> Iterable[tuple[str, Any]]:
    multi_items = getattr(params, "multi_items", None)
    if callable(multi_items):
        return multi_items()
    if isinstance(params, Mapping):
        return params.items()
    return params


def _store(container: dict[str, Any], path: list[str], value: Any) -> None:
    head, *rest = path
    if not rest:
        container[head] = value
        return

    if rest[0] == "":
        items = container.get(head)
        if not isinstance(items, list):
            items = container[head] = []
        if len(rest) == 1:
            items.append(value)
            return
        # a[][b]=1&a[][b]=2 starts a new element whenever the key repeats
        if not items or not isinstance(items[-1], dict) or rest[1] in items[-1]:
            items.append({})
        _store(items[-1], rest[1:], value)
        return

    child = container.get(head)
    if not isinstance(child, dict):
        child = container[head] = {}
    _store(child, rest, value)


def nested_params(params: Any) -> dict[str, Any]:
    """Expand bracketed keys of a multidict (or mapping, or pair list) into nested data."""
    result: dict[str, Any] = {}
    for key, value in _pairs(params):
        _store(result, split_key(str(key)), value)
    return result


def _is_scalar(value: Any) -> bool:
    return value is None or isinstance(value, PERMITTED_SCALARS)


def _is_index(key: Any) -> bool:
    return isinstance(key, int) or (isinstance(key, str) and key.lstrip("-").isdigit())


def _permit_nested(value: Any, shape: Shape) -> Any:
    if isinstance(value, Mapping):
        if value and all(_is_index(k) for k in value):
            return {k: _filter(v, shape) for k, v in value.items() if isinstance(v, Mapping)}
        return _filter(value, shape)
    if isinstance(value, (list, tuple)):
        return [_filter(v, shape) for v in value if isinstance(v, Mapping)]
    return None


def _filter(params: Mapping[str, Any], shape: Shape) -> dict[str, Any]:
    permitted: dict[str, Any] = {}
    for entry in shape:
        if isinstance(entry, str):
            if entry in params and _is_scalar(params[entry]):
                permitted[entry] = params[entry]
            continue
        for key, sub_shape in entry.items():
            if key not in params:
                continue
            value = params[key]
            if not sub_shape:
                if isinstance(value, (list, tuple)) and all(_is_scalar(v) for v in value):
                    permitted[key] = list(value)
                continue
            nested = _permit_nested(value, sub_shape)
            if nested is not None:
                permitted[key] = nested
    return permitted


def permit(params: Mapping[str, Any], shape: Shape, *, owner: str | None = None) -> dict[str, Any]:
    """Keep only the keys ``shape`` allows.

    Shape entries: ``"name"`` permits a scalar; ``{"name": []}`` permits a
    list of scalars; ``{"name": [...]}`` permits a nested mapping (or a list
    or index-keyed mapping of them) filtered by the inner shape.
    """
    permitted = _filter(params, shape)
    dropped = [str(k) for k in params if k not in permitted]
    if dropped:
        log.debug("unpermitted_parameters", owner=owner, keys=dropped)
    return permitted
