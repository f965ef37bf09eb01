"""Blank/present predicates.

Blank: ``None``, ``False``, whitespace-only strings (including ``""``) and
empty mappings, sequences and sets. Numbers, including 0, and other
objects are never blank.
"""
from collections.abc import Mapping, Set
from typing import Any


def is_blank(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (Mapping, Set, list, tuple, bytes)):
        return len(value) == 0
    return False


def is_present(value: Any) -> bool:
    return not is_blank(value)
