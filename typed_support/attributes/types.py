"""Attribute kinds and the small value types the engine relies on."""
from __future__ import annotations

import numbers
import weakref
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, ClassVar


class _Missing:
    """Sentinel for "no value" where ``None`` is a legitimate value."""

    _instance: ClassVar[_Missing | None] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


class Symbol(str):
    """Interned identifier value.

    Two live symbols with the same text are the same object, so identity
    comparison works the way it does for enum members. The intern table
    holds weak references; symbols nothing else refers to are released.
    """

    _interned: ClassVar[weakref.WeakValueDictionary[str, Symbol]] = weakref.WeakValueDictionary()

    def __new__(cls, value: str):
        text = str.__str__(value) if isinstance(value, str) else value
        if not isinstance(text, str):
            raise TypeError(f"Symbol requires a string, got {type(value).__name__}")
        existing = cls._interned.get(text)
        if existing is None:
            existing = super().__new__(cls, text)
            cls._interned[text] = existing
        return existing

    def __repr__(self) -> str:
        return f":{str.__str__(self)}"

    def __reduce__(self):
        return (Symbol, (str.__str__(self),))


class AttributeType(str, Enum):
    """Declared type of an attribute."""
    STRING = "string"
    FLOAT = "float"
    INTEGER = "integer"
    NUMERIC = "numeric"
    SYMBOL = "symbol"
    HASH = "hash"
    BOOLEAN = "boolean"
    ARRAY = "array"
    MODEL = "model"
    API_SCHEMA = "api_schema"
    ANY = "any"
    TYPED = "typed"


PRIMITIVE_TYPES: dict[type, AttributeType] = {
    bool: AttributeType.BOOLEAN,
    str: AttributeType.STRING,
    float: AttributeType.FLOAT,
    int: AttributeType.INTEGER,
    numbers.Number: AttributeType.NUMERIC,
    Symbol: AttributeType.SYMBOL,
    dict: AttributeType.HASH,
    list: AttributeType.ARRAY,
}


class TypedObject(ABC):
    """Anything exposing typed-object capabilities.

    Satisfies the ``model`` attribute kind alongside persisted domain
    records.
    """

    @classmethod
    @abstractmethod
    def attribute_names(cls) -> list[str]:
        """Declared attribute names in declaration order."""

    @classmethod
    @abstractmethod
    def from_raw(cls, raw: Any, *, convert_all: bool = False) -> TypedObject:
        """Build an instance from a raw mapping of attribute values."""

    @abstractmethod
    def attributes(self) -> dict[str, Any]:
        """Ordered map of attribute name to current or default value."""

    @abstractmethod
    def is_valid(self) -> bool:
        """Run field validations and report whether none failed."""

    @classmethod
    def _represents(cls, type_: Any) -> bool:
        """Whether instances stand in for ``type_`` as array elements."""
        return False
