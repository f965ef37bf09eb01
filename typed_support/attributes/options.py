"""Structured option records for attribute declarations.

Every recognised option is enumerated with an explicit default; anything
else is rejected when the attribute is declared.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from typed_support.core.errors import invalid_options


class SourceAccess(str, Enum):
    """How a value is read off an external source object."""
    ACCESSOR = "accessor"  # getattr(source, key)
    KEYED = "keyed"  # source[key]


class MappingOptions(BaseModel):
    """Where an attribute lives on a named external source.

    Attributes:
        model: Name of the external source (``from_models`` key)
        attribute: Key on the source, defaults to the attribute name
        to: ``fn(source, context)`` computing the value instead of reading it
        back: ``fn(value, accumulator)`` writing the value back in ``to_model_attributes``
        index: Index/key extracted from the read value
        transform: ``fn(value)`` applied after reading
        compact: Drop ``None`` elements from array values on write-back
        access: Declared read capability of the source; inferred when unset
    """
    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    model: str | None = None
    attribute: str | None = None
    to: Callable[..., Any] | None = None
    back: Callable[..., Any] | None = None
    index: Any = None
    transform: Callable[[Any], Any] | None = None
    compact: bool = False
    access: SourceAccess | None = None

    @field_validator("model", "attribute", mode="before")
    @classmethod
    def _names_as_text(cls, v: Any) -> Any:
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, type):
            return v.__name__
        return str(v)

    def source_key(self, attribute_name: str) -> str:
        return self.attribute or attribute_name


class AttributeOptions(BaseModel):
    """Options accepted by every attribute declaration."""
    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    allow_nil: bool | None = None
    allow_blank: bool | None = None
    blank_to_nil: bool = False
    default: Any = None
    choices: tuple[Any, ...] | None = None
    validates: bool = False
    convert: bool | None = None
    strip: bool = False
    sub_type: Any = None
    mapping: MappingOptions | None = None
    schema_name: str | None = None
    converter: Callable[[Any], Any] | None = None

    @field_validator("choices", mode="before")
    @classmethod
    def _choices_as_tuple(cls, v: Any) -> Any:
        if v is None or isinstance(v, tuple):
            return v
        if isinstance(v, (str, bytes)):
            raise ValueError("choices must be a collection of values")
        return tuple(v)

    @property
    def has_default(self) -> bool:
        return "default" in self.model_fields_set

    @property
    def resolved_allow_nil(self) -> bool:
        """allow_blank=False forbids nil unless nil is explicitly re-permitted."""
        if self.allow_blank is False and self.allow_nil is not True:
            return False
        return True if self.allow_nil is None else self.allow_nil

    @property
    def resolved_allow_blank(self) -> bool:
        return True if self.allow_blank is None else self.allow_blank


def parse_options(attribute: str | None, owner: str | None, options: dict[str, Any]) -> AttributeOptions:
    """Build an AttributeOptions record, reporting bad options as configuration errors."""
    try:
        return AttributeOptions(**options)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in e['loc']) or 'options'}: {e['msg']}" for e in exc.errors()
        )
        raise invalid_options(attribute, owner, problems) from exc
