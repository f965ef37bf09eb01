from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Callable

from .options import AttributeOptions, MappingOptions
from .types import MISSING, AttributeType

# (value, owner instance) -> converted value, or an Ok/Err result
Converter = Callable[[Any, Any], Any]


def _type_name(value: Any) -> str:
    if value is None:
        return ""
    return getattr(value, "__name__", str(value))


@dataclass(frozen=True, slots=True)
class AttributeDefinition:
    """Immutable metadata for one declared attribute.

    Redefining an attribute builds a new definition and replaces the
    registry entry; definitions themselves never change.
    """
    name: str
    kind: AttributeType
    type_class: Any
    sub_type: Any
    allow_nil: bool
    allow_blank: bool
    blank_to_nil: bool
    choices: tuple[Any, ...] | None
    validates: bool
    convert: bool
    strip: bool
    converter: Converter
    default: Any = MISSING
    mapping: MappingOptions | None = None
    schema_name: str | None = None

    @classmethod
    def build(
        cls,
        name: str,
        kind: AttributeType,
        options: AttributeOptions,
        converter: Converter,
        *,
        type_class: Any = None,
    ) -> AttributeDefinition:
        return cls(
            name=name,
            kind=kind,
            type_class=type_class,
            sub_type=options.sub_type,
            allow_nil=options.resolved_allow_nil,
            allow_blank=options.resolved_allow_blank,
            blank_to_nil=options.blank_to_nil,
            choices=options.choices,
            validates=options.validates,
            convert=bool(options.convert),
            strip=options.strip,
            converter=converter,
            default=options.default if options.has_default else MISSING,
            mapping=options.mapping,
            schema_name=options.schema_name,
        )

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING

    def resolve_default(self, owner: Any) -> Any:
        """Literal defaults as-is; classes are called as factories; other callables get the owner."""
        default = self.default
        if default is MISSING:
            return None
        if isinstance(default, type):
            return default()
        if callable(default):
            return default(owner)
        return default

    @property
    def signature(self) -> str:
        return (
            f"'{self.kind.value}' <type: {_type_name(self.type_class)}> "
            f"(subtype: {_type_name(self.sub_type)})"
        )

    def with_mapping(self, mapping: MappingOptions | None) -> AttributeDefinition:
        return replace(self, mapping=mapping)
