"""Attribute declaration surface.

Attributes are declared in a class body with the factories below; each
returns a ``TypedAttribute`` descriptor that the owning model turns into
an ``AttributeDefinition`` when the class is created:

    class Signup(TypedModel):
        email = attr_string(allow_blank=False, strip=True)
        age = attr_integer(convert=True)
        tags = attr_array(sub_type=Tag, convert=True)

Reading the attribute returns the stored value or the default; assigning
goes through the coercion engine.
"""
from __future__ import annotations

from typing import Any, Callable

from typed_support.core.errors import AppError, Err, ErrorCode, Ok, unsupported_type

from .blank import is_present
from .checks import element_matches
from .coercion import PresenceToBool, active_coercer
from .definition import AttributeDefinition, Converter
from .options import AttributeOptions, parse_options
from .types import PRIMITIVE_TYPES, AttributeType, Symbol, TypedObject

ConverterFactory = Callable[[str, AttributeOptions, Any], Converter]


class TypedAttribute:
    """Descriptor for one declared attribute.

    Holds the raw declaration until the owning class builds the definition;
    at runtime it routes reads and writes through the instance.
    """

    def __init__(
        self,
        kind: AttributeType,
        options: dict[str, Any],
        converter_factory: ConverterFactory,
        *,
        type_class: Any = None,
    ):
        self.kind = kind
        self.options = options
        self.converter_factory = converter_factory
        self.type_class = type_class
        self.name: str | None = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def build(self, owner_name: str, name: str, **overrides: Any) -> AttributeDefinition:
        options = parse_options(name, owner_name, {**self.options, **overrides})
        if options.converter is not None:
            converter = _user_converter(options.converter)
        else:
            converter = self.converter_factory(name, options, self.type_class)
        return AttributeDefinition.build(
            name, self.kind, options, converter, type_class=self.type_class
        )

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return instance.get(self.name)

    def __set__(self, instance: Any, value: Any) -> None:
        instance.set(self.name, value)

    def __repr__(self) -> str:
        return f"<TypedAttribute {self.name} {self.kind.value}>"


def _user_converter(fn: Callable[[Any], Any]) -> Converter:
    return lambda value, owner: fn(value)


def _cannot_convert(value: Any, target: Any) -> Err[AppError]:
    return Err(AppError(
        code=ErrorCode.E2005_CONVERSION_FAILED,
        message=f"Cannot build {getattr(target, '__name__', target)} from {type(value).__name__}",
    ))


# ============================================================================
# Converters per kind
# ============================================================================

def _identity(name: str, options: AttributeOptions, type_class: Any) -> Converter:
    return lambda value, owner: value


def _coerce_to(target: type) -> ConverterFactory:
    def factory(name: str, options: AttributeOptions, type_class: Any) -> Converter:
        return lambda value, owner: active_coercer().coerce(value, target)
    return factory


def _boolean(name: str, options: AttributeOptions, type_class: Any) -> Converter:
    rule = PresenceToBool()
    return lambda value, owner: rule.coerce(value)


def _numeric(name: str, options: AttributeOptions, type_class: Any) -> Converter:
    """Present values become floats; blank values fall back to the default."""
    def convert(value: Any, owner: Any) -> Any:
        if is_present(value):
            return active_coercer().coerce(value, float)
        return Ok(type(owner).attribute_definition(name).resolve_default(owner))
    return convert


def build_member(sub_type: Any, member: Any) -> Any:
    """Turn one raw array member into ``sub_type``."""
    if sub_type is None or element_matches(member, sub_type):
        return member
    if isinstance(sub_type, type) and issubclass(sub_type, TypedObject):
        return sub_type.from_raw(member)
    coercer = active_coercer()
    if isinstance(sub_type, type) and coercer.handles(sub_type):
        return coercer.coerce(member, sub_type).unwrap()
    return sub_type(member)


def _array(name: str, options: AttributeOptions, type_class: Any) -> Converter:
    sub_type = options.sub_type

    def convert(value: Any, owner: Any) -> Any:
        return active_coercer().coerce(value, list).map(
            lambda members: [build_member(sub_type, member) for member in members]
        )
    return convert


def _model(name: str, options: AttributeOptions, type_class: Any) -> Converter:
    sub_type = options.sub_type

    def convert(value: Any, owner: Any) -> Any:
        if isinstance(sub_type, type) and issubclass(sub_type, TypedObject):
            return sub_type.from_raw(value, convert_all=True)
        return _cannot_convert(value, sub_type)
    return convert


def _typed(name: str, options: AttributeOptions, type_class: Any) -> Converter:
    def convert(value: Any, owner: Any) -> Any:
        coercer = active_coercer()
        if coercer.handles(type_class):
            return coercer.coerce(value, type_class)
        if issubclass(type_class, TypedObject):
            return type_class.from_raw(value, convert_all=True)
        return type_class(value)
    return convert


_CONVERTERS: dict[AttributeType, ConverterFactory] = {
    AttributeType.ANY: _identity,
    AttributeType.STRING: _coerce_to(str),
    AttributeType.FLOAT: _coerce_to(float),
    AttributeType.INTEGER: _coerce_to(int),
    AttributeType.NUMERIC: _numeric,
    AttributeType.SYMBOL: _coerce_to(Symbol),
    AttributeType.HASH: _coerce_to(dict),
    AttributeType.BOOLEAN: _boolean,
    AttributeType.ARRAY: _array,
    AttributeType.MODEL: _model,
    AttributeType.TYPED: _typed,
}


def resolve_kind(type_: Any) -> tuple[AttributeType, Any]:
    """Map a declared type to its kind and, for classes, the class itself."""
    if isinstance(type_, AttributeType):
        return type_, None
    if isinstance(type_, str):
        try:
            return AttributeType(type_), None
        except ValueError:
            raise unsupported_type(type_) from None
    if isinstance(type_, type):
        return PRIMITIVE_TYPES.get(type_, AttributeType.TYPED), type_
    raise unsupported_type(type_)


# ============================================================================
# Declaration factories
# ============================================================================

def attribute(
    type_: Any = AttributeType.ANY,
    converter: Callable[[Any], Any] | None = None,
    **options: Any,
) -> TypedAttribute:
    """Declare an attribute of any kind.

    ``type_`` is a kind name (``"any"``, ``"model"``, ...), a primitive
    class (``str``, ``int``, ``float``, ``numbers.Number``, ``Symbol``,
    ``dict``, ``list``, ``bool``) or any other class, which makes the
    attribute ``typed``. ``converter`` replaces the kind's conversion.
    """
    kind, type_class = resolve_kind(type_)
    if converter is not None:
        options["converter"] = converter
    factory = _CONVERTERS.get(kind)
    if factory is None:
        # Kinds handled outside this module provide their own converter.
        factory = _identity
    return TypedAttribute(kind, options, factory, type_class=type_class)


def attr_any(**options: Any) -> TypedAttribute:
    return attribute(AttributeType.ANY, **options)


def attr_hash(**options: Any) -> TypedAttribute:
    return attribute(dict, **options)


def attr_boolean(**options: Any) -> TypedAttribute:
    """Boolean; converts ``"false"`` to False and anything else by presence."""
    return attribute(AttributeType.BOOLEAN, **options)


def attr_string(**options: Any) -> TypedAttribute:
    return attribute(str, **options)


def attr_float(**options: Any) -> TypedAttribute:
    return attribute(float, **options)


def attr_numeric(**options: Any) -> TypedAttribute:
    """Any number; converts present values to float and blanks to the default."""
    return attribute(AttributeType.NUMERIC, **options)


def attr_integer(**options: Any) -> TypedAttribute:
    return attribute(int, **options)


def attr_symbol(**options: Any) -> TypedAttribute:
    return attribute(Symbol, **options)


def attr_array(**options: Any) -> TypedAttribute:
    """List attribute; ``sub_type`` types every element.

    Conversion builds each non-matching element through the element
    type's ``from_raw`` when it is a typed object, or its constructor.
    """
    return attribute(list, **options)


def attr_model(**options: Any) -> TypedAttribute:
    """A typed object or persisted record, optionally restricted to ``sub_type``."""
    return attribute(AttributeType.MODEL, **options)
