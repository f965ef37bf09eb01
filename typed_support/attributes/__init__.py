"""Typed Attributes

- TypedModel: base class for objects with declared, typed attributes
- attribute / attr_* factories: class-body declarations
- AttributeOptions / MappingOptions: structured declaration options
- CoercionEngine / TypeChecker: the write path
- Errors / validates_each: field-level validation

Usage:
    from typed_support.attributes import TypedModel, attr_integer, attr_string

    class Person(TypedModel):
        name = attr_string(allow_blank=False)
        age = attr_integer(convert=True)
"""
from .types import MISSING, PRIMITIVE_TYPES, AttributeType, Symbol, TypedObject
from .blank import is_blank, is_present
from .options import AttributeOptions, MappingOptions, SourceAccess, parse_options
from .definition import AttributeDefinition, Converter
from .registry import AttributeRegistry
from .coercion import (
    DEFAULT_COERCER,
    LENIENT_COERCER,
    CoercionRule,
    ExplicitCoercion,
    active_coercer,
    coerce,
)
from .checks import DEFAULT_TYPE_CHECKER, TypeChecker, element_matches
from .engine import DEFAULT_ENGINE, CoercionEngine
from .accessors import (
    TypedAttribute,
    attr_any,
    attr_array,
    attr_boolean,
    attr_float,
    attr_hash,
    attr_integer,
    attr_model,
    attr_numeric,
    attr_string,
    attr_symbol,
    attribute,
    resolve_kind,
)
from .validation import Errors, ValidationErrorDetail, validates_each
from .model import TypedModel, attribute_items, to_json_value

__all__ = [
    "MISSING",
    "PRIMITIVE_TYPES",
    "AttributeType",
    "Symbol",
    "TypedObject",
    "is_blank",
    "is_present",
    "AttributeOptions",
    "MappingOptions",
    "SourceAccess",
    "parse_options",
    "AttributeDefinition",
    "Converter",
    "AttributeRegistry",
    "DEFAULT_COERCER",
    "LENIENT_COERCER",
    "CoercionRule",
    "ExplicitCoercion",
    "active_coercer",
    "coerce",
    "DEFAULT_TYPE_CHECKER",
    "TypeChecker",
    "element_matches",
    "DEFAULT_ENGINE",
    "CoercionEngine",
    "TypedAttribute",
    "attr_any",
    "attr_array",
    "attr_boolean",
    "attr_float",
    "attr_hash",
    "attr_integer",
    "attr_model",
    "attr_numeric",
    "attr_string",
    "attr_symbol",
    "attribute",
    "resolve_kind",
    "Errors",
    "ValidationErrorDetail",
    "validates_each",
    "TypedModel",
    "attribute_items",
    "to_json_value",
]
