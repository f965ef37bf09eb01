"""Type-compatibility checks for each attribute kind."""
from __future__ import annotations

import numbers
from collections.abc import Mapping
from types import SimpleNamespace
from typing import Any, Callable, ClassVar

from typed_support import records
from typed_support.core.errors import unsupported_type

from .definition import AttributeDefinition
from .types import AttributeType, Symbol, TypedObject


def _is_numeric_type(sub_type: Any) -> bool:
    return isinstance(sub_type, type) and issubclass(sub_type, numbers.Number)


def element_matches(element: Any, sub_type: Any) -> bool:
    """Array element check: an instance of ``sub_type``, or a typed object standing in for it.

    Booleans only match a numeric ``sub_type`` when it is ``bool`` itself.
    """
    if isinstance(element, bool) and sub_type is not bool and _is_numeric_type(sub_type):
        return False
    if isinstance(sub_type, type) and isinstance(element, sub_type):
        return True
    return isinstance(element, TypedObject) and type(element)._represents(sub_type)


class TypeChecker:
    """Decides whether a value satisfies an attribute definition.

    Subclasses extend ``checks`` with additional kinds; an unknown kind is
    a configuration error.
    """

    checks: ClassVar[dict[AttributeType, str]] = {
        AttributeType.BOOLEAN: "_check_boolean",
        AttributeType.STRING: "_check_string",
        AttributeType.FLOAT: "_check_float",
        AttributeType.INTEGER: "_check_integer",
        AttributeType.NUMERIC: "_check_numeric",
        AttributeType.SYMBOL: "_check_symbol",
        AttributeType.HASH: "_check_hash",
        AttributeType.ARRAY: "_check_array",
        AttributeType.MODEL: "_check_model",
        AttributeType.TYPED: "_check_typed",
    }

    def is_valid(self, value: Any, definition: AttributeDefinition) -> bool:
        if value is None and definition.allow_nil:
            return True
        method_name = self.checks.get(definition.kind)
        if method_name is None:
            raise unsupported_type(definition.kind.value, definition.sub_type, value)
        check: Callable[[Any, AttributeDefinition], bool] = getattr(self, method_name)
        return check(value, definition)

    def _check_boolean(self, value: Any, definition: AttributeDefinition) -> bool:
        return value is True or value is False

    def _check_string(self, value: Any, definition: AttributeDefinition) -> bool:
        return isinstance(value, str)

    def _check_float(self, value: Any, definition: AttributeDefinition) -> bool:
        return isinstance(value, float)

    def _check_integer(self, value: Any, definition: AttributeDefinition) -> bool:
        return isinstance(value, int) and not isinstance(value, bool)

    def _check_numeric(self, value: Any, definition: AttributeDefinition) -> bool:
        return isinstance(value, numbers.Number) and not isinstance(value, bool)

    def _check_symbol(self, value: Any, definition: AttributeDefinition) -> bool:
        return isinstance(value, Symbol)

    def _check_hash(self, value: Any, definition: AttributeDefinition) -> bool:
        return isinstance(value, (Mapping, SimpleNamespace))

    def _check_array(self, value: Any, definition: AttributeDefinition) -> bool:
        if not isinstance(value, (list, tuple)):
            return False
        sub_type = definition.sub_type
        if sub_type is None:
            return True
        return all(element_matches(element, sub_type) for element in value)

    def _check_model(self, value: Any, definition: AttributeDefinition) -> bool:
        is_model = isinstance(value, TypedObject) or records.is_record(value)
        if definition.sub_type is not None:
            return is_model and isinstance(value, definition.sub_type)
        return is_model

    def _check_typed(self, value: Any, definition: AttributeDefinition) -> bool:
        return isinstance(value, definition.type_class)


DEFAULT_TYPE_CHECKER = TypeChecker()
