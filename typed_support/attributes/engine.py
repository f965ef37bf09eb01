"""Coercion & Validation Engine

The write path shared by every attribute:

1. blank -> None when ``blank_to_nil`` is set
2. ``any`` attributes store the value as given
3. presence: None / blank rejected where disallowed
4. type check; on failure, convert (forced or auto) and check again
5. allowed-value set, then trimming

Nothing is stored unless the whole chain succeeds; the caller only writes
the value ``prepare`` returns.
"""
from __future__ import annotations

from typing import Any

from typed_support.core.errors import (
    Err,
    Ok,
    TypedSupportError,
    blank_not_allowed,
    invalid_type,
    nil_not_allowed,
    try_result,
    value_not_allowed,
)
from typed_support.core.logging import attributes_logger

from .blank import is_blank, is_present
from .checks import DEFAULT_TYPE_CHECKER, TypeChecker
from .definition import AttributeDefinition
from .types import AttributeType

log = attributes_logger()


class CoercionEngine:
    def __init__(self, checker: TypeChecker = DEFAULT_TYPE_CHECKER):
        self.checker = checker

    def prepare(
        self,
        owner: Any,
        definition: AttributeDefinition,
        value: Any,
        force_convert: bool = False,
    ) -> Any:
        """Return the value to store for ``definition`` on ``owner``, or raise."""
        owner_name = type(owner).__name__

        if definition.blank_to_nil and is_blank(value):
            value = None

        if definition.kind is AttributeType.ANY:
            return value

        self.check_presence(value, definition, owner_name)

        if self.checker.is_valid(value, definition):
            return self._finish(value, definition, owner_name)

        if not ((force_convert or definition.convert) and value is not None):
            raise invalid_type(definition.name, owner_name, definition.signature, value)

        converted = self._convert(owner, definition, value, owner_name)
        if not self.checker.is_valid(converted, definition):
            raise invalid_type(definition.name, owner_name, definition.signature, value)
        return self._finish(converted, definition, owner_name)

    def check_presence(self, value: Any, definition: AttributeDefinition, owner_name: str) -> None:
        if value is None and not definition.allow_nil:
            raise nil_not_allowed(definition.name, owner_name)
        if not definition.allow_blank and is_blank(value):
            raise blank_not_allowed(definition.name, owner_name)

    def _convert(self, owner: Any, definition: AttributeDefinition, value: Any, owner_name: str) -> Any:
        outcome = try_result(
            lambda: definition.converter(value, owner),
            passthrough=(TypedSupportError,),
        )
        if outcome.is_ok() and isinstance(outcome.value, (Ok, Err)):
            outcome = outcome.value
        if outcome.is_err():
            error = outcome.unwrap_err()
            log.debug(
                "conversion_failed",
                owner=owner_name,
                attribute=definition.name,
                kind=definition.kind.value,
                code=error.code.name,
                reason=error.message,
            )
            raise invalid_type(
                definition.name, owner_name, definition.signature, value, reason=error.message
            ) from error.cause
        return outcome.unwrap()

    def _finish(self, value: Any, definition: AttributeDefinition, owner_name: str) -> Any:
        if definition.choices and value not in definition.choices:
            raise value_not_allowed(definition.name, owner_name, value)
        if definition.strip and isinstance(value, str) and is_present(value):
            value = value.strip()
        return value


DEFAULT_ENGINE = CoercionEngine()
