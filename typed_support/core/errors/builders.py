"""Error Builders

Ergonomic constructors for every failure the engine raises. Each builder
returns the exception (callers ``raise`` it) with the canonical message,
code and metadata.
"""
from typing import Any

from .exceptions import (
    AllowedValueError,
    AttributeTypeError,
    ConfigurationError,
    PresenceError,
)
from .types import ErrorCode


# =============================================================================
# Presence (E2001, E2002)
# =============================================================================

def nil_not_allowed(attribute: str, owner: str) -> PresenceError:
    return PresenceError(
        f"nil is not a valid value for '{attribute}' ({owner})",
        code=ErrorCode.E2001_NIL_NOT_ALLOWED,
        attribute=attribute,
        owner=owner,
    )


def blank_not_allowed(attribute: str, owner: str) -> PresenceError:
    return PresenceError(
        f"Value cannot be blank for '{attribute}' ({owner})",
        code=ErrorCode.E2002_BLANK_NOT_ALLOWED,
        attribute=attribute,
        owner=owner,
    )


# =============================================================================
# Values (E2003, E2004)
# =============================================================================

def value_not_allowed(attribute: str, owner: str, value: Any) -> AllowedValueError:
    return AllowedValueError(
        f"The value '{value}' is not allowed for '{attribute}' ({owner})",
        attribute=attribute,
        owner=owner,
        metadata={"value": repr(value)},
    )


def invalid_type(
    attribute: str,
    owner: str,
    signature: str,
    value: Any,
    *,
    reason: str | None = None,
) -> AttributeTypeError:
    """Type mismatch after any conversion attempt.

    The message names the attribute, the expected type signature and the
    runtime type of the rejected value.
    """
    actual = type(value).__name__
    message = (
        f"The value '{value}' is not a {signature} type for '{attribute}' ({owner}). "
        f"It is <{actual}>"
    )
    meta = {"expected": signature, "actual": actual}
    if reason:
        message = f"{message}: {reason}"
        meta["reason"] = reason
    return AttributeTypeError(message, attribute=attribute, owner=owner, metadata=meta)


# =============================================================================
# Configuration (E9xxx)
# =============================================================================

def unsupported_type(kind: Any, sub_type: Any = None, value: Any = None) -> ConfigurationError:
    return ConfigurationError(
        f"No handling of {kind}[{sub_type}] for {value!r}",
        code=ErrorCode.E9001_UNSUPPORTED_TYPE,
        metadata={"kind": str(kind)},
    )


def unknown_attribute(key: Any, owner: str) -> ConfigurationError:
    return ConfigurationError(
        f"Attribute {key} has no setter method",
        code=ErrorCode.E9002_UNKNOWN_ATTRIBUTE,
        attribute=str(key),
        owner=owner,
    )


def invalid_options(attribute: str | None, owner: str | None, reason: str) -> ConfigurationError:
    return ConfigurationError(
        f"Invalid options for '{attribute}' ({owner}): {reason}",
        code=ErrorCode.E9003_INVALID_OPTION,
        attribute=attribute,
        owner=owner,
    )


def unknown_schema(schema_name: str, owner: str) -> ConfigurationError:
    return ConfigurationError(
        f"No schema named '{schema_name}' is defined on {owner}",
        code=ErrorCode.E9004_UNKNOWN_SCHEMA,
        owner=owner,
        metadata={"schema": schema_name},
    )


def registry_frozen(attribute: str, owner: str) -> ConfigurationError:
    return ConfigurationError(
        f"Cannot declare '{attribute}' on {owner}: its attributes are final once instances exist",
        code=ErrorCode.E9005_REGISTRY_FROZEN,
        attribute=attribute,
        owner=owner,
    )
