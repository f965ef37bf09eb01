"""Error Handling

- ErrorCode: error code taxonomy (E2xxx values, E9xxx configuration)
- AppError, Ok, Err, Result: error values used by the coercion rules
- TypedSupportError and its subclasses: what the engine raises
- Builder functions: canonical construction of each failure
- register_error_handlers: FastAPI integration

Usage:
    from typed_support.core.errors import AttributeTypeError, PresenceError

    try:
        form.assign(params)
    except (AttributeTypeError, PresenceError) as exc:
        report(exc.attribute, exc.message)
"""
from .types import (
    AppError,
    Err,
    ErrorCode,
    Ok,
    Result,
    from_exception,
    try_result,
)

from .exceptions import (
    AllowedValueError,
    AttributeTypeError,
    ConfigurationError,
    PresenceError,
    TypedSupportError,
    ValidationFailed,
)

from .builders import (
    blank_not_allowed,
    invalid_options,
    invalid_type,
    nil_not_allowed,
    registry_frozen,
    unknown_attribute,
    unknown_schema,
    unsupported_type,
    value_not_allowed,
)

from .handlers import register_error_handlers

__all__ = [
    "AppError",
    "Err",
    "ErrorCode",
    "Ok",
    "Result",
    "from_exception",
    "try_result",
    "AllowedValueError",
    "AttributeTypeError",
    "ConfigurationError",
    "PresenceError",
    "TypedSupportError",
    "ValidationFailed",
    "blank_not_allowed",
    "invalid_options",
    "invalid_type",
    "nil_not_allowed",
    "registry_frozen",
    "unknown_attribute",
    "unknown_schema",
    "unsupported_type",
    "value_not_allowed",
    "register_error_handlers",
]
