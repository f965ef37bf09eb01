"""Exception Hierarchy

Every failure the engine reports is a ``TypedSupportError`` that also
subclasses the builtin exception kind callers expect (``TypeError``,
``ValueError``, ``NotImplementedError``), so both ``except TypeError`` and
``except TypedSupportError`` work at the boundary.
"""
from __future__ import annotations

from typing import Any, Sequence, TYPE_CHECKING

from .types import AppError, ErrorCode

if TYPE_CHECKING:
    from typed_support.attributes.validation import ValidationErrorDetail


class TypedSupportError(Exception):
    """Base error carrying an error code and the attribute it concerns."""

    default_code: ErrorCode = ErrorCode.E2000_VALIDATION_GENERIC

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode | None = None,
        attribute: str | None = None,
        owner: str | None = None,
        metadata: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.attribute = attribute
        self.owner = owner
        self.metadata = metadata or {}
        super().__init__(message)

    def to_app_error(self) -> AppError:
        meta = {"attribute": self.attribute, "owner": self.owner, **self.metadata}
        return AppError(
            code=self.code,
            message=self.message,
            metadata={k: v for k, v in meta.items() if v is not None},
            cause=self,
        )


class ConfigurationError(TypedSupportError, NotImplementedError):
    """Declaration or lookup problem: unknown type, unknown attribute, bad options."""

    default_code = ErrorCode.E9000_CONFIGURATION_GENERIC


class PresenceError(TypedSupportError, ValueError):
    """nil or blank supplied where the attribute disallows it."""

    default_code = ErrorCode.E2001_NIL_NOT_ALLOWED


class AttributeTypeError(TypedSupportError, TypeError):
    """Value does not satisfy the declared type, even after conversion."""

    default_code = ErrorCode.E2004_INVALID_TYPE


class AllowedValueError(TypedSupportError, ValueError):
    """Value is not a member of the attribute's closed set of choices."""

    default_code = ErrorCode.E2003_VALUE_NOT_ALLOWED


class ValidationFailed(TypedSupportError, ValueError):
    """Field-level validation failed; carries every recorded detail."""

    default_code = ErrorCode.E2000_VALIDATION_GENERIC

    def __init__(self, message: str, details: Sequence[ValidationErrorDetail], **kwargs):
        self.details = list(details)
        super().__init__(message, **kwargs)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        if len(self.details) == 1:
            detail = self.details[0]
            return f"{detail.field_path}: {detail.message}"
        return f"{self.message} ({len(self.details)} errors)"

    def to_app_error(self) -> AppError:
        error = super().to_app_error()
        return error.with_metadata(errors=[d.to_dict() for d in self.details])
