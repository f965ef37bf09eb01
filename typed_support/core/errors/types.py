"""Error Codes and Result Types

Result/Either types for composable error propagation inside the coercion
rules, plus the error code taxonomy shared by every exception the library
raises.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Generic, NoReturn, TypeVar, Union, final

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E", bound="AppError")


class ErrorCode(Enum):
    """Hierarchical error code taxonomy.

    E2xxx: Value errors (presence, type, allowed values, conversion)
    E9xxx: Configuration errors (declarations, unknown attributes, schemas)
    """
    # Values (E2xxx)
    E2000_VALIDATION_GENERIC = 2000
    E2001_NIL_NOT_ALLOWED = 2001
    E2002_BLANK_NOT_ALLOWED = 2002
    E2003_VALUE_NOT_ALLOWED = 2003
    E2004_INVALID_TYPE = 2004
    E2005_CONVERSION_FAILED = 2005
    E2006_INVALID_FORMAT = 2006

    # Configuration (E9xxx)
    E9000_CONFIGURATION_GENERIC = 9000
    E9001_UNSUPPORTED_TYPE = 9001
    E9002_UNKNOWN_ATTRIBUTE = 9002
    E9003_INVALID_OPTION = 9003
    E9004_UNKNOWN_SCHEMA = 9004
    E9005_REGISTRY_FROZEN = 9005

    @property
    def http_status(self) -> int:
        """Map error code to an HTTP status for boundary handlers."""
        code = self.value
        if code == 2000:
            return 422
        if 2000 <= code < 3000:
            return 400
        if code == 9002:
            return 400
        return 500

    @property
    def category(self) -> str:
        """Human-readable error category."""
        if 2000 <= self.value < 3000:
            return "validation"
        return "configuration"


@dataclass(frozen=True, slots=True)
class AppError:
    """Error value carried by Err.

    Carries the typed code, a message, structured metadata and the
    exception that caused it, if any.
    """
    code: ErrorCode
    message: str
    metadata: dict = field(default_factory=dict)
    cause: Exception | None = None

    def with_metadata(self, **kwargs) -> AppError:
        """Create new error with additional metadata."""
        return AppError(
            code=self.code,
            message=self.message,
            metadata={**self.metadata, **kwargs},
            cause=self.cause,
        )

    def to_dict(self) -> dict:
        """Serialize error for API responses."""
        return {
            "error": {
                "code": self.code.name,
                "code_num": self.code.value,
                "message": self.message,
                "category": self.code.category,
                "metadata": self.metadata,
            }
        }

    def __str__(self) -> str:
        return f"[{self.code.name}] {self.message}"


@final
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Success variant of Result."""
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Result[U, AppError]:
        """Transform the success value."""
        return Ok(f(self.value))


@final
@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failure variant of Result. Wraps an AppError."""
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        raise ValueError(f"Called unwrap on Err: {self.error}")

    def unwrap_err(self) -> E:
        return self.error

    def map(self, f: Callable[[T], U]) -> Result[U, E]:
        return self  # type: ignore


Result = Union[Ok[T], Err[E]]


def from_exception(
    exc: Exception,
    code: ErrorCode = ErrorCode.E2005_CONVERSION_FAILED,
    message: str | None = None,
    **metadata,
) -> Err[AppError]:
    """Convert exception to Err, keeping the exception as cause."""
    return Err(AppError(code=code, message=message or str(exc), metadata=metadata, cause=exc))


def try_result(
    f: Callable[[], T],
    code: ErrorCode = ErrorCode.E2005_CONVERSION_FAILED,
    catch: tuple[type[Exception], ...] = (TypeError, ValueError, ArithmeticError),
    passthrough: tuple[type[Exception], ...] = (),
) -> Result[T, AppError]:
    """Execute function and wrap its outcome.

    Only the exception types in ``catch`` become Err; anything else, and
    anything matching ``passthrough``, propagates to the caller.
    """
    try:
        return Ok(f())
    except passthrough:
        raise
    except catch as e:
        return from_exception(e, code=code)
