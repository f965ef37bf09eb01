"""Explicit Coercion Rules

Conversion of out-of-type values into an attribute's declared type. Each
rule names the target type it produces and returns a Result, never
raising for bad input; the engine decides what a failed conversion means
for the attribute.

Numeric policy:
- strict (default): integers accept ints, truncated floats/Decimals and
  strings holding an integer literal; floats accept numbers and finite
  float literals. Anything else is an Err.
- lenient (``LENIENT_NUMBERS``): strings are parsed by their leading
  numeric prefix, falling back to 0 / 0.0.

Booleans never convert to numbers.
"""
from __future__ import annotations

import math
import numbers
import re
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from decimal import Decimal, InvalidOperation
from types import SimpleNamespace
from typing import Any, Generic, TypeVar
from uuid import UUID

from typed_support.core.config import get_settings
from typed_support.core.errors import AppError, Err, ErrorCode, Ok, Result

from .blank import is_present
from .types import Symbol, TypedObject

T = TypeVar("T")
S = TypeVar("S")

_INT_PREFIX = re.compile(r"\s*([+-]?\d+(?:_\d+)*)")
_FLOAT_PREFIX = re.compile(r"\s*([+-]?\d+(?:_\d+)*(?:\.\d+(?:_\d+)*)?(?:[eE][+-]?\d+)?)")


def _type_mismatch(value: Any, target: str) -> Err[AppError]:
    return Err(AppError(
        code=ErrorCode.E2004_INVALID_TYPE,
        message=f"Cannot coerce {type(value).__name__} to {target}",
        metadata={"source_type": type(value).__name__, "target_type": target},
    ))


def _bad_format(value: Any, target: str, reason: Any) -> Err[AppError]:
    return Err(AppError(
        code=ErrorCode.E2006_INVALID_FORMAT,
        message=f"Cannot coerce '{value}' to {target}: {reason}",
        metadata={"value": repr(value), "target": target},
    ))


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Number) and not isinstance(value, bool)


@dataclass(frozen=True, slots=True)
class CoercionRule(ABC, Generic[S, T]):
    """Base class for coercion rules.

    Each rule defines:
    - Source type(s) it can coerce from
    - Target type it coerces to
    - Validation of coercion feasibility
    - The actual coercion logic
    """

    @property
    @abstractmethod
    def source_types(self) -> tuple[type, ...]:
        """Types this rule can coerce from."""

    @property
    @abstractmethod
    def target_type(self) -> type[T]:
        """Type this rule coerces to."""

    def can_coerce(self, value: Any) -> bool:
        return isinstance(value, self.source_types) and not isinstance(value, bool)

    @abstractmethod
    def coerce(self, value: Any) -> Result[T, AppError]:
        """Coerce value to target type. Returns Result."""

    def __call__(self, value: Any) -> Result[T, AppError]:
        return self.coerce(value)


# ============================================================================
# Numbers
# ============================================================================

@dataclass(frozen=True, slots=True)
class StringToInt(CoercionRule[str, int]):
    """Coerce string to integer.

    Strict mode accepts integer literals only; lenient mode reads the
    leading digits and yields 0 when there are none.
    """
    lenient: bool = False

    @property
    def source_types(self) -> tuple[type, ...]:
        return (str,)

    @property
    def target_type(self) -> type[int]:
        return int

    def coerce(self, value: Any) -> Result[int, AppError]:
        if not isinstance(value, str):
            return _type_mismatch(value, "int")
        if self.lenient:
            match = _INT_PREFIX.match(value)
            return Ok(int(match.group(1)) if match else 0)
        try:
            return Ok(int(value.strip()))
        except ValueError as e:
            return _bad_format(value, "int", e)


@dataclass(frozen=True, slots=True)
class NumberToInt(CoercionRule[numbers.Real, int]):
    """Truncate a real number towards zero."""

    @property
    def source_types(self) -> tuple[type, ...]:
        return (numbers.Real, Decimal)

    @property
    def target_type(self) -> type[int]:
        return int

    def coerce(self, value: Any) -> Result[int, AppError]:
        if not _is_number(value):
            return _type_mismatch(value, "int")
        try:
            return Ok(int(value))
        except (ValueError, OverflowError, ArithmeticError) as e:
            return _bad_format(value, "int", e)


@dataclass(frozen=True, slots=True)
class StringToFloat(CoercionRule[str, float]):
    """Coerce string to float."""
    lenient: bool = False

    @property
    def source_types(self) -> tuple[type, ...]:
        return (str,)

    @property
    def target_type(self) -> type[float]:
        return float

    def coerce(self, value: Any) -> Result[float, AppError]:
        if not isinstance(value, str):
            return _type_mismatch(value, "float")
        if self.lenient:
            match = _FLOAT_PREFIX.match(value)
            return Ok(float(match.group(1).replace("_", "")) if match else 0.0)
        try:
            parsed = float(value.strip())
        except ValueError as e:
            return _bad_format(value, "float", e)
        if not math.isfinite(parsed):
            return _bad_format(value, "float", "not a finite number")
        return Ok(parsed)


@dataclass(frozen=True, slots=True)
class NumberToFloat(CoercionRule[numbers.Real, float]):

    @property
    def source_types(self) -> tuple[type, ...]:
        return (numbers.Real, Decimal)

    @property
    def target_type(self) -> type[float]:
        return float

    def coerce(self, value: Any) -> Result[float, AppError]:
        if not _is_number(value):
            return _type_mismatch(value, "float")
        try:
            return Ok(float(value))
        except (ValueError, OverflowError) as e:
            return _bad_format(value, "float", e)


@dataclass(frozen=True, slots=True)
class StringToDecimal(CoercionRule[str, Decimal]):
    """Coerce string to Decimal with precision preservation."""

    @property
    def source_types(self) -> tuple[type, ...]:
        return (str, int, float)

    @property
    def target_type(self) -> type[Decimal]:
        return Decimal

    def coerce(self, value: Any) -> Result[Decimal, AppError]:
        try:
            if isinstance(value, str):
                return Ok(Decimal(value.strip()))
            if _is_number(value):
                return Ok(Decimal(str(value)))
            return _type_mismatch(value, "Decimal")
        except InvalidOperation as e:
            return _bad_format(value, "Decimal", e)


# ============================================================================
# Text, identifiers and booleans
# ============================================================================

@dataclass(frozen=True, slots=True)
class PresenceToBool(CoercionRule[object, bool]):
    """The literal ``"false"`` is False; otherwise any present value is True."""

    @property
    def source_types(self) -> tuple[type, ...]:
        return (object,)

    @property
    def target_type(self) -> type[bool]:
        return bool

    def can_coerce(self, value: Any) -> bool:
        return True

    def coerce(self, value: Any) -> Result[bool, AppError]:
        if value == "false":
            return Ok(False)
        return Ok(is_present(value))


@dataclass(frozen=True, slots=True)
class ToText(CoercionRule[object, str]):

    @property
    def source_types(self) -> tuple[type, ...]:
        return (object,)

    @property
    def target_type(self) -> type[str]:
        return str

    def can_coerce(self, value: Any) -> bool:
        return True

    def coerce(self, value: Any) -> Result[str, AppError]:
        if isinstance(value, bool):
            return Ok("true" if value else "false")
        return Ok(str(value))


@dataclass(frozen=True, slots=True)
class StringToSymbol(CoercionRule[str, Symbol]):

    @property
    def source_types(self) -> tuple[type, ...]:
        return (str,)

    @property
    def target_type(self) -> type[Symbol]:
        return Symbol

    def coerce(self, value: Any) -> Result[Symbol, AppError]:
        if not isinstance(value, str):
            return _type_mismatch(value, "Symbol")
        return Ok(Symbol(value))


# ============================================================================
# Collections
# ============================================================================

@dataclass(frozen=True, slots=True)
class ToMapping(CoercionRule[object, dict]):
    """Mappings, typed objects, namespaces and sequences of pairs become dicts."""

    @property
    def source_types(self) -> tuple[type, ...]:
        return (Mapping, TypedObject, SimpleNamespace, list, tuple)

    @property
    def target_type(self) -> type[dict]:
        return dict

    def coerce(self, value: Any) -> Result[dict, AppError]:
        if isinstance(value, Mapping):
            return Ok(dict(value))
        if isinstance(value, TypedObject):
            return Ok(dict(value.attributes()))
        if isinstance(value, SimpleNamespace):
            return Ok(dict(vars(value)))
        if isinstance(value, (list, tuple)):
            try:
                return Ok(dict(value))
            except (TypeError, ValueError) as e:
                return _bad_format(value, "dict", e)
        return _type_mismatch(value, "dict")


@dataclass(frozen=True, slots=True)
class ToSequence(CoercionRule[Iterable, list]):
    """Iterables become lists; a mapping becomes its list of (key, value) pairs."""

    @property
    def source_types(self) -> tuple[type, ...]:
        return (Iterable,)

    @property
    def target_type(self) -> type[list]:
        return list

    def can_coerce(self, value: Any) -> bool:
        return isinstance(value, Iterable) and not isinstance(value, (str, bytes))

    def coerce(self, value: Any) -> Result[list, AppError]:
        if not self.can_coerce(value):
            return _type_mismatch(value, "list")
        if isinstance(value, Mapping):
            return Ok(list(value.items()))
        return Ok(list(value))


# ============================================================================
# Dates, times and identifiers
# ============================================================================

@dataclass(frozen=True, slots=True)
class ISO8601ToDateTime(CoercionRule[str, datetime]):
    """Coerce ISO8601 string (or a date) to datetime."""
    default_timezone: timezone | None = None

    @property
    def source_types(self) -> tuple[type, ...]:
        return (str, date)

    @property
    def target_type(self) -> type[datetime]:
        return datetime

    def _parse(self, value: str) -> datetime:
        """Parse ISO8601 string handling Z suffix."""
        dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        if dt.tzinfo is None and self.default_timezone:
            dt = dt.replace(tzinfo=self.default_timezone)
        return dt

    def coerce(self, value: Any) -> Result[datetime, AppError]:
        if isinstance(value, date) and not isinstance(value, datetime):
            return Ok(datetime(value.year, value.month, value.day, tzinfo=self.default_timezone))
        if not isinstance(value, str):
            return _type_mismatch(value, "datetime")
        try:
            return Ok(self._parse(value))
        except ValueError as e:
            return _bad_format(value, "datetime", e)


@dataclass(frozen=True, slots=True)
class ISO8601ToDate(CoercionRule[str, date]):
    """Coerce ISO8601 string (date or datetime) to date."""

    @property
    def source_types(self) -> tuple[type, ...]:
        return (str, datetime)

    @property
    def target_type(self) -> type[date]:
        return date

    def coerce(self, value: Any) -> Result[date, AppError]:
        if isinstance(value, datetime):
            return Ok(value.date())
        if not isinstance(value, str):
            return _type_mismatch(value, "date")
        text = value.strip()
        try:
            return Ok(date.fromisoformat(text))
        except ValueError:
            pass
        try:
            return Ok(datetime.fromisoformat(text.replace("Z", "+00:00")).date())
        except ValueError as e:
            return _bad_format(value, "date", e)


@dataclass(frozen=True, slots=True)
class ISO8601ToTime(CoercionRule[str, time]):

    @property
    def source_types(self) -> tuple[type, ...]:
        return (str, datetime)

    @property
    def target_type(self) -> type[time]:
        return time

    def coerce(self, value: Any) -> Result[time, AppError]:
        if isinstance(value, datetime):
            return Ok(value.timetz())
        if not isinstance(value, str):
            return _type_mismatch(value, "time")
        try:
            return Ok(time.fromisoformat(value.strip()))
        except ValueError as e:
            return _bad_format(value, "time", e)


@dataclass(frozen=True, slots=True)
class StringToUUID(CoercionRule[str, UUID]):

    @property
    def source_types(self) -> tuple[type, ...]:
        return (str,)

    @property
    def target_type(self) -> type[UUID]:
        return UUID

    def coerce(self, value: Any) -> Result[UUID, AppError]:
        if not isinstance(value, str):
            return _type_mismatch(value, "UUID")
        try:
            return Ok(UUID(value.strip()))
        except ValueError as e:
            return _bad_format(value, "UUID", e)


def _already(value: Any, target: type) -> bool:
    if isinstance(value, bool) and target is not bool:
        return False
    if target is date and isinstance(value, datetime):
        return False
    return isinstance(value, target)


def _default_rules(lenient: bool) -> tuple[CoercionRule, ...]:
    return (
        StringToInt(lenient=lenient),
        NumberToInt(),
        StringToFloat(lenient=lenient),
        NumberToFloat(),
        StringToDecimal(),
        PresenceToBool(),
        ToText(),
        StringToSymbol(),
        ToMapping(),
        ToSequence(),
        ISO8601ToDateTime(),
        ISO8601ToDate(),
        ISO8601ToTime(),
        StringToUUID(),
    )


@dataclass(frozen=True, slots=True)
class ExplicitCoercion:
    """Coercion system with explicit rules keyed by target type.

    Usage:
        coercer = ExplicitCoercion()
        coercer.coerce("123", int)   # Ok(123)
        coercer.coerce("abc", int)   # Err(AppError)
    """
    rules: tuple[CoercionRule, ...] = field(default_factory=lambda: _default_rules(False))

    def add_rule(self, rule: CoercionRule) -> ExplicitCoercion:
        """Add a coercion rule, returning new instance."""
        return ExplicitCoercion(rules=(*self.rules, rule))

    def handles(self, target_type: type) -> bool:
        return any(rule.target_type is target_type for rule in self.rules)

    def coerce(self, value: Any, target_type: type[T]) -> Result[T, AppError]:
        """Attempt to coerce value to target type."""
        if _already(value, target_type):
            return Ok(value)

        failure: Err[AppError] | None = None
        for rule in self.rules:
            if rule.target_type is target_type and rule.can_coerce(value):
                result = rule.coerce(value)
                if result.is_ok():
                    return result
                failure = failure or result

        return failure or _type_mismatch(value, getattr(target_type, "__name__", str(target_type)))


DEFAULT_COERCER = ExplicitCoercion()
LENIENT_COERCER = ExplicitCoercion(rules=_default_rules(True))


def active_coercer() -> ExplicitCoercion:
    """The coercer matching the configured numeric policy."""
    return LENIENT_COERCER if get_settings().LENIENT_NUMBERS else DEFAULT_COERCER


def coerce(value: Any, target_type: type[T]) -> Result[T, AppError]:
    """Convenience function using the active coercer."""
    return active_coercer().coerce(value, target_type)
