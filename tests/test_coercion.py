"""Coercion rules and the numeric conversion policy."""
import gc
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from decimal import Decimal
from uuid import UUID

import pytest

from typed_support.attributes import (
    DEFAULT_COERCER,
    LENIENT_COERCER,
    CoercionRule,
    Symbol,
    TypedModel,
    active_coercer,
    attr_float,
    attr_integer,
    coerce,
    is_blank,
)
from typed_support.attributes.coercion import PresenceToBool, StringToInt, ToMapping
from typed_support.core.errors import AttributeTypeError, ErrorCode, Ok


class Measured(TypedModel):
    count = attr_integer(convert=True)
    ratio = attr_float(convert=True)


def test_string_to_int():
    assert DEFAULT_COERCER.coerce("123", int) == Ok(123)
    assert DEFAULT_COERCER.coerce(" -7 ", int) == Ok(-7)


def test_strict_int_rejects_garbage():
    result = DEFAULT_COERCER.coerce("12abc", int)
    assert result.is_err()
    assert result.unwrap_err().code is ErrorCode.E2006_INVALID_FORMAT


def test_numbers_truncate_to_int():
    assert DEFAULT_COERCER.coerce(3.9, int) == Ok(3)
    assert DEFAULT_COERCER.coerce(Decimal("-2.5"), int) == Ok(-2)


def test_booleans_never_become_numbers():
    for target in (int, float):
        result = DEFAULT_COERCER.coerce(True, target)
        assert result.is_err()
        assert result.unwrap_err().code is ErrorCode.E2004_INVALID_TYPE


def test_lenient_prefix_parsing():
    assert LENIENT_COERCER.coerce("12abc", int) == Ok(12)
    assert LENIENT_COERCER.coerce("abc", int) == Ok(0)
    assert LENIENT_COERCER.coerce("1.5kg", float) == Ok(1.5)
    assert LENIENT_COERCER.coerce("", float) == Ok(0.0)


def test_float_literals():
    assert DEFAULT_COERCER.coerce("1.5e3", float) == Ok(1500.0)
    assert DEFAULT_COERCER.coerce(2, float) == Ok(2.0)
    assert DEFAULT_COERCER.coerce("1.5kg", float).is_err()


@pytest.mark.parametrize("text", ["nan", "inf", "-inf", " Infinity "])
def test_strict_float_rejects_non_finite_literals(text):
    result = DEFAULT_COERCER.coerce(text, float)
    assert result.is_err()
    assert result.unwrap_err().code is ErrorCode.E2006_INVALID_FORMAT


def test_non_finite_float_attribute_is_a_type_error():
    with pytest.raises(AttributeTypeError):
        Measured({"ratio": "nan"})


def test_presence_to_bool():
    rule = PresenceToBool()
    assert rule("false") == Ok(False)
    assert rule("") == Ok(False)
    assert rule("0") == Ok(True)
    assert rule([]) == Ok(False)


def test_text_and_symbols():
    assert DEFAULT_COERCER.coerce(12, str) == Ok("12")
    assert DEFAULT_COERCER.coerce(False, str) == Ok("false")
    assert DEFAULT_COERCER.coerce("name", Symbol).unwrap() is Symbol("name")


def test_unused_symbols_are_released():
    held = [Symbol(f"transient-{i}") for i in range(50)]
    assert Symbol("transient-0") is held[0]
    assert "transient-49" in Symbol._interned

    del held
    gc.collect()
    assert not any(key.startswith("transient-") for key in list(Symbol._interned.keys()))


def test_mappings_and_sequences():
    assert DEFAULT_COERCER.coerce([("a", 1)], dict) == Ok({"a": 1})
    assert DEFAULT_COERCER.coerce({"a": 1}, list) == Ok([("a", 1)])
    assert DEFAULT_COERCER.coerce((1, 2), list) == Ok([1, 2])
    assert DEFAULT_COERCER.coerce("ab", list).is_err()
    assert ToMapping().coerce([1, 2]).is_err()


def test_dates_times_and_identifiers():
    assert DEFAULT_COERCER.coerce("2024-01-02T03:04:05Z", datetime) == Ok(
        datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    )
    assert DEFAULT_COERCER.coerce("2024-01-02T03:04:05", date) == Ok(date(2024, 1, 2))
    assert DEFAULT_COERCER.coerce(datetime(2024, 1, 2, 3, 4), date) == Ok(date(2024, 1, 2))
    assert DEFAULT_COERCER.coerce("03:04", time) == Ok(time(3, 4))
    uid = "12345678-1234-5678-1234-567812345678"
    assert DEFAULT_COERCER.coerce(uid, UUID) == Ok(UUID(uid))
    assert DEFAULT_COERCER.coerce("not-a-date", date).is_err()


def test_values_already_of_target_pass_through():
    value = Decimal("1.10")
    assert DEFAULT_COERCER.coerce(value, Decimal).unwrap() is value


def test_add_rule_returns_extended_coercer():
    @dataclass(frozen=True, slots=True)
    class CommaList(CoercionRule[str, tuple]):
        @property
        def source_types(self):
            return (str,)

        @property
        def target_type(self):
            return tuple

        def coerce(self, value):
            return Ok(tuple(value.split(",")))

    extended = DEFAULT_COERCER.add_rule(CommaList())
    assert extended.handles(tuple)
    assert not DEFAULT_COERCER.handles(tuple)
    assert extended.coerce("a,b", tuple) == Ok(("a", "b"))


def test_strict_policy_on_attributes():
    assert active_coercer() is DEFAULT_COERCER
    with pytest.raises(AttributeTypeError) as exc_info:
        Measured({"count": "12abc"})
    assert "12abc" in str(exc_info.value)


def test_lenient_policy_on_attributes(lenient_numbers):
    assert active_coercer() is LENIENT_COERCER
    measured = Measured({"count": "12abc", "ratio": "x"})
    assert measured.count == 12
    assert measured.ratio == 0.0
    assert coerce("7 apples", int) == Ok(7)


def test_lenient_rule_is_configurable():
    assert StringToInt(lenient=True).coerce("42nd") == Ok(42)
    assert StringToInt().coerce("42nd").is_err()


@pytest.mark.parametrize(
    "value,blank",
    [
        (None, True),
        (False, True),
        ("", True),
        ("  \n", True),
        ({}, True),
        ([], True),
        (set(), True),
        (0, False),
        (0.0, False),
        ("a", False),
        (True, False),
        (object(), False),
    ],
)
def test_blank_predicate(value, blank):
    assert is_blank(value) is blank
