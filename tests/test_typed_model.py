"""TypedModel: declaration, typed writes, defaults and validation."""
from types import SimpleNamespace

import pytest

from typed_support.attributes import (
    AttributeType,
    Symbol,
    TypedModel,
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
    validates_each,
)
from typed_support.core.errors import (
    AllowedValueError,
    AttributeTypeError,
    ConfigurationError,
    ErrorCode,
    PresenceError,
    ValidationFailed,
)
from typed_support.forms import FormModel


class MyTypedThing(TypedModel):
    first = attr_symbol()
    second = attr_string()


class MyRequiredThing(TypedModel):
    first = attr_symbol(allow_nil=False)
    second = attr_string(allow_blank=False)


class MyBooleanThing(TypedModel):
    first = attr_boolean()
    second = attr_boolean(default=True)
    third = attr_boolean(allow_nil=True)
    fourth = attr_boolean(convert=True)
    fifth = attr_boolean(allow_nil=False)


class MyStringThing(TypedModel):
    first = attr_string(allow_nil=False)
    second = attr_string(default="hi")
    third = attr_string(allow_nil=True)
    fourth = attr_string(convert=True)
    fifth = attr_string(allow_nil=True, allow_blank=False)


class ModelClass(FormModel):
    pass


class AnotherModelClass(FormModel):
    name = attr_string(allow_blank=False)


class MyModelThing(TypedModel):
    first = attr_model()
    second = attr_model(sub_type=AnotherModelClass, validates=True)


class MyClassTypedThing(TypedModel):
    first = attribute(str)
    second = attribute(int, convert=True)


class MySymbolThing(TypedModel):
    first = attr_symbol()
    second = attr_symbol(convert=True)
    third = attr_symbol(choices=[Symbol("a"), Symbol("b"), Symbol("c")])


class MyArrayThing(TypedModel):
    first = attr_array()
    second = attr_array(sub_type=ModelClass)
    third = attr_array(sub_type=ModelClass, convert=True)


class MyNumberThing(TypedModel):
    first = attr_integer(allow_nil=False)
    second = attr_float(default=lambda owner: 0.4)
    third = attr_integer(allow_nil=True)
    fourth = attr_float(convert=True)
    fifth = attr_numeric()
    sixth = attr_numeric(convert=True)
    seventh = attr_numeric(convert=True, default=5)


class MyHashAndAnyThing(TypedModel):
    first = attr_hash(allow_nil=False)
    second = attr_hash(default=dict)
    third = attr_any()
    fourth = attr_hash(convert=True)


class MyJSONedThing(TypedModel):
    first = attr_boolean()
    second = attr_integer()


class MyConvertableThing(TypedModel):
    first = attr_boolean(convert=True)
    second = attr_float(convert=True)


class MyMappedThing(TypedModel):
    first = attr_boolean(default=False, mapping={"model": SimpleNamespace, "attribute": "the_first_attribute"})
    second = attr_array(mapping={"model": SimpleNamespace, "attribute": "the_second_attribute", "compact": True})


# ---------------------------------------------------------------------------
# Assigning and storing
# ---------------------------------------------------------------------------

def test_accepts_values():
    thing = MyTypedThing()
    thing.first = Symbol("first")
    assert thing.first is Symbol("first")


def test_accepts_values_via_assign():
    thing = MyTypedThing()
    thing.assign({"first": Symbol("first"), "second": "string"})
    assert thing.first is Symbol("first")
    assert thing["first"] is Symbol("first")
    assert thing.second == "string"


def test_assign_with_forced_conversion():
    thing = MyTypedThing()
    thing.assign({"first": "first", "second": 123}, convert_all=True)
    assert thing.first is Symbol("first")
    assert thing.second == "123"


def test_assign_rejects_wrong_type():
    with pytest.raises(AttributeTypeError):
        MyTypedThing().assign({"first": Symbol("first"), "second": 123})


def test_assign_is_idempotent():
    thing = MyTypedThing()
    values = {"first": Symbol("x"), "second": "y"}
    thing.assign(values)
    once = thing.attributes()
    thing.assign(values)
    assert thing.attributes() == once


def test_assign_unknown_key_is_a_configuration_error():
    with pytest.raises(ConfigurationError) as exc_info:
        MyTypedThing().assign({"nope": 1})
    assert exc_info.value.code is ErrorCode.E9002_UNKNOWN_ATTRIBUTE


def test_assign_can_ignore_unknown_keys():
    thing = MyTypedThing().assign({"nope": 1, "second": "ok"}, ignore_unknown=True)
    assert thing.second == "ok"


def test_failed_write_keeps_previous_value():
    thing = MyTypedThing()
    thing.second = "kept"
    with pytest.raises(AttributeTypeError):
        thing.second = 1
    assert thing.second == "kept"


def test_type_error_message_names_attribute_and_types():
    with pytest.raises(AttributeTypeError) as exc_info:
        MyTypedThing().second = 42
    message = str(exc_info.value)
    assert "'second'" in message
    assert "'string'" in message
    assert "<int>" in message


def test_getitem_and_fetch():
    thing = MyBooleanThing({"first": False})
    assert thing["second"] is True
    assert thing.fetch("first", "fallback") == "fallback"
    assert thing.fetch("third", 1) == 1
    assert thing.fetch("second") is True
    with pytest.raises(KeyError):
        thing["missing"]


# ---------------------------------------------------------------------------
# Presence options
# ---------------------------------------------------------------------------

def test_rejects_nil_when_not_allowed():
    with pytest.raises(PresenceError) as exc_info:
        MyRequiredThing().first = None
    assert isinstance(exc_info.value, ValueError)


def test_rejects_blank_when_not_allowed():
    with pytest.raises(PresenceError):
        MyRequiredThing().second = ""


# ---------------------------------------------------------------------------
# Booleans
# ---------------------------------------------------------------------------

def test_boolean_values():
    thing = MyBooleanThing()
    thing.first = True
    thing.second = False
    thing.third = False
    assert thing.first is True
    assert thing.second is False
    assert thing.third is False


def test_boolean_nil_is_returned_not_default():
    thing = MyBooleanThing()
    thing.second = None
    assert thing.second is None


def test_boolean_default():
    thing = MyBooleanThing()
    thing.first = True
    assert thing.second is True


def test_boolean_presence():
    thing = MyBooleanThing()
    assert thing.is_present("first") is False
    assert thing.is_present("second") is True


def test_boolean_rejects_wrong_type_and_nil():
    thing = MyBooleanThing()
    with pytest.raises(AttributeTypeError):
        thing.first = "hi"
    with pytest.raises(PresenceError):
        thing.fifth = None


@pytest.mark.parametrize(
    "raw,expected",
    [("hi", True), ("", False), ("true", True), ("false", False)],
)
def test_boolean_conversion(raw, expected):
    thing = MyBooleanThing()
    thing.fourth = raw
    assert thing.fourth is expected


# ---------------------------------------------------------------------------
# Strings
# ---------------------------------------------------------------------------

def test_string_nil_and_default():
    thing = MyStringThing()
    thing.first = "a"
    thing.third = None
    assert thing.third is None
    assert thing.second == "hi"


def test_string_presence():
    thing = MyStringThing()
    assert thing.is_present("third") is False
    assert thing.is_present("second") is True


def test_string_errors():
    thing = MyStringThing()
    with pytest.raises(AttributeTypeError):
        thing.first = True
    with pytest.raises(PresenceError):
        thing.first = None
    with pytest.raises(PresenceError):
        thing.fifth = None


def test_string_conversion():
    thing = MyStringThing()
    thing.fourth = 123
    assert thing.fourth == "123"


def test_strip_and_blank_to_nil():
    class Trimmed(TypedModel):
        name = attr_string(strip=True)
        nickname = attr_string(blank_to_nil=True)

    thing = Trimmed({"name": "  Ann  ", "nickname": "   "})
    assert thing.name == "Ann"
    assert thing.nickname is None
    assert thing.is_set("nickname")


# ---------------------------------------------------------------------------
# Models and nested validity
# ---------------------------------------------------------------------------

def test_accepts_models():
    thing = MyModelThing()
    thing.first = ModelClass()
    assert type(thing.first) is ModelClass


def test_accepts_sub_typed_models():
    thing = MyModelThing()
    thing.second = AnotherModelClass()
    assert type(thing.second) is AnotherModelClass


def test_invalid_nested_model_makes_parent_invalid():
    thing = MyModelThing()
    thing.second = AnotherModelClass()
    assert thing.is_valid() is False
    assert thing.errors["second"] == ["second is not valid"]


def test_valid_nested_model():
    thing = MyModelThing()
    thing.second = AnotherModelClass({"name": "test"})
    assert thing.is_valid() is True


def test_model_type_errors():
    thing = MyModelThing()
    with pytest.raises(AttributeTypeError):
        thing.first = True
    with pytest.raises(AttributeTypeError):
        thing.second = ModelClass()


def test_model_converts_from_mapping():
    class Holder(TypedModel):
        inner = attr_model(sub_type=AnotherModelClass, convert=True)

    holder = Holder({"inner": {"name": "nested"}})
    assert isinstance(holder.inner, AnotherModelClass)
    assert holder.inner.name == "nested"


# ---------------------------------------------------------------------------
# Class-typed attributes
# ---------------------------------------------------------------------------

def test_class_typed_attributes():
    thing = MyClassTypedThing()
    thing.first = "string"
    thing.second = "123"
    assert thing.first == "string"
    assert thing.second == 123
    with pytest.raises(AttributeTypeError):
        thing.first = True


def test_custom_class_typed_attribute():
    from datetime import date
    from decimal import Decimal

    class Invoice(TypedModel):
        issued_on = attribute(date, convert=True)
        total = attribute(Decimal, convert=True)

    invoice = Invoice({"issued_on": "2024-03-01", "total": "10.50"})
    assert invoice.issued_on == date(2024, 3, 1)
    assert invoice.total == Decimal("10.50")


def test_attribute_accepts_kind_names():
    class Named(TypedModel):
        count = attribute("integer", convert=True)

    assert Named.attribute_definition("count").kind is AttributeType.INTEGER
    assert Named({"count": "7"}).count == 7


def test_unsupported_type_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        attribute(42)
    with pytest.raises(ConfigurationError):
        attribute("decimal")


def test_custom_converter():
    class Tagged(TypedModel):
        tags = attr_array(convert=True, converter=lambda value: value.split(","))

    assert Tagged({"tags": "a,b"}).tags == ["a", "b"]


# ---------------------------------------------------------------------------
# Symbols
# ---------------------------------------------------------------------------

def test_symbols():
    thing = MySymbolThing()
    thing.first = Symbol("first")
    thing.second = "second"
    thing.third = Symbol("a")
    assert thing.first is Symbol("first")
    assert thing.second is Symbol("second")
    assert thing.third is Symbol("a")


def test_symbol_not_in_choices():
    with pytest.raises(AllowedValueError):
        MySymbolThing().third = Symbol("test")


def test_symbol_wrong_type():
    with pytest.raises(AttributeTypeError):
        MySymbolThing().first = True


# ---------------------------------------------------------------------------
# Arrays
# ---------------------------------------------------------------------------

def test_accepts_arrays():
    thing = MyArrayThing()
    thing.first = [1, 2, 3]
    assert thing.first == [1, 2, 3]


def test_accepts_sub_typed_arrays():
    thing = MyArrayThing()
    thing.second = [ModelClass(), ModelClass()]
    assert len(thing.second) == 2
    assert type(thing.second[0]) is ModelClass


def test_converts_array_elements():
    thing = MyArrayThing()
    thing.third = [{}]
    assert isinstance(thing.third[0], ModelClass)
    existing = ModelClass()
    thing.third = [existing]
    assert thing.third[0] is existing


def test_array_type_errors():
    thing = MyArrayThing()
    with pytest.raises(AttributeTypeError):
        thing.first = True
    with pytest.raises(AttributeTypeError):
        thing.second = [1]


def test_integer_arrays_reject_booleans():
    class Counts(TypedModel):
        values = attr_array(sub_type=int)
        converted = attr_array(sub_type=int, convert=True)
        flags = attr_array(sub_type=bool)

    counts = Counts({"values": [1, 2], "converted": ["3"], "flags": [True, False]})
    assert counts.converted == [3]
    assert counts.flags == [True, False]
    with pytest.raises(AttributeTypeError):
        counts.values = [True, False]
    with pytest.raises(AttributeTypeError):
        counts.converted = [True]


def test_nested_array_valid_only_when_every_element_is_valid():
    class Team(TypedModel):
        members = attr_array(sub_type=AnotherModelClass, validates=True)

    team = Team({"members": [AnotherModelClass({"name": "a"}), AnotherModelClass()]})
    assert team.is_valid() is False
    team.members = [AnotherModelClass({"name": "a"}), AnotherModelClass({"name": "b"})]
    assert team.is_valid() is True


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------

def test_number_nil_and_default():
    thing = MyNumberThing()
    thing.first = 123
    thing.third = None
    assert thing.third is None
    assert thing.second == 0.4


def test_numeric_accepts_ints_and_floats():
    thing = MyNumberThing()
    thing.fifth = 123
    thing.fifth = 1.0
    assert thing.fifth == 1.0


def test_zero_is_present():
    thing = MyNumberThing()
    thing.first = 0
    assert thing.is_present("first") is True
    assert thing.is_present("third") is False


def test_number_type_errors():
    thing = MyNumberThing()
    with pytest.raises(AttributeTypeError):
        thing.first = True
    with pytest.raises(AttributeTypeError):
        thing.fifth = True
    with pytest.raises(PresenceError):
        thing.first = None


def test_number_conversion():
    thing = MyNumberThing()
    thing.fourth = "123"
    thing.sixth = "123"
    assert thing.fourth == 123.0
    assert thing.sixth == 123.0


def test_numeric_blank_converts_to_default():
    thing = MyNumberThing()
    thing.seventh = ""
    assert thing.seventh == 5


def test_forced_integer_conversion():
    class Identified(TypedModel):
        id = attr_integer(allow_nil=True)

    thing = Identified()
    thing.set("id", "123", force_convert=True)
    assert thing.id == 123
    with pytest.raises(AttributeTypeError):
        thing.set("id", "abc", force_convert=True)


# ---------------------------------------------------------------------------
# Hashes and any
# ---------------------------------------------------------------------------

def test_hash_nil_and_default():
    thing = MyHashAndAnyThing()
    thing.first = {}
    thing.third = None
    assert thing.third is None
    assert thing.second == {}


def test_hash_presence():
    thing = MyHashAndAnyThing()
    thing.first = {"a": 1}
    assert thing.is_present("first") is True
    assert thing.is_present("third") is False
    assert thing.is_present("fourth") is False


def test_hash_errors():
    thing = MyHashAndAnyThing()
    with pytest.raises(AttributeTypeError):
        thing.first = True
    with pytest.raises(PresenceError):
        thing.first = None


def test_hash_conversion_from_pairs():
    thing = MyHashAndAnyThing()
    thing.fourth = [["a", "abc"], ["b", 1]]
    assert thing.fourth == {"a": "abc", "b": 1}


def test_any_accepts_anything():
    thing = MyHashAndAnyThing()
    obj = SimpleNamespace(a=1)
    thing.third = 123
    thing.third = {"stuff": "abc"}
    thing.third = obj
    assert thing.third is obj


# ---------------------------------------------------------------------------
# Introspection and serialization
# ---------------------------------------------------------------------------

def test_attribute_names():
    assert MyJSONedThing.attribute_names() == ["first", "second"]


def test_as_json():
    thing = MyJSONedThing({"first": True, "second": 213})
    assert thing.as_json() == {"first": True, "second": 213}
    assert thing.as_json()["first"] is True


def test_convert_all_attributes_on_construction():
    thing = MyConvertableThing({"first": "hi", "second": "1.2"})
    assert thing.as_json() == {"first": True, "second": 1.2}


def test_attributes_include_defaults_in_declaration_order():
    thing = MyBooleanThing({"third": True})
    assert list(thing.attributes()) == ["second", "third"]


def test_mapping_options_are_accepted():
    thing = MyMappedThing()
    thing.first = True
    thing.second = [3, 2]
    assert thing.first is True
    mapping = MyMappedThing.attribute_definition("second").mapping
    assert mapping.model == "SimpleNamespace"
    assert mapping.source_key("second") == "the_second_attribute"
    assert mapping.compact is True


def test_unknown_mapping_option_is_rejected():
    with pytest.raises(ConfigurationError) as exc_info:
        class BadMapping(TypedModel):
            first = attr_string(mapping={"model": "user", "name": "first"})
    assert exc_info.value.code is ErrorCode.E9003_INVALID_OPTION


def test_unknown_option_is_rejected():
    with pytest.raises(ConfigurationError):
        class BadOption(TypedModel):
            first = attr_string(in_list=[1])


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

def test_subclass_inherits_and_extends_registry():
    class Parent(TypedModel):
        name = attr_string()

    class Child(Parent):
        age = attr_integer()

    assert Parent.attribute_names() == ["name"]
    assert Child.attribute_names() == ["name", "age"]


def test_subclass_can_redefine_attribute():
    class Parent(TypedModel):
        value = attr_string()

    class Child(Parent):
        value = attr_integer(convert=True)

    assert Child({"value": "4"}).value == 4
    with pytest.raises(AttributeTypeError):
        Parent({"value": 4})


def test_registry_freezes_on_first_instance():
    class Late(TypedModel):
        name = attr_string()

    Late.declare("nickname", attr_string())
    assert Late.attribute_names() == ["name", "nickname"]
    Late()
    with pytest.raises(ConfigurationError):
        Late.declare("age", attr_integer())


def test_attribute_names_cannot_shadow_model_members():
    with pytest.raises(ConfigurationError):
        class Clashing(TypedModel):
            errors = attr_string()


def test_only_library_members_are_reserved():
    class Permissive(TypedModel):
        allows_nil = attr_boolean()
        allows_blank = attr_boolean()

    assert Permissive({"allows_nil": True}).allows_nil is True


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class Signup(TypedModel):
    email = attr_string(allow_blank=False)
    age = attr_integer(allow_nil=True)

    @validates_each("email")
    def _email_has_at(self, attribute, value):
        if value and "@" not in value:
            self.errors.add(attribute, "is not an email", constraint="format", value=value)


def test_validate_reports_missing_values():
    signup = Signup()
    assert signup.is_valid() is False
    assert signup.errors["email"] == ["must not be nil", "can't be blank"]
    assert "age" not in signup.errors


def test_custom_validators_run():
    signup = Signup({"email": "nope"})
    assert signup.is_valid() is False
    assert signup.errors.to_dict() == {"email": ["is not an email"]}
    assert signup.errors.full_messages() == ["email is not an email"]


def test_ensure_valid_raises_with_details():
    with pytest.raises(ValidationFailed) as exc_info:
        Signup({"email": "nope"}).ensure_valid()
    details = exc_info.value.details
    assert [d.to_dict() for d in details] == [
        {"field": "email", "constraint": "format", "message": "is not an email", "value": "nope"}
    ]


def test_validate_clears_previous_errors():
    signup = Signup({"email": "nope"})
    assert signup.is_valid() is False
    signup.email = "ann@example.com"
    assert signup.is_valid() is True
    assert not signup.errors
