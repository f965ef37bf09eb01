"""hashed_key: delegated, record and content-hash cache keys."""
from typed_support.attributes import TypedModel, attr_float, attr_string
from typed_support.forms import FormModel
from typed_support.hashing import canonical_json_bytes, hashed_key


class VersionedThing:
    def cache_key_with_version(self):
        return "users/cache_key"


class Presenter(TypedModel):
    name = attr_string()

    def cache_key(self):
        return "my_key"


def test_key_from_versioned_object():
    assert hashed_key(VersionedThing()).startswith("users/cache_key")


def test_key_from_presenter():
    assert hashed_key(Presenter()) == "my_key"


def test_key_from_list():
    assert hashed_key([1, 2, 3]) == "9ef50cc82ae474279fb8e82896142702bccbb33a"


def test_key_from_mapping():
    assert hashed_key({"a": 1, "b": 2}) == "4acc71e0547112eb432f0a36fb1924c4a738cb49"
    assert hashed_key({"b": 2, "a": 1}) == hashed_key({"a": 1, "b": 2})


def test_key_from_string():
    assert hashed_key("dlkjw") == "dda58a50939583b3c85b4a980653063ea18aa71e"


def test_canonical_json_is_compact_and_sorted():
    assert canonical_json_bytes({"b": [1, None], "a": "é"}) == '{"a":"é","b":[1,null]}'.encode("utf-8")


def test_typed_objects_hash_by_content():
    class Tag(TypedModel):
        label = attr_string()

    assert hashed_key({"tag": Tag({"label": "x"})}) == hashed_key({"tag": {"label": "x"}})


def test_non_finite_floats_encode_as_strings():
    payload = {"r": float("nan"), "s": [float("inf"), float("-inf")]}
    assert canonical_json_bytes(payload) == b'{"r":"nan","s":["inf","-inf"]}'


def test_form_with_non_finite_float_has_a_cache_key():
    class Reading(FormModel):
        ratio = attr_float()

    key = Reading({"ratio": float("inf")}).cache_key()
    assert key == hashed_key({"ratio": "inf"})
    assert key != Reading({"ratio": 1.0}).cache_key()
