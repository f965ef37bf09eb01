from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import SimpleNamespace
from typing import Any, Callable, ClassVar

from pydantic_core import to_jsonable_python

from typed_support import records
from typed_support.core.errors import ValidationFailed, unknown_attribute, invalid_options
from typed_support.core.logging import attributes_logger

from .accessors import TypedAttribute
from .blank import is_blank, is_present
from .definition import AttributeDefinition
from .engine import DEFAULT_ENGINE, CoercionEngine
from .registry import AttributeRegistry
from .types import AttributeType, TypedObject
from .validation import VALIDATES_EACH_ATTR, Errors

log = attributes_logger()

Writer = Callable[[Any, bool], None]


def attribute_items(attrs: Any) -> Iterable[tuple[Any, Any]]:
    """Key/value pairs of anything ``assign`` accepts."""
    if attrs is None:
        return ()
    if isinstance(attrs, Mapping):
        return attrs.items()
    if isinstance(attrs, TypedObject):
        return attrs.attributes().items()
    if isinstance(attrs, SimpleNamespace):
        return vars(attrs).items()
    raise TypeError(f"Cannot assign attributes from {type(attrs).__name__}")


def _json_fallback(value: Any) -> Any:
    if isinstance(value, TypedModel):
        return value.as_json()
    if isinstance(value, TypedObject):
        return value.attributes()
    if isinstance(value, SimpleNamespace):
        return vars(value)
    if records.is_record(value):
        return records.record_attributes(value)
    return str(value)


def to_json_value(value: Any) -> Any:
    return to_jsonable_python(value, fallback=_json_fallback)


class TypedModel(TypedObject):
    """Object whose attributes are declared, typed and checked on every write.

        class Person(TypedModel):
            name = attr_string(allow_blank=False)
            age = attr_integer(allow_nil=True, convert=True)

        person = Person({"name": "Ann", "age": "41"})
        person.age        # 41
        person.age = "x"  # AttributeTypeError

    Subclasses inherit a copy of their parent's attribute registry. The
    registry is frozen once the first instance of the class is created.
    """

    engine: ClassVar[CoercionEngine] = DEFAULT_ENGINE
    _registry: ClassVar[AttributeRegistry] = AttributeRegistry("TypedModel")
    _validators: ClassVar[tuple[tuple[str, tuple[str, ...]], ...]] = ()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._registry = cls._registry.derive(cls.__name__)

        validators = dict(cls._validators)
        for name, member in list(cls.__dict__.items()):
            if isinstance(member, TypedAttribute):
                cls._check_name(name)
                cls._define(name, member)
            elif callable(member) and hasattr(member, VALIDATES_EACH_ATTR):
                validators[name] = getattr(member, VALIDATES_EACH_ATTR)
        cls._validators = tuple(validators.items())

    # -------------------------------------------------------------------------
    # Declaration
    # -------------------------------------------------------------------------

    @classmethod
    def declare(cls, name: str, attr: TypedAttribute) -> AttributeDefinition:
        """Declare (or redefine) an attribute after the class body ran."""
        cls._check_name(name)
        attr.__set_name__(cls, name)
        definition = cls._define(name, attr)
        setattr(cls, name, attr)
        return definition

    @classmethod
    def _check_name(cls, name: str) -> None:
        for base in cls.__mro__[1:]:
            if not base.__module__.startswith("typed_support."):
                continue
            member = base.__dict__.get(name)
            if member is not None and not isinstance(member, TypedAttribute):
                raise invalid_options(name, cls.__name__, f"'{name}' is reserved by {base.__name__}")

    @classmethod
    def _define(cls, name: str, attr: TypedAttribute) -> AttributeDefinition:
        definition = cls._build_definition(name, attr)
        cls._registry.define(definition)
        return definition

    @classmethod
    def _build_definition(cls, name: str, attr: TypedAttribute) -> AttributeDefinition:
        return attr.build(cls.__name__, name)

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    @classmethod
    def registry(cls) -> AttributeRegistry:
        return cls._registry

    @classmethod
    def attribute_names(cls) -> list[str]:
        return cls._registry.names()

    @classmethod
    def attribute_definition(cls, name: str) -> AttributeDefinition | None:
        return cls._registry.get(name)

    @classmethod
    def from_raw(cls, raw: Any, *, convert_all: bool = False) -> TypedModel:
        return cls(raw, convert_all=convert_all)

    @classmethod
    def _represents(cls, type_: Any) -> bool:
        return False

    # -------------------------------------------------------------------------
    # Instance
    # -------------------------------------------------------------------------

    def __init__(self, attrs: Any = None, *, convert_all: bool = False):
        self._values: dict[str, Any] = {}
        self._errors = Errors()
        type(self)._registry.freeze()
        if attrs:
            self.assign(attrs, convert_all=convert_all)

    def get(self, name: str) -> Any:
        """Stored value, or the default when nothing was stored."""
        if name in self._values:
            return self._values[name]
        definition = self._registry.get(name)
        if definition is None:
            raise AttributeError(f"{type(self).__name__} has no attribute '{name}'")
        return definition.resolve_default(self)

    def set(self, name: str, value: Any, force_convert: bool = False) -> None:
        """Check (and convert) ``value``, then store it; nothing is stored on failure."""
        definition = self._registry.get(name)
        if definition is None:
            raise unknown_attribute(name, type(self).__name__)
        self._values[name] = self.engine.prepare(self, definition, value, force_convert)

    def is_present(self, name: str) -> bool:
        return is_present(self.get(name))

    def is_set(self, name: str) -> bool:
        return name in self._values

    def _writer_for(self, key: str) -> Writer | None:
        if key in self._registry:
            return lambda value, force: self.set(key, value, force)
        return None

    def assign(self, attrs: Any, convert_all: bool = False, ignore_unknown: bool = False) -> TypedModel:
        """Write each key/value pair through its attribute's writer.

        Args:
            attrs: Mapping (or typed object) of attribute name to value
            convert_all: Force conversion on every write
            ignore_unknown: Skip keys with no writer instead of raising
        """
        for key, value in attribute_items(attrs):
            key = str(key)
            writer = self._writer_for(key)
            if writer is None:
                if ignore_unknown:
                    log.debug("unknown_attribute_ignored", owner=type(self).__name__, attribute=key)
                    continue
                raise unknown_attribute(key, type(self).__name__)
            writer(value, convert_all)
        return self

    def __getitem__(self, key: str) -> Any:
        if key not in self._registry:
            raise KeyError(key)
        return self.get(key)

    def fetch(self, key: str, fallback: Any = None) -> Any:
        """Value of ``key``, or ``fallback`` when it is None or False."""
        value = self[key]
        if value is None or value is False:
            return fallback
        return value

    def attributes(self) -> dict[str, Any]:
        """Set values and defaults, in declaration order."""
        return {
            name: self.get(name)
            for name, definition in self._registry.items()
            if name in self._values or definition.has_default
        }

    def to_dict(self) -> dict[str, Any]:
        return self.attributes()

    def as_json(self) -> dict[str, Any]:
        """JSON-compatible dict of explicitly set values."""
        return to_json_value(dict(self._values))

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    @property
    def errors(self) -> Errors:
        return self._errors

    def validate(self) -> bool:
        """Re-run every field check, recording failures in ``errors``."""
        errors = self._errors
        errors.clear()
        for name, definition in self._registry.items():
            value = self.get(name)
            if not definition.allow_nil and value is None:
                errors.add(name, "must not be nil", constraint="not_nil")
            if not definition.allow_blank and is_blank(value):
                errors.add(name, "can't be blank", constraint="presence", value=value)
            if definition.validates and is_present(value) and not self._nested_valid(definition, value):
                errors.add(name, f"{name} is not valid", constraint="nested")

        for method_name, names in self._validators:
            method = getattr(self, method_name)
            for name in names:
                method(name, self.get(name))
        return not errors

    @staticmethod
    def _nested_valid(definition: AttributeDefinition, value: Any) -> bool:
        members = value if definition.kind is AttributeType.ARRAY else [value]
        return all(member.is_valid() for member in members if isinstance(member, TypedObject))

    def is_valid(self) -> bool:
        return self.validate()

    def ensure_valid(self) -> TypedModel:
        if not self.validate():
            raise ValidationFailed(
                f"{type(self).__name__} is not valid",
                self._errors.details,
                owner=type(self).__name__,
            )
        return self

    def __repr__(self) -> str:
        values = "".join(f" {k}={v!r}" for k, v in self._values.items())
        return f"<{type(self).__name__}<TypedModel>{values}>"
