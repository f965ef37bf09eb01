"""Form Model: typed object <-> named external sources.

Each attribute may carry a ``MappingOptions`` naming the source it belongs
to. ``from_models`` builds a form from several named sources at once and
``to_model_attributes`` writes the form's values back in the shape of one
source:

    class ProfileForm(FormModel):
        first_name = attr_string(mapping={"model": "user"})
        last_name = attr_string(mapping={"model": "user", "attribute": "surname"})
        age = attr_integer(mapping={"model": "profile"})

    form = ProfileForm.from_models({"user": user, "profile": profile})
    form.to_model_attributes("user")  # {"first_name": ..., "surname": ...}
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Iterable, Union

from typed_support.attributes import (
    MISSING,
    AttributeType,
    MappingOptions,
    TypedModel,
    TypedObject,
    to_json_value,
)
from typed_support.attributes.model import Writer
from typed_support.core.errors import ConfigurationError, ErrorCode, unknown_attribute
from typed_support.core.logging import forms_logger
from typed_support.hashing import hashed_key

from .params import nested_params, param_key, permit
from .sources import persisted_state, read, source_snapshot

log = forms_logger()

NESTED_SUFFIX = "_attributes"
EXCLUDED_KEYS = frozenset({"id"})

Others = Union[Mapping[str, Any], Callable[..., Mapping[str, Any]]]


def _is_form(type_: Any) -> bool:
    return isinstance(type_, type) and issubclass(type_, FormModel)


def _as_names(values: str | Iterable[str] | None) -> set[str]:
    if values is None:
        return set()
    if isinstance(values, str):
        return {values}
    return {str(v) for v in values}


def _index_key(key: Any) -> int:
    try:
        return int(str(key))
    except ValueError:
        return 0


def resolve_mapped_value(
    source: Any,
    attribute_name: str,
    mapping: MappingOptions,
    context: Any = None,
) -> Any:
    """Value for one mapped attribute, or MISSING when the source lacks the key.

    Priority: ``to(source, context)``, then a read of the mapped key; the
    index and transform are applied to whatever was found.
    """
    if mapping.to is not None:
        value = mapping.to(source, context)
    else:
        value = read(source, mapping.source_key(attribute_name), mapping.access)
        if value is MISSING:
            return MISSING
    if mapping.index is not None and value is not None:
        value = value[mapping.index]
    if mapping.transform is not None:
        value = mapping.transform(value)
    return value


class FormModel(TypedModel):
    """Typed object with source mappings, nested attributes and a persisted flag."""

    def __init__(self, attrs: Any = None, persisted: bool = False, convert_all: bool = False):
        self._persisted = bool(persisted)
        super().__init__(attrs, convert_all=convert_all)

    @property
    def persisted(self) -> bool:
        return self._persisted

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def form_name(cls) -> str:
        """Key scoping this form's parameters, e.g. ``signup_form``."""
        return param_key(cls.__name__)

    @classmethod
    def from_params(cls, params: Any, *, persisted: bool = False, extract: bool = False) -> FormModel:
        """Build from request parameters, converting every value.

        With ``extract`` the parameters are scoped by ``form_name()`` and
        filtered through ``permitted_keys()``.
        """
        params = nested_params(params) if params is not None else {}
        if extract:
            scoped = params.get(cls.form_name())
            params = permit(scoped if isinstance(scoped, Mapping) else {}, cls.permitted_keys(), owner=cls.__name__)
        return cls(params, persisted, True)

    @classmethod
    def from_raw(cls, raw: Any, *, convert_all: bool = True) -> FormModel:
        return cls(raw, False, convert_all)

    @classmethod
    def from_model(
        cls,
        model: Any,
        *,
        allowed_attributes: Iterable[str] | Mapping[str, str] | None = None,
    ) -> FormModel:
        """Build from a single object's attribute snapshot.

        ``allowed_attributes`` is None (every declared attribute the model
        has), a list of names, or a ``{form_key: model_key}`` mapping.
        """
        attrs = source_snapshot(model)
        if allowed_attributes is None:
            selected = {k: attrs[k] for k in cls.attribute_names() if k in attrs}
        elif isinstance(allowed_attributes, Mapping):
            selected = {str(k): attrs.get(str(v)) for k, v in allowed_attributes.items()}
        else:
            selected = {k: attrs[k] for k in map(str, allowed_attributes) if k in attrs}
        return cls(selected, persisted_state(model))

    @classmethod
    def from_models(
        cls,
        models: Mapping[str, Any],
        *,
        persisted: bool = True,
        context: Any = None,
        exclude: str | Iterable[str] | None = None,
        others: Others | None = None,
        form: FormModel | None = None,
    ) -> FormModel:
        """Build one form from several named sources.

        Args:
            models: source name -> source object; None sources are skipped
            persisted: persisted flag of the new form
            context: passed to every mapping's ``to`` function
            exclude: attribute names never assigned from the sources
            others: values (or ``fn(form) -> values``) assigned last
            form: merge into this form instead of a new one
        """
        if form is None:
            form = cls({}, persisted)
        excluded = _as_names(exclude)

        for source_name, source in models.items():
            if source is None:
                continue
            form.merge_source(str(source_name), source, context=context, exclude=excluded)

        if others:
            form.assign(others(form) if callable(others) else others)
        return form

    def merge_source(
        self,
        source_name: str,
        source: Any,
        *,
        context: Any = None,
        exclude: set[str] | frozenset[str] = frozenset(),
    ) -> FormModel:
        """Assign every attribute mapped to ``source_name`` that ``source`` exposes."""
        selected: dict[str, Any] = {}
        for name, mapping in type(self).named_mappings(source_name).items():
            if name in exclude:
                continue
            value = resolve_mapped_value(source, name, mapping, context)
            if value is not MISSING:
                selected[name] = value
        log.debug(
            "source_merged",
            form=type(self).__name__,
            source=source_name,
            attributes=list(selected),
        )
        return self.assign(selected)

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    @classmethod
    def named_mappings(cls, model_name: str | None = None) -> dict[str, MappingOptions]:
        """Attribute name -> mapping, for every attribute mapped to ``model_name`` (or any)."""
        return {
            name: definition.mapping
            for name, definition in cls.registry().items()
            if definition.mapping is not None
            and (model_name is None or definition.mapping.model == str(model_name))
        }

    @classmethod
    def permitted_keys(cls) -> list[Any]:
        """Allow-list shape for request parameters.

        Scalars are bare names; lists are ``{name: []}``; nested forms are
        ``{"<name>_attributes": <their permitted keys>}``.
        """
        keys: list[Any] = []
        for name, definition in cls.registry().items():
            sub_type = definition.sub_type
            if definition.kind is AttributeType.ARRAY:
                if _is_form(sub_type):
                    keys.append({f"{name}{NESTED_SUFFIX}": sub_type.permitted_keys()})
                elif isinstance(sub_type, type) and issubclass(sub_type, TypedObject):
                    keys.append({f"{name}{NESTED_SUFFIX}": []})
                else:
                    keys.append({name: []})
            elif definition.kind is AttributeType.MODEL and _is_form(sub_type):
                keys.append({f"{name}{NESTED_SUFFIX}": sub_type.permitted_keys()})
            elif definition.kind is AttributeType.MODEL:
                keys.append(f"{name}{NESTED_SUFFIX}")
            else:
                keys.append(name)
        return keys

    # -------------------------------------------------------------------------
    # Assignment
    # -------------------------------------------------------------------------

    def _writer_for(self, key: str) -> Writer | None:
        writer = super()._writer_for(key)
        if writer is None and key.endswith(NESTED_SUFFIX):
            name = key[: -len(NESTED_SUFFIX)]
            if name in self.registry():
                return lambda value, force: self.set_nested_attributes(name, value, force)
        return writer

    def set_nested_attributes(self, name: str, params: Any, force_convert: bool = False) -> None:
        """``<name>_attributes`` writer for nested forms and lists of them.

        Index-keyed mappings (``{"1": {...}, "0": {...}}``) are ordered by
        their numeric key before being written as a list.
        """
        definition = self.attribute_definition(name)
        if definition is None:
            raise unknown_attribute(f"{name}{NESTED_SUFFIX}", type(self).__name__)
        if definition.kind is AttributeType.MODEL and definition.sub_type is not None:
            self.set(name, params, force_convert)
        elif definition.kind is AttributeType.ARRAY and definition.sub_type is not None:
            if isinstance(params, Mapping):
                members = [v for _, v in sorted(params.items(), key=lambda kv: _index_key(kv[0]))]
            else:
                members = list(params or [])
            self.set(name, members, force_convert)
        else:
            raise ConfigurationError(
                f"'{name}' does not hold nested objects; cannot assign {name}{NESTED_SUFFIX}",
                code=ErrorCode.E9002_UNKNOWN_ATTRIBUTE,
                attribute=name,
                owner=type(self).__name__,
            )

    # -------------------------------------------------------------------------
    # Extraction
    # -------------------------------------------------------------------------

    def to_model_attributes(self, model_name: str, *, exclude: str | Iterable[str] | None = None) -> dict[str, Any]:
        """Values of the attributes mapped to ``model_name``, under that source's keys.

        ``back(value, accumulator)`` mappings write their own keys; ``compact``
        drops None elements from lists; ``id`` is always excluded.
        """
        attrs = self.attributes()
        excluded = EXCLUDED_KEYS | _as_names(exclude)
        out: dict[str, Any] = {}
        for name, mapping in type(self).named_mappings(model_name).items():
            if name not in attrs:
                continue
            value = attrs[name]
            if mapping.back is not None:
                mapping.back(value, out)
                continue
            key = mapping.source_key(name)
            if key in excluded:
                continue
            if mapping.compact and isinstance(value, (list, tuple)):
                value = [v for v in value if v is not None]
            out[key] = value
        return out

    def attributes(self) -> dict[str, Any]:
        """Set values and defaults, without ``id``."""
        return {k: v for k, v in super().attributes().items() if k not in EXCLUDED_KEYS}

    def as_json(self) -> dict[str, Any]:
        """JSON-compatible dict of set values and defaults."""
        return to_json_value(super().attributes())

    def cache_key(self) -> str:
        return hashed_key(self.attributes())

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return other.attributes() == self.attributes()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"<{type(self).__name__}<FormModel> persisted={self._persisted} {self.attributes()!r}>"
