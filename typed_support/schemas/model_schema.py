"""Schema-produced typed objects.

``ApiModelSchema`` is the form model every named schema builds on. It adds
the ``api_schema`` attribute kind, declared with ``nested`` (one nested
schema) or ``nested_collection`` (a list of them):

    s.nested("profile", ProfileSchema, allow_nil=True)
    s.nested_collection("posts", PostSchema, schema_name="minimal")

Nested values are rendered with the schema name of the owning schema
(unless ``schema_name`` is given) and the context of the current render.
Attributes without a mapped source read from the rendered model, known
as ``"model"``.
"""
from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Callable, ClassVar

from typed_support.attributes import (
    MISSING,
    AttributeDefinition,
    AttributeOptions,
    AttributeType,
    CoercionEngine,
    Converter,
    MappingOptions,
    TypeChecker,
    TypedAttribute,
    active_coercer,
)
from typed_support.forms import FormModel, read
from typed_support.core.logging import schemas_logger

log = schemas_logger()

PRIMARY_SOURCE = "model"

SchemaBody = Callable[[type["ApiModelSchema"]], None]


class SchemaTypeChecker(TypeChecker):
    """Type checks plus the ``api_schema`` kind."""

    checks = {**TypeChecker.checks, AttributeType.API_SCHEMA: "_check_api_schema"}

    def _check_api_schema(self, value: Any, definition: AttributeDefinition) -> bool:
        from .api_schema import ApiSchema

        sub_type = definition.sub_type
        return (
            isinstance(value, ApiModelSchema)
            and isinstance(sub_type, type)
            and issubclass(sub_type, ApiSchema)
        )


def _renderer(schema: Any, schema_name: str | None) -> Callable[[Any, Any], Any]:
    def render(value: Any, owner: Any) -> Any:
        name = schema_name or type(owner).schema_name
        return schema(value).render(name, getattr(owner, "_schema_context", None))
    return render


def _nested_options(schema: Any, options: dict[str, Any]) -> dict[str, Any]:
    options = dict(options)
    options["validates"] = True
    options["sub_type"] = schema
    if options.get("allow_blank") is None and options.get("allow_nil") is None:
        options["allow_blank"] = False
    options.setdefault("convert", True)
    return options


def attr_nested(schema: Any, **options: Any) -> TypedAttribute:
    """One nested schema, rendered from the raw value on write."""
    def factory(name: str, opts: AttributeOptions, type_class: Any) -> Converter:
        return _renderer(schema, opts.schema_name)

    return TypedAttribute(AttributeType.API_SCHEMA, _nested_options(schema, options), factory)


def attr_nested_collection(schema: Any, **options: Any) -> TypedAttribute:
    """A list of nested schemas; every element is rendered independently."""
    options = _nested_options(schema, options)
    options["convert"] = True

    def factory(name: str, opts: AttributeOptions, type_class: Any) -> Converter:
        render = _renderer(schema, opts.schema_name)

        def convert(values: Any, owner: Any) -> Any:
            return active_coercer().coerce(values, list).map(
                lambda members: [render(member, owner) for member in members]
            )
        return convert

    return TypedAttribute(AttributeType.ARRAY, options, factory, type_class=list)


class ApiModelSchema(FormModel):
    """Form model generated for one named schema of an ``ApiSchema``."""

    engine: ClassVar[CoercionEngine] = CoercionEngine(SchemaTypeChecker())
    schema_owner: ClassVar[type | None] = None
    schema_name: ClassVar[str] = "default"
    schema_bodies: ClassVar[tuple[SchemaBody, ...]] = ()

    def __init__(self, model: Any = None, persisted: bool = False, convert_all: bool = False):
        """Take each declared attribute the model exposes; anything else is ignored."""
        self._schema_context: Any = None
        assigned: dict[str, Any] = {}
        if model is not None:
            for name in self.attribute_names():
                value = read(model, name)
                if value is not MISSING:
                    assigned[name] = value
        super().__init__(assigned, persisted, convert_all)

    @classmethod
    def _build_definition(cls, name: str, attr: TypedAttribute) -> AttributeDefinition:
        definition = super()._build_definition(name, attr)
        mapping = definition.mapping
        if mapping is None:
            return definition.with_mapping(MappingOptions(model=PRIMARY_SOURCE))
        if mapping.model is None:
            return definition.with_mapping(mapping.model_copy(update={"model": PRIMARY_SOURCE}))
        return definition

    @classmethod
    def nested(cls, name: str, schema: Any, **options: Any) -> AttributeDefinition:
        return cls.declare(name, attr_nested(schema, **options))

    @classmethod
    def nested_collection(cls, name: str, schema: Any, **options: Any) -> AttributeDefinition:
        return cls.declare(name, attr_nested_collection(schema, **options))

    @classmethod
    def _represents(cls, type_: Any) -> bool:
        return getattr(type_, "__name__", None) == cls.__name__

    @classmethod
    def _association_sources(cls) -> list[str]:
        sources: list[str] = []
        for mapping in cls.named_mappings().values():
            if mapping.model != PRIMARY_SOURCE and mapping.model not in sources:
                sources.append(mapping.model)
        return sources

    def _with_context(self, context: Any) -> ApiModelSchema:
        self._schema_context = context
        return self

    @classmethod
    def from_models(
        cls,
        models: Mapping[str, Any],
        *,
        persisted: bool = True,
        context: Any = None,
        exclude: Any = None,
        others: Any = None,
        form: FormModel | None = None,
    ) -> ApiModelSchema:
        """Merge the named sources, then fill attributes mapped to associations.

        An attribute mapped to a source other than ``"model"`` is read from
        that association of the primary model (``model.<source>``).
        """
        if form is None:
            form = cls({}, persisted)
        form._with_context(context)
        data = super().from_models(
            models, persisted=persisted, context=context, exclude=exclude, others=others, form=form
        )

        root = models.get(PRIMARY_SOURCE)
        for source_name in cls._association_sources():
            association = read(root, source_name) if root is not None else MISSING
            if association is MISSING or association is None:
                continue
            merged = super().from_models(
                {source_name: association},
                persisted=persisted,
                context=context,
                exclude=exclude,
                form=cls({}, persisted)._with_context(context),
            )
            data._values.update(merged._values)
            log.debug("association_merged", schema=cls.__name__, source=source_name)
        return data

    def __repr__(self) -> str:
        return f"<{type(self).__name__}<ApiModelSchema> {json.dumps(self.as_json())}>"
