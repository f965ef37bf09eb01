"""Named schemas describing how a model is rendered.

    class UserSchema(ApiSchema):
        @schema()
        def default(s):
            s.declare("uid", attr_string())
            s.declare("full_name", attr_string(mapping={"attribute": "name"}))
            s.nested("profile", ProfileSchema, allow_nil=True)

        @schema("detailed", based_on="default")
        def detailed(s):
            s.declare("email", attr_string())

    UserSchema(user).render("detailed", context)

Each named schema is an ``ApiModelSchema`` subclass. A schema based on
another replays the base schema's declarations before its own; defining
a schema name again refines the existing schema. Subclasses of an
``ApiSchema`` start from a copy of their parent's schemas.
"""
from __future__ import annotations

from typing import Any, ClassVar

from typed_support.attributes import TypedAttribute
from typed_support.core.config import get_settings
from typed_support.core.errors import unknown_schema
from typed_support.core.logging import schemas_logger

from .model_schema import PRIMARY_SOURCE, ApiModelSchema, SchemaBody

log = schemas_logger()

SCHEMA_ATTR = "__api_schema__"


def schema(name: str | SchemaBody = "default", *, based_on: str | None = None) -> Any:
    """Mark a function in an ``ApiSchema`` body as the definition of a named schema.

    The function receives the generated schema class and declares its
    attributes. Usable bare (``@schema``) for the default schema.
    """
    if callable(name):
        setattr(name, SCHEMA_ATTR, ("default", None))
        return name

    def decorator(fn: SchemaBody) -> SchemaBody:
        setattr(fn, SCHEMA_ATTR, (name, based_on))
        return fn
    return decorator


def _declaring(attributes: dict[str, TypedAttribute]) -> SchemaBody:
    def body(schema_class: type[ApiModelSchema]) -> None:
        for attr_name, attr in attributes.items():
            schema_class.declare(attr_name, attr)
    return body


class ApiSchema:
    """Owner of named schemas for one kind of model."""

    _schemas: ClassVar[dict[str, type[ApiModelSchema]]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._schemas = dict(cls._schemas)
        for member_name, member in list(cls.__dict__.items()):
            marker = getattr(member, SCHEMA_ATTR, None)
            if marker is None:
                continue
            schema_name, based_on = marker
            cls.define_schema(schema_name, member, based_on=based_on)
            delattr(cls, member_name)

    @classmethod
    def define_schema(
        cls,
        name: str = "default",
        body: SchemaBody | None = None,
        *,
        based_on: str | None = None,
        **attributes: TypedAttribute,
    ) -> type[ApiModelSchema]:
        """Create, or refine, the schema called ``name``.

        Args:
            name: Schema name
            body: ``fn(schema_class)`` declaring attributes
            based_on: Existing schema whose declarations are replayed first
            **attributes: Attributes declared after ``body``
        """
        if based_on is not None and based_on not in cls._schemas:
            raise unknown_schema(based_on, cls.__name__)

        existing = cls._schemas.get(name)
        base = existing or ApiModelSchema

        bodies: list[SchemaBody] = []
        if based_on is not None:
            bodies.extend(cls._schemas[based_on].schema_bodies)
        if body is not None:
            bodies.append(body)
        if attributes:
            bodies.append(_declaring(attributes))

        schema_class: type[ApiModelSchema] = type(
            cls.__name__,
            (base,),
            {
                "__module__": cls.__module__,
                "__qualname__": cls.__qualname__,
                "schema_owner": cls,
                "schema_name": name,
                "schema_bodies": (*base.schema_bodies, *bodies),
            },
        )
        for replay in bodies:
            replay(schema_class)

        cls._schemas[name] = schema_class
        log.debug(
            "schema_defined",
            owner=cls.__name__,
            schema=name,
            based_on=based_on,
            refined=existing is not None,
            attributes=schema_class.attribute_names(),
        )
        return schema_class

    @classmethod
    def schema_names(cls) -> list[str]:
        return list(cls._schemas)

    @classmethod
    def schema_class(cls, name: str) -> type[ApiModelSchema]:
        try:
            return cls._schemas[name]
        except KeyError:
            raise unknown_schema(name, cls.__name__) from None

    @classmethod
    def represent(cls, model: Any, name: str | None = None, context: Any = None) -> ApiModelSchema:
        return cls(model).render(name, context)

    def __init__(self, model: Any):
        self.model = model

    def render(self, name: str | None = None, context: Any = None) -> ApiModelSchema:
        """Render the model with the named schema, falling back to the default schema."""
        default = get_settings().DEFAULT_SCHEMA
        name = name or default
        schema_class = self._schemas.get(name)
        if schema_class is None:
            log.debug("schema_fallback", owner=type(self).__name__, requested=name, used=default)
            schema_class = self.schema_class(default)
        return schema_class.from_models({PRIMARY_SOURCE: self.model}, context=context)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} model={self.model!r}>"

