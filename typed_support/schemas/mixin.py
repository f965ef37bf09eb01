from __future__ import annotations

import importlib
from typing import Any

from typed_support.core.config import get_settings
from typed_support.core.errors import ConfigurationError, ErrorCode

from .api_schema import ApiSchema
from .model_schema import ApiModelSchema


def find_schema(namespace: str, class_name: str) -> type[ApiSchema]:
    """The ``ApiSchema`` subclass called ``class_name`` in module ``namespace``."""
    try:
        module = importlib.import_module(namespace)
    except ImportError as e:
        raise ConfigurationError(
            f"Schema namespace '{namespace}' cannot be imported: {e}",
            code=ErrorCode.E9004_UNKNOWN_SCHEMA,
            metadata={"namespace": namespace},
        ) from e
    schema_class = getattr(module, class_name, None)
    if not (isinstance(schema_class, type) and issubclass(schema_class, ApiSchema)):
        raise ConfigurationError(
            f"No ApiSchema named '{class_name}' in '{namespace}'",
            code=ErrorCode.E9004_UNKNOWN_SCHEMA,
            owner=class_name,
            metadata={"namespace": namespace},
        )
    return schema_class


class WithApiSchema:
    """Mixin giving models a ``to_api`` rendering through their same-named schema."""

    def to_api(
        self,
        name: str | None = None,
        context: Any = None,
        schema_namespace: str | None = None,
    ) -> ApiModelSchema:
        namespace = schema_namespace or get_settings().SCHEMA_NAMESPACE
        return find_schema(namespace, type(self).__name__)(self).render(name, context)
