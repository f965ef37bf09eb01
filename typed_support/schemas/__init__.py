"""API Schemas

- ApiSchema: named, composable schemas for rendering a model
- ApiModelSchema: the form model each named schema generates
- schema: decorator marking schema definitions in an ApiSchema body
- WithApiSchema: ``model.to_api()`` through a schema namespace
"""
from .model_schema import (
    PRIMARY_SOURCE,
    ApiModelSchema,
    SchemaTypeChecker,
    attr_nested,
    attr_nested_collection,
)
from .api_schema import ApiSchema, schema
from .mixin import WithApiSchema, find_schema

__all__ = [
    "PRIMARY_SOURCE",
    "ApiModelSchema",
    "SchemaTypeChecker",
    "attr_nested",
    "attr_nested_collection",
    "ApiSchema",
    "schema",
    "WithApiSchema",
    "find_schema",
]
