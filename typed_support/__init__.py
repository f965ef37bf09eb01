"""typed_support: typed attributes, form models and API schemas.

    from typed_support import FormModel, attr_integer, attr_string

    class SignupForm(FormModel):
        email = attr_string(allow_blank=False, strip=True)
        age = attr_integer(allow_nil=True)

    form = SignupForm.from_params({"email": " ann@example.com ", "age": "41"})
"""
from typed_support.core.config import Settings, get_settings
from typed_support.core.logging import configure_logging
from typed_support.core.errors import (
    AllowedValueError,
    AttributeTypeError,
    ConfigurationError,
    PresenceError,
    TypedSupportError,
    ValidationFailed,
    register_error_handlers,
)
from typed_support.attributes import (
    AttributeType,
    Symbol,
    TypedModel,
    TypedObject,
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
    is_blank,
    is_present,
    validates_each,
)
from typed_support.forms import FormModel, form_params
from typed_support.schemas import (
    ApiModelSchema,
    ApiSchema,
    WithApiSchema,
    attr_nested,
    attr_nested_collection,
    schema,
)
from typed_support.hashing import hashed_key

__version__ = "0.1.0"

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "AllowedValueError",
    "AttributeTypeError",
    "ConfigurationError",
    "PresenceError",
    "TypedSupportError",
    "ValidationFailed",
    "register_error_handlers",
    "AttributeType",
    "Symbol",
    "TypedModel",
    "TypedObject",
    "attr_any",
    "attr_array",
    "attr_boolean",
    "attr_float",
    "attr_hash",
    "attr_integer",
    "attr_model",
    "attr_numeric",
    "attr_string",
    "attr_symbol",
    "attribute",
    "is_blank",
    "is_present",
    "validates_each",
    "FormModel",
    "form_params",
    "ApiModelSchema",
    "ApiSchema",
    "WithApiSchema",
    "attr_nested",
    "attr_nested_collection",
    "schema",
    "hashed_key",
]
