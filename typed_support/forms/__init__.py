"""Form Models

- FormModel: typed object mapped to named external sources
- nested_params / permit: request parameter shaping
- form_params: FastAPI dependency building a form from a request
"""
from .sources import default_access, persisted_state, read, source_snapshot
from .params import nested_params, param_key, permit, split_key
from .model import FormModel, resolve_mapped_value
from .boundaries import form_params, read_request_params

__all__ = [
    "default_access",
    "persisted_state",
    "read",
    "source_snapshot",
    "nested_params",
    "param_key",
    "permit",
    "split_key",
    "FormModel",
    "resolve_mapped_value",
    "form_params",
    "read_request_params",
]
