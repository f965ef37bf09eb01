"""Form parsing at the HTTP boundary.

    @router.post("/signup")
    async def signup(form: SignupForm = Depends(form_params(SignupForm))):
        form.ensure_valid()
        ...

JSON bodies are used as-is; form bodies and query strings have their
bracketed keys expanded first. Failures raise library errors, which
``register_error_handlers`` turns into JSON error responses.
"""
from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Awaitable, Callable, TypeVar

from fastapi import Request

from typed_support.core.errors import ErrorCode, TypedSupportError
from typed_support.core.logging import forms_logger

from .model import FormModel
from .params import nested_params

log = forms_logger()

F = TypeVar("F", bound=FormModel)

_FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def _bad_body(message: str) -> TypedSupportError:
    return TypedSupportError(message, code=ErrorCode.E2006_INVALID_FORMAT)


async def read_request_params(request: Request) -> dict[str, Any]:
    """Request parameters as nested data: JSON body, form body or query string."""
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()

    if content_type == "application/json":
        raw = await request.body()
        if not raw:
            return nested_params(request.query_params)
        try:
            body = json.loads(raw)
        except ValueError as e:
            raise _bad_body(f"Request body is not valid JSON: {e}") from e
        if not isinstance(body, Mapping):
            raise _bad_body(f"Request body must be a JSON object, got {type(body).__name__}")
        return dict(body)

    if content_type in _FORM_TYPES:
        form = await request.form()
        return nested_params(form)

    return nested_params(request.query_params)


def form_params(
    form_class: type[F],
    *,
    extract: bool = True,
    persisted: bool = False,
) -> Callable[[Request], Awaitable[F]]:
    """FastAPI dependency building ``form_class`` from the request.

    With ``extract`` (the default) parameters are scoped under
    ``form_class.form_name()`` and filtered by its permitted keys.
    """
    async def dependency(request: Request) -> F:
        params = await read_request_params(request)
        log.debug(
            "form_params_received",
            form=form_class.__name__,
            path=request.url.path,
            keys=list(params),
        )
        return form_class.from_params(params, persisted=persisted, extract=extract)

    dependency.__name__ = f"{form_class.form_name()}_params"
    return dependency
