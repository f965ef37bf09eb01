"""FastAPI Exception Handlers

Turns the library's exceptions into structured JSON error responses at
an HTTP boundary. Presence, type and allowed-value failures become 400s,
failed field validation a 422, configuration problems a 500.
"""
from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from typed_support.core.logging import get_logger

from .exceptions import TypedSupportError
from .types import AppError

log = get_logger("typed_support.errors.handlers")


def error_to_response(error: AppError) -> JSONResponse:
    """Convert AppError to FastAPI JSONResponse."""
    status_code = error.code.http_status

    log_method = log.warning if status_code < 500 else log.error
    log_method(
        "error_response",
        error_code=error.code.name,
        error_code_num=error.code.value,
        message=error.message,
        category=error.code.category,
        metadata=error.metadata,
    )

    return JSONResponse(status_code=status_code, content=error.to_dict())


async def typed_support_error_handler(request: Request, exc: TypedSupportError) -> JSONResponse:
    """Handle every library error, including ``ensure_valid`` failures."""
    error = exc.to_app_error().with_metadata(path=request.url.path)
    return error_to_response(error)


def register_error_handlers(app: FastAPI) -> None:
    """Register the library's error handlers on a FastAPI app.

    Usage:
        app = FastAPI()
        register_error_handlers(app)
    """
    app.add_exception_handler(TypedSupportError, typed_support_error_handler)
