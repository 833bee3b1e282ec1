"""Maps domain and request errors to HTTP responses.

Domain errors carry field-level messages and are returned as
``{"errors": {...}, "errorType": "<ClassName>"}``. Anything unexpected is
logged and reported without internals.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import (
    ExpectedVersionError,
    InvalidDataError,
    InvalidOperationError,
    InvalidStateError,
    ObjectNotFoundError,
    ValidationError,
)

from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# Subclasses must come before their bases: the first match wins.
ERROR_STATUS_CODES = (
    (ObjectNotFoundError, 404),
    (ValidationError, 400),
    (InvalidDataError, 400),
    (ExpectedVersionError, 409),
    (InvalidStateError, 409),
    (InvalidOperationError, 422),
)


def _error_body(errors, error_type: str) -> dict:
    return {"errors": errors, "errorType": error_type}


def _messages(exc) -> dict:
    """Field messages live on ``.messages`` for validation errors and in ``args[0]`` for the rest."""
    messages = getattr(exc, "messages", None)
    if isinstance(messages, dict):
        return messages
    if exc.args and isinstance(exc.args[0], dict):
        return exc.args[0]
    return {"_entity": [str(messages or exc)]}


async def domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
    status_code = next(code for error_cls, code in ERROR_STATUS_CODES if isinstance(exc, error_cls))
    logger.info(
        "request_rejected",
        path=request.url.path,
        status_code=status_code,
        error_type=type(exc).__name__,
    )
    return JSONResponse(status_code=status_code, content=_error_body(_messages(exc), type(exc).__name__))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path", "header")]
        errors.setdefault(".".join(location) or "request", []).append(error.get("msg", "Invalid value"))
    return JSONResponse(status_code=400, content=_error_body(errors, "ValidationError"))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", path=request.url.path, error_type=type(exc).__name__)
    return JSONResponse(
        status_code=500,
        content=_error_body({"server": ["Internal server error"]}, "InternalServerError"),
    )


def register_error_handlers(app: FastAPI) -> None:
    for error_cls, _ in ERROR_STATUS_CODES:
        app.add_exception_handler(error_cls, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
