"""Global exception handlers.

``CatalogError`` subclasses map 1:1 to a status and message. Request parsing
failures become field-keyed validation errors. Anything else is a 500 whose
detail only reaches the log.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from catalog.core.errors import (
    BadRequestError,
    CatalogError,
    InfrastructureError,
    NotFoundError,
    ValidationFailedError,
)
from catalog.core.tracing import get_current_trace_id
from catalog.core.validator import first_error_per_field

logger = logging.getLogger(__name__)

_MESSAGE_OVERRIDES = {
    "int_parsing": "must be an integer value",
    "int_type": "must be an integer value",
    "string_type": "must be a string",
    "list_type": "must be a list",
    "extra_forbidden": "unknown field",
}


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


def error_response(exc: CatalogError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_response(),
        headers=exc.headers or None,
    )


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    extra = {"error_code": exc.code, "path": request.url.path, "method": request.method}
    if isinstance(exc, InfrastructureError):
        logger.error("%s (trace %s)", exc.detail, get_current_trace_id(), extra=extra)
    else:
        logger.info("%s: %s", exc.code, exc.message, extra=extra)
    return error_response(exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()

    if any(e["type"] == "json_invalid" for e in errors):
        return error_response(BadRequestError("body contains badly formed JSON"))
    # Unparseable path parameters mean the resource cannot exist.
    if any(e["loc"] and e["loc"][0] == "path" for e in errors):
        return error_response(NotFoundError())

    fields = first_error_per_field(
        (_field_name(e["loc"]), _MESSAGE_OVERRIDES.get(e["type"], e["msg"])) for e in errors
    )
    logger.info("Request validation failed on %s: %s", request.url.path, fields)
    return error_response(ValidationFailedError(fields))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return error_response(NotFoundError())
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        message = f"the {request.method} method is not supported for this resource"
        body = {"error": {"code": "METHOD_NOT_ALLOWED", "message": message}}
        return JSONResponse(status_code=exc.status_code, content=body)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": "HTTP_ERROR", "message": str(exc.detail)}},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: the response never carries internal details."""
    logger.exception(
        "Unhandled exception on %s: %s", request.url.path, exc,
        extra={"path": request.url.path, "method": request.method},
    )
    return error_response(InfrastructureError(str(exc)))


def _field_name(loc: tuple) -> str:
    # ("body", "genres", 0) -> "genres"; ("query", "page") -> "page"
    parts = [str(p) for p in loc[1:] if not isinstance(p, int)]
    return parts[0] if parts else str(loc[-1])
