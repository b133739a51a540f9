"""Catalog API Error Handlers — what the route layer returns when it cannot dispatch.

Invariants:
    - CatalogError → its own to_response() envelope and http_status
    - A body that is not a map of field → string | list[string] → 400 VALIDATION_ERROR,
      one detail per offending body field
    - Anything else → 500 INTERNAL_ERROR without exception text in the body

Design Decisions:
    - Operations report failures as outcomes (api/presenters.py); these handlers only
      see route-level failures: unknown collection segment, malformed body, bugs
    - Client-side CatalogErrors (4xx) log at WARNING, server-side ones at ERROR
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from catalog.core.errors import CatalogError, ErrorSeverity

logger = logging.getLogger(__name__)

MALFORMED_BODY_MESSAGE = "Request body must map field names to strings or lists of strings"


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(RequestValidationError, malformed_body_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    level = logging.WARNING if exc.http_status < 500 else logging.ERROR
    logger.log(
        level,
        f"{request.method} {request.url.path} -> {exc.http_status} {exc.code}: {exc.message}",
        extra={"error_code": exc.code, "path": request.url.path},
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def malformed_body_handler(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = _body_field_details(exc)
    logger.warning(
        f"Malformed catalog form body on {request.url.path}: "
        f"{[d['field'] for d in details]}",
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": MALFORMED_BODY_MESSAGE,
                "category": "validation",
                "severity": ErrorSeverity.ERROR.value,
                "details": details,
            },
        },
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: the body never carries exception text."""
    logger.error(
        f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}",
        exc_info=exc,
        extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "category": "internal",
                "severity": ErrorSeverity.CRITICAL.value,
            },
        },
    )


def _body_field_details(exc: RequestValidationError) -> list[dict]:
    """One entry per body field; union-branch noise after the field name is dropped."""
    details: list[dict] = []
    seen: set[str] = set()
    for error in exc.errors():
        loc = [str(part) for part in error["loc"]]
        if loc and loc[0] == "body":
            loc = loc[1:]
        field = loc[0] if loc else "body"
        if field in seen:
            continue
        seen.add(field)
        details.append({"field": field, "message": error["msg"], "type": error["type"]})
    return details
