"""Global exception handlers mapping domain exceptions to HTTP responses.

Every error body has the shape ``{"error": <message>, "type": <kind>}``.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from skinscores.exceptions import (
    InvalidArgumentError,
    NotFoundError,
    PermissionDeniedError,
    SkinScoresError,
    UnauthenticatedError,
)

log = logging.getLogger(__name__)


def _error(status_code: int, exc: SkinScoresError) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": exc.kind})


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request."
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "invalid value")
    return f"Invalid request: {location}: {message}" if location else f"Invalid request: {message}"


def register_error_handlers(app: FastAPI) -> None:
    """Register exception-to-HTTP-status mappings."""

    @app.exception_handler(UnauthenticatedError)
    async def handle_unauthenticated(request: Request, exc: UnauthenticatedError) -> JSONResponse:
        response = _error(401, exc)
        response.headers["WWW-Authenticate"] = "Bearer"
        return response

    @app.exception_handler(InvalidArgumentError)
    async def handle_invalid_argument(request: Request, exc: InvalidArgumentError) -> JSONResponse:
        return _error(400, exc)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return _error(404, exc)

    @app.exception_handler(PermissionDeniedError)
    async def handle_permission_denied(request: Request, exc: PermissionDeniedError) -> JSONResponse:
        return _error(403, exc)

    @app.exception_handler(SkinScoresError)
    async def handle_generic_error(request: Request, exc: SkinScoresError) -> JSONResponse:
        log.error("Request to %s failed: %s", request.url.path, exc)
        return _error(500, exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": _describe_validation_error(exc), "type": InvalidArgumentError.kind},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        log.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal error.", "type": SkinScoresError.kind},
        )
