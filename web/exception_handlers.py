"""Exception handlers producing the ``{"success": false, "error": ...}`` envelope."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException

from src.core.exceptions import ProviderError, TempMailError, ValidationError
from src.middleware.error_handler import (
    error_envelope,
    handle_provider_error,
    handle_tempmail_error,
    handle_validation_error,
)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Convert FastAPI HTTPException to the error envelope, keeping its status."""
    headers = getattr(exc, "headers", None) or {}
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)

    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(detail),
        headers=headers,
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Convert Pydantic request validation errors to a 400 envelope."""
    errors = {}
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"] if loc != "body")
        errors[field or "body"] = error["msg"]

    message = "; ".join(f"{field}: {msg}" for field, msg in errors.items())
    return JSONResponse(
        status_code=400,
        content=error_envelope(message or "Invalid request body", errors=errors),
    )


async def tempmail_exception_handler(request: Request, exc: TempMailError) -> JSONResponse:
    if isinstance(exc, ValidationError):
        return handle_validation_error(exc, request)
    if isinstance(exc, ProviderError):
        return handle_provider_error(exc, request)
    return handle_tempmail_error(exc, request)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(TempMailError, tempmail_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 envelope for slowapi limit breaches."""
    return JSONResponse(
        status_code=429,
        content=error_envelope(f"Rate limit exceeded: {exc.detail}"),
    )
