"""Global error handling middleware for the TempMail relay."""

import traceback
from typing import Any, Callable, Dict, cast

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from src.core.exceptions import ProviderError, TempMailError, ValidationError


def error_envelope(message: str, **extra: Any) -> Dict[str, Any]:
    """Body shared by every error response."""
    content: Dict[str, Any] = {"success": False, "error": message}
    content.update(extra)
    return content


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware with consistent JSON responses.

    Catches all unhandled exceptions and returns ``{"success": false, "error": ...}``.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request and handle any exceptions.

        Args:
            request: FastAPI request
            call_next: Next middleware/handler in chain

        Returns:
            Response object
        """
        try:
            response = await call_next(request)
            return cast(Response, response)
        except ValidationError as e:
            return handle_validation_error(e, request)
        except ProviderError as e:
            return handle_provider_error(e, request)
        except TempMailError as e:
            return handle_tempmail_error(e, request)
        except Exception as e:
            return handle_unexpected_error(e, request)


def handle_validation_error(error: ValidationError, request: Request) -> JSONResponse:
    """400 with the offending field when known."""
    logger.warning(
        f"Validation error: {error.message}",
        extra={"path": request.url.path, "field": error.field},
    )

    extra = {"field": error.field} if error.field else {}
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_envelope(error.message, **extra),
    )


def handle_provider_error(error: ProviderError, request: Request) -> JSONResponse:
    logger.error(
        f"Provider error: {error.message}",
        extra={"path": request.url.path, "status": error.status},
    )
    return JSONResponse(status_code=error.status_code, content=error_envelope(error.message))


def handle_tempmail_error(error: TempMailError, request: Request) -> JSONResponse:
    """Known relay errors map to their own status code."""
    logger.error(
        f"TempMail error: {error.__class__.__name__}: {error.message} "
        f"(recoverable={error.recoverable})",
        extra={"path": request.url.path},
    )
    return JSONResponse(status_code=error.status_code, content=error_envelope(error.message))


def handle_unexpected_error(error: Exception, request: Request) -> JSONResponse:
    """Handle unexpected errors. Must not leak internal details."""
    # Log full traceback for debugging
    logger.error(
        f"Unexpected error: {str(error)}",
        extra={"path": request.url.path, "traceback": traceback.format_exc()},
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope("Internal server error"),
    )
