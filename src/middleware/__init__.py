"""Middleware package for FastAPI application."""

from .correlation import CorrelationMiddleware
from .error_handler import ErrorHandlerMiddleware

__all__ = ["CorrelationMiddleware", "ErrorHandlerMiddleware"]
