"""Custom exception classes for the TempMail relay."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional


class TempMailError(Exception):
    """Base exception for the TempMail relay."""

    status_code: int = 500

    def __init__(
        self, message: str, recoverable: bool = True, details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize TempMail error.

        Args:
            message: Error message
            recoverable: Whether the error is recoverable with retry
            details: Additional error details
        """
        self.message = message
        self.recoverable = recoverable
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "recoverable": self.recoverable,
            "details": self.details,
            "timestamp": self.timestamp,
        }


class ValidationError(TempMailError):
    """Input validation failed."""

    status_code = 400

    def __init__(self, message: str = "Invalid input", field: Optional[str] = None):
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Name of the offending field, if known
        """
        self.field = field
        super().__init__(
            message, recoverable=False, details={"field": field} if field else None
        )


# Upstream provider errors
class ProviderError(TempMailError):
    """Upstream mailbox provider returned an error or unusable data."""

    status_code = 502

    def __init__(self, message: str = "Mailbox provider error", status: Optional[int] = None):
        self.status = status
        super().__init__(
            message, recoverable=True, details={"status": status} if status else None
        )


class ProviderTimeoutError(ProviderError):
    """Upstream mailbox provider did not answer in time."""

    status_code = 504

    def __init__(self, message: str = "Mailbox provider timed out", timeout: Optional[float] = None):
        super().__init__(message)
        if timeout:
            self.details["timeout"] = timeout


# Configuration Errors
class ConfigurationError(TempMailError):
    """Configuration error occurred."""

    def __init__(
        self,
        message: str = "Configuration error",
        recoverable: bool = False,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, recoverable, details)


class ConnectionLimitError(TempMailError):
    """Realtime hub refused a connection because it is full."""

    status_code = 503

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(
            f"WebSocket connection limit reached ({limit})",
            recoverable=True,
            details={"limit": limit},
        )
