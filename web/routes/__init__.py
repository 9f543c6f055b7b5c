"""Routes package for the TempMail relay web application."""

from .health import router as health_router
from .mailbox import router as mailbox_router

__all__ = [
    "health_router",
    "mailbox_router",
]
