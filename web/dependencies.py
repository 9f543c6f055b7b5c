"""Shared dependencies for the TempMail relay web application.

Long-lived services are created by the application lifespan and stored on
``app.state``; routes reach them through the functions below.
"""

from fastapi import Request

from src.services.coordinator import MailboxCoordinator
from web.websocket.manager import NotificationHub


def get_coordinator(request: Request) -> MailboxCoordinator:
    """Coordinator created at startup."""
    return request.app.state.coordinator


def get_hub(request: Request) -> NotificationHub:
    return request.app.state.hub
