"""Mailbox request models."""

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class CreateEmailRequest(BaseModel):
    """Create email request model."""

    prefix: Optional[str] = Field(default=None, max_length=64)
    count: int = 1


class CheckEmailsRequest(BaseModel):
    """Check emails request model."""

    emails: Optional[List[Any]] = None


class StartRealtimeRequest(BaseModel):
    """Start realtime request model.

    ``clientId`` is the id announced in the WebSocket welcome frame.
    """

    email: Optional[str] = None
    clientId: Optional[str] = None
