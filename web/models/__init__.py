"""Pydantic models for the TempMail relay web application."""

from .mailbox import CheckEmailsRequest, CreateEmailRequest, StartRealtimeRequest

__all__ = [
    "CreateEmailRequest",
    "CheckEmailsRequest",
    "StartRealtimeRequest",
]
