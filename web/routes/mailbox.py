"""Mailbox routes: address generation, inbox checks and realtime tracking."""

import time
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request
from loguru import logger
from slowapi import Limiter
from slowapi.util import get_remote_address

from src.core.config import get_settings
from src.core.exceptions import ValidationError
from src.services.coordinator import MailboxCoordinator
from web.dependencies import get_coordinator
from web.models import CheckEmailsRequest, CreateEmailRequest, StartRealtimeRequest

router = APIRouter(prefix="/api", tags=["mailbox"])
limiter = Limiter(key_func=get_remote_address)


def _rate_limit() -> str:
    return get_settings().rate_limit


def _require_address(email: Optional[str]) -> str:
    if not email or "@" not in email:
        raise ValidationError("Invalid email address", field="email")
    return email


@router.post("/create-email")
@limiter.limit(_rate_limit)
async def create_email(
    request: Request,
    body: Optional[CreateEmailRequest] = None,
    coordinator: MailboxCoordinator = Depends(get_coordinator),
) -> Dict[str, Any]:
    """
    Generate one or more disposable addresses.

    Args:
        request: FastAPI request object (required for rate limiter)
        body: Optional prefix and count

    Returns:
        Generated addresses
    """
    body = body or CreateEmailRequest()
    emails = coordinator.create_addresses(prefix=body.prefix, count=body.count)
    return {
        "success": True,
        "emails": emails,
        "message": f"Successfully generated {len(emails)} temporary email(s)",
    }


@router.get("/get-messages/{email}")
async def get_messages(
    email: str, coordinator: MailboxCoordinator = Depends(get_coordinator)
) -> Dict[str, Any]:
    """Fetch an inbox once; messages newest first."""
    _require_address(email)
    messages = await coordinator.fetch_once(email)
    return {
        "success": True,
        "email": email,
        "messages": [m.to_dict() for m in messages],
        "count": len(messages),
        "timestamp": int(time.time() * 1000),
    }


@router.post("/check-emails")
@limiter.limit(_rate_limit)
async def check_emails(
    request: Request,
    body: CheckEmailsRequest,
    coordinator: MailboxCoordinator = Depends(get_coordinator),
) -> Dict[str, Any]:
    """
    Fetch several inboxes at once.

    Args:
        request: FastAPI request object (required for rate limiter)
        body: Addresses to check

    Returns:
        One result per address, in request order
    """
    if not body.emails:
        raise ValidationError("No emails provided", field="emails")

    results = await coordinator.check_many(body.emails)
    return {"success": True, "results": results, "timestamp": int(time.time() * 1000)}


@router.get("/verify-email/{email}")
async def verify_email(
    email: str, coordinator: MailboxCoordinator = Depends(get_coordinator)
) -> Dict[str, Any]:
    success, valid, message = await coordinator.verify_address(email)
    return {"success": success, "valid": valid, "message": message}


@router.post("/start-realtime")
async def start_realtime(
    body: StartRealtimeRequest, coordinator: MailboxCoordinator = Depends(get_coordinator)
) -> Dict[str, Any]:
    """Start periodic polling for an address with pushes over WebSocket."""
    if not body.email:
        raise ValidationError("Email is required", field="email")
    _require_address(body.email)

    coordinator.start_realtime(body.email, client_id=body.clientId)
    return {"success": True, "message": "Real-time checking started"}


@router.delete("/delete-email/{email}")
async def delete_email(
    email: str, coordinator: MailboxCoordinator = Depends(get_coordinator)
) -> Dict[str, Any]:
    """Stop polling an address. Succeeds whether or not it was tracked."""
    if not coordinator.stop(email):
        logger.debug(f"Delete requested for untracked address {email}")
    return {"success": True, "message": f"Stopped checking emails for {email}"}


@router.get("/stats")
async def get_stats(coordinator: MailboxCoordinator = Depends(get_coordinator)) -> Dict[str, Any]:
    return {"success": True, "stats": coordinator.stats()}
