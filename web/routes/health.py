"""Health check route for the TempMail relay."""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends

from src.services.coordinator import MailboxCoordinator
from web.dependencies import get_coordinator, get_hub
from web.websocket.manager import NotificationHub

router = APIRouter(tags=["health"])


def get_version() -> str:
    """
    Get application version from centralized source.

    Returns:
        Version string
    """
    from src import __version__

    return __version__


@router.get("/health")
async def health_check(
    coordinator: MailboxCoordinator = Depends(get_coordinator),
    hub: NotificationHub = Depends(get_hub),
) -> Dict[str, Any]:
    """
    Health check endpoint for monitoring and container orchestration.

    Returns:
        Health status with component information
    """
    return {
        "status": "healthy",
        "version": get_version(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "components": {
            "scheduler": "running" if coordinator.scheduler.running else "stopped",
            "connections": len(hub),
            "tracked": len(coordinator.scheduler),
        },
    }
