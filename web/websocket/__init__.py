"""WebSocket management for the TempMail relay."""

from .manager import NotificationHub, Subscription

__all__ = ["NotificationHub", "Subscription", "websocket_endpoint"]


def __getattr__(name: str):
    """Lazy import of the endpoint to keep the hub importable without FastAPI routing."""
    if name == "websocket_endpoint":
        from .handler import websocket_endpoint

        globals()["websocket_endpoint"] = websocket_endpoint
        return websocket_endpoint
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
