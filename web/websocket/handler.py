"""WebSocket handler for realtime inbox updates."""

from fastapi import WebSocket, WebSocketDisconnect
from loguru import logger

from src.constants import WELCOME_TEXT, RealtimeLimits, RealtimeMessageType
from src.core.exceptions import ConnectionLimitError

from .manager import NotificationHub


async def websocket_endpoint(websocket: WebSocket):
    """
    WebSocket endpoint for realtime updates.

    Protocol:
    1. Server sends ``{"type": "welcome", "clientId", "message"}`` on connect
    2. Client sends ``{"type": "register", "email"}`` to subscribe to an address
    3. Client may send ``{"type": "ping"}``; server answers ``{"type": "pong", "timestamp"}``
    4. Server pushes ``{"type": "new_messages", ...}`` for the subscribed address

    Args:
        websocket: WebSocket connection
    """
    hub: NotificationHub = websocket.app.state.hub

    await websocket.accept()

    # Try to connect with limit enforcement
    try:
        connection_id = await hub.connect(websocket)
    except ConnectionLimitError:
        await websocket.close(
            code=RealtimeLimits.CLOSE_TRY_AGAIN_LATER, reason="Connection limit reached"
        )
        return

    await hub.send(
        connection_id,
        {
            "type": RealtimeMessageType.WELCOME,
            "clientId": connection_id,
            "message": WELCOME_TEXT,
        },
    )

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))

            payload = message.get("text")
            if payload is None:
                payload = message.get("bytes") or b""
            await hub.handle_message(connection_id, payload)
    except WebSocketDisconnect:
        logger.info(f"WebSocket client disconnected: {connection_id}")
    except Exception as e:
        logger.error(f"WebSocket error for {connection_id}: {e}")
    finally:
        await hub.disconnect(connection_id)
