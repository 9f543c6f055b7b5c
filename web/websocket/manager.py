"""WebSocket notification hub: live connections, subscriptions and fanout."""

import asyncio
import json
import logging
import secrets
import string
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Set, Union

from src.constants import RealtimeLimits, RealtimeMessageType
from src.core.exceptions import ConnectionLimitError

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_connection_id() -> str:
    """Millisecond timestamp followed by a random base-36 suffix."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"{int(time.time() * 1000)}{suffix}"


def normalize_address(address: str) -> str:
    return address.strip().lower()


@dataclass
class Subscription:
    """
    One live realtime client.

    Attributes:
        connection_id: Opaque id handed to the client in the welcome frame
        websocket: Transport with ``send_json`` and ``close`` coroutines
        address: Subscribed address; the last ``register`` wins
        last_activity: Monotonic time of connect or last inbound frame
    """

    connection_id: str
    websocket: Any
    address: Optional[str] = None
    last_activity: float = field(default_factory=time.monotonic)
    tokens: float = RealtimeLimits.BURST_SIZE
    tokens_updated: float = field(default_factory=time.monotonic)


class NotificationHub:
    """Connection registry with an address -> connection-id subscription index."""

    MESSAGES_PER_SECOND = RealtimeLimits.MESSAGES_PER_SECOND
    BURST_SIZE = RealtimeLimits.BURST_SIZE

    def __init__(self, max_connections: int = 1000):
        """
        Initialize notification hub.

        Args:
            max_connections: Maximum number of concurrent live connections
        """
        self.max_connections = max_connections
        self._connections: Dict[str, Subscription] = {}
        self._by_address: Dict[str, Set[str]] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, connection_id: str) -> bool:
        return connection_id in self._connections

    def get(self, connection_id: str) -> Optional[Subscription]:
        return self._connections.get(connection_id)

    def subscribers(self, address: str) -> List[str]:
        """Connection ids currently registered to ``address``."""
        return sorted(self._by_address.get(normalize_address(address), ()))

    def _check_rate_limit(self, subscription: Subscription) -> bool:
        """
        Check if an inbound frame is within rate limit using token bucket algorithm.

        Returns:
            True if frame is allowed, False if rate limited
        """
        now = time.monotonic()
        elapsed = now - subscription.tokens_updated

        # Add tokens based on elapsed time
        subscription.tokens = min(
            self.BURST_SIZE, subscription.tokens + elapsed * self.MESSAGES_PER_SECOND
        )
        subscription.tokens_updated = now

        if subscription.tokens >= 1:
            subscription.tokens -= 1
            return True

        return False

    async def connect(self, websocket: Any) -> str:
        """
        Register a new connection.

        Note: WebSocket should already be accepted before calling this method.

        Returns:
            Fresh connection id

        Raises:
            ConnectionLimitError: If the hub is full
        """
        async with self._lock:
            if len(self._connections) >= self.max_connections:
                logger.warning(
                    f"WebSocket connection limit reached ({self.max_connections}). "
                    "Rejecting new connection."
                )
                raise ConnectionLimitError(self.max_connections)

            connection_id = generate_connection_id()
            while connection_id in self._connections:
                connection_id = generate_connection_id()
            self._connections[connection_id] = Subscription(
                connection_id=connection_id, websocket=websocket
            )

        logger.info(f"New WebSocket connection: {connection_id}")
        return connection_id

    async def disconnect(self, connection_id: str) -> bool:
        """
        Remove a connection and its subscription. Safe to call twice.

        Returns:
            True if the connection was known
        """
        async with self._lock:
            subscription = self._connections.pop(connection_id, None)
            if subscription is None:
                return False
            self._unindex(subscription)

        logger.info(f"WebSocket disconnected: {connection_id}")
        return True

    def _unindex(self, subscription: Subscription) -> None:
        if subscription.address is None:
            return
        ids = self._by_address.get(subscription.address)
        if ids is not None:
            ids.discard(subscription.connection_id)
            if not ids:
                del self._by_address[subscription.address]

    def register(self, connection_id: str, address: str) -> bool:
        """
        Subscribe a connection to an address, replacing its previous one.

        Returns:
            False if the connection is unknown
        """
        subscription = self._connections.get(connection_id)
        if subscription is None:
            return False

        self._unindex(subscription)
        subscription.address = normalize_address(address)
        self._by_address.setdefault(subscription.address, set()).add(connection_id)
        logger.info(f"Client {connection_id} registered for email: {subscription.address}")
        return True

    async def handle_message(self, connection_id: str, payload: Union[str, bytes, dict]) -> None:
        """
        Process one inbound frame.

        ``register`` subscribes the connection, ``ping`` is answered with a
        ``pong``. Anything else is logged and ignored; the connection stays open.
        """
        subscription = self._connections.get(connection_id)
        if subscription is None:
            return

        subscription.last_activity = time.monotonic()
        if not self._check_rate_limit(subscription):
            logger.warning(f"WebSocket message rate limit exceeded for {connection_id}")
            return

        try:
            data = json.loads(payload) if isinstance(payload, (str, bytes)) else payload
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        except ValueError as e:
            logger.error(f"Error parsing WebSocket message from {connection_id}: {e}")
            return

        kind = data.get("type")
        if kind == RealtimeMessageType.REGISTER:
            address = data.get("email")
            if not isinstance(address, str) or not address.strip():
                logger.error(f"Register without email from {connection_id}")
                return
            self.register(connection_id, address)
        elif kind == RealtimeMessageType.PING:
            await self.send(
                connection_id,
                {"type": RealtimeMessageType.PONG, "timestamp": int(time.time() * 1000)},
            )
        else:
            logger.debug(f"Ignoring WebSocket message of type {kind!r} from {connection_id}")

    async def send(self, connection_id: str, message: dict) -> bool:
        """
        Send one frame to a connection; a failed send drops the connection.

        Returns:
            True if the frame was sent
        """
        subscription = self._connections.get(connection_id)
        if subscription is None:
            return False

        try:
            await subscription.websocket.send_json(message)
            return True
        except Exception as e:
            logger.debug(f"WebSocket send to {connection_id} failed: {e}")
            await self.disconnect(connection_id)
            return False

    async def broadcast_to_address(self, address: str, messages: Sequence[Any]) -> int:
        """
        Push new messages to every connection registered to ``address``.

        Args:
            address: Address the messages belong to
            messages: Items with ``to_dict()`` or plain dicts

        Returns:
            Number of connections that received the push
        """
        key = normalize_address(address)
        connection_ids = list(self._by_address.get(key, ()))
        if not connection_ids:
            return 0

        items = [m.to_dict() if hasattr(m, "to_dict") else dict(m) for m in messages]
        payload = {
            "type": RealtimeMessageType.NEW_MESSAGES,
            "email": key,
            "messages": items,
            "count": len(items),
            "timestamp": int(time.time() * 1000),
        }

        results = await asyncio.gather(*(self.send(cid, payload) for cid in connection_ids))
        delivered = sum(1 for ok in results if ok)
        logger.info(f"Pushed {len(items)} message(s) for {key} to {delivered} client(s)")
        return delivered

    async def sweep_idle(self, max_idle_seconds: float) -> List[str]:
        """
        Close and remove connections idle for longer than ``max_idle_seconds``.

        Returns:
            Ids of the removed connections
        """
        now = time.monotonic()
        async with self._lock:
            stale = [
                s for s in self._connections.values() if now - s.last_activity > max_idle_seconds
            ]

        for subscription in stale:
            await self._close(subscription, RealtimeLimits.CLOSE_GOING_AWAY)
            await self.disconnect(subscription.connection_id)
            logger.info(f"Cleaned up inactive connection: {subscription.connection_id}")
        return [s.connection_id for s in stale]

    async def close_all(self, code: int = RealtimeLimits.CLOSE_GOING_AWAY) -> int:
        """Close every connection (shutdown). Returns the number closed."""
        async with self._lock:
            subscriptions = list(self._connections.values())
            self._connections.clear()
            self._by_address.clear()

        for subscription in subscriptions:
            await self._close(subscription, code)
        return len(subscriptions)

    @staticmethod
    async def _close(subscription: Subscription, code: int) -> None:
        try:
            await subscription.websocket.close(code=code)
        except Exception as e:
            logger.debug(f"Closing {subscription.connection_id} failed: {e}")
