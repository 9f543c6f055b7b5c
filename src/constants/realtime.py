"""Realtime (WebSocket) protocol constants."""

from typing import Final


class RealtimeMessageType:
    """Values of the ``type`` discriminator on realtime frames."""

    WELCOME: Final[str] = "welcome"
    REGISTER: Final[str] = "register"
    PING: Final[str] = "ping"
    PONG: Final[str] = "pong"
    NEW_MESSAGES: Final[str] = "new_messages"


class RealtimeLimits:
    """Per-connection limits."""

    MESSAGES_PER_SECOND: Final[float] = 10.0  # Token bucket rate
    BURST_SIZE: Final[float] = 20.0  # Maximum burst capacity
    CLOSE_TRY_AGAIN_LATER: Final[int] = 1013
    CLOSE_GOING_AWAY: Final[int] = 1001


WELCOME_TEXT: Final[str] = "Connected to TempMail WebSocket"
