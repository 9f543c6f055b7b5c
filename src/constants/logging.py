"""Logging-related constants."""

from typing import Final


class LogEmoji:
    """Emoji constants for consistent logging."""

    SUCCESS: Final[str] = "✅"
    START: Final[str] = "🚀"
    STOP: Final[str] = "🛑"
    MAIL: Final[str] = "📧"
    CLEANUP: Final[str] = "🧹"
