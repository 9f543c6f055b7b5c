"""Unified constants for the TempMail relay.

All classes and constants can be imported directly from this package:
    from src.constants import DOMAINS, Intervals, RealtimeMessageType, etc.
"""

# Logging
from .logging import LogEmoji

# Mailbox
from .mailbox import (
    DOMAINS,
    AddressRules,
    MessageDefaults,
    ProviderActions,
)

# Realtime
from .realtime import (
    WELCOME_TEXT,
    RealtimeLimits,
    RealtimeMessageType,
)

# Timing-related
from .timing import (
    Intervals,
    Timeouts,
)

__all__ = [
    # Timing
    "Timeouts",
    "Intervals",
    # Mailbox
    "DOMAINS",
    "AddressRules",
    "MessageDefaults",
    "ProviderActions",
    # Realtime
    "RealtimeMessageType",
    "RealtimeLimits",
    "WELCOME_TEXT",
    # Logging
    "LogEmoji",
]
