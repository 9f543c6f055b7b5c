"""Timing-related constants (timeouts, intervals) in SECONDS."""

from typing import Final


class Timeouts:
    """Upstream and shutdown timeouts."""

    PROVIDER_REQUEST: Final[float] = 10.0
    PROVIDER_VERIFY: Final[float] = 5.0
    PROVIDER_MAX: Final[float] = 60.0
    GRACEFUL_SHUTDOWN: Final[float] = 5.0


class Intervals:
    """Recurring job intervals."""

    CHECK_INBOX: Final[float] = 5.0
    IDLE_SWEEP: Final[int] = 3600
    CONNECTION_IDLE: Final[int] = 3600
