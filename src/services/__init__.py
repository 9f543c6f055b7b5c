"""Business logic services module."""

import importlib as _importlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .coordinator import MailboxCoordinator as MailboxCoordinator
    from .mailbox import MailboxFetcher as MailboxFetcher
    from .mailbox import MailProviderClient as MailProviderClient
    from .otp import OTPPatternMatcher as OTPPatternMatcher
    from .scheduling import PollingScheduler as PollingScheduler

_LAZY_MODULE_MAP = {
    "MailboxCoordinator": ("src.services.coordinator", "MailboxCoordinator"),
    "MailboxFetcher": ("src.services.mailbox", "MailboxFetcher"),
    "MailProviderClient": ("src.services.mailbox", "MailProviderClient"),
    "OTPPatternMatcher": ("src.services.otp", "OTPPatternMatcher"),
    "PollingScheduler": ("src.services.scheduling", "PollingScheduler"),
}

__all__ = list(_LAZY_MODULE_MAP.keys())


def __getattr__(name: str):
    """Lazy import with explicit mapping - importlib based."""
    if name in _LAZY_MODULE_MAP:
        module_path, attr_name = _LAZY_MODULE_MAP[name]
        module = _importlib.import_module(module_path)
        attr = getattr(module, attr_name)
        globals()[name] = attr
        return attr
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
