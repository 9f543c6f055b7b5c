"""Mailbox access: provider client, fetcher, address generation."""

from .address_generator import generate_addresses, generate_local_part, normalize_prefix
from .fetcher import MailboxFetcher
from .models import InboxMessage, MailAddress, parse_provider_date
from .provider_client import MailProviderClient

__all__ = [
    "InboxMessage",
    "MailAddress",
    "MailProviderClient",
    "MailboxFetcher",
    "generate_addresses",
    "generate_local_part",
    "normalize_prefix",
    "parse_provider_date",
]
