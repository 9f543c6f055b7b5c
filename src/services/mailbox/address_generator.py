"""Local generation of disposable addresses (no network access)."""

import re
import secrets
from typing import List, Optional, Sequence

from loguru import logger

from src.constants import DOMAINS, AddressRules
from src.core.exceptions import ValidationError

_PREFIX_STRIP = re.compile(r"[^a-z0-9]")


def normalize_prefix(prefix: Optional[str]) -> str:
    """Lower-case the prefix, drop characters outside ``[a-z0-9]`` and cap its length."""
    if not prefix:
        return ""
    return _PREFIX_STRIP.sub("", prefix.lower())[: AddressRules.MAX_PREFIX_LENGTH]


def generate_local_part(prefix: Optional[str] = None) -> str:
    """
    Build a local part of 4..8 characters starting with ``prefix``.

    Args:
        prefix: Optional user-chosen prefix

    Returns:
        Local part drawn from ``AddressRules.ALPHABET``
    """
    head = normalize_prefix(prefix)
    random_length = max(AddressRules.LOCAL_PART_LENGTH - len(head), AddressRules.MIN_RANDOM_CHARS)
    tail = "".join(secrets.choice(AddressRules.ALPHABET) for _ in range(random_length))
    return head + tail


def generate_addresses(
    count: int = 1,
    prefix: Optional[str] = None,
    domains: Sequence[str] = DOMAINS,
    max_count: int = 50,
) -> List[str]:
    """
    Generate ``count`` random addresses on the domain pool.

    Raises:
        ValidationError: If count is outside ``1..max_count``
    """
    if isinstance(count, bool) or not isinstance(count, int) or not 1 <= count <= max_count:
        raise ValidationError(f"count must be between 1 and {max_count}", field="count")

    addresses = []
    for _ in range(count):
        address = f"{generate_local_part(prefix)}@{secrets.choice(list(domains))}"
        addresses.append(address)
        logger.info(f"Generated email: {address}")
    return addresses
