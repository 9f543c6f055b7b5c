"""Mailbox and address-generation constants."""

from typing import Final, Tuple

# Domains served by the upstream provider. Generation and verification both
# use this pool; its order is irrelevant.
DOMAINS: Final[Tuple[str, ...]] = (
    "1secmail.com",
    "1secmail.org",
    "1secmail.net",
    "esiix.com",
    "wwjmp.com",
    "xojxe.com",
    "yoggm.com",
)


class AddressRules:
    """Local-part generation rules."""

    ALPHABET: Final[str] = "abcdefghijklmnopqrstuvwxyz0123456789"
    LOCAL_PART_LENGTH: Final[int] = 8
    MIN_RANDOM_CHARS: Final[int] = 4
    MAX_PREFIX_LENGTH: Final[int] = LOCAL_PART_LENGTH - MIN_RANDOM_CHARS


class MessageDefaults:
    """Defaults applied while normalizing provider messages."""

    SUBJECT: Final[str] = "No Subject"
    BODY: Final[str] = ""
    DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"


class ProviderActions:
    """Query actions understood by the upstream provider."""

    LIST_MESSAGES: Final[str] = "getMessages"
    READ_MESSAGE: Final[str] = "readMessage"
