"""Mailbox models - TypedDict and dataclass definitions."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TypedDict, Union

from src.constants import MessageDefaults
from src.core.exceptions import ValidationError


class MessageSummary(TypedDict, total=False):
    """One item of the provider's list-messages response."""

    id: Union[int, str]
    # "from" is a keyword, accessed as summary["from"]
    subject: str
    date: str


class MessageDetail(TypedDict, total=False):
    """Provider's read-message response (fields used by the relay)."""

    id: Union[int, str]
    subject: str
    date: str
    body: str
    textBody: str
    htmlBody: str


@dataclass(frozen=True)
class MailAddress:
    """A disposable mailbox, ``local_part@domain``."""

    login: str
    domain: str

    @classmethod
    def parse(cls, address: str) -> "MailAddress":
        """
        Split an address into login and domain.

        Raises:
            ValidationError: If the address has no ``@`` or an empty side
        """
        if not address or "@" not in address:
            raise ValidationError("Invalid email address", field="email")
        login, _, domain = address.strip().partition("@")
        if not login or not domain:
            raise ValidationError("Invalid email address", field="email")
        return cls(login=login.lower(), domain=domain.lower())

    def __str__(self) -> str:
        return f"{self.login}@{self.domain}"


def parse_provider_date(value: Optional[str]) -> Optional[int]:
    """
    Convert a provider date string to epoch milliseconds.

    Provider dates carry no zone and are treated as UTC.

    Returns:
        Milliseconds since epoch, or None if the value cannot be parsed
    """
    if not value:
        return None
    for parser in (
        lambda v: datetime.strptime(v, MessageDefaults.DATE_FORMAT),
        datetime.fromisoformat,
    ):
        try:
            parsed = parser(value)
        except (TypeError, ValueError):
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return int(parsed.timestamp() * 1000)
    return None


@dataclass(frozen=True)
class InboxMessage:
    """
    One normalized inbox item.

    Attributes:
        id: Provider-assigned id, unique within one address
        sender: ``from`` header as reported by the provider
        subject: Subject line, defaulted when absent
        body: Text body, falling back to the HTML body
        date: Provider timestamp string
        timestamp: ``date`` in epoch milliseconds, None if unparseable
        otp: Extracted one-time passcode, if any
    """

    id: Union[int, str]
    sender: str
    subject: str
    body: str
    date: str
    timestamp: Optional[int] = None
    otp: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation used by the HTTP API and realtime pushes."""
        return {
            "id": self.id,
            "from": self.sender,
            "subject": self.subject,
            "body": self.body,
            "date": self.date,
            "timestamp": self.timestamp,
            "otp": self.otp,
        }

