"""Mailbox fetcher - list, read and parse one inbox."""

import asyncio
from typing import List, Optional

from loguru import logger

from src.constants import LogEmoji, MessageDefaults
from src.core.exceptions import ProviderError

from ..otp import OTPPatternMatcher, html_to_text
from .models import InboxMessage, MailAddress, MessageSummary, parse_provider_date
from .provider_client import MailProviderClient


class MailboxFetcher:
    """
    Fetch and normalize the messages of one address.

    One list request is issued, then one detail request per listed item,
    concurrently. A failing list request yields an empty result; a failing
    detail request drops only that message. Nothing is retried here: the
    next scheduler tick is the retry.
    """

    def __init__(
        self, client: MailProviderClient, matcher: Optional[OTPPatternMatcher] = None
    ):
        """
        Initialize fetcher.

        Args:
            client: Upstream provider client
            matcher: OTP matcher (default patterns if omitted)
        """
        self.client = client
        self.matcher = matcher or OTPPatternMatcher()

    async def fetch(self, address: str) -> List[InboxMessage]:
        """
        Fetch all messages for an address.

        Args:
            address: Disposable address (``login@domain``)

        Returns:
            Messages in provider order, possibly empty

        Raises:
            ValidationError: If the address is malformed
        """
        mailbox = MailAddress.parse(address)

        try:
            summaries = await self.client.list_messages(mailbox.login, mailbox.domain)
        except ProviderError as e:
            logger.warning(f"Error checking email {mailbox}: {e.message}")
            return []

        if not summaries:
            return []

        results = await asyncio.gather(
            *(self._read_one(mailbox, summary) for summary in summaries)
        )
        return [message for message in results if message is not None]

    async def _read_one(
        self, mailbox: MailAddress, summary: MessageSummary
    ) -> Optional[InboxMessage]:
        """Read one message body; None when the detail fetch fails."""
        message_id = summary.get("id") if isinstance(summary, dict) else None
        try:
            if message_id is None:
                raise ProviderError("Message summary without id")
            detail = await self.client.read_message(mailbox.login, mailbox.domain, message_id)
            return self._build_message(mailbox, summary, detail)
        except Exception as e:
            logger.warning(f"Error fetching message {message_id} for {mailbox}: {e}")
            return None

    def _build_message(self, mailbox: MailAddress, summary: MessageSummary, detail) -> InboxMessage:
        subject = summary.get("subject") or MessageDefaults.SUBJECT
        text_body = detail.get("textBody")
        html_body = detail.get("htmlBody")
        body = text_body or html_body or MessageDefaults.BODY

        # HTML markup is stripped before matching so attribute values and
        # CSS sizes are not mistaken for codes.
        searchable = body if text_body else html_to_text(body)
        otp = self.matcher.extract_otp(f"{subject} {searchable}")
        if otp:
            logger.info(f"{LogEmoji.MAIL} OTP found for {mailbox}")

        date = summary.get("date") or detail.get("date") or ""
        return InboxMessage(
            id=summary["id"],
            sender=summary.get("from", ""),
            subject=subject,
            body=body,
            date=date,
            timestamp=parse_provider_date(date),
            otp=otp,
        )
