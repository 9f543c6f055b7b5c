"""
Mailbox coordinator.

Single entry point used by the web layer: address generation, on-demand
fetches, realtime tracking and the wiring of scheduler output into the
notification hub.
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Tuple

from loguru import logger

from src.constants import DOMAINS, LogEmoji
from src.core.exceptions import ProviderError, ValidationError

from .mailbox import InboxMessage, MailAddress, MailboxFetcher, MailProviderClient, generate_addresses
from .scheduling import PollingScheduler

if TYPE_CHECKING:
    from src.core.config import Settings
    from web.websocket.manager import NotificationHub

SWEEP_JOB_ID = "housekeeping:idle-sweep"


def now_ms() -> int:
    return int(time.time() * 1000)


class MailboxCoordinator:
    """Glue between the polling scheduler, the notification hub and the HTTP routes."""

    def __init__(
        self,
        settings: "Settings",
        hub: "NotificationHub",
        client: Optional[MailProviderClient] = None,
        fetcher: Optional[MailboxFetcher] = None,
        scheduler: Optional[PollingScheduler] = None,
        domains: Sequence[str] = DOMAINS,
    ):
        """
        Initialize coordinator.

        Args:
            settings: Application settings
            hub: Notification hub receiving scheduler output
            client: Provider client (built from settings if omitted)
            fetcher: Mailbox fetcher (built around ``client`` if omitted)
            scheduler: Polling scheduler (built around ``fetcher`` if omitted)
            domains: Domain pool for generation and verification
        """
        self.settings = settings
        self.hub = hub
        self.client = client or MailProviderClient(
            base_url=settings.provider_base_url, timeout=settings.provider_timeout
        )
        self.fetcher = fetcher or MailboxFetcher(self.client)
        self.scheduler = scheduler or PollingScheduler(
            self.fetcher, interval_seconds=settings.check_interval
        )
        self.domains = tuple(domains)

    # Lifecycle

    async def start(self) -> None:
        """Start the scheduler and register the idle sweep."""
        self.scheduler.start_scheduler()
        self.scheduler.add_housekeeping_job(
            self.sweep_idle, seconds=self.settings.sweep_interval, job_id=SWEEP_JOB_ID
        )
        logger.info(f"{LogEmoji.SUCCESS} Mailbox coordinator started")

    async def shutdown(self) -> None:
        """Stop all polling, close live connections and the provider session."""
        stopped = self.scheduler.stop_all()
        self.scheduler.shutdown()
        closed = await self.hub.close_all()
        await self.client.close()
        logger.info(
            f"{LogEmoji.STOP} Mailbox coordinator stopped "
            f"({stopped} tracked address(es), {closed} connection(s))"
        )

    async def sweep_idle(self) -> None:
        """Housekeeping job: drop idle connections and, if configured, idle addresses."""
        removed = await self.hub.sweep_idle(self.settings.connection_idle_timeout)
        if removed:
            logger.info(f"{LogEmoji.CLEANUP} Swept {len(removed)} idle connection(s)")
        if self.settings.tracked_address_idle_timeout:
            self.scheduler.sweep_idle(self.settings.tracked_address_idle_timeout)

    # Operations

    def create_addresses(self, prefix: Optional[str] = None, count: int = 1) -> List[str]:
        """Generate addresses locally; no provider call."""
        return generate_addresses(
            count=count,
            prefix=prefix,
            domains=self.domains,
            max_count=self.settings.max_create_count,
        )

    async def fetch_once(self, address: str) -> List[InboxMessage]:
        """
        Fetch an inbox on demand, bypassing the scheduler.

        Returns:
            Messages newest first

        Raises:
            ValidationError: If the address is malformed
        """
        messages = await self.fetcher.fetch(address)
        return list(reversed(messages))

    async def check_many(self, addresses: Sequence[Any]) -> List[Dict[str, Any]]:
        """
        Fetch several inboxes concurrently.

        One result per input address, in input order. A failing address
        contributes an error entry instead of failing the batch.
        """
        if not addresses:
            raise ValidationError("No emails provided", field="emails")
        if len(addresses) > self.settings.max_batch_size:
            raise ValidationError(
                f"At most {self.settings.max_batch_size} emails per request", field="emails"
            )

        outcomes = await asyncio.gather(
            *(self._fetch_entry(address) for address in addresses), return_exceptions=True
        )

        results: List[Dict[str, Any]] = []
        for address, outcome in zip(addresses, outcomes):
            if isinstance(outcome, BaseException):
                error = outcome.message if isinstance(outcome, ValidationError) else str(outcome)
                if not isinstance(outcome, ValidationError):
                    logger.warning(f"Error checking email {address}: {outcome}")
                results.append({"email": address, "error": error, "messages": [], "count": 0})
                continue
            results.append(
                {
                    "email": address,
                    "messages": [m.to_dict() for m in outcome],
                    "count": len(outcome),
                    "hasOTP": any(m.otp for m in outcome),
                }
            )
        return results

    async def _fetch_entry(self, address: Any) -> List[InboxMessage]:
        if not isinstance(address, str):
            raise ValidationError("Invalid email address", field="emails")
        return await self.fetch_once(address)

    async def verify_address(self, address: str) -> Tuple[bool, bool, str]:
        """
        Check whether an address is on the domain pool and reachable upstream.

        Returns:
            ``(success, valid, message)``
        """
        login, _, domain = address.partition("@")
        if domain.lower() not in self.domains or not login:
            return False, False, "Invalid domain"

        try:
            await self.client.list_messages(
                login.lower(), domain.lower(), timeout=self.settings.verify_timeout
            )
        except ProviderError as e:
            logger.debug(f"Verification failed for {address}: {e.message}")
            return True, False, "Email does not exist or is not accessible"
        return True, True, "Email is valid and active"

    def start_realtime(self, address: str, client_id: Optional[str] = None) -> str:
        """
        Start periodic polling for an address with results fanned out to the hub.

        Re-registering an address replaces its previous polling job. When
        ``client_id`` names a live connection, that connection is subscribed too.

        Returns:
            Normalized address being tracked
        """
        mailbox = MailAddress.parse(address)
        key = str(mailbox)
        self.scheduler.start(key, self._deliver)
        if client_id and not self.hub.register(client_id, key):
            logger.debug(f"Client {client_id} is not connected; polling without subscription")
        logger.info(f"Starting real-time checking for {key}, client: {client_id}")
        return key

    def stop(self, address: str) -> bool:
        """Stop polling an address. Idempotent."""
        return self.scheduler.stop(address.strip().lower())

    async def _deliver(self, address: str, messages: List[InboxMessage]) -> int:
        return await self.hub.broadcast_to_address(address, messages)

    def stats(self) -> Dict[str, Any]:
        interval = self.settings.check_interval
        return {
            "activeAccounts": len(self.scheduler),
            "activeConnections": len(self.hub),
            "domainsAvailable": len(self.domains),
            "checkInterval": f"{interval:g} seconds",
            "serverTime": datetime.now(timezone.utc).isoformat(),
        }
