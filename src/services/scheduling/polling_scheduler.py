"""Per-address inbox polling on an APScheduler event-loop scheduler."""

import itertools
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional, Set, Union

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from loguru import logger

from src.constants import Intervals, LogEmoji

from ..mailbox import InboxMessage, MailboxFetcher

MessagesCallback = Callable[[str, List[InboxMessage]], Awaitable[Optional[int]]]

POLL_JOB_PREFIX = "poll:"


@dataclass
class TrackedAddress:
    """
    State of one address under periodic polling.

    Attributes:
        address: Tracked address
        generation: Registration number; results from an older generation are dropped
        on_messages: Receiver of new messages
        started_at: Monotonic registration time
        last_activity: Monotonic time of registration or last delivery
        seen_ids: Message ids already delivered for this registration
    """

    address: str
    generation: int
    on_messages: MessagesCallback
    started_at: float = field(default_factory=time.monotonic)
    last_activity: float = field(default_factory=time.monotonic)
    seen_ids: Set[Union[int, str]] = field(default_factory=set)
    active: bool = True


class PollingScheduler:
    """
    One recurring job per tracked address.

    Jobs are keyed by address and registered with ``replace_existing`` so a
    second ``start`` for the same address replaces the first. ``max_instances=1``
    keeps ticks for one address from overlapping; a tick that outlasts the
    interval makes the scheduler skip the missed firing.
    """

    def __init__(
        self,
        fetcher: MailboxFetcher,
        interval_seconds: float = Intervals.CHECK_INBOX,
        deduplicate: bool = True,
    ):
        """
        Initialize polling scheduler.

        Args:
            fetcher: Mailbox fetcher invoked on every tick
            interval_seconds: Seconds between ticks for one address
            deduplicate: Deliver each message id only once per registration
        """
        self.fetcher = fetcher
        self.interval_seconds = interval_seconds
        self.deduplicate = deduplicate
        self.scheduler: Optional[AsyncIOScheduler] = None
        self._tracked: Dict[str, TrackedAddress] = {}
        self._generations = itertools.count(1)

    def __len__(self) -> int:
        return len(self._tracked)

    def __contains__(self, address: str) -> bool:
        return address in self._tracked

    @property
    def running(self) -> bool:
        return self.scheduler is not None and self.scheduler.running

    def tracked_addresses(self) -> List[str]:
        return list(self._tracked)

    def get(self, address: str) -> Optional[TrackedAddress]:
        return self._tracked.get(address)

    def start_scheduler(self) -> None:
        """Start the underlying scheduler. Must be called from a running event loop."""
        if self.scheduler is not None:
            return

        self.scheduler = AsyncIOScheduler(timezone="UTC")
        self.scheduler.start()
        logger.info(f"{LogEmoji.START} Polling scheduler started (interval: {self.interval_seconds}s)")

    def shutdown(self) -> None:
        """Cancel every job and stop the underlying scheduler."""
        self.stop_all()
        if self.scheduler is not None:
            self.scheduler.shutdown(wait=False)
            self.scheduler = None
            logger.info(f"{LogEmoji.STOP} Polling scheduler stopped")

    def start(self, address: str, on_messages: MessagesCallback) -> TrackedAddress:
        """
        Track an address, replacing any previous registration for it.

        Args:
            address: Address to poll
            on_messages: Awaited with ``(address, messages)`` when a tick yields messages;
                returning 0 (no receivers) leaves the messages unseen for the next tick

        Returns:
            The new tracking entry
        """
        self.start_scheduler()
        assert self.scheduler is not None

        previous = self._tracked.get(address)
        if previous is not None:
            previous.active = False
            logger.info(f"Replacing existing checker for: {address}")

        entry = TrackedAddress(
            address=address, generation=next(self._generations), on_messages=on_messages
        )
        self._tracked[address] = entry
        self.scheduler.add_job(
            self._tick,
            trigger="interval",
            seconds=self.interval_seconds,
            args=[address, entry.generation],
            id=POLL_JOB_PREFIX + address,
            name=f"Inbox poll {address}",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        logger.info(f"Started checking emails for: {address}")
        return entry

    def stop(self, address: str) -> bool:
        """
        Stop tracking an address. No-op when it is not tracked.

        An in-flight tick is left to finish; its result is discarded.

        Returns:
            True if the address was tracked
        """
        entry = self._tracked.pop(address, None)
        if entry is None:
            return False

        entry.active = False
        self._remove_job(address)
        logger.info(f"Stopped checking emails for: {address}")
        return True

    def stop_all(self) -> int:
        """Stop tracking every address. Returns the number stopped."""
        addresses = list(self._tracked)
        for address in addresses:
            self.stop(address)
        return len(addresses)

    def sweep_idle(self, max_idle_seconds: float) -> List[str]:
        """Stop addresses with no registration or delivery in ``max_idle_seconds``."""
        now = time.monotonic()
        idle = [
            address
            for address, entry in self._tracked.items()
            if now - entry.last_activity > max_idle_seconds
        ]
        for address in idle:
            self.stop(address)
        if idle:
            logger.info(f"{LogEmoji.CLEANUP} Stopped {len(idle)} idle tracked address(es)")
        return idle

    def add_housekeeping_job(
        self, func: Callable[[], Awaitable[None]], seconds: float, job_id: str
    ) -> None:
        """Register a recurring maintenance coroutine on the same scheduler."""
        self.start_scheduler()
        assert self.scheduler is not None
        self.scheduler.add_job(
            func,
            trigger="interval",
            seconds=seconds,
            id=job_id,
            name=job_id,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )

    async def run_tick(self, address: str) -> List[InboxMessage]:
        """Run one tick for a tracked address immediately. Returns what was delivered."""
        entry = self._tracked.get(address)
        if entry is None:
            return []
        return await self._tick(address, entry.generation)

    def _remove_job(self, address: str) -> None:
        if self.scheduler is None:
            return
        try:
            self.scheduler.remove_job(POLL_JOB_PREFIX + address)
        except JobLookupError:
            pass

    def _is_current(self, address: str, generation: int) -> bool:
        entry = self._tracked.get(address)
        return entry is not None and entry.generation == generation

    async def _tick(self, address: str, generation: int) -> List[InboxMessage]:
        """Fetch once and deliver new messages; never raises."""
        if not self._is_current(address, generation):
            return []

        try:
            messages = await self.fetcher.fetch(address)
        except Exception as e:
            logger.warning(f"Error in checker for {address}: {e}")
            return []

        # Stopped or replaced while the fetch was in flight.
        entry = self._tracked.get(address)
        if entry is None or entry.generation != generation:
            logger.debug(f"Dropping late result for {address} (generation {generation})")
            return []

        if self.deduplicate:
            messages = [m for m in messages if m.id not in entry.seen_ids]

        if not messages:
            return []

        entry.last_activity = time.monotonic()
        try:
            receivers = await entry.on_messages(address, messages)
        except Exception as e:
            logger.warning(f"Error delivering messages for {address}: {e}")
            return messages

        # Nobody received them; offer the same messages again next tick.
        if receivers == 0:
            logger.debug(f"No receivers for {address}; {len(messages)} message(s) kept unseen")
        elif self.deduplicate:
            entry.seen_ids.update(m.id for m in messages)
        return messages
