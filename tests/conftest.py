"""Pytest configuration and common fixtures."""

import os
import sys
import warnings
from pathlib import Path

# CRITICAL: Set environment variables BEFORE any src imports
# web.app builds a module-level app from the environment at import time.
os.environ.setdefault("ENV", "testing")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_DIR", "")

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from typing import Any, Dict, List, Optional, Set, Union
from unittest.mock import AsyncMock, MagicMock

# NOW it's safe to import from src
import pytest

from src.core.config import Settings
from src.core.exceptions import ProviderError, ProviderTimeoutError
from src.services.mailbox import InboxMessage, MailProviderClient


def pytest_configure(config):
    """Configure pytest environment before tests run."""
    # Suppress async mock warnings
    warnings.filterwarnings("ignore", message="coroutine.*was never awaited")


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Automatically set up test environment for all tests."""
    monkeypatch.setenv("ENV", "testing")
    monkeypatch.setenv("RATE_LIMIT_ENABLED", "false")
    monkeypatch.setenv("LOG_DIR", "")

    # Reset settings singleton so each test gets fresh settings
    from src.core.config.settings import reset_settings

    reset_settings()
    yield
    # Cleanup: reset settings singleton after test
    reset_settings()


@pytest.fixture
def settings() -> Settings:
    """Settings with fast timers for tests."""
    return Settings(
        env="testing",
        check_interval=0.05,
        sweep_interval=3600,
        rate_limit_enabled=False,
        log_dir="",
    )


class FakeProviderClient(MailProviderClient):
    """
    In-memory stand-in for the upstream provider.

    Mailboxes map ``login@domain`` to a list of raw messages shaped like the
    provider's read-message response (``id``, ``from``, ``subject``, ``date``,
    ``textBody`` / ``htmlBody``).
    """

    def __init__(self):
        super().__init__(base_url="https://provider.test/api/v1/")
        self.mailboxes: Dict[str, List[Dict[str, Any]]] = {}
        self.broken_details: Set[Union[int, str]] = set()
        self.unreachable: Set[str] = set()
        self.list_calls: List[str] = []
        self.closed = False

    def add_message(self, address: str, **message: Any) -> Dict[str, Any]:
        box = self.mailboxes.setdefault(address.lower(), [])
        message.setdefault("id", len(box) + 1)
        message.setdefault("from", "noreply@example.com")
        message.setdefault("subject", "Hello")
        message.setdefault("date", "2024-01-15 10:30:00")
        box.append(message)
        return message

    async def list_messages(self, login: str, domain: str, timeout: Optional[float] = None):
        address = f"{login}@{domain}"
        self.list_calls.append(address)
        if address in self.unreachable:
            raise ProviderTimeoutError(f"Provider getMessages timed out after {timeout}s")
        return [
            {"id": m["id"], "from": m["from"], "subject": m["subject"], "date": m["date"]}
            for m in self.mailboxes.get(address, [])
        ]

    async def read_message(self, login: str, domain: str, message_id):
        if message_id in self.broken_details:
            raise ProviderError("Provider returned HTTP 500 for readMessage", status=500)
        for message in self.mailboxes.get(f"{login}@{domain}", []):
            if message["id"] == message_id:
                return dict(message)
        raise ProviderError(f"Unexpected read-message payload for id {message_id}")

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_provider() -> FakeProviderClient:
    """Fake provider with an empty mailbox set."""
    return FakeProviderClient()


@pytest.fixture
def make_message():
    """Factory for InboxMessage objects used by hub and scheduler tests."""

    def _make(message_id: Union[int, str] = 1, otp: Optional[str] = None, **kwargs) -> InboxMessage:
        fields = {
            "id": message_id,
            "sender": "noreply@example.com",
            "subject": "Your code",
            "body": f"Your code is {otp}" if otp else "Hello",
            "date": "2024-01-15 10:30:00",
            "timestamp": 1705314600000,
            "otp": otp,
        }
        fields.update(kwargs)
        return InboxMessage(**fields)

    return _make


@pytest.fixture
def make_websocket():
    """Factory for mock WebSocket objects."""

    def _make():
        ws = MagicMock()
        ws.send_json = AsyncMock()
        ws.close = AsyncMock()
        return ws

    return _make
