"""HTTP client for the upstream disposable-mailbox provider."""

import asyncio
from typing import Any, Dict, List, Optional, Union

import aiohttp
from loguru import logger

from src.constants import ProviderActions, Timeouts
from src.core.exceptions import ProviderError, ProviderTimeoutError

from .models import MessageDetail, MessageSummary


class MailProviderClient:
    """
    Read-only client for a 1secmail-compatible provider.

    Two endpoints are used, both plain GETs against the base URL with query
    parameters: ``getMessages`` (list) and ``readMessage`` (detail). Every
    call is bounded by a timeout; failures raise ``ProviderError``.
    """

    def __init__(
        self,
        base_url: str = "https://www.1secmail.com/api/v1/",
        timeout: float = Timeouts.PROVIDER_REQUEST,
    ):
        """
        Initialize provider client.

        Args:
            base_url: Provider API base URL
            timeout: Default request timeout in seconds
        """
        self.base_url = base_url
        self.timeout = timeout
        self._http_session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        """Async context manager entry."""
        await self._init_http_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def _init_http_session(self) -> None:
        """Initialize HTTP session with connection pooling."""
        if self._http_session is None:
            connector = aiohttp.TCPConnector(
                limit=100,
                limit_per_host=20,
                ttl_dns_cache=120,
                enable_cleanup_closed=True,
            )
            self._http_session = aiohttp.ClientSession(
                connector=connector,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={"Accept": "application/json"},
            )
            logger.debug(f"Provider HTTP session opened for {self.base_url}")

    async def close(self) -> None:
        """Close HTTP session."""
        if self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
            logger.debug("Provider HTTP session closed")

    async def _get_json(self, params: Dict[str, Any], timeout: Optional[float] = None) -> Any:
        """
        Issue one GET and decode the JSON body.

        Raises:
            ProviderTimeoutError: If the request exceeds the timeout
            ProviderError: On transport errors, non-200 status or bad JSON
        """
        await self._init_http_session()
        assert self._http_session is not None

        effective_timeout = timeout or self.timeout
        try:
            async with self._http_session.get(
                self.base_url,
                params=params,
                timeout=aiohttp.ClientTimeout(total=effective_timeout),
            ) as response:
                if response.status != 200:
                    raise ProviderError(
                        f"Provider returned HTTP {response.status} for {params['action']}",
                        status=response.status,
                    )
                return await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise ProviderTimeoutError(
                f"Provider {params['action']} timed out after {effective_timeout}s",
                timeout=effective_timeout,
            ) from e
        except aiohttp.ClientError as e:
            raise ProviderError(f"Provider {params['action']} failed: {e}") from e
        except ValueError as e:
            raise ProviderError(f"Provider {params['action']} returned invalid JSON") from e

    async def list_messages(
        self, login: str, domain: str, timeout: Optional[float] = None
    ) -> List[MessageSummary]:
        """
        List the inbox of ``login@domain``.

        Args:
            login: Local part of the address
            domain: Domain of the address
            timeout: Optional per-call timeout override

        Returns:
            Message summaries in provider order
        """
        data = await self._get_json(
            {"action": ProviderActions.LIST_MESSAGES, "login": login, "domain": domain},
            timeout=timeout,
        )
        if not isinstance(data, list):
            raise ProviderError(
                f"Unexpected list-messages payload type: {type(data).__name__}"
            )
        return data

    async def read_message(
        self, login: str, domain: str, message_id: Union[int, str]
    ) -> MessageDetail:
        """Fetch one message with its body."""
        data = await self._get_json(
            {
                "action": ProviderActions.READ_MESSAGE,
                "login": login,
                "domain": domain,
                "id": message_id,
            }
        )
        if not isinstance(data, dict):
            raise ProviderError(f"Unexpected read-message payload for id {message_id}")
        return data
