"""Change-notification feed client."""

from __future__ import annotations

import typing as typ

import httpx

from courier.proxy.client import send_request
from courier.proxy.errors import ProxyConfigError
from courier.proxy.response import HDR_REMAINING
from courier.proxy.urls import consume_url

from .models import ConsumeResult, decode_change_notifications

if typ.TYPE_CHECKING:
    from courier.proxy.config import ProxyClientConfig
    from courier.proxy.response import ProxyResponse

CHANGE_NOTIFICATION_MEDIA_TYPE = "application/vnd.hedtech.change-notifications.v2+json"
MIN_CONSUME_LIMIT = 1
MAX_CONSUME_LIMIT = 1000


class NotificationFeedClient(typ.Protocol):
    """Interface for pulling pending change notifications."""

    async def consume(
        self, limit: int | None = None, last_processed_id: int | None = None
    ) -> ConsumeResult:
        """Return up to ``limit`` pending notifications and the remaining count."""
        ...


class MessagesClient:
    """httpx implementation of :class:`NotificationFeedClient`.

    Consuming is destructive upstream: the feed advances its own cursor, so
    notifications handed out here are not offered again.
    """

    def __init__(
        self,
        config: ProxyClientConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with the provided API configuration."""
        if not config.token.strip():
            raise ProxyConfigError.empty_token()

        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=config.timeout_s,
            headers={
                "Authorization": f"Bearer {config.token}",
                "User-Agent": config.user_agent,
            },
        )

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> MessagesClient:
        """Return the client for use as an async context manager."""
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        """Close owned HTTP resources on exit."""
        await self.aclose()

    async def consume(
        self, limit: int | None = None, last_processed_id: int | None = None
    ) -> ConsumeResult:
        """Pull pending notifications from the feed.

        Parameters
        ----------
        limit
            Maximum notifications to return, between 1 and 1000. ``None``
            leaves the batch size to the server.
        last_processed_id
            Resume after this notification id. ``None`` lets the server use
            its own cursor.

        Raises
        ------
        ValueError
            If ``limit`` is outside 1-1000.
        ProxyAPIError
            If the request fails or the server answers with status >= 400.
        ProxyResponseShapeError
            If the body is not a JSON array of notifications.

        """
        if limit is not None and not MIN_CONSUME_LIMIT <= limit <= MAX_CONSUME_LIMIT:
            msg = (
                f"limit must be between {MIN_CONSUME_LIMIT} and "
                f"{MAX_CONSUME_LIMIT}, got {limit}"
            )
            raise ValueError(msg)
        url = consume_url(
            self._config.base_url, limit=limit, last_processed_id=last_processed_id
        )
        response = await self._send("GET", url)
        notifications = decode_change_notifications(response.content)
        return ConsumeResult(
            notifications=tuple(notifications),
            remaining=response.int_header(HDR_REMAINING) or 0,
        )

    async def num_available_messages(self) -> int:
        """Return how many notifications are waiting, via a HEAD request."""
        response = await self._send("HEAD", consume_url(self._config.base_url))
        return response.int_header(HDR_REMAINING) or 0

    async def _send(self, method: str, url: str) -> ProxyResponse:
        return await send_request(
            self._client, method, url, accept=CHANGE_NOTIFICATION_MEDIA_TYPE
        )
