"""Resource API client used by the paging engine and reconciliation."""

from __future__ import annotations

import typing as typ

import httpx

from .config import ProxyClientConfig
from .errors import ProxyAPIError, ProxyConfigError
from .response import ProxyResponse
from .urls import api_url

DEFAULT_VERSION = "application/json"

_HTTP_ERROR_STATUS_THRESHOLD = 400


class ResourceFetcher(typ.Protocol):
    """Interface for single-request resource retrieval."""

    async def get(
        self, resource_name: str, version: str = "", query: str = ""
    ) -> ProxyResponse:
        """Fetch a resource listing with an already-encoded query string."""
        ...

    async def get_by_id(
        self, resource_name: str, resource_id: str, version: str = ""
    ) -> ProxyResponse:
        """Fetch one resource record by id."""
        ...


def resolve_version(version: str | None) -> str:
    """Return ``version`` or the default media type when it is blank."""
    if version is None or not version.strip():
        return DEFAULT_VERSION
    return version.strip()


async def send_request(
    client: httpx.AsyncClient, method: str, url: str, *, accept: str
) -> ProxyResponse:
    """Issue one request and map failures onto :class:`ProxyAPIError`.

    Raises
    ------
    ProxyAPIError
        If the transport fails or the server answers with status >= 400.

    """
    try:
        response = await client.request(method, url, headers={"Accept": accept})
    except httpx.TransportError as exc:
        raise ProxyAPIError.network_error(exc) from exc
    if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
        raise ProxyAPIError.http_error(response.status_code, response.text)
    return ProxyResponse.from_httpx(response)


class ProxyClient:
    """httpx implementation of :class:`ResourceFetcher`.

    The requested version travels in the ``Accept`` header. Non-2xx replies
    and transport failures surface as :class:`ProxyAPIError`; nothing is
    retried.
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

    @property
    def base_url(self) -> str:
        """Return the configured API base URL."""
        return self._config.base_url

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> ProxyClient:
        """Return the client for use as an async context manager."""
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        """Close owned HTTP resources on exit."""
        await self.aclose()

    async def get(
        self, resource_name: str, version: str = "", query: str = ""
    ) -> ProxyResponse:
        """Fetch ``resource_name`` at ``version`` with an encoded ``query``.

        Parameters
        ----------
        resource_name
            Name of the resource collection, e.g. ``persons``.
        version
            Media type sent as ``Accept``; blank selects ``application/json``.
        query
            Empty, or an encoded query string beginning with ``?``.

        Raises
        ------
        ValueError
            If ``resource_name`` is blank.
        ProxyAPIError
            If the request fails or the server answers with status >= 400.

        """
        if not resource_name.strip():
            msg = "resource_name must be non-blank"
            raise ValueError(msg)
        url = f"{api_url(self._config.base_url, resource_name)}{query}"
        return await self._send("GET", url, version)

    async def get_by_id(
        self, resource_name: str, resource_id: str, version: str = ""
    ) -> ProxyResponse:
        """Fetch one record of ``resource_name`` by id."""
        if not resource_name.strip():
            msg = "resource_name must be non-blank"
            raise ValueError(msg)
        if not resource_id.strip():
            msg = "resource_id must be non-blank"
            raise ValueError(msg)
        url = api_url(self._config.base_url, resource_name, resource_id)
        return await self._send("GET", url, version)

    async def _send(self, method: str, url: str, version: str) -> ProxyResponse:
        return await send_request(
            self._client, method, url, accept=resolve_version(version)
        )
