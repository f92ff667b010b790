"""Configuration for the resource and notification HTTP clients."""

from __future__ import annotations

import dataclasses
import os

from .errors import ProxyConfigError

_DEFAULT_BASE_URL = "https://integrate.elluciancloud.com"
_DEFAULT_TIMEOUT_S = 30.0


@dataclasses.dataclass(frozen=True, slots=True)
class ProxyClientConfig:
    """Connection settings shared by :class:`ProxyClient` and ``MessagesClient``.

    Attributes
    ----------
    token
        Bearer token sent with every request. Acquiring it is the caller's
        concern.
    base_url
        Scheme and host of the upstream API, without a trailing slash.
    timeout_s
        Request timeout in seconds, enforced by httpx.
    user_agent
        ``User-Agent`` header value.

    """

    token: str
    base_url: str = _DEFAULT_BASE_URL
    timeout_s: float = _DEFAULT_TIMEOUT_S
    user_agent: str = "courier/0.1"

    @staticmethod
    def _parse_timeout() -> float:
        raw = os.environ.get("COURIER_TIMEOUT_S", "")
        if not raw.strip():
            return _DEFAULT_TIMEOUT_S
        try:
            value = float(raw)
        except ValueError as exc:
            raise ProxyConfigError.invalid_timeout(raw) from exc
        if value <= 0:
            raise ProxyConfigError.invalid_timeout(raw)
        return value

    @classmethod
    def from_env(cls) -> ProxyClientConfig:
        """Build configuration from ``COURIER_*`` environment variables.

        Reads ``COURIER_API_TOKEN`` (required), ``COURIER_BASE_URL`` and
        ``COURIER_TIMEOUT_S``.

        Raises
        ------
        ProxyConfigError
            If the token is missing or the timeout is not a positive number.

        """
        token = os.environ.get("COURIER_API_TOKEN", "").strip()
        if not token:
            raise ProxyConfigError.missing_token()
        base_url = os.environ.get("COURIER_BASE_URL", "").strip() or _DEFAULT_BASE_URL
        return cls(
            token=token,
            base_url=base_url.rstrip("/"),
            timeout_s=cls._parse_timeout(),
        )
