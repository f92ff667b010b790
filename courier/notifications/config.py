"""Configuration for the change-notification poll service.

Usage
-----
>>> config = PollingConfig()
>>> config.polling_interval_s
60

Or load from environment variables:

>>> import os
>>> os.environ["COURIER_POLLING_INTERVAL_S"] = "15"
>>> PollingConfig.from_env().polling_interval_s
15

"""

from __future__ import annotations

import dataclasses as dc
import os

from .errors import SubscriptionConfigError

DEFAULT_POLLING_INTERVAL_S = 60


@dc.dataclass(frozen=True, slots=True)
class PollingConfig:
    """Polling cadence and batch size for a notification pipeline.

    Attributes
    ----------
    polling_interval_s
        Seconds to wait between polls. Default is 60.
    notification_limit
        Maximum notifications requested per poll. ``None`` leaves the batch
        size to the feed.

    """

    polling_interval_s: int = DEFAULT_POLLING_INTERVAL_S
    notification_limit: int | None = None

    @staticmethod
    def _parse_positive_int(env_var: str) -> int | None:
        """Read a positive integer env var, returning ``None`` when unset."""
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            return None
        try:
            value = int(raw)
        except ValueError as exc:
            msg = f"{env_var} must be an integer, got: {raw!r}"
            raise SubscriptionConfigError(msg) from exc
        if value < 1:
            msg = f"{env_var} must be positive, got: {value}"
            raise SubscriptionConfigError(msg)
        return value

    @classmethod
    def from_env(cls) -> PollingConfig:
        """Create configuration from environment variables.

        Reads ``COURIER_POLLING_INTERVAL_S`` and ``COURIER_NOTIFICATION_LIMIT``;
        both must be positive integers when set.

        Raises
        ------
        SubscriptionConfigError
            If either variable is set to something other than a positive
            integer.

        """
        interval = cls._parse_positive_int("COURIER_POLLING_INTERVAL_S")
        return cls(
            polling_interval_s=interval or DEFAULT_POLLING_INTERVAL_S,
            notification_limit=cls._parse_positive_int("COURIER_NOTIFICATION_LIMIT"),
        )
