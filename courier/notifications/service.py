"""Consume change notifications and reconcile them to canonical versions."""

from __future__ import annotations

import typing as typ

from courier.messages.models import ConsumeResult

from .errors import SubscriptionConfigError
from .overrides import VersionOverrideTable
from .reconcile import ChangeNotificationReconciler

if typ.TYPE_CHECKING:
    from courier.messages.client import NotificationFeedClient
    from courier.proxy.client import ResourceFetcher


class ChangeNotificationService:
    """Pull a batch from the feed and apply version overrides to it."""

    def __init__(
        self,
        feed: NotificationFeedClient | None,
        fetcher: ResourceFetcher,
        overrides: VersionOverrideTable | None = None,
    ) -> None:
        """Bind the service to its feed, fetcher and override table.

        Raises
        ------
        SubscriptionConfigError
            If ``feed`` is ``None``.

        """
        if feed is None:
            raise SubscriptionConfigError.missing_feed_client()
        self._feed = feed
        self._overrides = overrides if overrides is not None else VersionOverrideTable()
        self._reconciler = ChangeNotificationReconciler(fetcher, self._overrides)

    @property
    def overrides(self) -> VersionOverrideTable:
        """Return the live override table."""
        return self._overrides

    def with_resource_version_override(
        self, resource_name: str, version: str
    ) -> ChangeNotificationService:
        """Reconcile ``resource_name`` to the full media type ``version``."""
        self._overrides.add(resource_name, version)
        return self

    def with_resource_abbreviated_version_override(
        self, resource_name: str, token: str
    ) -> ChangeNotificationService:
        """Reconcile ``resource_name`` to a short version such as ``16``."""
        self._overrides.add_abbreviated(resource_name, token)
        return self

    async def get_change_notifications(self, limit: int | None = None) -> ConsumeResult:
        """Return the next batch from the feed, reconciled where overrides apply.

        Errors from the feed or from reconciliation fetches propagate.
        """
        result = await self._feed.consume(limit)
        if not self._overrides or not result.notifications:
            return result
        reconciled = await self._reconciler.reconcile_all(result.notifications)
        return ConsumeResult(
            notifications=tuple(reconciled), remaining=result.remaining
        )
