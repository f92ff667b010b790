"""Rewrite stale-version notifications with their canonical representation."""

from __future__ import annotations

import typing as typ

import msgspec

from courier.logging import get_logger, log_debug
from courier.proxy.errors import ProxyResponseShapeError
from courier.proxy.response import HDR_CONTENT_RESTRICTED, HDR_MEDIA_TYPE

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from courier.messages.models import ChangeNotification
    from courier.proxy.client import ResourceFetcher

    from .overrides import VersionOverrideTable

DEFAULT_CONTENT_TYPE = "resource-representation"

logger = get_logger(__name__)


class ChangeNotificationReconciler:
    """Replace notification content with the overridden resource version.

    Deleted notifications, resources without an override and notifications
    already at the override version are returned unchanged. Fetch failures
    propagate to the caller.
    """

    def __init__(
        self, fetcher: ResourceFetcher, overrides: VersionOverrideTable
    ) -> None:
        """Bind the reconciler to a fetcher and an override table."""
        self._fetcher = fetcher
        self._overrides = overrides

    def needs_reconciliation(self, notification: ChangeNotification) -> bool:
        """Return whether ``notification`` would be refetched."""
        if notification.is_deleted:
            return False
        override = self._overrides.get(notification.resource.name)
        return override is not None and override != notification.resource.version

    async def reconcile(self, notification: ChangeNotification) -> ChangeNotification:
        """Return ``notification`` at its canonical version.

        The replacement keeps ``id``, ``published``, ``operation`` and
        ``publisher``. Its ``resource.version`` is the version the server
        reports having served, falling back to the requested override.

        Raises
        ------
        ProxyAPIError
            If fetching the canonical representation fails.
        ProxyResponseShapeError
            If the canonical representation is not JSON.

        """
        if not self.needs_reconciliation(notification):
            return notification

        resource = notification.resource
        override = typ.cast("str", self._overrides.get(resource.name))
        response = await self._fetcher.get_by_id(resource.name, resource.id, override)
        try:
            content = response.json()
        except msgspec.DecodeError as exc:
            raise ProxyResponseShapeError.invalid_json(
                f"{resource.name}/{resource.id}", exc
            ) from exc

        served_version = response.header(HDR_MEDIA_TYPE) or override
        log_debug(
            logger,
            "Reconciled notification %s for %s/%s from %r to %r",
            notification.id,
            resource.name,
            resource.id,
            resource.version,
            served_version,
        )
        return msgspec.structs.replace(
            notification,
            resource=msgspec.structs.replace(resource, version=served_version),
            content_type=response.header(HDR_CONTENT_RESTRICTED)
            or DEFAULT_CONTENT_TYPE,
            content=content,
        )

    async def reconcile_all(
        self, notifications: cabc.Iterable[ChangeNotification]
    ) -> list[ChangeNotification]:
        """Reconcile ``notifications`` one at a time, preserving their order."""
        return [await self.reconcile(notification) for notification in notifications]
