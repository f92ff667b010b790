"""Change-notification wire models and decoding."""

from __future__ import annotations

import datetime as dt  # noqa: TC003 - msgspec resolves annotations at runtime
import enum
import typing as typ

import msgspec

from courier.common.time import parse_feed_timestamp
from courier.proxy.errors import ProxyResponseShapeError


class ChangeOperation(enum.StrEnum):
    """Operations the feed is known to report."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    REPLACED = "replaced"


class Resource(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """Identifies the record a notification is about and its representation version.

    Attributes
    ----------
    name
        Resource collection name, e.g. ``persons``.
    id
        Record identifier.
    version
        Media type the content was published as.
    domain
        Optional business domain.

    """

    name: str
    id: str
    version: str = ""
    domain: str | None = None


class Tenant(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """Tenant the publishing application belongs to."""

    id: str | None = None
    alias: str | None = None
    name: str | None = None
    environment: str | None = None


class Publisher(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """Application that published a notification."""

    id: str | None = None
    application_name: str | None = None
    tenant: Tenant | None = None


class ChangeNotification(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """One create/update/delete event for a resource record.

    Instances are never mutated; reconciliation builds replacements with
    :func:`msgspec.structs.replace`.
    """

    id: str
    published: dt.datetime
    operation: str
    resource: Resource
    content_type: str = ""
    content: typ.Any = None
    publisher: Publisher | None = None

    @property
    def is_deleted(self) -> bool:
        """Return whether the notification reports a deletion."""
        return self.operation.strip().lower() == ChangeOperation.DELETED


class ConsumeResult(msgspec.Struct, kw_only=True, frozen=True):
    """Notifications returned by one feed request."""

    notifications: tuple[ChangeNotification, ...] = ()
    remaining: int = 0

    def __len__(self) -> int:
        """Return the number of notifications in the batch."""
        return len(self.notifications)


def _normalise_entry(entry: object) -> object:
    if not isinstance(entry, dict):
        return entry
    normalised = dict(entry)
    if isinstance(normalised.get("id"), int):
        normalised["id"] = str(normalised["id"])
    published = normalised.get("published")
    if isinstance(published, str):
        normalised["published"] = parse_feed_timestamp(published)
    return normalised


def decode_change_notifications(body: str | bytes) -> list[ChangeNotification]:
    """Decode a feed response body into notifications.

    A blank body decodes to an empty list, as does ``null``.

    Raises
    ------
    ProxyResponseShapeError
        If the body is not a JSON array of notification objects.

    """
    text = body.decode("utf-8") if isinstance(body, bytes) else body
    if not text.strip():
        return []
    try:
        raw = msgspec.json.decode(text)
    except msgspec.DecodeError as exc:
        raise ProxyResponseShapeError.invalid_json("change notifications", exc) from exc
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ProxyResponseShapeError.invalid_json(
            "change notifications", "expected a JSON array"
        )
    try:
        entries = [_normalise_entry(entry) for entry in raw]
        return msgspec.convert(
            entries,
            type=list[ChangeNotification],
        )
    except (msgspec.ValidationError, ValueError) as exc:
        raise ProxyResponseShapeError.invalid_json("change notifications", exc) from exc


def encode_change_notifications(
    notifications: typ.Iterable[ChangeNotification],
) -> bytes:
    """Encode notifications back into feed-shaped JSON."""
    return msgspec.json.encode(list(notifications))
