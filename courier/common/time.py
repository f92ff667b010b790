"""Common time utilities."""

from __future__ import annotations

import datetime as dt


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp."""
    return dt.datetime.now(dt.UTC)


def parse_feed_timestamp(value: str) -> dt.datetime:
    """Parse a notification feed timestamp into an aware UTC datetime.

    The feed publishes values such as ``2017-12-12 22:37:44.242116+00``: a
    space instead of ``T`` and an hour-only offset. Values without an offset
    are taken to be UTC.

    Examples
    --------
    >>> parse_feed_timestamp("2017-12-12 22:37:44+00").isoformat()
    '2017-12-12T22:37:44+00:00'

    """
    text = value.strip().replace("Z", "+00:00")
    parsed = dt.datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=dt.UTC)
    return parsed.astimezone(dt.UTC)
