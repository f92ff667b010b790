"""Change-notification feed client and wire models."""

from __future__ import annotations

from .client import MessagesClient, NotificationFeedClient
from .models import (
    ChangeNotification,
    ChangeOperation,
    ConsumeResult,
    Publisher,
    Resource,
    Tenant,
    decode_change_notifications,
)

__all__ = [
    "ChangeNotification",
    "ChangeOperation",
    "ConsumeResult",
    "MessagesClient",
    "NotificationFeedClient",
    "Publisher",
    "Resource",
    "Tenant",
    "decode_change_notifications",
]
