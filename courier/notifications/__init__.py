"""Change-notification reconciliation and distribution pipeline."""

from __future__ import annotations

from .config import PollingConfig
from .errors import SubscriberHandlerError, SubscriptionConfigError
from .observability import (
    ErrorCategory,
    PipelineEventLogger,
    PipelineEventType,
    PipelineRunContext,
    categorize_error,
)
from .overrides import VersionOverrideTable, full_version
from .poll_service import ChangeNotificationPollService
from .reconcile import ChangeNotificationReconciler
from .service import ChangeNotificationService
from .subscriber import ChangeNotificationSubscriber, NotificationSubscriber
from .subscription import (
    ChangeNotificationListSubscription,
    ChangeNotificationSubscription,
    NotificationSubscription,
)

__all__ = [
    "ChangeNotificationListSubscription",
    "ChangeNotificationPollService",
    "ChangeNotificationReconciler",
    "ChangeNotificationService",
    "ChangeNotificationSubscriber",
    "ChangeNotificationSubscription",
    "ErrorCategory",
    "NotificationSubscriber",
    "NotificationSubscription",
    "PipelineEventLogger",
    "PipelineEventType",
    "PipelineRunContext",
    "PollingConfig",
    "SubscriberHandlerError",
    "SubscriptionConfigError",
    "VersionOverrideTable",
    "categorize_error",
    "full_version",
]
