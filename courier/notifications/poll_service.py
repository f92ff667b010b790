"""Application-facing entry point for change-notification polling."""

from __future__ import annotations

import typing as typ

from .errors import SubscriptionConfigError
from .subscriber import ChangeNotificationSubscriber
from .subscription import (
    ChangeNotificationListSubscription,
    ChangeNotificationSubscription,
    NotificationSubscription,
)

if typ.TYPE_CHECKING:
    from .config import PollingConfig
    from .observability import PipelineEventLogger
    from .service import ChangeNotificationService
    from .subscriber import NotificationSubscriber
    from .subscription import SleepFn


class ChangeNotificationPollService:
    """Polls a :class:`ChangeNotificationService` on behalf of subscribers.

    With ``batch=False`` each subscriber receives notifications one at a
    time; with ``batch=True`` it receives each polled batch as a list.

    Examples
    --------
    Attach a subscriber and run until it cancels:

    >>> poll_service = ChangeNotificationPollService(service, limit=50)
    >>> poll_service.add_subscriber(MySubscriber())
    >>> await poll_service.start()

    """

    def __init__(  # noqa: PLR0913 - keyword-only tuning knobs
        self,
        service: ChangeNotificationService | None,
        *,
        limit: int | None = None,
        polling_interval: float | None = None,
        batch: bool = False,
        sleep: SleepFn | None = None,
        event_logger: PipelineEventLogger | None = None,
    ) -> None:
        """Create the poll service and its subscription.

        Raises
        ------
        SubscriptionConfigError
            If ``service`` is ``None`` or ``polling_interval`` is not positive.

        """
        if service is None:
            raise SubscriptionConfigError.missing_service()
        self.limit = limit
        subscription_type = (
            ChangeNotificationListSubscription
            if batch
            else ChangeNotificationSubscription
        )
        self.subscription: NotificationSubscription[typ.Any] = subscription_type(
            service,
            polling_interval=polling_interval,
            sleep=sleep,
            event_logger=event_logger,
        )

    @classmethod
    def from_config(
        cls,
        service: ChangeNotificationService,
        config: PollingConfig,
        *,
        batch: bool = False,
    ) -> ChangeNotificationPollService:
        """Build a poll service from :class:`PollingConfig` values."""
        return cls(
            service,
            limit=config.notification_limit,
            polling_interval=config.polling_interval_s,
            batch=batch,
        )

    def add_subscriber(
        self, subscriber: NotificationSubscriber[typ.Any]
    ) -> ChangeNotificationPollService:
        """Attach ``subscriber``; attaching it twice has no further effect."""
        if isinstance(subscriber, ChangeNotificationSubscriber):
            subscriber.on_subscribe(self.subscription)
        else:
            self.subscription.subscribe(subscriber)
        return self

    def unsubscribe(self, subscriber: NotificationSubscriber[typ.Any]) -> bool:
        """Detach ``subscriber``; safe to call from inside a handler."""
        return self.subscription.unsubscribe(subscriber)

    @property
    def subscriber_count(self) -> int:
        """Return the number of attached subscribers."""
        return len(self.subscription)

    def subscribers(self) -> list[NotificationSubscriber[typ.Any]]:
        """Return the attached subscribers in attach order."""
        return self.subscription.subscribers()

    def cancel(self) -> None:
        """Stop polling once the current distribution pass finishes."""
        self.subscription.cancel()

    async def start(self) -> None:
        """Run the polling loop until it completes.

        Returns once the subscription is cancelled or loses its last
        subscriber. Fetch and reconciliation errors propagate after every
        subscriber has been sent ``on_completed``.
        """
        await self.subscription.process(self.limit)
