"""Subscriber interface and a convenience base class."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from .subscription import NotificationSubscription


class NotificationSubscriber[T](typ.Protocol):
    """Receives notifications, errors and the completion signal.

    ``T`` is a single ``ChangeNotification`` for item subscriptions and a
    ``list[ChangeNotification]`` for list subscriptions.
    """

    async def on_notification(self, value: T) -> None:
        """Handle one delivered value."""
        ...

    async def on_error(self, error: BaseException) -> None:
        """Handle an error raised while this subscriber processed a value."""
        ...

    async def on_completed(self) -> None:
        """Handle the end of the subscription."""
        ...


class ChangeNotificationSubscriber[T]:
    """Base subscriber with no-op handlers and subscription control.

    Override :meth:`on_notification` (and optionally :meth:`on_error`) in
    application code. Attach through ``ChangeNotificationPollService``'s
    ``add_subscriber`` or :meth:`on_subscribe`.
    """

    def __init__(self) -> None:
        """Start detached."""
        self._subscription: NotificationSubscription[T] | None = None

    @property
    def subscription(self) -> NotificationSubscription[T] | None:
        """Return the subscription this subscriber joined, if any."""
        return self._subscription

    def on_subscribe(self, subscription: NotificationSubscription[T]) -> None:
        """Join ``subscription``."""
        self._subscription = subscription
        subscription.subscribe(self)

    def is_subscription_running(self) -> bool:
        """Return whether the joined subscription exists and is not cancelled."""
        return self._subscription is not None and not self._subscription.cancelled

    def cancel_subscription(self) -> None:
        """Cancel the whole subscription and detach this subscriber.

        Polling stops after the current cycle's distribution finishes.
        """
        if self._subscription is None:
            return
        self._subscription.cancel()
        self.unsubscribe()

    def unsubscribe(self) -> None:
        """Detach from the joined subscription; a no-op when detached."""
        if self._subscription is not None:
            self._subscription.unsubscribe(self)

    async def on_notification(self, value: T) -> None:
        """Handle one delivered value; does nothing by default."""

    async def on_error(self, error: BaseException) -> None:
        """Handle a processing error; does nothing by default."""

    async def on_completed(self) -> None:
        """Detach when the subscription completes."""
        self.unsubscribe()
