"""Subscriber sets and the poll, distribute and sleep loop.

A subscription owns an ordered, duplicate-free list of subscribers and a
cancellation flag. :meth:`NotificationSubscription.process` polls the
service, hands each result to a snapshot of the subscribers and then sleeps
for the polling interval. The flag is checked once per cycle, after
distribution and before sleeping, so an in-flight poll or sleep is never
interrupted.
"""

from __future__ import annotations

import abc
import asyncio
import collections.abc as cabc
import typing as typ

from courier.common.time import utcnow

from .config import DEFAULT_POLLING_INTERVAL_S
from .errors import SubscriberHandlerError, SubscriptionConfigError
from .observability import PipelineEventLogger, PipelineRunContext

if typ.TYPE_CHECKING:
    from courier.messages.models import ChangeNotification

    from .service import ChangeNotificationService
    from .subscriber import NotificationSubscriber

type SleepFn = cabc.Callable[[float], cabc.Awaitable[None]]


class NotificationSubscription[T](abc.ABC):
    """Base subscription; subclasses decide what one delivery contains.

    A completed run leaves the subscription empty and uncancelled, so
    subscribers can be attached again and :meth:`process` restarted.
    """

    mode: typ.ClassVar[str]

    def __init__(
        self,
        service: ChangeNotificationService | None,
        *,
        polling_interval: float | None = None,
        sleep: SleepFn | None = None,
        event_logger: PipelineEventLogger | None = None,
    ) -> None:
        """Bind the subscription to the service it polls.

        Raises
        ------
        SubscriptionConfigError
            If ``service`` is ``None`` or ``polling_interval`` is not positive.

        """
        if service is None:
            raise SubscriptionConfigError.missing_service()
        if polling_interval is not None and polling_interval <= 0:
            raise SubscriptionConfigError.invalid_polling_interval(polling_interval)
        self._service = service
        self.polling_interval: float = (
            DEFAULT_POLLING_INTERVAL_S if polling_interval is None else polling_interval
        )
        self._sleep: SleepFn = sleep or asyncio.sleep
        self._event_logger = event_logger or PipelineEventLogger()
        self._subscribers: list[NotificationSubscriber[T]] = []
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        """Return whether cancellation has been requested."""
        return self._cancelled

    def cancel(self) -> None:
        """Request that polling stop after the current distribution pass."""
        self._cancelled = True

    def subscribe(self, subscriber: NotificationSubscriber[T]) -> bool:
        """Attach ``subscriber``; return ``False`` if it was already attached."""
        if subscriber in self._subscribers:
            return False
        self._subscribers.append(subscriber)
        return True

    def unsubscribe(self, subscriber: NotificationSubscriber[T]) -> bool:
        """Detach ``subscriber``; return ``False`` if it was not attached."""
        if subscriber not in self._subscribers:
            return False
        self._subscribers.remove(subscriber)
        return True

    def subscribers(self) -> list[NotificationSubscriber[T]]:
        """Return a copy of the attached subscribers in attach order."""
        return list(self._subscribers)

    def __len__(self) -> int:
        """Return the number of attached subscribers."""
        return len(self._subscribers)

    def __contains__(self, subscriber: object) -> bool:
        """Return whether ``subscriber`` is attached."""
        return subscriber in self._subscribers

    @abc.abstractmethod
    def deliveries(
        self, notifications: cabc.Sequence[ChangeNotification]
    ) -> list[T]:
        """Split one polled batch into the values handed to subscribers."""

    async def process(self, limit: int | None = None) -> None:
        """Poll and distribute until cancelled or no subscribers remain.

        When the loop ends, every still-attached subscriber receives
        ``on_completed``, the subscriber set is cleared and the cancellation
        flag is reset. Errors from polling or reconciliation end the loop the
        same way and are then re-raised unchanged.
        """
        context = PipelineRunContext(mode=self.mode, started_at=utcnow())
        self._event_logger.log_run_started(
            context, subscriber_count=len(self._subscribers)
        )
        cycles = 0
        try:
            while self._subscribers:
                result = await self._service.get_change_notifications(limit)
                cycles += 1
                for value in self.deliveries(result.notifications):
                    await self._notify(context, value)
                self._event_logger.log_cycle_completed(
                    context,
                    cycle=cycles,
                    notifications=len(result.notifications),
                    subscribers=len(self._subscribers),
                    remaining=result.remaining,
                )
                if self._cancelled:
                    break
                await self._sleep(self.polling_interval)
        except BaseException as exc:
            await self._end_transmission(context)
            if isinstance(exc, Exception):
                self._event_logger.log_run_failed(
                    context,
                    cycles=cycles,
                    error=exc,
                    duration=utcnow() - context.started_at,
                )
            raise
        cancelled = self._cancelled
        await self._end_transmission(context)
        self._event_logger.log_run_completed(
            context,
            cycles=cycles,
            cancelled=cancelled,
            duration=utcnow() - context.started_at,
        )

    async def _notify(self, context: PipelineRunContext, value: T) -> None:
        for subscriber in list(self._subscribers):
            try:
                await subscriber.on_notification(value)
            except Exception as exc:  # noqa: BLE001 - isolate subscriber failures
                error = SubscriberHandlerError.handler_failed(_notification_ids(value))
                error.__cause__ = exc
                self._event_logger.log_subscriber_failed(
                    context, subscriber=subscriber, handler="on_notification", error=exc
                )
                await self._report_error(context, subscriber, error)

    async def _report_error(
        self,
        context: PipelineRunContext,
        subscriber: NotificationSubscriber[T],
        error: SubscriberHandlerError,
    ) -> None:
        try:
            await subscriber.on_error(error)
        except Exception as exc:  # noqa: BLE001 - isolate subscriber failures
            self._event_logger.log_subscriber_failed(
                context, subscriber=subscriber, handler="on_error", error=exc
            )

    async def _end_transmission(self, context: PipelineRunContext) -> None:
        for subscriber in list(self._subscribers):
            if subscriber not in self._subscribers:
                continue
            try:
                await subscriber.on_completed()
            except Exception as exc:  # noqa: BLE001 - isolate subscriber failures
                self._event_logger.log_subscriber_failed(
                    context, subscriber=subscriber, handler="on_completed", error=exc
                )
        self._subscribers.clear()
        self._cancelled = False


def _notification_ids(value: object) -> tuple[str, ...]:
    if isinstance(value, list):
        return tuple(str(getattr(item, "id", "")) for item in value)
    return (str(getattr(value, "id", "")),)


class ChangeNotificationSubscription(NotificationSubscription["ChangeNotification"]):
    """Delivers notifications one at a time, in feed order."""

    mode: typ.ClassVar[str] = "item"

    def deliveries(
        self, notifications: cabc.Sequence[ChangeNotification]
    ) -> list[ChangeNotification]:
        """Return each notification as its own delivery."""
        return list(notifications)


class ChangeNotificationListSubscription(
    NotificationSubscription["list[ChangeNotification]"]
):
    """Delivers each polled batch as one ordered list."""

    mode: typ.ClassVar[str] = "list"

    def deliveries(
        self, notifications: cabc.Sequence[ChangeNotification]
    ) -> list[list[ChangeNotification]]:
        """Return the batch as a single delivery; an empty batch delivers nothing."""
        if not notifications:
            return []
        return [list(notifications)]
