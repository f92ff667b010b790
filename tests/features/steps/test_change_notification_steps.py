"""Behavioural tests for change-notification reconciliation and delivery."""

from __future__ import annotations

import asyncio
import secrets
import typing as typ

import pytest
from pytest_bdd import given, parsers, scenario, then, when

from courier.messages import MessagesClient
from courier.messages.models import ChangeNotification
from courier.notifications import (
    ChangeNotificationPollService,
    ChangeNotificationService,
    full_version,
)
from courier.proxy import ProxyClient, ProxyClientConfig
from tests.helpers.fakes import FailingSubscriber, RecordingSubscriber
from tests.helpers.upstream import FakeUpstream


def run_async[T](coro: typ.Coroutine[typ.Any, typ.Any, T]) -> T:
    """Run async coroutines in sync BDD step functions."""
    return asyncio.run(coro)


class NotificationContext(typ.TypedDict, total=False):
    """Shared state used by change-notification BDD steps."""

    upstream: FakeUpstream
    overrides: dict[str, str]
    recorder: RecordingSubscriber[ChangeNotification]
    failing: FailingSubscriber


@scenario(
    "../change_notifications.feature",
    "An outdated notification is delivered at the overridden version",
)
def test_outdated_notification_reconciled() -> None:
    """Behavioural test: overrides refetch content at the requested version."""


@scenario(
    "../change_notifications.feature",
    "A failing subscriber does not starve the others",
)
def test_failing_subscriber_isolated() -> None:
    """Behavioural test: one subscriber's failures do not affect another."""


@pytest.fixture
def notification_context() -> NotificationContext:
    """Start each scenario with an empty upstream and no overrides."""
    return {"upstream": FakeUpstream(), "overrides": {}}


def _notification_json(notification_id: str, version: str) -> dict[str, object]:
    return {
        "id": notification_id,
        "published": "2017-12-12T22:37:44.242116Z",
        "operation": "replaced",
        "resource": {"name": "persons", "id": "p-1", "version": version},
        "contentType": "resource-representation",
        "content": {"id": "p-1", "schema": version},
        "publisher": {"id": "pub-1", "applicationName": "Student"},
    }


def _record(token: str) -> dict[str, object]:
    return {"id": "p-1", "names": [{"firstName": "Ada"}], "schema": token}


@given(parsers.parse('the feed holds a "persons" notification at version "{token}"'))
def feed_holds_notification(
    notification_context: NotificationContext, token: str
) -> None:
    """Queue one notification in the feed."""
    notification_context["upstream"].feed.append(
        [_notification_json("1", full_version(token))]
    )


@given(parsers.parse('the feed holds {count:d} "persons" notifications'))
def feed_holds_notifications(
    notification_context: NotificationContext, count: int
) -> None:
    """Queue one batch of ``count`` notifications."""
    notification_context["upstream"].feed.append(
        [_notification_json(str(i), full_version("8")) for i in range(1, count + 1)]
    )


@given(
    parsers.parse(
        'the upstream serves "persons" record "{resource_id}" at version "{token}"'
    )
)
def upstream_serves_record(
    notification_context: NotificationContext, resource_id: str, token: str
) -> None:
    """Make a canonical record available at one version."""
    version = full_version(token)
    notification_context["upstream"].records[("persons", resource_id, version)] = (
        _record(token),
        {"x-media-type": version},
    )


@given(parsers.parse('the service overrides "{resource}" to version "{token}"'))
def service_overrides(
    notification_context: NotificationContext, resource: str, token: str
) -> None:
    """Record an abbreviated version override."""
    notification_context["overrides"][resource] = token


async def _poll(
    context: NotificationContext, subscribers: list[object], *, stop_on_sleep: bool
) -> None:
    upstream = context["upstream"]
    config = ProxyClientConfig(
        token=secrets.token_hex(8), base_url="https://api.example.test"
    )
    http_client = upstream.client()
    service = ChangeNotificationService(
        MessagesClient(config, http_client=http_client),
        ProxyClient(config, http_client=http_client),
    )
    for resource, token in context["overrides"].items():
        service.with_resource_abbreviated_version_override(resource, token)

    poll_service: ChangeNotificationPollService

    async def _sleep(seconds: float) -> None:
        del seconds
        if stop_on_sleep:
            poll_service.cancel()

    poll_service = ChangeNotificationPollService(service, limit=10, sleep=_sleep)
    for subscriber in subscribers:
        poll_service.add_subscriber(typ.cast("typ.Any", subscriber))
    try:
        await poll_service.start()
    finally:
        await http_client.aclose()


@when("a subscriber consumes one notification")
def subscriber_consumes_one(notification_context: NotificationContext) -> None:
    """Run the pipeline until the subscriber has one notification."""
    recorder = RecordingSubscriber[ChangeNotification](cancel_after=1)
    notification_context["recorder"] = recorder
    run_async(_poll(notification_context, [recorder], stop_on_sleep=False))


@when("a failing subscriber and a recording subscriber poll until the first pause")
def two_subscribers_poll(notification_context: NotificationContext) -> None:
    """Run one full cycle with a failing and a healthy subscriber."""
    failing = FailingSubscriber()
    recorder = RecordingSubscriber[ChangeNotification]()
    notification_context["failing"] = failing
    notification_context["recorder"] = recorder
    run_async(_poll(notification_context, [failing, recorder], stop_on_sleep=True))


@then(parsers.parse('the delivered notification is at version "{token}"'))
def delivered_at_version(
    notification_context: NotificationContext, token: str
) -> None:
    """Check the reconciled resource version."""
    (notification,) = notification_context["recorder"].received
    assert notification.resource.version == full_version(token)
    assert notification.operation == "replaced"


@then(parsers.parse('the delivered content is the version "{token}" record'))
def delivered_content(notification_context: NotificationContext, token: str) -> None:
    """Check the content was replaced by the canonical fetch body."""
    (notification,) = notification_context["recorder"].received
    assert notification.content == _record(token)


@then(parsers.parse('the recording subscriber received notifications "{ids}"'))
def recorder_received(notification_context: NotificationContext, ids: str) -> None:
    """Check delivery order to the healthy subscriber."""
    received = notification_context["recorder"].received
    assert [n.id for n in received] == ids.split(",")


@then(parsers.parse("the failing subscriber was told about {count:d} errors"))
def failing_told_about_errors(
    notification_context: NotificationContext, count: int
) -> None:
    """Check each failed delivery reached the failing subscriber's on_error."""
    assert len(notification_context["failing"].errors) == count


@then("both subscribers were completed")
def both_completed(notification_context: NotificationContext) -> None:
    """Check on_completed reached every subscriber when polling stopped."""
    assert notification_context["failing"].completed == 1
    assert notification_context["recorder"].completed == 1
