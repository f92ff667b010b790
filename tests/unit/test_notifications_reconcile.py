"""Unit tests for notification reconciliation."""

from __future__ import annotations

import msgspec
import pytest

from courier.notifications import ChangeNotificationReconciler, VersionOverrideTable
from courier.notifications.reconcile import DEFAULT_CONTENT_TYPE
from courier.proxy import ProxyAPIError
from tests.helpers.fakes import (
    PERSONS_V8,
    PERSONS_V12,
    FakeFetcher,
    make_notification,
    make_response,
)

_CANONICAL = {"id": "p-1", "names": [{"firstName": "Ada"}], "v": 12}


def _reconciler(
    records: dict | None = None, overrides: dict[str, str] | None = None
) -> tuple[ChangeNotificationReconciler, FakeFetcher]:
    fetcher = FakeFetcher(records=records or {})
    table = VersionOverrideTable(overrides if overrides is not None else {})
    return ChangeNotificationReconciler(fetcher, table), fetcher


@pytest.mark.asyncio
async def test_stale_notification_is_refetched_at_override_version() -> None:
    """An out-of-date notification carries the canonical content afterwards."""
    reconciler, fetcher = _reconciler(
        {("persons", "p-1", PERSONS_V12): make_response(_CANONICAL)},
        {"persons": PERSONS_V12},
    )
    original = make_notification("7")

    reconciled = await reconciler.reconcile(original)

    assert reconciled.resource.version == PERSONS_V12
    assert reconciled.content == _CANONICAL
    assert reconciled.content_type == DEFAULT_CONTENT_TYPE
    assert (reconciled.id, reconciled.published, reconciled.operation) == (
        original.id,
        original.published,
        original.operation,
    )
    assert reconciled.publisher == original.publisher
    assert original.resource.version == PERSONS_V8, "The input must not change"
    assert [(c.resource_id, c.version) for c in fetcher.calls] == [("p-1", PERSONS_V12)]


@pytest.mark.asyncio
async def test_served_version_and_restriction_headers_win() -> None:
    """Server-reported version and content restriction are recorded."""
    served = "application/vnd.hedtech.integration.v12.4.0+json"
    reconciler, _ = _reconciler(
        {
            ("persons", "p-1", PERSONS_V12): make_response(
                _CANONICAL,
                {"x-media-type": served, "x-content-restricted": "partial, masked"},
            )
        },
        {"persons": PERSONS_V12},
    )

    reconciled = await reconciler.reconcile(make_notification())

    assert reconciled.resource.version == served
    assert reconciled.content_type == "partial, masked"


@pytest.mark.parametrize("operation", ["deleted", "Deleted"])
@pytest.mark.asyncio
async def test_deleted_notifications_pass_through(operation: str) -> None:
    """Deletions keep their content and version whatever the overrides say."""
    reconciler, fetcher = _reconciler(overrides={"persons": PERSONS_V12})
    original = make_notification(operation=operation, content={"id": "p-1"})

    reconciled = await reconciler.reconcile(original)

    assert reconciled is original
    assert fetcher.calls == []


@pytest.mark.asyncio
async def test_resources_without_override_pass_through() -> None:
    """Only overridden resources are refetched."""
    reconciler, fetcher = _reconciler(overrides={"courses": PERSONS_V12})
    original = make_notification()

    assert await reconciler.reconcile(original) is original
    assert fetcher.calls == []


@pytest.mark.asyncio
async def test_reconciling_canonical_notification_is_idempotent() -> None:
    """A notification already at the override version is left byte-identical."""
    reconciler, fetcher = _reconciler(overrides={"PERSONS": PERSONS_V12})
    canonical = make_notification(version=PERSONS_V12, content=_CANONICAL)

    once = await reconciler.reconcile(canonical)
    twice = await reconciler.reconcile(once)

    assert msgspec.json.encode(once) == msgspec.json.encode(canonical)
    assert msgspec.json.encode(twice) == msgspec.json.encode(once)
    assert fetcher.calls == []


@pytest.mark.asyncio
async def test_fetch_failure_propagates() -> None:
    """A failed canonical fetch is raised to the caller."""
    reconciler, _ = _reconciler(overrides={"persons": PERSONS_V12})

    with pytest.raises(ProxyAPIError) as excinfo:
        await reconciler.reconcile(make_notification())

    assert excinfo.value.status_code == 404


@pytest.mark.asyncio
async def test_reconcile_all_keeps_order() -> None:
    """Batches are reconciled one by one in feed order."""
    reconciler, _ = _reconciler(
        {
            ("persons", "p-1", PERSONS_V12): make_response(_CANONICAL),
            ("persons", "p-2", PERSONS_V12): make_response({"id": "p-2"}),
        },
        {"persons": PERSONS_V12},
    )
    batch = [
        make_notification("1", resource_id="p-1"),
        make_notification("2", resource_id="p-2", operation="deleted"),
        make_notification("3", resource_id="p-2"),
    ]

    reconciled = await reconciler.reconcile_all(batch)

    assert [n.id for n in reconciled] == ["1", "2", "3"]
    assert [n.resource.version for n in reconciled] == [
        PERSONS_V12,
        PERSONS_V8,
        PERSONS_V12,
    ]
    assert reconciled[2].content == {"id": "p-2"}
