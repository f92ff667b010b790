"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import pytest

from tests.helpers.fakes import RecordingSleep


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    """Return a sleep replacement that returns immediately."""
    return RecordingSleep()


@pytest.fixture(autouse=True)
def _clear_courier_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer ``COURIER_*`` settings out of config tests."""
    for name in (
        "COURIER_API_TOKEN",
        "COURIER_BASE_URL",
        "COURIER_TIMEOUT_S",
        "COURIER_POLLING_INTERVAL_S",
        "COURIER_NOTIFICATION_LIMIT",
    ):
        monkeypatch.delenv(name, raising=False)
