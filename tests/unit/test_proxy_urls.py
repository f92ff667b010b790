"""Unit tests for resource and feed URL construction."""

from __future__ import annotations

import pytest

from courier.proxy.urls import add_paging, api_url, consume_url

_BASE = "https://api.example.test"


@pytest.mark.parametrize(
    ("resource_name", "resource_id", "expected"),
    [
        ("persons", None, f"{_BASE}/api/persons"),
        ("persons", "p-1", f"{_BASE}/api/persons/p-1"),
        ("persons", "  ", f"{_BASE}/api/persons"),
        ("", "p-1", f"{_BASE}/api"),
    ],
)
def test_api_url(resource_name: str, resource_id: str | None, expected: str) -> None:
    """Resource and id segments are appended when present."""
    assert api_url(f"{_BASE}/", resource_name, resource_id) == expected


@pytest.mark.parametrize(
    ("query", "offset", "page_size", "expected"),
    [
        ("", 0, 10, "?offset=0&limit=10"),
        ("?firstName=John", 20, 10, "?firstName=John&offset=20&limit=10"),
        ("?criteria=%7B%7D", 5, 0, "?criteria=%7B%7D&offset=5"),
        ("", -1, 0, ""),
    ],
)
def test_add_paging(query: str, offset: int, page_size: int, expected: str) -> None:
    """Paging parameters join an existing query with ``&``."""
    assert add_paging(query, offset, page_size) == expected


@pytest.mark.parametrize(
    ("limit", "last_processed_id", "expected"),
    [
        (None, None, f"{_BASE}/consume"),
        (50, None, f"{_BASE}/consume?limit=50"),
        (50, 0, f"{_BASE}/consume?lastProcessedID=0&limit=50"),
        (0, -1, f"{_BASE}/consume"),
    ],
)
def test_consume_url(
    limit: int | None, last_processed_id: int | None, expected: str
) -> None:
    """Only meaningful consume parameters are sent."""
    assert consume_url(_BASE, limit=limit, last_processed_id=last_processed_id) == (
        expected
    )
