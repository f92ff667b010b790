"""URL construction for resource, paging and feed endpoints."""

from __future__ import annotations


def api_url(base_url: str, resource_name: str, resource_id: str | None = None) -> str:
    """Return the ``/api`` URL for a resource, optionally addressing one record."""
    url = f"{base_url.rstrip('/')}/api"
    if resource_name.strip():
        url = f"{url}/{resource_name}"
        if resource_id and resource_id.strip():
            url = f"{url}/{resource_id}"
    return url


def add_paging(query: str, offset: int, page_size: int) -> str:
    """Append ``offset``/``limit`` parameters to an encoded query string.

    ``query`` is empty or starts with ``?``. A negative offset or a
    non-positive page size leaves that parameter out.

    Examples
    --------
    >>> add_paging("", 0, 10)
    '?offset=0&limit=10'
    >>> add_paging("?firstName=John", 20, 10)
    '?firstName=John&offset=20&limit=10'

    """
    params: list[str] = []
    if offset >= 0:
        params.append(f"offset={offset}")
    if page_size > 0:
        params.append(f"limit={page_size}")
    if not params:
        return query
    joiner = "&" if "?" in query else "?"
    return f"{query}{joiner}{'&'.join(params)}"


def consume_url(
    base_url: str,
    *,
    limit: int | None = None,
    last_processed_id: int | None = None,
) -> str:
    """Return the change-notification ``/consume`` URL."""
    params: list[str] = []
    if last_processed_id is not None and last_processed_id >= 0:
        params.append(f"lastProcessedID={last_processed_id}")
    if limit is not None and limit > 0:
        params.append(f"limit={limit}")
    url = f"{base_url.rstrip('/')}/consume"
    if params:
        url = f"{url}?{'&'.join(params)}"
    return url
