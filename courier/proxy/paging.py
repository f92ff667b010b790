"""Offset/limit paging over filtered resource listings.

One discovery request per call reads the total count and a sample page.
Page boundaries are computed from that single count, so rows written
upstream while a call is in progress can be missed or repeated across
pages; the count is never refreshed mid-call.
"""

from __future__ import annotations

import dataclasses

from courier.logging import get_logger, log_info

from .client import ResourceFetcher, resolve_version
from .filters import FilterPayload, QueryFilter, as_payload
from .response import HDR_MAX_PAGE_SIZE, HDR_TOTAL_COUNT, ProxyResponse
from .urls import add_paging

# Caller page sizes at or below this trigger page-size discovery
MIN_PAGE_SIZE = 0
FALLBACK_MAX_PAGE_SIZE = 500

logger = get_logger(__name__)


@dataclasses.dataclass(slots=True)
class Pager:
    """Per-call paging context, filled in as discovery proceeds."""

    resource_name: str
    version: str
    payload: FilterPayload | None
    page_size: int
    offset: int
    total_count: int | None = None
    sample: ProxyResponse | None = None

    @property
    def encoded_filter(self) -> str:
        """Return the encoded filter query string, or an empty string."""
        return "" if self.payload is None else self.payload.encode()

    def query(self, offset: int, limit: int) -> str:
        """Return the filter query with paging parameters appended."""
        return add_paging(self.encoded_filter, offset, limit)

    def require_sample(self) -> ProxyResponse:
        """Return the discovery response, which every resolved pager holds."""
        if self.sample is None:
            msg = "paging context has not been resolved"
            raise RuntimeError(msg)
        return self.sample


def _trim_sample(
    sample: ProxyResponse, offset: int, num_rows: int | None = None
) -> ProxyResponse:
    if offset <= 0 and num_rows is None:
        return sample
    rows = sample.rows()
    end = len(rows) if num_rows is None else offset + num_rows
    if offset <= 0 and end >= len(rows):
        return sample
    return sample.with_rows(rows[offset:end])


class PagingEngine:
    """Fetch ordered pages of a resource listing through a :class:`ResourceFetcher`.

    Requests are issued strictly one after another so pages come back in
    ascending offset order. Fetch errors propagate unchanged and abort the
    remaining requests.
    """

    def __init__(self, fetcher: ResourceFetcher) -> None:
        """Bind the engine to the fetcher that performs single requests."""
        self._fetcher = fetcher

    async def fetch_range(
        self,
        resource_name: str,
        version: str = "",
        query_filter: QueryFilter | None = None,
        page_size: int = 0,
        offset: int = 0,
    ) -> list[ProxyResponse]:
        """Return every page of the listing from ``offset`` to the end.

        Parameters
        ----------
        resource_name
            Resource collection to page through.
        version
            Requested media type; blank selects the default version.
        query_filter
            A built :class:`FilterPayload`, a filter builder, or ``None``.
        page_size
            Rows per page; a non-positive value is discovered from the server.
        offset
            Zero-based index of the first row; negative values count as 0.

        Returns
        -------
        list[ProxyResponse]
            Raw page responses in ascending offset order. The final page may
            hold fewer rows than ``page_size``.

        Notes
        -----
        When the total count fits in one page, the discovery response is
        returned instead of a paged request. A ``page_size`` larger than the
        server's default page, with no ``x-max-page-size`` header to clamp
        it, therefore returns only the rows of that default page. With 25
        rows, a default page of 10 and ``page_size=50``, ``offset=15``
        yields one empty page.

        """
        pager = await self._resolve(
            resource_name, version, query_filter, page_size, offset
        )
        shortcut = self._shortcut(pager)
        if shortcut is not None:
            self._log_call(pager, len(shortcut))
            return shortcut

        pages: list[ProxyResponse] = []
        for page_offset in self._page_offsets(pager):
            pages.append(await self._fetch_page(pager, page_offset, pager.page_size))
        self._log_call(pager, len(pages))
        return pages

    async def fetch_all_pages(
        self,
        resource_name: str,
        version: str = "",
        query_filter: QueryFilter | None = None,
        page_size: int = 0,
    ) -> list[ProxyResponse]:
        """Return every page of the listing, starting at the first row."""
        return await self.fetch_range(
            resource_name, version, query_filter, page_size, 0
        )

    async def fetch_pages(  # noqa: PLR0913 - mirrors fetch_range plus a bound
        self,
        resource_name: str,
        version: str = "",
        query_filter: QueryFilter | None = None,
        page_size: int = 0,
        offset: int = 0,
        num_pages: int = 1,
    ) -> list[ProxyResponse]:
        """Return at most ``num_pages`` pages starting at ``offset``."""
        if num_pages < 1:
            msg = f"num_pages must be positive, got {num_pages}"
            raise ValueError(msg)
        pager = await self._resolve(
            resource_name, version, query_filter, page_size, offset
        )
        shortcut = self._shortcut(pager)
        if shortcut is not None:
            self._log_call(pager, len(shortcut))
            return shortcut

        pages: list[ProxyResponse] = []
        for page_offset in self._page_offsets(pager)[:num_pages]:
            pages.append(await self._fetch_page(pager, page_offset, pager.page_size))
        self._log_call(pager, len(pages))
        return pages

    async def fetch_rows(  # noqa: PLR0913 - mirrors fetch_range plus a bound
        self,
        resource_name: str,
        version: str = "",
        query_filter: QueryFilter | None = None,
        page_size: int = 0,
        offset: int = 0,
        num_rows: int = 1,
    ) -> list[ProxyResponse]:
        """Return pages holding exactly ``num_rows`` rows from ``offset``.

        ``num_rows`` is clamped to the rows that exist past ``offset``. The
        last page requests only the rows still missing.
        """
        if num_rows < 1:
            msg = f"num_rows must be positive, got {num_rows}"
            raise ValueError(msg)
        pager = await self._resolve(
            resource_name, version, query_filter, page_size, offset
        )
        sample = pager.require_sample()
        if pager.total_count is None or pager.total_count <= 0:
            self._log_call(pager, 1)
            return [sample]
        if pager.offset >= pager.total_count:
            self._log_call(pager, 0)
            return []
        end = min(pager.offset + num_rows, pager.total_count)
        if not self._should_page(pager):
            self._log_call(pager, 1)
            return [_trim_sample(sample, pager.offset, end - pager.offset)]

        pages: list[ProxyResponse] = []
        for page_offset in range(pager.offset, end, pager.page_size):
            limit = min(pager.page_size, end - page_offset)
            pages.append(await self._fetch_page(pager, page_offset, limit))
        self._log_call(pager, len(pages))
        return pages

    async def get_total_count(
        self,
        resource_name: str,
        version: str = "",
        query_filter: QueryFilter | None = None,
    ) -> int:
        """Return the server-reported row count, or 0 when it is not reported."""
        sample = await self._sample(resource_name, version, as_payload(query_filter))
        return sample.int_header(HDR_TOTAL_COUNT) or 0

    async def get_page_size(
        self,
        resource_name: str,
        version: str = "",
        query_filter: QueryFilter | None = None,
    ) -> int:
        """Return the page size the server naturally serves for this listing."""
        sample = await self._sample(resource_name, version, as_payload(query_filter))
        return self._discover_page_size(sample)

    async def get_max_page_size(
        self,
        resource_name: str,
        version: str = "",
        query_filter: QueryFilter | None = None,
    ) -> int:
        """Return the server-declared maximum page size or the fallback maximum."""
        sample = await self._sample(resource_name, version, as_payload(query_filter))
        declared = sample.int_header(HDR_MAX_PAGE_SIZE)
        if declared is None or declared <= 0:
            return FALLBACK_MAX_PAGE_SIZE
        return declared

    async def _sample(
        self, resource_name: str, version: str, payload: FilterPayload | None
    ) -> ProxyResponse:
        query = "" if payload is None else payload.encode()
        return await self._fetcher.get(resource_name, resolve_version(version), query)

    async def _resolve(
        self,
        resource_name: str,
        version: str,
        query_filter: QueryFilter | None,
        page_size: int,
        offset: int,
    ) -> Pager:
        pager = Pager(
            resource_name=resource_name,
            version=resolve_version(version),
            payload=as_payload(query_filter),
            page_size=page_size,
            offset=max(offset, 0),
        )
        sample = await self._sample(pager.resource_name, pager.version, pager.payload)
        pager.sample = sample
        pager.total_count = sample.int_header(HDR_TOTAL_COUNT)
        pager.page_size = self._effective_page_size(sample, page_size)
        return pager

    @staticmethod
    def _discover_page_size(sample: ProxyResponse) -> int:
        measured = sample.content_count()
        if measured is not None:
            return max(measured, 1)
        declared = sample.int_header(HDR_MAX_PAGE_SIZE)
        if declared is not None and declared > 0:
            return declared
        return FALLBACK_MAX_PAGE_SIZE

    def _effective_page_size(self, sample: ProxyResponse, requested: int) -> int:
        if requested <= MIN_PAGE_SIZE:
            return self._discover_page_size(sample)
        declared = sample.int_header(HDR_MAX_PAGE_SIZE)
        if declared is not None and 0 < declared < requested:
            return declared
        return requested

    @staticmethod
    def _should_page(pager: Pager) -> bool:
        return pager.total_count is not None and pager.total_count > pager.page_size

    def _shortcut(self, pager: Pager) -> list[ProxyResponse] | None:
        """Return the result when no paging loop is needed, else ``None``."""
        sample = pager.require_sample()
        if pager.total_count is None or pager.total_count <= 0:
            return [sample]
        if pager.offset >= pager.total_count:
            return []
        if not self._should_page(pager):
            return [_trim_sample(sample, pager.offset)]
        return None

    @staticmethod
    def _page_offsets(pager: Pager) -> range:
        total = pager.total_count or 0
        return range(pager.offset, total, pager.page_size)

    async def _fetch_page(
        self, pager: Pager, offset: int, limit: int
    ) -> ProxyResponse:
        return await self._fetcher.get(
            pager.resource_name, pager.version, pager.query(offset, limit)
        )

    @staticmethod
    def _log_call(pager: Pager, page_count: int) -> None:
        log_info(
            logger,
            "Paged %s: total_count=%s page_size=%d offset=%d pages=%d",
            pager.resource_name,
            "unknown" if pager.total_count is None else pager.total_count,
            pager.page_size,
            pager.offset,
            page_count,
        )

