"""Response value returned by resource and feed fetches."""

from __future__ import annotations

import dataclasses
import typing as typ

import httpx
import msgspec

HDR_TOTAL_COUNT = "x-total-count"
HDR_MAX_PAGE_SIZE = "x-max-page-size"
HDR_MEDIA_TYPE = "x-media-type"
HDR_CONTENT_RESTRICTED = "x-content-restricted"
HDR_REMAINING = "x-remaining"


@dataclasses.dataclass(frozen=True, slots=True)
class ProxyResponse:
    """Status, headers and raw body of one upstream fetch.

    Header lookups are case-insensitive. The body is kept as text so callers
    can decide how, or whether, to parse it.
    """

    status_code: int
    headers: httpx.Headers
    content: str

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> ProxyResponse:
        """Capture an httpx response."""
        return cls(
            status_code=response.status_code,
            headers=httpx.Headers(response.headers),
            content=response.text,
        )

    def header(self, name: str) -> str | None:
        """Return the value of header ``name``, or ``None``.

        Repeated headers come back joined with commas, as httpx reports them.
        """
        if not name.strip():
            return None
        value = self.headers.get(name)
        return None if value is None else value.strip()

    def int_header(self, name: str) -> int | None:
        """Return header ``name`` as an int, or ``None`` when absent or malformed."""
        value = self.header(name)
        if value is None:
            return None
        # Counts repeated by a proxy arrive comma-joined; the first one wins
        try:
            return int(value.split(",", 1)[0])
        except ValueError:
            return None

    def json(self) -> typ.Any:  # noqa: ANN401 - arbitrary JSON document
        """Decode the body as JSON, returning ``None`` for a blank body.

        Raises
        ------
        msgspec.DecodeError
            If the body is not valid JSON.

        """
        if not self.content.strip():
            return None
        return msgspec.json.decode(self.content)

    def content_count(self) -> int | None:
        """Return the number of rows in the body.

        An array counts its elements and a non-empty object counts as one row.
        ``None`` means the body is blank or not JSON and so cannot be measured.
        """
        try:
            document = self.json()
        except msgspec.DecodeError:
            return None
        if document is None:
            return None
        if isinstance(document, list):
            return len(document)
        if isinstance(document, dict):
            return 1 if document else 0
        return 0

    def rows(self) -> list[typ.Any]:
        """Return the body rows, wrapping a single object in a list."""
        try:
            document = self.json()
        except msgspec.DecodeError:
            return []
        if isinstance(document, list):
            return document
        if isinstance(document, dict) and document:
            return [document]
        return []

    def with_rows(self, rows: typ.Sequence[typ.Any]) -> ProxyResponse:
        """Return a copy of this response whose body holds only ``rows``."""
        body = msgspec.json.encode(list(rows)).decode("utf-8")
        return dataclasses.replace(self, content=body)
