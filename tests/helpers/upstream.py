"""httpx mock transport that behaves like the resource API and the feed."""

from __future__ import annotations

import dataclasses
import json

import httpx

_NATURAL_PAGE_SIZE = 10


@dataclasses.dataclass(slots=True)
class FakeUpstream:
    """Serves resource listings, single records and a consumable feed.

    ``listings`` maps a resource name to its rows. ``records`` maps
    ``(resource, id, accept)`` to a ``(body, headers)`` pair. Each call to
    ``/consume`` pops the next batch from ``feed``.
    """

    listings: dict[str, list[object]] = dataclasses.field(default_factory=dict)
    records: dict[tuple[str, str, str], tuple[object, dict[str, str]]] = (
        dataclasses.field(default_factory=dict)
    )
    feed: list[list[dict[str, object]]] = dataclasses.field(default_factory=list)
    requests: list[httpx.Request] = dataclasses.field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        """Route one request."""
        self.requests.append(request)
        parts = [part for part in request.url.path.split("/") if part]
        if parts == ["consume"]:
            batch = self.feed.pop(0) if self.feed else []
            return httpx.Response(
                200,
                headers={"x-remaining": str(sum(len(b) for b in self.feed))},
                content=json.dumps(batch),
            )
        if len(parts) == 2 and parts[0] == "api":  # noqa: PLR2004
            return self._listing(request, parts[1])
        if len(parts) == 3 and parts[0] == "api":  # noqa: PLR2004
            key = (parts[1], parts[2], request.headers.get("Accept", ""))
            if key not in self.records:
                return httpx.Response(404, json={"errors": [{"code": "Not.Found"}]})
            body, headers = self.records[key]
            return httpx.Response(200, headers=headers, json=body)
        return httpx.Response(404)

    def _listing(self, request: httpx.Request, resource: str) -> httpx.Response:
        rows = self.listings.get(resource, [])
        offset = int(request.url.params.get("offset", "0"))
        limit = int(request.url.params.get("limit", str(_NATURAL_PAGE_SIZE)))
        return httpx.Response(
            200,
            headers={"x-total-count": str(len(rows))},
            json=rows[offset : offset + limit],
        )

    def client(self) -> httpx.AsyncClient:
        """Return an httpx client routed to this upstream."""
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def listing_offsets(self, resource: str) -> list[str | None]:
        """Return the ``offset`` parameter of each listing request, in order."""
        return [
            request.url.params.get("offset")
            for request in self.requests
            if request.url.path.rstrip("/").endswith(f"/api/{resource}")
        ]
