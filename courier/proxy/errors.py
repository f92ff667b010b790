"""Resource API client errors."""

from __future__ import annotations

# Upper bound on how much of a response body is echoed into messages
_BODY_PREVIEW_LIMIT = 200


class ProxyAPIError(RuntimeError):
    """Raised when a resource or feed request fails.

    Covers non-2xx responses, which carry the raw response body, and
    network-level failures, which carry no status code.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        """Initialise with a message, optional HTTP status code and body."""
        self.status_code = status_code
        self.body = body
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int, body: str) -> ProxyAPIError:
        """Return an error for non-2xx HTTP responses."""
        preview = body[:_BODY_PREVIEW_LIMIT]
        return cls(f"HTTP {status_code}: {preview}", status_code=status_code, body=body)

    @classmethod
    def network_error(cls, exc: BaseException) -> ProxyAPIError:
        """Return an error for transport failures such as timeouts."""
        return cls(f"Request failed before a response arrived: {exc}")


class ProxyResponseShapeError(RuntimeError):
    """Raised when a response body cannot be decoded into the expected shape."""

    @classmethod
    def invalid_json(cls, what: str, detail: object) -> ProxyResponseShapeError:
        """Return an error for a body that is not the expected JSON."""
        return cls(f"Response body for {what} is not valid JSON: {detail}")


class ProxyConfigError(RuntimeError):
    """Raised when client configuration is invalid."""

    @classmethod
    def missing_token(cls) -> ProxyConfigError:
        """Return an error when no API token is configured."""
        return cls("COURIER_API_TOKEN is required for the resource API")

    @classmethod
    def empty_token(cls) -> ProxyConfigError:
        """Return an error when the provided token is empty."""
        return cls("API token must be non-empty")

    @classmethod
    def invalid_timeout(cls, raw: str) -> ProxyConfigError:
        """Return an error for an unusable timeout value."""
        return cls(f"COURIER_TIMEOUT_S must be a positive number, got: {raw!r}")


class FilterError(ValueError):
    """Raised when a filter cannot be built from its entries."""

    @classmethod
    def blank_key(cls) -> FilterError:
        """Return an error for an empty or whitespace key."""
        return cls("Filter keys must be non-blank")

    @classmethod
    def blank_value(cls, key: str) -> FilterError:
        """Return an error for an empty value under ``key``."""
        return cls(f"Filter value for {key!r} must be non-blank")

    @classmethod
    def empty(cls, kind: str) -> FilterError:
        """Return an error for a filter with no entries."""
        return cls(f"Cannot build an empty {kind}")

    @classmethod
    def duplicate_key(cls, key: str) -> FilterError:
        """Return an error for a flat-map key that is already present."""
        return cls(f"Filter map already contains {key!r}")
