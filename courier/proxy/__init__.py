"""Resource API client, filter builders and the paging engine."""

from __future__ import annotations

from .client import DEFAULT_VERSION, ProxyClient, ResourceFetcher
from .config import ProxyClientConfig
from .errors import (
    FilterError,
    ProxyAPIError,
    ProxyConfigError,
    ProxyResponseShapeError,
)
from .filters import (
    CriteriaFilter,
    FilterEncoding,
    FilterMap,
    FilterPayload,
    NamedQueryFilter,
    QueryFilter,
)
from .paging import PagingEngine
from .response import ProxyResponse

__all__ = [
    "DEFAULT_VERSION",
    "CriteriaFilter",
    "FilterEncoding",
    "FilterError",
    "FilterMap",
    "FilterPayload",
    "NamedQueryFilter",
    "PagingEngine",
    "ProxyAPIError",
    "ProxyClient",
    "ProxyClientConfig",
    "ProxyConfigError",
    "ProxyResponse",
    "ProxyResponseShapeError",
    "QueryFilter",
    "ResourceFetcher",
]
