"""Filter builders and their query-string encodings.

Three mutually exclusive filter styles are supported, each producing a
:class:`FilterPayload` tagged with its :class:`FilterEncoding`:

* criteria trees (``?criteria={...}``) built with :class:`CriteriaFilter`;
* named queries (``?<label>={...}``) built with :class:`NamedQueryFilter`;
* flat key/value maps (``?k=v&k2=v2``) built with :class:`FilterMap`.

Criteria and named-query payloads percent-encode their JSON value when the
payload is turned into a query string; the ``?<marker>=`` prefix is left as
is. Flat maps are sent verbatim.

Examples
--------
>>> CriteriaFilter().with_simple_criteria("lastName", "Smith").build().encode()
'?criteria=%7B%22lastName%22%3A%22Smith%22%7D'
>>> FilterMap().with_parameter_pair("firstName", "John").build().encode()
'?firstName=John'

"""

from __future__ import annotations

import dataclasses
import enum
import typing as typ
from urllib.parse import quote

import msgspec

from .errors import FilterError

CRITERIA_PREFIX = "?criteria="

type FilterScalar = str | int | float | bool
type FilterValue = (
    FilterScalar | list[FilterValue] | dict[str, FilterValue] | CriteriaFilter
)


class FilterEncoding(enum.StrEnum):
    """How a filter payload is carried in the request URL."""

    CRITERIA = "criteria"
    NAMED_QUERY = "named_query"
    FLAT_MAP = "flat_map"


@dataclasses.dataclass(frozen=True, slots=True)
class FilterPayload:
    """An already-built filter and the encoding rules that apply to it.

    Attributes
    ----------
    encoding
        Which of the three filter styles ``raw`` is written in.
    raw
        Unencoded query text, e.g. ``?criteria={"lastName":"Smith"}``.

    """

    encoding: FilterEncoding
    raw: str

    @classmethod
    def criteria(cls, document: str) -> FilterPayload:
        """Wrap a criteria JSON document, with or without its ``?criteria=`` marker."""
        text = document.strip()
        if not text.startswith(CRITERIA_PREFIX):
            text = f"{CRITERIA_PREFIX}{text}"
        return cls(FilterEncoding.CRITERIA, text)

    @classmethod
    def named_query(cls, label: str, document: str) -> FilterPayload:
        """Wrap a named-query JSON document under ``label``."""
        if not label.strip():
            raise FilterError.blank_key()
        return cls(FilterEncoding.NAMED_QUERY, f"?{label.strip()}={document.strip()}")

    @classmethod
    def flat_map(cls, pairs: typ.Mapping[str, str]) -> FilterPayload:
        """Wrap plain query parameters."""
        filter_map = FilterMap()
        for key, value in pairs.items():
            filter_map.with_parameter_pair(key, value)
        return filter_map.build()

    def encode(self) -> str:
        """Return the query string to append to the resource URL."""
        if self.encoding is FilterEncoding.FLAT_MAP:
            return self.raw
        marker, separator, value = self.raw.partition("=")
        if not separator:
            return quote(self.raw, safe="")
        return f"{marker}={quote(value, safe='')}"


def _unwrap(value: FilterValue) -> typ.Any:  # noqa: ANN401 - JSON-shaped tree
    if isinstance(value, CriteriaFilter):
        return value.as_dict()
    if isinstance(value, list):
        return [_unwrap(item) for item in value]
    if isinstance(value, dict):
        return {key: _unwrap(item) for key, item in value.items()}
    return value


def _validate_tree(tree: typ.Mapping[str, typ.Any]) -> None:
    for key, value in tree.items():
        if not isinstance(key, str) or not key.strip():
            raise FilterError.blank_key()
        _validate_value(key, value)


def _validate_value(key: str, value: object) -> None:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise FilterError.blank_value(key)
    if isinstance(value, dict):
        if not value:
            raise FilterError.blank_value(key)
        _validate_tree(typ.cast("dict[str, typ.Any]", value))
    elif isinstance(value, list):
        for item in value:
            _validate_value(key, item)


def _dump(tree: object) -> str:
    return msgspec.json.encode(tree).decode("utf-8")


class CriteriaFilter:
    """Builder for nested criteria trees.

    Entries keep insertion order. Adding a key that is already present leaves
    the first value in place.
    """

    def __init__(self) -> None:
        """Start with an empty tree."""
        self._tree: dict[str, typ.Any] = {}

    def with_simple_criteria(self, key: str, value: FilterValue) -> CriteriaFilter:
        """Add ``{key: value}`` at the top level."""
        self._tree.setdefault(key, _unwrap(value))
        return self

    def with_criteria_set(
        self, label: str, *pairs: tuple[str, FilterValue]
    ) -> CriteriaFilter:
        """Add ``{label: {k1: v1, k2: v2, ...}}``."""
        group: dict[str, typ.Any] = {}
        for key, value in pairs:
            group.setdefault(key, _unwrap(value))
        return self.with_simple_criteria(label, group)

    def with_array(self, label: str, *values: FilterValue) -> CriteriaFilter:
        """Add ``{label: [v1, v2, ...]}``."""
        return self.with_simple_criteria(label, [_unwrap(value) for value in values])

    def with_array_pairs(
        self, label: str, *pairs: tuple[str, FilterValue]
    ) -> CriteriaFilter:
        """Add ``{label: [{k1: v1}, {k2: v2}, ...]}``."""
        items = [{key: _unwrap(value)} for key, value in pairs]
        return self.with_simple_criteria(label, items)

    def nest(self, label: str) -> CriteriaFilter:
        """Return a new filter wrapping this tree as ``{label: {...}}``."""
        return CriteriaFilter().with_simple_criteria(label, self.as_dict())

    def as_dict(self) -> dict[str, typ.Any]:
        """Return a copy of the tree as plain JSON-compatible data."""
        return msgspec.json.decode(msgspec.json.encode(self._tree))

    def build(self) -> FilterPayload:
        """Validate the tree and return its ``?criteria=`` payload.

        Raises
        ------
        FilterError
            If the tree is empty or holds blank keys or values.

        """
        if not self._tree:
            raise FilterError.empty("criteria filter")
        _validate_tree(self._tree)
        return FilterPayload(
            FilterEncoding.CRITERIA, f"{CRITERIA_PREFIX}{_dump(self._tree)}"
        )


class NamedQueryFilter:
    """Builder for one named query such as ``?keywordSearch={"keywordSearch":"x"}``."""

    def __init__(self, label: str) -> None:
        """Create a named query with the given URL parameter name."""
        if not label.strip():
            raise FilterError.blank_key()
        self.label = label.strip()
        self._tree: dict[str, typ.Any] = {}

    def with_named_query(self, key: str, value: FilterValue) -> NamedQueryFilter:
        """Add ``{key: value}`` to the query document."""
        self._tree.setdefault(key, _unwrap(value))
        return self

    def with_named_query_set(
        self, key: str, *triples: tuple[str, str, FilterValue]
    ) -> NamedQueryFilter:
        """Add ``{key: [{label: {k: v}}, ...]}`` from ``(label, k, v)`` triples."""
        items = [{label: {inner: _unwrap(value)}} for label, inner, value in triples]
        return self.with_named_query(key, items)

    def build(self) -> FilterPayload:
        """Validate the query document and return its payload."""
        if not self._tree:
            raise FilterError.empty("named query")
        _validate_tree(self._tree)
        return FilterPayload(
            FilterEncoding.NAMED_QUERY, f"?{self.label}={_dump(self._tree)}"
        )


class FilterMap:
    """Builder for plain ``key=value`` query parameters."""

    def __init__(self) -> None:
        """Start with no parameters."""
        self._pairs: dict[str, str] = {}

    def with_parameter_pair(self, key: str, value: str) -> FilterMap:
        """Add one parameter; a repeated key raises :class:`FilterError`."""
        if not key.strip():
            raise FilterError.blank_key()
        if key in self._pairs:
            raise FilterError.duplicate_key(key)
        self._pairs[key] = value
        return self

    def keys(self) -> list[str]:
        """Return parameter names in insertion order."""
        return list(self._pairs)

    def get(self, key: str) -> str | None:
        """Return the value for ``key`` or ``None``."""
        return self._pairs.get(key)

    def build(self) -> FilterPayload:
        """Return the ``?k=v&k2=v2`` payload."""
        if not self._pairs:
            raise FilterError.empty("filter map")
        joined = "&".join(f"{key}={value}" for key, value in self._pairs.items())
        return FilterPayload(FilterEncoding.FLAT_MAP, f"?{joined}")


type QueryFilter = FilterPayload | CriteriaFilter | NamedQueryFilter | FilterMap


def as_payload(query_filter: QueryFilter | None) -> FilterPayload | None:
    """Normalise a builder or payload into a :class:`FilterPayload`."""
    if query_filter is None or isinstance(query_filter, FilterPayload):
        return query_filter
    return query_filter.build()


def encode_filter(query_filter: QueryFilter | None) -> str:
    """Return the encoded query string for ``query_filter``; empty for ``None``."""
    payload = as_payload(query_filter)
    return "" if payload is None else payload.encode()
