"""Per-resource canonical version overrides used by reconciliation."""

from __future__ import annotations

import collections.abc as cabc

from .errors import SubscriptionConfigError

FULL_VERSION_TEMPLATE = "application/vnd.hedtech.integration.v{version}+json"


def full_version(token: str) -> str:
    """Expand an abbreviated version token into a full media type.

    Examples
    --------
    >>> full_version("16")
    'application/vnd.hedtech.integration.v16+json'
    >>> full_version("v12.3.0")
    'application/vnd.hedtech.integration.v12.3.0+json'

    """
    text = token.strip()
    if text[:1] in {"v", "V"}:
        text = text[1:]
    if not text:
        raise SubscriptionConfigError.blank_version(token)
    return FULL_VERSION_TEMPLATE.format(version=text)


def _require_name(resource_name: str | None) -> str:
    if resource_name is None or not resource_name.strip():
        raise SubscriptionConfigError.blank_resource_name()
    return resource_name.strip()


class VersionOverrideTable:
    """Case-insensitive mapping of resource name to canonical version.

    Re-adding a resource replaces its version and the stored spelling of its
    name.
    """

    def __init__(self, overrides: cabc.Mapping[str, str] | None = None) -> None:
        """Create a table, optionally seeded from ``overrides``."""
        self._entries: dict[str, tuple[str, str]] = {}
        for name, version in (overrides or {}).items():
            self.add(name, version)

    def add(self, resource_name: str, version: str) -> VersionOverrideTable:
        """Force ``resource_name`` to be reconciled to ``version``.

        Raises
        ------
        SubscriptionConfigError
            If either argument is blank.

        """
        name = _require_name(resource_name)
        if version is None or not version.strip():
            raise SubscriptionConfigError.blank_version(name)
        self._entries[name.casefold()] = (name, version.strip())
        return self

    def add_abbreviated(self, resource_name: str, token: str) -> VersionOverrideTable:
        """Add an override from a short token such as ``16`` or ``v12.3.0``."""
        name = _require_name(resource_name)
        if token is None or not token.strip():
            raise SubscriptionConfigError.blank_version(name)
        return self.add(name, full_version(token))

    def remove(self, resource_name: str) -> bool:
        """Drop the override for ``resource_name``; return whether one existed."""
        name = _require_name(resource_name)
        return self._entries.pop(name.casefold(), None) is not None

    def get(self, resource_name: str | None) -> str | None:
        """Return the override version for ``resource_name``, if any."""
        if resource_name is None:
            return None
        entry = self._entries.get(resource_name.strip().casefold())
        return None if entry is None else entry[1]

    def resources(self) -> list[str]:
        """Return overridden resource names in insertion order."""
        return [name for name, _ in self._entries.values()]

    def __len__(self) -> int:
        """Return the number of overrides."""
        return len(self._entries)

    def __contains__(self, resource_name: object) -> bool:
        """Return whether ``resource_name`` has an override."""
        if not isinstance(resource_name, str):
            return False
        return resource_name.strip().casefold() in self._entries
