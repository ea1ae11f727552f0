"""Fixed key-to-label option source."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from searchselect.sources.base import OptionSource, cap_entries, coerce_entries
from searchselect.typing.enums import SourceKind

if TYPE_CHECKING:
    from collections.abc import Mapping

    from searchselect.typing.models import OptionEntry


class StaticSource(OptionSource):
    """Options known up front; searching filters labels in-process."""

    kind: ClassVar[SourceKind] = SourceKind.STATIC

    def __init__(self, options: Mapping[Any, str]) -> None:
        """Initialize source.

        Args:
            options (Mapping[Any, str]): Ordered key-to-label mapping.
        """
        self._entries = coerce_entries(options)
        self._labels = {entry.key: entry.label for entry in self._entries}

    @property
    def supports_listing(self) -> bool:
        """Return whether `list_options` can enumerate the option set."""
        return True

    @property
    def keys(self) -> frozenset[str]:
        """Return every known key."""
        return frozenset(self._labels)

    def __contains__(self, key: object) -> bool:
        return key in self._labels

    def __len__(self) -> int:
        return len(self._entries)

    async def list_options(self, limit: int | None = None) -> list[OptionEntry]:
        return cap_entries(self._entries, limit, source="static")

    async def search(self, query: str, limit: int) -> list[OptionEntry]:
        needle = query.strip().casefold()
        if not needle:
            return cap_entries(self._entries, limit, source="static")
        matches = (entry for entry in self._entries if needle in entry.label.casefold())
        return cap_entries(matches, limit, source="static")

    async def resolve_label(self, key: str) -> str | None:
        return self._labels.get(key)

    async def resolve_labels(self, keys: list[str]) -> dict[str, str]:
        return {key: self._labels[key] for key in keys if key in self._labels}
