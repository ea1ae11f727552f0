"""Collaborator interfaces."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from searchselect.typing.models import FilterSpec, OptionEntry

Record = Mapping[str, Any]

SearchResults = Mapping[Any, str] | Iterable["OptionEntry | tuple[Any, str]"]
SearchCallback = Callable[[str, int], "SearchResults | Awaitable[SearchResults]"]
LabelCallback = Callable[[str], "str | None | Awaitable[str | None]"]
LabelsCallback = Callable[[list[str]], "Mapping[Any, str] | Awaitable[Mapping[Any, str]]"]
RecordLabelCallback = Callable[[Record], str]
QueryModifier = Callable[["FilterSpec"], "FilterSpec"]
DisableWhen = Callable[[str], bool]


class DataStoreAdapter(Protocol):
    """Backing store consumed by relationship sources.

    Every method may be implemented synchronously or as a coroutine.
    """

    def search(self, spec: FilterSpec) -> list[Record] | Awaitable[list[Record]]:
        """Return records of `spec.collection` matching the filter.

        Args:
            spec: Filter specification.

        Returns:
            list[Record]: Matching records, at most `spec.limit`.
        """

    def find_by_keys(self, collection: str, keys: list[str]) -> list[Record] | Awaitable[list[Record]]:
        """Return records whose key is in `keys`.

        Args:
            collection: Target collection.
            keys: Keys to look up.

        Returns:
            list[Record]: Found records; missing keys are simply absent.
        """

    def create(self, collection: str, data: dict[str, Any]) -> Record | Awaitable[Record]:
        """Persist a new record.

        Args:
            collection: Target collection.
            data: Record attributes.

        Returns:
            Record: Created record including its key.
        """

    def update(self, collection: str, key: str, data: dict[str, Any]) -> Record | Awaitable[Record]:
        """Update an existing record.

        Args:
            collection: Target collection.
            key: Record key.
            data: Attributes to change.

        Returns:
            Record: Updated record.
        """

    def attach(self, relation: str, owner_key: str, keys: list[str]) -> None | Awaitable[None]:
        """Link related keys to an owner."""

    def detach(self, relation: str, owner_key: str, keys: list[str]) -> None | Awaitable[None]:
        """Unlink related keys from an owner."""

    def sync(self, relation: str, owner_key: str, keys: list[str]) -> None | Awaitable[None]:
        """Make the owner's related keys exactly `keys`."""
