"""Option source interface shared by every variant."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, ClassVar

from searchselect import logger
from searchselect.exceptions import UnsupportedOperationError
from searchselect.typing.models import OptionEntry, normalize_key

if TYPE_CHECKING:
    from collections.abc import Iterable

    from searchselect.typing.enums import SourceKind


class OptionSource(ABC):
    """Provider of the option universe of one field.

    A source is chosen when the field is built and never swapped afterwards.
    """

    kind: ClassVar[SourceKind]

    @property
    def supports_listing(self) -> bool:
        """Return whether `list_options` can enumerate the option set."""
        return False

    @property
    def supports_batch_labels(self) -> bool:
        """Return whether `resolve_labels` is available."""
        return True

    async def list_options(self, limit: int | None = None) -> list[OptionEntry]:
        """Return the full option set, capped at `limit`.

        Args:
            limit (int | None): Optional cap.

        Raises:
            UnsupportedOperationError: When the source cannot enumerate options.
        """
        raise UnsupportedOperationError(message=f"{type(self).__name__} cannot list its options")

    @abstractmethod
    async def search(self, query: str, limit: int) -> list[OptionEntry]:
        """Return at most `limit` entries matching `query`, in relevance order."""

    @abstractmethod
    async def resolve_label(self, key: str) -> str | None:
        """Return the label of `key`, or None when the key is unknown."""

    @abstractmethod
    async def resolve_labels(self, keys: list[str]) -> dict[str, str]:
        """Return labels for `keys`; unknown keys are omitted."""


def coerce_entries(results: Any) -> list[OptionEntry]:
    """Normalize callback results into option entries.

    Args:
        results (Any): Mapping of key to label, entries, or `(key, label)` pairs.

    Raises:
        TypeError: If an item has an unsupported shape.

    Returns:
        list[OptionEntry]: Entries in the callback's order.
    """
    if results is None:
        return []
    if isinstance(results, Mapping):
        return [OptionEntry(key=key, label=str(label)) for key, label in results.items()]

    entries: list[OptionEntry] = []
    for item in results:
        if isinstance(item, OptionEntry):
            entries.append(item)
        elif isinstance(item, tuple) and len(item) == 2:  # noqa: PLR2004
            entries.append(OptionEntry(key=item[0], label=str(item[1])))
        else:
            raise TypeError(f"Unsupported search result item: {item!r}")  # noqa: TRY003
    return entries


def coerce_labels(results: Mapping[Any, Any] | None) -> dict[str, str]:
    """Normalize a key-to-label mapping.

    Args:
        results (Mapping[Any, Any] | None): Raw mapping returned by a callback.

    Returns:
        dict[str, str]: Mapping keyed by canonical keys, None labels dropped.
    """
    if not results:
        return {}
    return {normalize_key(key): str(label) for key, label in results.items() if label is not None}


def cap_entries(entries: Iterable[OptionEntry], limit: int | None, *, source: str) -> list[OptionEntry]:
    """Truncate entries to `limit`, preserving order.

    Args:
        entries (Iterable[OptionEntry]): Entries to cap.
        limit (int | None): Maximum entry count; None keeps everything.
        source (str): Source name used in the log record.

    Returns:
        list[OptionEntry]: Capped entries.
    """
    capped = list(entries)
    if limit is None or len(capped) <= limit:
        return capped
    logger.debug(
        "Truncated search results to options limit",
        extra={"source": source, "received": len(capped), "limit": limit},
    )
    return capped[:limit]
