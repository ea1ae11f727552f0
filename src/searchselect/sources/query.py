"""Callback-driven option source over an external dataset."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from searchselect import logger
from searchselect.async_runner import maybe_await
from searchselect.exceptions import LabelResolutionError, SearchFailedError, UnsupportedOperationError
from searchselect.sources.base import OptionSource, cap_entries, coerce_entries, coerce_labels
from searchselect.typing.enums import SourceKind

if TYPE_CHECKING:
    from searchselect.typing.models import OptionEntry
    from searchselect.typing.protocol import LabelCallback, LabelsCallback, SearchCallback


class QuerySource(OptionSource):
    """Source whose search and label lookups are user-supplied callbacks.

    Results of `search_using` are trusted as-is: no filtering or sorting is
    applied, only truncation to the requested limit.
    """

    kind: ClassVar[SourceKind] = SourceKind.QUERY

    def __init__(
        self,
        search_using: SearchCallback,
        *,
        label_using: LabelCallback | None = None,
        labels_using: LabelsCallback | None = None,
    ) -> None:
        """Initialize source.

        Args:
            search_using (SearchCallback): `(query, limit)` search callback.
            label_using (LabelCallback | None): Single-key label callback.
            labels_using (LabelsCallback | None): Batched label callback.
        """
        self._search_using = search_using
        self._label_using = label_using
        self._labels_using = labels_using

    @property
    def supports_single_label(self) -> bool:
        """Return whether a single key can be resolved."""
        return self._label_using is not None or self._labels_using is not None

    @property
    def supports_batch_labels(self) -> bool:
        """Return whether `resolve_labels` is available."""
        return self._labels_using is not None

    async def search(self, query: str, limit: int) -> list[OptionEntry]:
        try:
            raw = await maybe_await(self._search_using(query, limit))
            entries = coerce_entries(raw)
        except Exception as exc:
            logger.warning("Search callback failed", extra={"query": query, "error": str(exc)})
            raise SearchFailedError(query=query, cause=exc) from exc
        return cap_entries(entries, limit, source="query")

    async def resolve_label(self, key: str) -> str | None:
        if self._label_using is None:
            return (await self.resolve_labels([key])).get(key)
        try:
            label = await maybe_await(self._label_using(key))
        except Exception as exc:
            raise LabelResolutionError(keys=(key,), cause=exc) from exc
        return None if label is None else str(label)

    async def resolve_labels(self, keys: list[str]) -> dict[str, str]:
        if self._labels_using is None:
            raise UnsupportedOperationError(message="QuerySource has no batched label callback")
        if not keys:
            return {}
        try:
            raw = await maybe_await(self._labels_using(list(keys)))
            return coerce_labels(raw)
        except Exception as exc:
            raise LabelResolutionError(keys=tuple(keys), cause=exc) from exc
