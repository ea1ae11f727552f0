"""Candidate list and label resolution for a field."""

from __future__ import annotations

from typing import TYPE_CHECKING

from searchselect import logger
from searchselect.exceptions import LabelResolutionError
from searchselect.typing.enums import LabelStatus
from searchselect.typing.models import SelectedOption, SelectionView, normalize_key

if TYPE_CHECKING:
    from collections.abc import Iterable

    from searchselect.controller import SearchController
    from searchselect.selection import SelectionState
    from searchselect.sources.base import OptionSource
    from searchselect.typing.models import OptionEntry, OptionKey
    from searchselect.typing.protocol import DisableWhen


class OptionResolver:
    """Merge search results with the selection and keep selected labels resolved.

    Selection display never depends on the current candidate list: a selected
    key keeps its label even when the last search did not return it.
    """

    def __init__(
        self,
        source: OptionSource,
        state: SelectionState,
        *,
        controller: SearchController | None = None,
        disable_option_when: DisableWhen | None = None,
    ) -> None:
        """Initialize resolver.

        Args:
            source (OptionSource): Option universe.
            state (SelectionState): Selection being displayed.
            controller (SearchController | None): Search controller, None for non-searchable fields.
            disable_option_when (DisableWhen | None): Predicate marking keys as not selectable.
        """
        self._source = source
        self._state = state
        self._controller = controller
        self._disable_option_when = disable_option_when
        self._base_options: list[OptionEntry] = []
        self._failed: set[str] = set()
        self._resolving: set[str] = set()

    @property
    def state(self) -> SelectionState:
        """Return the selection state."""
        return self._state

    @property
    def base_options(self) -> list[OptionEntry]:
        """Return options shown when no search result applies."""
        return list(self._base_options)

    @property
    def failed_keys(self) -> set[str]:
        """Return selected keys whose last label resolution failed."""
        return set(self._failed)

    async def load_base_options(self, limit: int | None = None) -> list[OptionEntry]:
        """Load the option list displayed before any search.

        Args:
            limit (int | None): Optional cap.

        Returns:
            list[OptionEntry]: Loaded options.
        """
        self._base_options = await self._source.list_options(limit)
        for entry in self._base_options:
            if entry.key in self._state and self._state.label(entry.key) is None:
                self._state.set_label(entry.key, entry.label)
        return self.base_options

    def add_base_option(self, entry: OptionEntry) -> None:
        """Insert or refresh an entry of the base list."""
        for index, existing in enumerate(self._base_options):
            if existing.key == entry.key:
                self._base_options[index] = entry
                return
        self._base_options.append(entry)

    def is_disabled(self, key: str) -> bool:
        """Return whether a key cannot be newly selected."""
        return bool(self._disable_option_when and self._disable_option_when(key))

    def candidates(self, search_result: list[OptionEntry] | None = None) -> list[OptionEntry]:
        """Compute the renderable candidate list.

        Args:
            search_result (list[OptionEntry] | None): Explicit search result; defaults to the controller's.

        Returns:
            list[OptionEntry]: Candidates with disabled entries marked.
        """
        if search_result is None and self._controller is not None:
            search_result = self._controller.result
        entries = self._base_options if search_result is None else search_result
        return [self._mark_disabled(entry) for entry in entries]

    def find_entry(self, key: str) -> OptionEntry | None:
        """Return the displayed candidate or base entry for a key."""
        for entry in self.candidates():
            if entry.key == key:
                return entry
        for entry in self._base_options:
            if entry.key == key:
                return self._mark_disabled(entry)
        return None

    def select(self, key: OptionKey) -> bool:
        """Select a key, taking its label from the chosen entry when available.

        Args:
            key (OptionKey): Key picked by the user.

        Returns:
            bool: False when the key is disabled and was not selected.
        """
        normalized = normalize_key(key)
        if normalized in self._state:
            return True
        entry = self.find_entry(normalized)
        if (entry is not None and entry.disabled) or self.is_disabled(normalized):
            logger.info("Refused selection of disabled option", extra={"key": normalized})
            return False
        self._state.select(normalized, label=entry.label if entry else None)
        return True

    def deselect(self, key: OptionKey) -> None:
        """Remove a key and forget its label state."""
        normalized = normalize_key(key)
        self._state.deselect(normalized)
        self._failed.discard(normalized)

    def set_label(self, key: str, label: str) -> None:
        """Store a label learned outside resolution, e.g. after editing the option."""
        if self._state.set_label(key, label):
            self._failed.discard(key)

    async def hydrate(self, keys: Iterable[OptionKey]) -> dict[str, str]:
        """Replace the selection from a stored value and resolve its labels once.

        Args:
            keys (Iterable[OptionKey]): Stored keys.

        Returns:
            dict[str, str]: Labels resolved by this call.
        """
        self._state.replace(keys)
        self._failed.intersection_update(self._state.keys)
        return await self.resolve_missing_labels()

    async def resolve_missing_labels(self) -> dict[str, str]:
        """Resolve labels of selected keys that have none, including earlier failures.

        Single mode issues one `resolve_label` call, multiple mode one batched
        `resolve_labels` call for all missing keys. Unknown keys are labelled
        with their own key text.

        Returns:
            dict[str, str]: Labels resolved by this call.
        """
        missing = [key for key in self._state.unresolved_keys if key not in self._resolving]
        if not missing:
            return {}

        self._resolving.update(missing)
        try:
            labels = await self._fetch_labels(missing)
        except LabelResolutionError as exc:
            self._failed.update(key for key in missing if key in self._state)
            logger.warning("Label resolution failed", extra={"keys": missing, "error": str(exc)})
            return {}
        finally:
            self._resolving.difference_update(missing)

        resolved: dict[str, str] = {}
        for key in missing:
            label = labels.get(key, key)
            if self._state.set_label(key, label):
                resolved[key] = label
                self._failed.discard(key)
        return resolved

    async def _fetch_labels(self, keys: list[str]) -> dict[str, str]:
        if self._state.is_multiple:
            return await self._source.resolve_labels(keys)
        label = await self._source.resolve_label(keys[0])
        return {} if label is None else {keys[0]: label}

    def selection_view(self) -> SelectionView:
        """Project the selection with a label status for every key."""
        items: list[SelectedOption] = []
        for key in self._state.keys:
            label = self._state.label(key)
            if label is not None:
                status = LabelStatus.RESOLVED
            elif key in self._failed:
                status = LabelStatus.FAILED
            else:
                status = LabelStatus.PENDING
            items.append(SelectedOption(key=key, label=label, status=status))
        return SelectionView(mode=self._state.mode, items=items)

    def _mark_disabled(self, entry: OptionEntry) -> OptionEntry:
        if entry.disabled or not self.is_disabled(entry.key):
            return entry
        return entry.model_copy(update={"disabled": True})
