"""Selected keys of a field and their resolved labels."""

from __future__ import annotations

from typing import TYPE_CHECKING

from searchselect.typing.enums import SelectionMode
from searchselect.typing.models import normalize_key

if TYPE_CHECKING:
    from collections.abc import Iterable

    from searchselect.typing.models import OptionKey


class SelectionState:
    """Current value of a field.

    Single mode holds at most one key; multiple mode holds a set of keys kept
    in selection order for display. The label cache only ever contains
    currently selected keys. Size constraints are not enforced here.
    """

    def __init__(self, mode: SelectionMode) -> None:
        """Initialize an empty selection.

        Args:
            mode (SelectionMode): Single or multiple selection.
        """
        self._mode = mode
        self._keys: list[str] = []
        self._labels: dict[str, str] = {}

    @property
    def mode(self) -> SelectionMode:
        """Return selection mode."""
        return self._mode

    @property
    def is_multiple(self) -> bool:
        """Return whether several keys may be selected."""
        return self._mode == SelectionMode.MULTIPLE

    @property
    def keys(self) -> list[str]:
        """Return selected keys."""
        return list(self._keys)

    @property
    def value(self) -> str | list[str] | None:
        """Return the field value: one key (or None) in single mode, a list in multiple mode."""
        if self.is_multiple:
            return list(self._keys)
        return self._keys[0] if self._keys else None

    @property
    def label_cache(self) -> dict[str, str]:
        """Return a copy of the resolved labels."""
        return dict(self._labels)

    @property
    def unresolved_keys(self) -> list[str]:
        """Return selected keys whose label is not known yet."""
        return [key for key in self._keys if key not in self._labels]

    @property
    def is_empty(self) -> bool:
        """Return whether nothing is selected."""
        return not self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def label(self, key: str) -> str | None:
        """Return the cached label of a selected key."""
        return self._labels.get(key)

    def select(self, key: OptionKey, label: str | None = None) -> None:
        """Select a key, replacing the value in single mode.

        Args:
            key (OptionKey): Key to select.
            label (str | None): Label when already known.
        """
        normalized = normalize_key(key)
        if self.is_multiple:
            if normalized not in self._keys:
                self._keys.append(normalized)
        elif self._keys != [normalized]:
            self._labels.clear()
            self._keys = [normalized]
        if label is not None:
            self._labels[normalized] = label

    def deselect(self, key: OptionKey) -> None:
        """Remove a key and its label; in single mode this clears to the placeholder."""
        normalized = normalize_key(key)
        if normalized in self._keys:
            self._keys.remove(normalized)
        self._labels.pop(normalized, None)

    def clear(self) -> None:
        """Remove every key."""
        self._keys.clear()
        self._labels.clear()

    def replace(self, keys: Iterable[OptionKey]) -> None:
        """Replace the whole selection, keeping labels of keys that stay selected.

        Args:
            keys (Iterable[OptionKey]): New selection. Only the first key is kept in single mode.
        """
        normalized: list[str] = []
        for key in keys:
            candidate = normalize_key(key)
            if candidate not in normalized:
                normalized.append(candidate)
        if not self.is_multiple:
            normalized = normalized[:1]
        self._keys = normalized
        self._labels = {key: label for key, label in self._labels.items() if key in normalized}

    def set_label(self, key: str, label: str) -> bool:
        """Cache a resolved label.

        Labels arriving for keys deselected in the meantime are dropped.

        Args:
            key (str): Selected key.
            label (str): Resolved label.

        Returns:
            bool: True when the label was stored.
        """
        if key not in self._keys:
            return False
        self._labels[key] = label
        return True
