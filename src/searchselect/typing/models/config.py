"""Field and source configuration models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from searchselect.typing.enums import RelationKind, SelectionMode
from searchselect.typing.models.option import OptionKey, normalize_key

DEFAULT_OPTIONS_LIMIT = 50
DEFAULT_SEARCH_DEBOUNCE_MS = 1000


class OptionFormSpec(BaseModel):
    """Descriptor of a create/edit option sub-form."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    fields: tuple[str, ...]
    required: tuple[str, ...] = ()

    def extract(self, data: dict[str, Any]) -> dict[str, Any]:
        """Keep only the form's fields from submitted data.

        Args:
            data (dict[str, Any]): Raw submitted payload.

        Returns:
            dict[str, Any]: Payload restricted to declared fields.
        """
        return {name: data[name] for name in self.fields if name in data}

    def missing_required(self, data: dict[str, Any]) -> list[str]:
        """Return required fields that are absent or blank.

        Args:
            data (dict[str, Any]): Submitted payload.

        Returns:
            list[str]: Missing field names.
        """
        missing: list[str] = []
        for name in self.required:
            value = data.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)
        return missing


class OptionSourceConfig(BaseModel):
    """Immutable query shape of a store-backed source."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    search_columns: tuple[str, ...] = ()
    order_by: str | None = None
    create_form: OptionFormSpec | None = None
    edit_form: OptionFormSpec | None = None


class RelationConfig(BaseModel):
    """Foreign-entity relationship backing a field."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    target: str
    title_attribute: str
    kind: RelationKind = RelationKind.BELONGS_TO
    key_attribute: str = "id"

    @property
    def is_many(self) -> bool:
        """Return whether the relationship holds several related keys."""
        return self.kind == RelationKind.BELONGS_TO_MANY


class SelectConfig(BaseModel):
    """Configuration surface of a searchable select field."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    multiple: bool = False
    searchable: bool | tuple[str, ...] = False
    preload: bool = False
    allow_html: bool = False
    disabled: bool = False
    options_limit: int = Field(default=DEFAULT_OPTIONS_LIMIT, ge=1)
    search_debounce_ms: int = Field(default=DEFAULT_SEARCH_DEBOUNCE_MS, ge=0)
    search_cache_size: int = Field(default=32, ge=0)
    min_items: int | None = Field(default=None, ge=0)
    max_items: int | None = Field(default=None, ge=0)
    disable_placeholder_selection: bool = False
    default: OptionKey | list[OptionKey] | None = None

    placeholder: str = "Select an option"
    loading_message: str = "Loading..."
    no_search_results_message: str = "No options match your search."
    searching_message: str = "Searching..."
    search_prompt: str = "Start typing to search..."

    @field_validator("default", mode="before")
    @classmethod
    def _normalize_default(cls, value: Any) -> str | list[str] | None:
        """Normalize default keys to their canonical string form.

        Args:
            value (Any): Raw default value.

        Returns:
            str | list[str] | None: Canonical default.
        """
        if value is None:
            return None
        if isinstance(value, list | tuple):
            return [normalize_key(key) for key in value]
        return normalize_key(value)

    @property
    def mode(self) -> SelectionMode:
        """Return selection mode."""
        return SelectionMode.MULTIPLE if self.multiple else SelectionMode.SINGLE

    @property
    def is_searchable(self) -> bool:
        """Return whether keystrokes trigger searches."""
        return bool(self.searchable)

    @property
    def search_columns(self) -> tuple[str, ...]:
        """Return explicit search columns, empty when `searchable` is a flag."""
        if isinstance(self.searchable, tuple):
            return self.searchable
        return ()

    @property
    def debounce_seconds(self) -> float:
        """Return debounce duration in seconds."""
        return self.search_debounce_ms / 1000
