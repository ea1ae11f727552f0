"""Renderer-facing view models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from searchselect.typing.enums import LabelStatus, SearchStatus, SelectionMode, ValidationRule
from searchselect.typing.models.option import OptionEntry


class SelectedOption(BaseModel):
    """One selected key as the renderer should display it."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    key: str
    label: str | None = None
    status: LabelStatus = LabelStatus.RESOLVED


class SelectionView(BaseModel):
    """Read-only projection of the selection state."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    mode: SelectionMode
    items: list[SelectedOption] = Field(default_factory=list)

    @property
    def keys(self) -> list[str]:
        """Return selected keys."""
        return [item.key for item in self.items]

    def label_for(self, key: str) -> str | None:
        """Return the resolved label of a selected key.

        Args:
            key (str): Selected key.

        Returns:
            str | None: Label, or None when absent or still pending.
        """
        for item in self.items:
            if item.key == key:
                return item.label
        return None


class RenderPayload(BaseModel):
    """Everything the external renderer needs for one frame."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    candidates: list[OptionEntry]
    selection: SelectionView
    status: SearchStatus
    error: str | None = None
    message: str | None = None
    placeholder: str
    loading_message: str
    searching_message: str
    no_results_message: str
    search_prompt: str
    disabled: bool = False
    allow_html: bool = False


class ValidationViolation(BaseModel):
    """Single failed submit-time rule."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    rule: ValidationRule
    message: str
