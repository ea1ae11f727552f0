"""Core domain model exports."""

from searchselect.typing.models.config import (
    DEFAULT_OPTIONS_LIMIT,
    DEFAULT_SEARCH_DEBOUNCE_MS,
    OptionFormSpec,
    OptionSourceConfig,
    RelationConfig,
    SelectConfig,
)
from searchselect.typing.models.option import OptionEntry, OptionKey, normalize_key
from searchselect.typing.models.render import (
    RenderPayload,
    SelectedOption,
    SelectionView,
    ValidationViolation,
)
from searchselect.typing.models.session import FilterSpec, SearchSession

__all__ = [
    "DEFAULT_OPTIONS_LIMIT",
    "DEFAULT_SEARCH_DEBOUNCE_MS",
    "FilterSpec",
    "OptionEntry",
    "OptionFormSpec",
    "OptionKey",
    "OptionSourceConfig",
    "RelationConfig",
    "RenderPayload",
    "SearchSession",
    "SelectConfig",
    "SelectedOption",
    "SelectionView",
    "ValidationViolation",
    "normalize_key",
]
