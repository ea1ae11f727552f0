"""Typing-centric domain modules."""

from searchselect.typing.enums import (
    LabelStatus,
    RelationKind,
    SearchStatus,
    SelectionMode,
    SourceKind,
    ValidationRule,
)
from searchselect.typing.models import (
    FilterSpec,
    OptionEntry,
    OptionFormSpec,
    OptionSourceConfig,
    RelationConfig,
    RenderPayload,
    SearchSession,
    SelectConfig,
    SelectedOption,
    SelectionView,
    ValidationViolation,
)
from searchselect.typing.protocol import DataStoreAdapter, Record

__all__ = [
    "DataStoreAdapter",
    "FilterSpec",
    "LabelStatus",
    "OptionEntry",
    "OptionFormSpec",
    "OptionSourceConfig",
    "Record",
    "RelationConfig",
    "RelationKind",
    "RenderPayload",
    "SearchSession",
    "SearchStatus",
    "SelectConfig",
    "SelectedOption",
    "SelectionMode",
    "SelectionView",
    "SourceKind",
    "ValidationRule",
    "ValidationViolation",
]
