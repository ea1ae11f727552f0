"""Project enums."""

from __future__ import annotations

from enum import StrEnum


class _EnumMixin(StrEnum):
    """Shared conversion helpers for user-facing enums."""

    @classmethod
    def from_str(cls, value: str) -> _EnumMixin:
        """Parse enum from string.

        Args:
            value: Raw string value.

        Raises:
            ValueError: If the value is not supported.

        Returns:
            _EnumMixin: Parsed enum value.
        """
        try:
            return cls(value)
        except ValueError as exc:
            supported = ", ".join(member.value for member in cls)
            message = f"Unsupported {cls.__name__} value '{value}'. Expected one of: {supported}"
            raise ValueError(message) from exc

    def to_str(self) -> str:
        """Return string representation.

        Returns:
            str: Enum string value.
        """
        return self.value


class SelectionMode(_EnumMixin):
    """Whether a field holds one key or a set of keys."""

    SINGLE = "single"
    MULTIPLE = "multiple"


class SearchStatus(_EnumMixin):
    """Lifecycle state of the current search session."""

    IDLE = "idle"
    DEBOUNCING = "debouncing"
    IN_FLIGHT = "in_flight"
    COMPLETED = "completed"
    ERRORED = "errored"


class LabelStatus(_EnumMixin):
    """Resolution state of a selected key's label."""

    RESOLVED = "resolved"
    PENDING = "pending"
    FAILED = "failed"


class SourceKind(_EnumMixin):
    """Option source variants."""

    STATIC = "static"
    QUERY = "query"
    RELATION = "relation"


class RelationKind(_EnumMixin):
    """Cardinality of a relationship-backed source."""

    BELONGS_TO = "belongs_to"
    BELONGS_TO_MANY = "belongs_to_many"


class ValidationRule(_EnumMixin):
    """Submit-time selection rules."""

    MIN_ITEMS = "min_items"
    MAX_ITEMS = "max_items"
    PLACEHOLDER = "placeholder"
    UNKNOWN_OPTION = "unknown_option"
