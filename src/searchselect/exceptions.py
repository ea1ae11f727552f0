"""Package exceptions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from searchselect.typing.models import ValidationViolation


class PackageError(Exception):
    """Root exception for the package."""


@dataclass(frozen=True)
class SettingsError(PackageError):
    """Raised when settings cannot be loaded or validated."""

    message: str = "Failed to load settings"
    exc: BaseException | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.exc}" if self.exc else self.message


@dataclass(frozen=True)
class AsyncExecutionError(PackageError):
    """Raised when an async operation fails in compatibility runner."""

    result: BaseException
    message: str = "Async operation failed"

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.result}"


@dataclass(frozen=True)
class ConfigurationError(PackageError):
    """Raised at setup time when a field or source is misconfigured."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class UnsupportedOperationError(PackageError):
    """Raised when an option source does not support the requested capability."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class SearchFailedError(PackageError):
    """Raised when a search callback or store query fails."""

    query: str
    cause: BaseException | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        base = f"Search failed for query '{self.query}'"
        return f"{base}: {self.cause}" if self.cause else base


@dataclass(frozen=True)
class LabelResolutionError(PackageError):
    """Raised when labels for selected keys cannot be fetched."""

    keys: tuple[str, ...]
    cause: BaseException | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        base = f"Label resolution failed for keys: {', '.join(self.keys)}"
        return f"{base}: {self.cause}" if self.cause else base


@dataclass(frozen=True)
class ValidationFailedError(PackageError):
    """Raised when a selection violates submit-time rules."""

    violations: list[ValidationViolation] = field(default_factory=list)

    @property
    def rules(self) -> list[str]:
        """Return violated rule names in evaluation order."""
        return [violation.rule.to_str() for violation in self.violations]

    def __str__(self) -> str:
        """Return error message payload."""
        return "; ".join(violation.message for violation in self.violations) or "Validation failed"


@dataclass(frozen=True)
class OptionFormError(PackageError):
    """Raised when create/edit option form data is incomplete."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class TransportError(PackageError):
    """Raised when a remote option endpoint call fails."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message
