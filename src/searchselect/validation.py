"""Submit-time selection rules."""

from __future__ import annotations

from typing import TYPE_CHECKING

from searchselect.exceptions import ValidationFailedError
from searchselect.typing.enums import ValidationRule
from searchselect.typing.models import ValidationViolation

if TYPE_CHECKING:
    from collections.abc import Collection

    from searchselect.selection import SelectionState
    from searchselect.typing.models import SelectConfig


class ValidationGate:
    """Check a selection against item-count, placeholder and membership rules.

    Rules only run at submission; the UI may violate them while editing.
    """

    def __init__(self, config: SelectConfig, *, known_keys: Collection[str] | None = None) -> None:
        """Initialize gate.

        Args:
            config (SelectConfig): Field configuration carrying the rules.
            known_keys (Collection[str] | None): Complete key set for static sources.
        """
        self._config = config
        self._known_keys = known_keys

    def check(self, state: SelectionState) -> list[ValidationViolation]:
        """Return every violated rule.

        Args:
            state (SelectionState): Selection to check.

        Returns:
            list[ValidationViolation]: Violations in evaluation order.
        """
        violations: list[ValidationViolation] = []
        config = self._config
        count = len(state)

        if state.is_multiple:
            if config.min_items is not None and count < config.min_items:
                violations.append(
                    ValidationViolation(
                        rule=ValidationRule.MIN_ITEMS,
                        message=f"Select at least {config.min_items} item(s), {count} selected",
                    ),
                )
            if config.max_items is not None and count > config.max_items:
                violations.append(
                    ValidationViolation(
                        rule=ValidationRule.MAX_ITEMS,
                        message=f"Select at most {config.max_items} item(s), {count} selected",
                    ),
                )
        elif config.disable_placeholder_selection and config.default is None and state.is_empty:
            violations.append(
                ValidationViolation(rule=ValidationRule.PLACEHOLDER, message="A selection is required"),
            )

        if self._known_keys is not None:
            unknown = [key for key in state.keys if key not in self._known_keys]
            if unknown:
                violations.append(
                    ValidationViolation(
                        rule=ValidationRule.UNKNOWN_OPTION,
                        message=f"Unknown option(s): {', '.join(unknown)}",
                    ),
                )
        return violations

    def validate(self, state: SelectionState) -> None:
        """Raise when any rule is violated.

        Args:
            state (SelectionState): Selection to check.

        Raises:
            ValidationFailedError: If at least one rule is violated.
        """
        violations = self.check(state)
        if violations:
            raise ValidationFailedError(violations=violations)
