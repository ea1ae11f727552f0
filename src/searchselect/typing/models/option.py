"""Option-centric domain models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

OptionKey = str | int


def normalize_key(key: OptionKey) -> str:
    """Normalize an option key to its canonical string form.

    Args:
        key (OptionKey): Raw key from a store, callback or submitted form.

    Raises:
        ValueError: If the key is not a scalar string or integer.

    Returns:
        str: Canonical key.
    """
    if isinstance(key, bool) or not isinstance(key, str | int):
        raise ValueError(f"Option keys must be str or int, got {type(key).__name__}")  # noqa: TRY003
    return str(key)


class OptionEntry(BaseModel):
    """Single renderable option."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    key: str
    label: str
    disabled: bool = False

    @field_validator("key", mode="before")
    @classmethod
    def _normalize_key(cls, value: OptionKey) -> str:
        """Coerce integer keys to strings.

        Args:
            value (OptionKey): Raw key.

        Returns:
            str: Canonical key.
        """
        return normalize_key(value)
