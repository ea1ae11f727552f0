"""Form submission: validation, value encoding and relationship sync."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from searchselect import logger
from searchselect.exceptions import ConfigurationError
from searchselect.sources.relation import RelationSource
from searchselect.typing.models import normalize_key

if TYPE_CHECKING:
    from searchselect.field import SearchableSelect


class SubmittedSelection(BaseModel):
    """Outcome of submitting one select field."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    field: str
    value: str | list[str] | None
    encoded: str | None = None
    synced: bool = False


def encode_stored_value(value: str | list[str] | None) -> str | None:
    """Encode a field value for a text column; lists become JSON arrays.

    Args:
        value (str | list[str] | None): Dehydrated field value.

    Returns:
        str | None: Column payload.
    """
    if value is None:
        return None
    if isinstance(value, list):
        return json.dumps(value)
    return value


def decode_stored_value(raw: str | list[object] | None, *, multiple: bool) -> str | list[str] | None:
    """Decode a stored column value back into a field value.

    Args:
        raw (str | list[object] | None): Column payload or already-decoded list.
        multiple (bool): Whether the field holds several keys.

    Raises:
        ValueError: If a multiple value is not a JSON array.

    Returns:
        str | list[str] | None: Field value suitable for `SearchableSelect.attach`.
    """
    if raw is None or raw == "":
        return [] if multiple else None
    if not multiple:
        return normalize_key(raw) if isinstance(raw, str | int) else None

    items = raw
    if isinstance(raw, str):
        try:
            items = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Stored value is not a JSON array: {raw!r}") from exc  # noqa: TRY003
    if not isinstance(items, list):
        raise ValueError(f"Stored value is not a JSON array: {raw!r}")  # noqa: TRY003
    return [normalize_key(item) for item in items]


async def submit_selection(field: SearchableSelect, *, owner_key: str | None = None) -> SubmittedSelection:
    """Validate a field and persist its selection.

    Many-valued relationships are synchronized on the owner record here, at
    save time, never per selection. Other multiple values are JSON-encoded.

    Args:
        field (SearchableSelect): Attached field.
        owner_key (str | None): Key of the record owning the relationship.

    Raises:
        ConfigurationError: If a many-valued relation is submitted without owner key.

    Returns:
        SubmittedSelection: Submitted value.
    """
    field.validate()
    value = field.dehydrate()
    source = field.source

    if isinstance(source, RelationSource):
        if not source.relation.is_many:
            return SubmittedSelection(field=field.name, value=value)
        if owner_key is None:
            raise ConfigurationError(message=f"Submitting '{field.name}' requires the owner record key")
        keys = value if isinstance(value, list) else []
        await source.sync(owner_key, keys)
        return SubmittedSelection(field=field.name, value=value, synced=True)

    encoded = encode_stored_value(value)
    logger.debug("Selection submitted", extra={"field": field.name, "encoded": encoded})
    return SubmittedSelection(field=field.name, value=value, encoded=encoded)
