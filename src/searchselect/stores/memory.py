"""In-process data store adapter."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from searchselect import logger
from searchselect.typing.models import normalize_key

if TYPE_CHECKING:
    from pathlib import Path

    from searchselect.typing.models import FilterSpec
    from searchselect.typing.protocol import Record


class InMemoryStore(BaseModel):
    """Collections of records plus relationship pivots, held in memory.

    Searching mirrors a SQL `LIKE '%q%'` OR-combined across the filter columns.
    """

    model_config = ConfigDict(extra="forbid")

    collections: dict[str, list[dict[str, Any]]] = Field(default_factory=dict)
    pivots: dict[str, dict[str, list[str]]] = Field(default_factory=dict)
    key_attribute: str = "id"

    @classmethod
    def from_json(cls, path: Path) -> InMemoryStore:
        """Load a store from a JSON document.

        Args:
            path (Path): File with `collections` and optional `pivots`.

        Returns:
            InMemoryStore: Loaded store.
        """
        payload = json.loads(path.read_text(encoding="utf-8"))
        return cls.model_validate(payload)

    def _records(self, collection: str) -> list[dict[str, Any]]:
        return self.collections.setdefault(collection, [])

    def _key_of(self, record: Record) -> str:
        return normalize_key(record[self.key_attribute])

    def search(self, spec: FilterSpec) -> list[Record]:
        """Return records matching a filter.

        Args:
            spec (FilterSpec): Filter specification.

        Returns:
            list[Record]: Matching records, ordered and capped.
        """
        records = [
            record
            for record in self._records(spec.collection)
            if all(record.get(name) == expected for name, expected in spec.where.items())
        ]

        needle = spec.query.strip().casefold()
        if needle:
            records = [
                record
                for record in records
                if any(needle in str(record.get(column, "")).casefold() for column in spec.columns)
            ]

        if spec.order_by:
            column = spec.order_by.removeprefix("-")
            records = sorted(
                records,
                key=lambda record: str(record.get(column, "")).casefold(),
                reverse=spec.order_by.startswith("-"),
            )

        if spec.limit is not None:
            records = records[: spec.limit]
        return [dict(record) for record in records]

    def find_by_keys(self, collection: str, keys: list[str]) -> list[Record]:
        """Return records whose key is in `keys`."""
        wanted = set(keys)
        return [dict(record) for record in self._records(collection) if self._key_of(record) in wanted]

    def create(self, collection: str, data: dict[str, Any]) -> Record:
        """Insert a record, generating its key when absent.

        Args:
            collection (str): Target collection.
            data (dict[str, Any]): Record attributes.

        Returns:
            Record: Stored record.
        """
        records = self._records(collection)
        record = dict(data)
        if record.get(self.key_attribute) is None:
            record[self.key_attribute] = self._next_key(records)
        records.append(record)
        logger.debug("Record created", extra={"collection": collection, "key": self._key_of(record)})
        return dict(record)

    def update(self, collection: str, key: str, data: dict[str, Any]) -> Record:
        """Update attributes of an existing record.

        Args:
            collection (str): Target collection.
            key (str): Record key.
            data (dict[str, Any]): Attributes to change.

        Raises:
            KeyError: If no record has this key.

        Returns:
            Record: Updated record.
        """
        for record in self._records(collection):
            if self._key_of(record) == key:
                record.update({name: value for name, value in data.items() if name != self.key_attribute})
                return dict(record)
        raise KeyError(f"No record '{key}' in collection '{collection}'")

    def related(self, relation: str, owner_key: str) -> list[str]:
        """Return keys linked to an owner through a relation."""
        return list(self.pivots.get(relation, {}).get(owner_key, []))

    def attach(self, relation: str, owner_key: str, keys: list[str]) -> None:
        """Link keys to an owner, ignoring already linked ones."""
        linked = self.pivots.setdefault(relation, {}).setdefault(owner_key, [])
        linked.extend(key for key in keys if key not in linked)

    def detach(self, relation: str, owner_key: str, keys: list[str]) -> None:
        """Unlink keys from an owner."""
        removed = set(keys)
        linked = self.pivots.setdefault(relation, {}).setdefault(owner_key, [])
        linked[:] = [key for key in linked if key not in removed]

    def sync(self, relation: str, owner_key: str, keys: list[str]) -> None:
        """Make the owner's linked keys exactly `keys`."""
        current = self.related(relation, owner_key)
        self.detach(relation, owner_key, [key for key in current if key not in keys])
        self.attach(relation, owner_key, keys)

    def _next_key(self, records: list[dict[str, Any]]) -> str:
        keys = [self._key_of(record) for record in records]
        if all(key.isdigit() for key in keys):
            return str(max((int(key) for key in keys), default=0) + 1)
        return uuid4().hex
