"""Relationship-backed option source."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from searchselect import logger
from searchselect.async_runner import maybe_await
from searchselect.exceptions import (
    ConfigurationError,
    LabelResolutionError,
    OptionFormError,
    SearchFailedError,
)
from searchselect.sources.base import OptionSource, cap_entries
from searchselect.typing.enums import SourceKind
from searchselect.typing.models import FilterSpec, OptionEntry, OptionSourceConfig, normalize_key

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from searchselect.typing.models import OptionFormSpec, RelationConfig
    from searchselect.typing.protocol import DataStoreAdapter, QueryModifier, Record, RecordLabelCallback

    CreateCallback = Callable[[dict[str, Any]], "Record | Awaitable[Record]"]
    UpdateCallback = Callable[[str, dict[str, Any]], "Record | Awaitable[Record]"]


class RelationSource(OptionSource):
    """Options drawn from the target collection of a relationship."""

    kind: ClassVar[SourceKind] = SourceKind.RELATION

    def __init__(  # noqa: PLR0913
        self,
        store: DataStoreAdapter,
        relation: RelationConfig,
        config: OptionSourceConfig | None = None,
        *,
        modify_query: QueryModifier | None = None,
        label_from_record: RecordLabelCallback | None = None,
        create_option_using: CreateCallback | None = None,
        update_option_using: UpdateCallback | None = None,
    ) -> None:
        """Initialize source.

        Args:
            store (DataStoreAdapter): Backing store adapter.
            relation (RelationConfig): Relationship descriptor.
            config (OptionSourceConfig | None): Search columns, ordering and sub-forms.
            modify_query (QueryModifier | None): Hook applied to every filter before the store sees it.
            label_from_record (RecordLabelCallback | None): Custom label builder.
            create_option_using (CreateCallback | None): Custom persistence for the create form.
            update_option_using (UpdateCallback | None): Custom persistence for the edit form.
        """
        self._store = store
        self._relation = relation
        self._config = config or OptionSourceConfig()
        self._modify_query = modify_query
        self._label_from_record = label_from_record
        self._create_option_using = create_option_using
        self._update_option_using = update_option_using

    @property
    def relation(self) -> RelationConfig:
        """Return relationship descriptor."""
        return self._relation

    @property
    def config(self) -> OptionSourceConfig:
        """Return source configuration."""
        return self._config

    @property
    def supports_listing(self) -> bool:
        """Return whether `list_options` can enumerate the option set."""
        return True

    @property
    def search_columns(self) -> tuple[str, ...]:
        """Return columns searched for a query."""
        return self._config.search_columns or (self._relation.title_attribute,)

    def with_search_columns(self, columns: tuple[str, ...]) -> RelationSource:
        """Return a copy of this source searching `columns`.

        Args:
            columns (tuple[str, ...]): Attributes to search.

        Returns:
            RelationSource: New source sharing store and callbacks.
        """
        return RelationSource(
            self._store,
            self._relation,
            self._config.model_copy(update={"search_columns": tuple(columns)}),
            modify_query=self._modify_query,
            label_from_record=self._label_from_record,
            create_option_using=self._create_option_using,
            update_option_using=self._update_option_using,
        )

    def build_filter(self, query: str, limit: int | None) -> FilterSpec:
        """Build the store filter for a query, applying the modification hook.

        Args:
            query (str): Search text, blank for "everything".
            limit (int | None): Result cap.

        Returns:
            FilterSpec: Filter handed to the store.
        """
        spec = FilterSpec(
            collection=self._relation.target,
            query=query.strip(),
            columns=self.search_columns,
            limit=limit,
            order_by=self._config.order_by,
        )
        if self._modify_query is not None:
            spec = self._modify_query(spec)
        return spec

    def entry_from_record(self, record: Record) -> OptionEntry:
        """Convert a store record into an option entry.

        Args:
            record (Record): Store record.

        Returns:
            OptionEntry: Entry keyed by the relation key attribute.
        """
        key = normalize_key(record[self._relation.key_attribute])
        if self._label_from_record is not None:
            label = self._label_from_record(record)
        else:
            label = record.get(self._relation.title_attribute)
        return OptionEntry(key=key, label="" if label is None else str(label))

    async def _fetch(self, query: str, limit: int | None) -> list[OptionEntry]:
        try:
            spec = self.build_filter(query, limit)
            records = await maybe_await(self._store.search(spec))
            entries = [self.entry_from_record(record) for record in records]
        except Exception as exc:
            logger.warning(
                "Relation search failed",
                extra={"relation": self._relation.name, "query": query, "error": str(exc)},
            )
            raise SearchFailedError(query=query, cause=exc) from exc
        return cap_entries(entries, limit, source="relation")

    async def list_options(self, limit: int | None = None) -> list[OptionEntry]:
        return await self._fetch("", limit)

    async def search(self, query: str, limit: int) -> list[OptionEntry]:
        return await self._fetch(query, limit)

    async def resolve_label(self, key: str) -> str | None:
        return (await self.resolve_labels([key])).get(key)

    async def resolve_labels(self, keys: list[str]) -> dict[str, str]:
        if not keys:
            return {}
        wanted = set(keys)
        labels: dict[str, str] = {}
        try:
            records = await maybe_await(self._store.find_by_keys(self._relation.target, list(keys)))
            for record in records:
                entry = self.entry_from_record(record)
                if entry.key in wanted:
                    labels[entry.key] = entry.label
        except Exception as exc:
            raise LabelResolutionError(keys=tuple(keys), cause=exc) from exc
        return labels

    async def create_option(self, data: dict[str, Any]) -> OptionEntry:
        """Persist a new related record from create-form data.

        Args:
            data (dict[str, Any]): Submitted form data.

        Raises:
            ConfigurationError: If no create form is configured.

        Returns:
            OptionEntry: Entry for the created record.
        """
        form = self._config.create_form
        if form is None:
            raise ConfigurationError(message=f"Relation '{self._relation.name}' has no create option form")
        payload = _form_payload(form, data)
        if self._create_option_using is not None:
            record = await maybe_await(self._create_option_using(payload))
        else:
            record = await maybe_await(self._store.create(self._relation.target, payload))
        entry = self.entry_from_record(record)
        logger.info("Option created", extra={"relation": self._relation.name, "key": entry.key})
        return entry

    async def update_option(self, key: str, data: dict[str, Any]) -> OptionEntry:
        """Update a related record from edit-form data.

        Args:
            key (str): Key of the record being edited.
            data (dict[str, Any]): Submitted form data.

        Raises:
            ConfigurationError: If no edit form is configured.

        Returns:
            OptionEntry: Entry for the updated record.
        """
        form = self._config.edit_form
        if form is None:
            raise ConfigurationError(message=f"Relation '{self._relation.name}' has no edit option form")
        payload = _form_payload(form, data)
        if self._update_option_using is not None:
            record = await maybe_await(self._update_option_using(key, payload))
        else:
            record = await maybe_await(self._store.update(self._relation.target, key, payload))
        entry = self.entry_from_record(record)
        logger.info("Option updated", extra={"relation": self._relation.name, "key": entry.key})
        return entry

    async def attach(self, owner_key: str, keys: list[str]) -> None:
        """Link related keys to the owner record."""
        self._require_many("attach")
        await maybe_await(self._store.attach(self._relation.name, owner_key, list(keys)))

    async def detach(self, owner_key: str, keys: list[str]) -> None:
        """Unlink related keys from the owner record."""
        self._require_many("detach")
        await maybe_await(self._store.detach(self._relation.name, owner_key, list(keys)))

    async def sync(self, owner_key: str, keys: list[str]) -> None:
        """Make the owner's related keys exactly `keys`."""
        self._require_many("sync")
        await maybe_await(self._store.sync(self._relation.name, owner_key, list(keys)))
        logger.info(
            "Relation synced",
            extra={"relation": self._relation.name, "owner_key": owner_key, "count": len(keys)},
        )

    def _require_many(self, operation: str) -> None:
        if not self._relation.is_many:
            raise ConfigurationError(
                message=f"'{operation}' requires a many-valued relation, '{self._relation.name}' is single-valued",
            )


def _form_payload(form: OptionFormSpec, data: dict[str, Any]) -> dict[str, Any]:
    """Restrict submitted data to a form and enforce its required fields.

    Args:
        form (OptionFormSpec): Form descriptor.
        data (dict[str, Any]): Submitted data.

    Raises:
        OptionFormError: If required fields are missing.

    Returns:
        dict[str, Any]: Form payload.
    """
    payload = form.extract(data)
    missing = form.missing_required(payload)
    if missing:
        raise OptionFormError(message=f"Missing required option fields: {', '.join(missing)}")
    return payload
