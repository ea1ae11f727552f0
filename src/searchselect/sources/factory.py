"""Build an option source from closure-style configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from searchselect.exceptions import ConfigurationError
from searchselect.sources.query import QuerySource
from searchselect.sources.relation import RelationSource
from searchselect.sources.static import StaticSource

if TYPE_CHECKING:
    from collections.abc import Mapping

    from searchselect.sources.base import OptionSource
    from searchselect.typing.models import OptionSourceConfig, RelationConfig
    from searchselect.typing.protocol import (
        DataStoreAdapter,
        LabelCallback,
        LabelsCallback,
        QueryModifier,
        RecordLabelCallback,
        SearchCallback,
    )


def build_source(  # noqa: PLR0913
    *,
    options: Mapping[Any, str] | None = None,
    search_results_using: SearchCallback | None = None,
    option_label_using: LabelCallback | None = None,
    option_labels_using: LabelsCallback | None = None,
    relation: RelationConfig | None = None,
    store: DataStoreAdapter | None = None,
    source_config: OptionSourceConfig | None = None,
    modify_query: QueryModifier | None = None,
    label_from_record: RecordLabelCallback | None = None,
) -> OptionSource:
    """Select the option source variant matching the supplied configuration.

    Exactly one of `options`, `search_results_using` or `relation` must be
    given; the combinations are mutually exclusive.

    Args:
        options (Mapping[Any, str] | None): Static key-to-label mapping.
        search_results_using (SearchCallback | None): Custom search callback.
        option_label_using (LabelCallback | None): Single label callback for custom search.
        option_labels_using (LabelsCallback | None): Batched label callback for custom search.
        relation (RelationConfig | None): Relationship descriptor.
        store (DataStoreAdapter | None): Store backing the relationship.
        source_config (OptionSourceConfig | None): Relationship search configuration.
        modify_query (QueryModifier | None): Relationship query hook.
        label_from_record (RecordLabelCallback | None): Relationship label builder.

    Raises:
        ConfigurationError: If the configuration is ambiguous or incomplete.

    Returns:
        OptionSource: Configured source.
    """
    configured = [
        name
        for name, value in (
            ("options", options),
            ("search_results_using", search_results_using),
            ("relation", relation),
        )
        if value is not None
    ]
    if len(configured) > 1:
        raise ConfigurationError(message=f"Option sources are mutually exclusive, got: {', '.join(configured)}")
    if not configured:
        raise ConfigurationError(message="One of options, search_results_using or relation is required")

    label_callbacks = option_label_using is not None or option_labels_using is not None
    if label_callbacks and search_results_using is None:
        raise ConfigurationError(message="Label callbacks are only used with search_results_using")

    if options is not None:
        return StaticSource(options)

    if search_results_using is not None:
        if not label_callbacks:
            raise ConfigurationError(
                message="search_results_using requires option_label_using or option_labels_using",
            )
        return QuerySource(
            search_results_using,
            label_using=option_label_using,
            labels_using=option_labels_using,
        )

    if store is None:
        raise ConfigurationError(message="A relation source requires a data store adapter")
    return RelationSource(
        store,
        relation,
        source_config,
        modify_query=modify_query,
        label_from_record=label_from_record,
    )
