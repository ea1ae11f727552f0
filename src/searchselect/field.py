"""Searchable select field: configuration checks and renderer event handling."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from searchselect import logger
from searchselect.controller import SearchController
from searchselect.exceptions import ConfigurationError, SearchFailedError, UnsupportedOperationError
from searchselect.resolver import OptionResolver
from searchselect.selection import SelectionState
from searchselect.sources.query import QuerySource
from searchselect.sources.relation import RelationSource
from searchselect.sources.static import StaticSource
from searchselect.typing.enums import RelationKind, SearchStatus
from searchselect.typing.models import RenderPayload, SelectConfig
from searchselect.validation import ValidationGate

if TYPE_CHECKING:
    from searchselect.sources.base import OptionSource
    from searchselect.typing.models import OptionEntry, OptionKey, SelectionView, ValidationViolation
    from searchselect.typing.protocol import DisableWhen


def _coerce_config(config: SelectConfig | dict[str, Any] | None) -> SelectConfig:
    """Build a field configuration, turning validation errors into setup errors.

    Args:
        config (SelectConfig | dict[str, Any] | None): Configuration or raw options.

    Raises:
        ConfigurationError: If the raw options are invalid.

    Returns:
        SelectConfig: Validated configuration.
    """
    if config is None:
        return SelectConfig()
    if isinstance(config, SelectConfig):
        return config
    try:
        return SelectConfig.model_validate(config)
    except ValidationError as exc:
        raise ConfigurationError(message=f"Invalid select configuration: {exc}") from exc


def _check_configuration(source: OptionSource, config: SelectConfig) -> OptionSource:  # noqa: C901
    """Validate source/config compatibility and apply column overrides.

    Args:
        source (OptionSource): Configured option source.
        config (SelectConfig): Field configuration.

    Raises:
        ConfigurationError: On any incompatible combination.

    Returns:
        OptionSource: Source to use, with `searchable` columns applied.
    """
    if config.min_items is not None and config.max_items is not None and config.min_items > config.max_items:
        raise ConfigurationError(message="min_items cannot exceed max_items")

    if config.search_columns and not isinstance(source, RelationSource):
        raise ConfigurationError(message="Search columns are only supported by relation sources")

    if isinstance(source, QuerySource):
        if config.multiple and not source.supports_batch_labels:
            raise ConfigurationError(message="A multiple select with custom search requires option_labels_using")
        if not config.multiple and not source.supports_single_label:
            raise ConfigurationError(message="A custom search requires option_label_using")

    if isinstance(source, RelationSource):
        kind = source.relation.kind
        if config.multiple and kind == RelationKind.BELONGS_TO:
            raise ConfigurationError(message=f"Relation '{source.relation.name}' is single-valued, multiple is set")
        if not config.multiple and kind == RelationKind.BELONGS_TO_MANY:
            raise ConfigurationError(message=f"Relation '{source.relation.name}' is many-valued, multiple is not set")
        if config.multiple and source.config.edit_form is not None:
            raise ConfigurationError(message="Editing options is only supported for single selects")
        if config.search_columns:
            return source.with_search_columns(config.search_columns)

    return source


def _as_keys(value: OptionKey | list[OptionKey] | tuple[OptionKey, ...] | set[OptionKey] | None) -> list[OptionKey]:
    if value is None:
        return []
    if isinstance(value, list | tuple | set | frozenset):
        return list(value)
    if isinstance(value, str) and not value:
        return []
    return [value]


class SearchableSelect:
    """Form field choosing one or many keys from a static, preloaded or searched option set."""

    def __init__(
        self,
        name: str,
        source: OptionSource,
        config: SelectConfig | dict[str, Any] | None = None,
        *,
        disable_option_when: DisableWhen | None = None,
    ) -> None:
        """Initialize field and fail fast on configuration mistakes.

        Args:
            name (str): Field name.
            source (OptionSource): Option source variant.
            config (SelectConfig | dict[str, Any] | None): Field configuration.
            disable_option_when (DisableWhen | None): Predicate marking keys as not newly selectable.
        """
        self.name = name
        self._config = _coerce_config(config)
        self._source = _check_configuration(source, self._config)
        self._disable_option_when = disable_option_when
        self._searchable = self._config.is_searchable or isinstance(self._source, QuerySource)
        self._gate = ValidationGate(
            self._config,
            known_keys=self._source.keys if isinstance(self._source, StaticSource) else None,
        )
        self._controller: SearchController | None = None
        self._state: SelectionState | None = None
        self._resolver: OptionResolver | None = None
        self._base_error: SearchFailedError | None = None

    @property
    def config(self) -> SelectConfig:
        """Return field configuration."""
        return self._config

    @property
    def source(self) -> OptionSource:
        """Return option source."""
        return self._source

    @property
    def is_searchable(self) -> bool:
        """Return whether keystrokes trigger searches."""
        return self._searchable

    @property
    def is_attached(self) -> bool:
        """Return whether the field currently holds a selection state."""
        return self._state is not None

    @property
    def controller(self) -> SearchController | None:
        """Return search controller, None when detached or not searchable."""
        return self._controller

    @property
    def state(self) -> SelectionState:
        """Return selection state."""
        return self._require_attached()[0]

    async def attach(self, value: OptionKey | list[OptionKey] | None = None) -> None:
        """Attach the field to a value: build state, hydrate labels and load base options.

        Args:
            value (OptionKey | list[OptionKey] | None): Stored value; the configured default when None.
        """
        if self._state is not None:
            self.detach()

        self._state = SelectionState(self._config.mode)
        if self._searchable:
            self._controller = SearchController(
                self._source,
                limit=self._config.options_limit,
                debounce_seconds=0.0 if isinstance(self._source, StaticSource) else self._config.debounce_seconds,
                cache_size=self._config.search_cache_size,
                name=self.name,
            )
        self._resolver = OptionResolver(
            self._source,
            self._state,
            controller=self._controller,
            disable_option_when=self._disable_option_when,
        )

        initial = value if value is not None else self._config.default
        keys = _as_keys(initial)
        with structlog.contextvars.bound_contextvars(field=self.name):
            if keys:
                await self._resolver.hydrate(keys)
            await self._load_base_options()
            logger.debug("Field attached", extra={"selected": len(self._state)})

    def detach(self) -> None:
        """Drop the selection state and stop pending searches."""
        if self._controller is not None:
            self._controller.close()
        self._controller = None
        self._state = None
        self._resolver = None
        self._base_error = None

    def keystroke(self, text: str) -> None:
        """Handle a change of the search input."""
        self._require_attached()
        if self._controller is None:
            logger.debug("Ignoring keystroke on non-searchable field", extra={"field": self.name})
            return
        self._controller.keystroke(text)

    async def search(self, query: str) -> list[OptionEntry]:
        """Run a search immediately and return the resulting candidates.

        Args:
            query (str): Search text.

        Returns:
            list[OptionEntry]: Candidates after the search settled.
        """
        self.keystroke(query)
        if self._controller is not None:
            await self._controller.flush()
            await self._controller.wait_idle()
        return self.candidates()

    async def select(self, key: OptionKey) -> bool:
        """Handle the user picking an option.

        Args:
            key (OptionKey): Picked key.

        Returns:
            bool: False when the option is disabled.
        """
        state, resolver = self._require_attached()
        selected = resolver.select(key)
        if selected and state.unresolved_keys:
            await resolver.resolve_missing_labels()
        return selected

    def deselect(self, key: OptionKey) -> None:
        """Handle the user removing an option; single selects fall back to the placeholder."""
        _, resolver = self._require_attached()
        resolver.deselect(key)

    async def focus(self) -> None:
        """Retry pending label resolutions and failed preloads."""
        _, resolver = self._require_attached()
        await resolver.resolve_missing_labels()
        if self._base_error is not None:
            await self._load_base_options()

    async def submit_create_form(self, data: dict[str, Any]) -> OptionEntry:
        """Create a related record and select it.

        Args:
            data (dict[str, Any]): Create-form payload.

        Raises:
            ConfigurationError: If the source cannot create options.

        Returns:
            OptionEntry: Created option.
        """
        state, resolver = self._require_attached()
        if not isinstance(self._source, RelationSource):
            raise ConfigurationError(message="Creating options requires a relation source")
        entry = await self._source.create_option(data)
        if self._controller is not None:
            self._controller.clear_cache()
        resolver.add_base_option(entry)
        state.select(entry.key, label=entry.label)
        return entry

    async def submit_edit_form(self, data: dict[str, Any]) -> OptionEntry:
        """Update the selected related record and refresh its label.

        Args:
            data (dict[str, Any]): Edit-form payload.

        Raises:
            ConfigurationError: If the source cannot edit options.
            UnsupportedOperationError: If nothing is selected.

        Returns:
            OptionEntry: Updated option.
        """
        state, resolver = self._require_attached()
        if not isinstance(self._source, RelationSource):
            raise ConfigurationError(message="Editing options requires a relation source")
        key = state.value
        if not isinstance(key, str):
            raise UnsupportedOperationError(message="No selected option to edit")
        entry = await self._source.update_option(key, data)
        if self._controller is not None:
            self._controller.clear_cache()
        resolver.add_base_option(entry)
        resolver.set_label(entry.key, entry.label)
        return entry

    def candidates(self) -> list[OptionEntry]:
        """Return the current candidate list."""
        _, resolver = self._require_attached()
        return resolver.candidates()

    def selection_view(self) -> SelectionView:
        """Return the selection as the renderer displays it."""
        _, resolver = self._require_attached()
        return resolver.selection_view()

    def render(self) -> RenderPayload:
        """Build the payload handed to the external renderer."""
        _, resolver = self._require_attached()
        config = self._config
        candidates = resolver.candidates()
        status = self._controller.status if self._controller is not None else SearchStatus.IDLE
        error = self._controller.error if self._controller is not None else None
        error = error or self._base_error

        message: str | None = None
        if status in {SearchStatus.DEBOUNCING, SearchStatus.IN_FLIGHT}:
            message = config.searching_message
        elif status == SearchStatus.COMPLETED and not candidates:
            message = config.no_search_results_message
        elif self._searchable and not candidates and error is None:
            message = config.search_prompt

        return RenderPayload(
            candidates=candidates,
            selection=resolver.selection_view(),
            status=status,
            error=str(error) if error is not None else None,
            message=message,
            placeholder=config.placeholder,
            loading_message=config.loading_message,
            searching_message=config.searching_message,
            no_results_message=config.no_search_results_message,
            search_prompt=config.search_prompt,
            disabled=config.disabled,
            allow_html=config.allow_html,
        )

    def dehydrate(self) -> str | list[str] | None:
        """Return the value to persist."""
        return self.state.value

    def check(self) -> list[ValidationViolation]:
        """Return submit-time rule violations."""
        return self._gate.check(self.state)

    def validate(self) -> None:
        """Raise `ValidationFailedError` when submit-time rules are violated."""
        self._gate.validate(self.state)

    async def settle(self) -> None:
        """Wait for pending searches, then resolve any missing labels."""
        _, resolver = self._require_attached()
        if self._controller is not None:
            await self._controller.wait_idle()
        await resolver.resolve_missing_labels()

    async def _load_base_options(self) -> None:
        if self._resolver is None or not self._source.supports_listing:
            return
        if isinstance(self._source, StaticSource):
            await self._resolver.load_base_options()
            return
        if not (self._config.preload or not self._searchable):
            return
        try:
            await self._resolver.load_base_options(self._config.options_limit)
        except SearchFailedError as exc:
            self._base_error = exc
            logger.warning("Preloading options failed", extra={"field": self.name, "error": str(exc)})
        else:
            self._base_error = None

    def _require_attached(self) -> tuple[SelectionState, OptionResolver]:
        if self._state is None or self._resolver is None:
            raise UnsupportedOperationError(message=f"Field '{self.name}' is not attached to a value")
        return self._state, self._resolver
