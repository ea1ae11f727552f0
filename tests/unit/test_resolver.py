from __future__ import annotations

import asyncio

from searchselect.exceptions import LabelResolutionError
from searchselect.resolver import OptionResolver
from searchselect.selection import SelectionState
from searchselect.sources.base import OptionSource
from searchselect.sources.static import StaticSource
from searchselect.typing.enums import LabelStatus, SelectionMode
from searchselect.typing.models import OptionEntry


class _LabelSource(OptionSource):
    """Source counting label lookups."""

    def __init__(self, labels: dict[str, str]) -> None:
        self.labels = labels
        self.single_calls: list[str] = []
        self.batch_calls: list[list[str]] = []
        self.fail = False
        self.gate: asyncio.Event | None = None

    async def search(self, query: str, limit: int) -> list[OptionEntry]:
        return [OptionEntry(key=key, label=label) for key, label in self.labels.items() if query in label][:limit]

    async def resolve_label(self, key: str) -> str | None:
        self.single_calls.append(key)
        if self.fail:
            raise LabelResolutionError(keys=(key,))
        return self.labels.get(key)

    async def resolve_labels(self, keys: list[str]) -> dict[str, str]:
        self.batch_calls.append(list(keys))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise LabelResolutionError(keys=tuple(keys))
        return {key: self.labels[key] for key in keys if key in self.labels}


LABELS = {"1": "Ada", "2": "Alan", "3": "Grace", "4": "Barbara", "5": "Edsger"}


def test_hydrating_multiple_value_resolves_labels_in_one_batch() -> None:
    source = _LabelSource(LABELS)
    resolver = OptionResolver(source, SelectionState(SelectionMode.MULTIPLE))

    resolved = asyncio.run(resolver.hydrate(["1", "3", 5]))

    assert resolved == {"1": "Ada", "3": "Grace", "5": "Edsger"}
    assert source.batch_calls == [["1", "3", "5"]]
    assert source.single_calls == []


def test_hydrating_single_value_uses_single_lookup() -> None:
    source = _LabelSource(LABELS)
    resolver = OptionResolver(source, SelectionState(SelectionMode.SINGLE))

    asyncio.run(resolver.hydrate(["2"]))

    assert source.single_calls == ["2"]
    assert resolver.state.label("2") == "Alan"


def test_unknown_keys_are_labelled_with_their_key() -> None:
    resolver = OptionResolver(_LabelSource(LABELS), SelectionState(SelectionMode.MULTIPLE))

    asyncio.run(resolver.hydrate(["1", "99"]))

    assert resolver.selection_view().label_for("99") == "99"


def test_selected_label_survives_searches_that_omit_it() -> None:
    source = _LabelSource(LABELS)
    resolver = OptionResolver(source, SelectionState(SelectionMode.MULTIPLE))
    asyncio.run(resolver.hydrate(["3"]))

    search_result = asyncio.run(source.search("A", 10))
    candidates = resolver.candidates(search_result)

    assert "3" not in [entry.key for entry in candidates]
    assert resolver.selection_view().label_for("3") == "Grace"


def test_select_takes_label_from_candidate() -> None:
    resolver = OptionResolver(StaticSource(LABELS), SelectionState(SelectionMode.MULTIPLE))
    asyncio.run(resolver.load_base_options())

    assert resolver.select("4") is True
    assert resolver.state.label("4") == "Barbara"


def test_disabled_option_cannot_be_newly_selected() -> None:
    resolver = OptionResolver(
        StaticSource(LABELS),
        SelectionState(SelectionMode.MULTIPLE),
        disable_option_when=lambda key: key == "2",
    )
    asyncio.run(resolver.load_base_options())

    assert resolver.select("2") is False
    assert resolver.state.keys == []
    assert [entry.key for entry in resolver.candidates() if entry.disabled] == ["2"]


def test_previously_selected_disabled_key_stays_selected() -> None:
    resolver = OptionResolver(
        StaticSource(LABELS),
        SelectionState(SelectionMode.MULTIPLE),
        disable_option_when=lambda key: key == "2",
    )
    asyncio.run(resolver.hydrate(["2", "1"]))

    assert resolver.state.keys == ["2", "1"]
    assert resolver.select("2") is True
    assert resolver.selection_view().label_for("2") == "Alan"


def test_base_options_fill_missing_labels() -> None:
    source = StaticSource(LABELS)
    state = SelectionState(SelectionMode.SINGLE)
    state.select("5")
    resolver = OptionResolver(source, state)

    asyncio.run(resolver.load_base_options(limit=10))

    assert state.label("5") == "Edsger"
    assert len(resolver.base_options) == 5


def test_label_failure_keeps_key_and_is_retried() -> None:
    source = _LabelSource(LABELS)
    source.fail = True
    resolver = OptionResolver(source, SelectionState(SelectionMode.MULTIPLE))

    assert asyncio.run(resolver.hydrate(["1", "2"])) == {}
    view = resolver.selection_view()
    assert view.keys == ["1", "2"]
    assert [item.status for item in view.items] == [LabelStatus.FAILED, LabelStatus.FAILED]
    assert resolver.failed_keys == {"1", "2"}

    source.fail = False
    assert asyncio.run(resolver.resolve_missing_labels()) == {"1": "Ada", "2": "Alan"}
    assert resolver.failed_keys == set()
    assert len(source.batch_calls) == 2


def test_label_arriving_after_deselect_is_dropped() -> None:
    source = _LabelSource(LABELS)
    resolver = OptionResolver(source, SelectionState(SelectionMode.MULTIPLE))

    async def _scenario() -> dict[str, str]:
        source.gate = asyncio.Event()
        resolver.state.replace(["1", "2"])
        pending = asyncio.ensure_future(resolver.resolve_missing_labels())
        await asyncio.sleep(0)
        resolver.deselect("2")
        source.gate.set()
        return await pending

    resolved = asyncio.run(_scenario())

    assert resolved == {"1": "Ada"}
    assert resolver.state.label_cache == {"1": "Ada"}


def test_pending_labels_are_reported_before_resolution() -> None:
    resolver = OptionResolver(_LabelSource(LABELS), SelectionState(SelectionMode.MULTIPLE))
    resolver.state.replace(["1"])

    view = resolver.selection_view()

    assert view.items[0].status is LabelStatus.PENDING
    assert view.items[0].label is None


def test_set_label_refreshes_resolved_label() -> None:
    resolver = OptionResolver(_LabelSource(LABELS), SelectionState(SelectionMode.SINGLE))
    asyncio.run(resolver.hydrate(["1"]))

    resolver.set_label("1", "Ada King")
    resolver.add_base_option(OptionEntry(key="1", label="Ada King"))

    assert resolver.selection_view().label_for("1") == "Ada King"
    assert resolver.base_options == [OptionEntry(key="1", label="Ada King")]
