from __future__ import annotations

import asyncio

from searchselect.controller import SearchController
from searchselect.exceptions import SearchFailedError
from searchselect.sources.base import OptionSource
from searchselect.typing.enums import SearchStatus
from searchselect.typing.models import OptionEntry


class _RecordingSource(OptionSource):
    """Source returning one entry per query and recording calls."""

    def __init__(self, *, total: int = 1) -> None:
        self.calls: list[tuple[str, int]] = []
        self.total = total
        self.gates: dict[str, asyncio.Event] = {}
        self.failing: set[str] = set()
        self.crashing: set[str] = set()

    async def search(self, query: str, limit: int) -> list[OptionEntry]:
        self.calls.append((query, limit))
        gate = self.gates.get(query)
        if gate is not None:
            await gate.wait()
        if query in self.failing:
            raise SearchFailedError(query=query)
        if query in self.crashing:
            raise RuntimeError("index corrupted")
        return [OptionEntry(key=f"{query}-{index}", label=query) for index in range(self.total)]

    async def resolve_label(self, key: str) -> str | None:
        return None

    async def resolve_labels(self, keys: list[str]) -> dict[str, str]:
        return {}


def test_burst_of_keystrokes_issues_one_search_with_final_query() -> None:
    source = _RecordingSource()

    async def _scenario() -> SearchController:
        controller = SearchController(source, debounce_seconds=0.05)
        for query in ("a", "al", "ali", "alic"):
            controller.keystroke(query)
            await asyncio.sleep(0.01)
        assert controller.status is SearchStatus.DEBOUNCING
        await controller.wait_idle()
        return controller

    controller = asyncio.run(_scenario())

    assert source.calls == [("alic", 50)]
    assert controller.status is SearchStatus.COMPLETED
    assert controller.last_request_id == 1
    assert [entry.key for entry in controller.result] == ["alic-0"]


def _race(first_to_finish: str) -> tuple[SearchController, list[OptionEntry] | None]:
    source = _RecordingSource()

    async def _scenario() -> tuple[SearchController, list[OptionEntry] | None]:
        source.gates = {"a": asyncio.Event(), "ab": asyncio.Event()}
        controller = SearchController(source, debounce_seconds=0)

        controller.keystroke("a")
        assert await controller.flush() == 1
        controller.keystroke("ab")
        assert await controller.flush() == 2
        await asyncio.sleep(0)

        source.gates[first_to_finish].set()
        await asyncio.sleep(0.01)
        intermediate = controller.result
        for gate in source.gates.values():
            gate.set()
        await controller.wait_idle()
        return controller, intermediate

    return asyncio.run(_scenario())


def test_newest_result_wins_when_it_arrives_first() -> None:
    controller, intermediate = _race("ab")

    assert [entry.label for entry in intermediate] == ["ab"]
    assert [entry.label for entry in controller.result] == ["ab"]
    assert controller.session.request_id == 2


def test_stale_result_is_discarded_when_it_arrives_first() -> None:
    controller, intermediate = _race("a")

    assert intermediate is None
    assert [entry.label for entry in controller.result] == ["ab"]
    assert controller.status is SearchStatus.COMPLETED


def test_results_are_truncated_to_limit() -> None:
    source = _RecordingSource(total=80)

    async def _scenario() -> SearchController:
        controller = SearchController(source, limit=50, debounce_seconds=0)
        controller.keystroke("x")
        await controller.flush()
        await controller.wait_idle()
        return controller

    controller = asyncio.run(_scenario())

    assert len(controller.result) == 50


def test_failed_search_keeps_previous_result() -> None:
    source = _RecordingSource()
    source.failing = {"boom"}

    async def _scenario() -> SearchController:
        controller = SearchController(source, debounce_seconds=0)
        controller.keystroke("ok")
        await controller.flush()
        await controller.wait_idle()
        controller.keystroke("boom")
        await controller.flush()
        await controller.wait_idle()
        return controller

    controller = asyncio.run(_scenario())

    assert controller.status is SearchStatus.ERRORED
    assert isinstance(controller.error, SearchFailedError)
    assert [entry.label for entry in controller.result] == ["ok"]


def test_repeated_query_is_served_from_cache() -> None:
    source = _RecordingSource()

    async def _scenario() -> SearchController:
        controller = SearchController(source, debounce_seconds=0)
        for query in ("abc", "abcd", "abc"):
            controller.keystroke(query)
            await controller.flush()
            await controller.wait_idle()
        return controller

    controller = asyncio.run(_scenario())

    assert [query for query, _ in source.calls] == ["abc", "abcd"]
    assert controller.last_request_id == 3
    assert [entry.label for entry in controller.result] == ["abc"]


def test_clear_cache_forces_new_search() -> None:
    source = _RecordingSource()

    async def _scenario() -> None:
        controller = SearchController(source, debounce_seconds=0)
        for _ in range(2):
            controller.keystroke("abc")
            await controller.flush()
            await controller.wait_idle()
            controller.clear_cache()

    asyncio.run(_scenario())

    assert len(source.calls) == 2


def test_blank_query_returns_to_idle_without_search() -> None:
    source = _RecordingSource()

    async def _scenario() -> SearchController:
        controller = SearchController(source, debounce_seconds=0.05)
        controller.keystroke("abc")
        controller.keystroke("   ")
        await controller.wait_idle()
        return controller

    controller = asyncio.run(_scenario())

    assert source.calls == []
    assert controller.status is SearchStatus.IDLE
    assert controller.result is None
    assert controller.is_busy is False


def test_minimum_spacing_between_searches() -> None:
    source = _RecordingSource()

    async def _scenario() -> float:
        loop = asyncio.get_running_loop()
        controller = SearchController(source, debounce_seconds=0.05)
        controller.keystroke("a")
        await controller.flush()
        issued_first = loop.time()
        controller.keystroke("ab")
        await controller.flush()
        await controller.wait_idle()
        return loop.time() - issued_first

    elapsed = asyncio.run(_scenario())

    assert elapsed >= 0.04
    assert [query for query, _ in source.calls] == ["a", "ab"]


def test_listeners_receive_status_changes() -> None:
    source = _RecordingSource()
    seen: list[SearchStatus] = []

    async def _scenario() -> None:
        controller = SearchController(source, debounce_seconds=0)
        unsubscribe = controller.subscribe(lambda session: seen.append(session.status))
        controller.keystroke("a")
        await controller.flush()
        await controller.wait_idle()
        unsubscribe()
        controller.keystroke("")

    asyncio.run(_scenario())

    assert seen == [SearchStatus.DEBOUNCING, SearchStatus.IN_FLIGHT, SearchStatus.COMPLETED]


def test_close_ignores_in_flight_result() -> None:
    source = _RecordingSource()

    async def _scenario() -> SearchController:
        source.gates = {"slow": asyncio.Event()}
        controller = SearchController(source, debounce_seconds=0)
        controller.keystroke("slow")
        await controller.flush()
        controller.close()
        source.gates["slow"].set()
        await controller.wait_idle()
        return controller

    controller = asyncio.run(_scenario())

    assert controller.status is SearchStatus.IDLE
    assert controller.result is None


def test_unexpected_source_error_ends_errored_and_keeps_previous_result() -> None:
    source = _RecordingSource()
    source.crashing = {"crash"}
    seen: list[SearchStatus] = []

    async def _scenario() -> SearchController:
        controller = SearchController(source, debounce_seconds=0)
        controller.keystroke("ok")
        await controller.flush()
        await controller.wait_idle()
        controller.subscribe(lambda session: seen.append(session.status))
        controller.keystroke("crash")
        await controller.flush()
        await controller.wait_idle()
        return controller

    controller = asyncio.run(_scenario())

    assert controller.status is SearchStatus.ERRORED
    assert seen[-1] is SearchStatus.ERRORED
    assert isinstance(controller.error, SearchFailedError)
    assert isinstance(controller.error.cause, RuntimeError)
    assert controller.error.query == "crash"
    assert [entry.label for entry in controller.result] == ["ok"]


def test_flush_waiting_for_spacing_keeps_controller_busy() -> None:
    source = _RecordingSource()

    async def _scenario() -> tuple[bool, int | None]:
        controller = SearchController(source, debounce_seconds=0.05)
        controller.keystroke("a")
        await controller.flush()
        await controller.wait_idle()

        controller.keystroke("ab")
        pending = asyncio.ensure_future(controller.flush())
        await asyncio.sleep(0.01)
        busy = controller.is_busy
        await controller.wait_idle()
        assert source.calls[-1] == ("ab", 50)
        return busy, await pending

    busy, request_id = asyncio.run(_scenario())

    assert busy is True
    assert request_id == 2


def test_keystroke_during_flush_supersedes_it() -> None:
    source = _RecordingSource()

    async def _scenario() -> int | None:
        controller = SearchController(source, debounce_seconds=0.05)
        controller.keystroke("a")
        await controller.flush()
        controller.keystroke("ab")
        pending = asyncio.ensure_future(controller.flush())
        await asyncio.sleep(0.01)
        controller.keystroke("abc")
        superseded = await pending
        await controller.wait_idle()
        return superseded

    assert asyncio.run(_scenario()) is None
    assert [query for query, _ in source.calls] == ["a", "abc"]
