"""Debounced search orchestration with stale-result suppression."""

from __future__ import annotations

import asyncio
from collections import OrderedDict
from typing import TYPE_CHECKING

import structlog

from searchselect import logger
from searchselect.exceptions import SearchFailedError
from searchselect.typing.enums import SearchStatus
from searchselect.typing.models import DEFAULT_OPTIONS_LIMIT, OptionEntry, SearchSession

if TYPE_CHECKING:
    from collections.abc import Callable

    from searchselect.sources.base import OptionSource

    SessionListener = Callable[[SearchSession], None]


class SearchController:
    """Turn keystrokes into at most one search per debounce window.

    Only the result of the most recently issued request is ever applied. A
    keystroke never aborts an in-flight call; its result is ignored on arrival.
    """

    def __init__(
        self,
        source: OptionSource,
        *,
        limit: int = DEFAULT_OPTIONS_LIMIT,
        debounce_seconds: float = 1.0,
        cache_size: int = 32,
        name: str | None = None,
    ) -> None:
        """Initialize controller.

        Args:
            source (OptionSource): Source queried by searches.
            limit (int): Maximum number of candidates per search.
            debounce_seconds (float): Trailing debounce and minimum spacing between searches.
            cache_size (int): Number of query results kept; 0 disables caching.
            name (str | None): Field name bound to log records of search tasks.
        """
        self._source = source
        self._name = name
        self._limit = limit
        self._debounce = debounce_seconds
        self._cache_size = cache_size
        self._cache: OrderedDict[str, list[OptionEntry]] = OrderedDict()
        self._session = SearchSession()
        self._timer: asyncio.Task[None] | None = None
        self._in_flight: set[asyncio.Task[None]] = set()
        self._last_request_id = 0
        self._accepted_request_id: int | None = None
        self._last_issued_at: float | None = None
        self._result: list[OptionEntry] | None = None
        self._error: SearchFailedError | None = None
        self._listeners: list[SessionListener] = []

    @property
    def session(self) -> SearchSession:
        """Return the current search session."""
        return self._session

    @property
    def status(self) -> SearchStatus:
        """Return the current session status."""
        return self._session.status

    @property
    def result(self) -> list[OptionEntry] | None:
        """Return the last applied search result, None when no search applies."""
        return self._result

    @property
    def error(self) -> SearchFailedError | None:
        """Return the failure of the current search, if any."""
        return self._error

    @property
    def last_request_id(self) -> int:
        """Return the id of the most recently issued request."""
        return self._last_request_id

    @property
    def is_busy(self) -> bool:
        """Return whether a debounce timer or search call is pending."""
        timer_pending = self._timer is not None and not self._timer.done()
        return timer_pending or any(not task.done() for task in self._in_flight)

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a state-change listener.

        Args:
            listener (SessionListener): Called with the current session on every change.

        Returns:
            Callable[[], None]: Function removing the listener.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def keystroke(self, query: str) -> None:
        """Record a new query and restart the debounce timer.

        Must be called from within a running event loop. A blank query cancels
        any pending search and returns to idle without searching.

        Args:
            query (str): Full text of the search input.
        """
        self._cancel_timer()
        self._accepted_request_id = None

        if not query.strip():
            self._session = SearchSession(query=query, status=SearchStatus.IDLE)
            self._result = None
            self._error = None
            self._notify()
            return

        session = SearchSession(query=query, status=SearchStatus.DEBOUNCING)
        self._session = session
        loop = asyncio.get_running_loop()
        delay = max(self._debounce, self._spacing_remaining())
        self._timer = loop.create_task(self._issue_later(session, delay))
        self._notify()

    async def flush(self) -> int | None:
        """Issue a debouncing search now, honouring the minimum spacing.

        Returns:
            int | None: Request id of the current session, None if it was superseded.
        """
        session = self._session
        if session.status != SearchStatus.DEBOUNCING:
            return session.request_id

        self._cancel_timer()
        timer = asyncio.get_running_loop().create_task(self._issue_later(session, self._spacing_remaining()))
        self._timer = timer
        await asyncio.wait({timer})
        if timer.cancelled():
            return None
        return session.request_id

    async def wait_idle(self) -> None:
        """Wait until no timer or search call is pending."""
        while True:
            pending = {task for task in self._in_flight if not task.done()}
            if self._timer is not None and not self._timer.done():
                pending.add(self._timer)
            if not pending:
                return
            await asyncio.wait(pending)

    def clear_cache(self) -> None:
        """Forget cached search results."""
        self._cache.clear()

    def close(self) -> None:
        """Cancel the pending timer and ignore any in-flight result."""
        self._cancel_timer()
        self._accepted_request_id = None
        self._session = SearchSession(query=self._session.query, status=SearchStatus.IDLE)

    def _spacing_remaining(self) -> float:
        if self._last_issued_at is None:
            return 0.0
        loop = asyncio.get_running_loop()
        return max(0.0, self._last_issued_at + self._debounce - loop.time())

    async def _issue_later(self, session: SearchSession, delay: float) -> None:
        if delay > 0:
            await asyncio.sleep(delay)
        self._timer = None
        self._issue(session)

    def _issue(self, session: SearchSession) -> int:
        loop = asyncio.get_running_loop()
        self._last_request_id += 1
        request_id = self._last_request_id
        session.request_id = request_id
        session.status = SearchStatus.IN_FLIGHT
        self._accepted_request_id = request_id
        self._last_issued_at = loop.time()

        task = loop.create_task(self._run(session, request_id))
        self._in_flight.add(task)
        task.add_done_callback(self._on_search_done)
        logger.debug("Search issued", extra={"query": session.query, "request_id": request_id})
        self._notify()
        return request_id

    async def _run(self, session: SearchSession, request_id: int) -> None:
        structlog.contextvars.bind_contextvars(field=self._name, request_id=request_id)
        try:
            entries = await self._fetch(session.query)
        except Exception as exc:
            error = exc if isinstance(exc, SearchFailedError) else SearchFailedError(query=session.query, cause=exc)
            if request_id != self._accepted_request_id:
                logger.debug("Discarding stale search failure")
                return
            session.status = SearchStatus.ERRORED
            self._error = error
            logger.warning("Search failed", extra={"query": session.query, "error": str(error)})
            self._notify()
            return

        if request_id != self._accepted_request_id:
            logger.debug(
                "Discarding stale search result",
                extra={"latest_request_id": self._last_request_id},
            )
            return
        session.status = SearchStatus.COMPLETED
        self._result = entries
        self._error = None
        self._notify()

    async def _fetch(self, query: str) -> list[OptionEntry]:
        cached = self._cache.get(query)
        if cached is not None:
            self._cache.move_to_end(query)
            return list(cached)

        entries = (await self._source.search(query, self._limit))[: self._limit]
        if self._cache_size > 0:
            self._cache[query] = entries
            while len(self._cache) > self._cache_size:
                self._cache.popitem(last=False)
        return list(entries)

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    def _on_search_done(self, task: asyncio.Task[None]) -> None:
        self._in_flight.discard(task)
        if task.cancelled():
            return
        try:
            task.result()
        except Exception:
            logger.exception("Search task crashed")

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._session)
