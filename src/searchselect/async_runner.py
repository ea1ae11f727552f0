"""Helpers bridging sync and async call sites."""

from __future__ import annotations

import asyncio
import inspect
import threading
from queue import Queue
from typing import TYPE_CHECKING, Any, TypeVar, cast

from searchselect.exceptions import AsyncExecutionError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Coroutine

T = TypeVar("T")


async def maybe_await(value: T | Awaitable[T]) -> T:
    """Return a callback result, awaiting it first when it is awaitable.

    User callbacks and store adapters may be plain functions or coroutines.

    Args:
        value: Direct result or awaitable produced by a callback.

    Returns:
        The resolved value.
    """
    if inspect.isawaitable(value):
        return await value
    return cast("T", value)


def _run_in_background_thread(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine in a dedicated thread with its own event loop.

    Args:
        coro: The coroutine to run.

    Raises:
        AsyncExecutionError: If the coroutine raises an exception.

    Returns:
        The result of the coroutine.
    """
    output: Queue[T | BaseException] = Queue(maxsize=1)

    def _runner() -> None:
        try:
            output.put(asyncio.run(coro))
        except BaseException as exc:
            output.put(exc)

    thread = threading.Thread(target=_runner, daemon=True)
    thread.start()
    thread.join()

    result = output.get()
    if isinstance(result, BaseException):
        raise AsyncExecutionError(result=result) from result
    return result


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Drive a field coroutine to completion from sync code.

    Without a running loop the coroutine gets its own `asyncio.run`; inside a
    running loop it is executed on a helper thread so the caller's loop is not
    re-entered.

    Args:
        coro: The coroutine to run.

    Returns:
        The result of the coroutine.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    return _run_in_background_thread(coro)
