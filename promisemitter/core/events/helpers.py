"""
Future combinators used by emitters.

- wait_all: all-succeed-or-first-failure join, never cancels its inputs
- with_timeout: race a pending operation against a timer
- compose: chain two sync-or-async callables into one listener
"""

import asyncio
from collections.abc import Awaitable, Callable, Iterable
import inspect
from typing import Any, TypeVar

from promisemitter.core.exceptions import ListenerTimeoutError

T = TypeVar("T")


def _observe(fut: asyncio.Future) -> None:
    """Retrieve a settled future's exception so asyncio doesn't report it as lost."""
    if not fut.cancelled():
        fut.exception()


def wait_all(pendings: Iterable[Awaitable[Any]]) -> asyncio.Future[None]:
    """
    Combine pending operations into one future.

    Resolves with None once every input has succeeded. Fails with the first
    input failure as soon as it happens; the other inputs keep running and
    their outcomes are discarded.

    Args:
        pendings: Futures, tasks or coroutines (coroutines are scheduled)

    Returns:
        Future settling as described above
    """
    loop = asyncio.get_running_loop()
    combined: asyncio.Future[None] = loop.create_future()
    futures = [asyncio.ensure_future(p) for p in pendings]

    if not futures:
        combined.set_result(None)
        return combined

    remaining = len(futures)

    def _settled(fut: asyncio.Future) -> None:
        nonlocal remaining
        if fut.cancelled():
            if not combined.done():
                combined.cancel()
            return
        error = fut.exception()
        if combined.done():
            return
        if error is not None:
            combined.set_exception(error)
            return
        remaining -= 1
        if remaining == 0:
            combined.set_result(None)

    for fut in futures:
        fut.add_done_callback(_settled)

    return combined


def with_timeout(pending: Awaitable[T], delay_ms: float) -> asyncio.Future[T]:
    """
    Race a pending operation against a timer of delay_ms milliseconds.

    Unlike asyncio.wait_for, the input is never cancelled when the timer wins:
    it keeps running and its outcome is ignored.

    Raises (through the returned future):
        ListenerTimeoutError: with timed_out_listener still unset
    """
    loop = asyncio.get_running_loop()
    source = asyncio.ensure_future(pending)
    raced: asyncio.Future[T] = loop.create_future()
    error = ListenerTimeoutError(
        f"Timeout waiting for event listener to complete after {delay_ms}ms",
        timeout_ms=delay_ms,
    )

    def _expire() -> None:
        if not raced.done():
            raced.set_exception(error)

    def _settled(fut: asyncio.Future[T]) -> None:
        _observe(fut)
        if raced.done():
            return
        if fut.cancelled():
            raced.cancel()
        elif fut.exception() is not None:
            raced.set_exception(fut.exception())
        else:
            raced.set_result(fut.result())

    # the timer is left armed after an early settlement; _expire is then a no-op
    loop.call_later(delay_ms / 1000, _expire)
    source.add_done_callback(_settled)
    return raced


def compose(outer: Callable[[Any], Any], inner: Callable[[Any], Any]) -> Callable[[Any], Any]:
    """
    Build x -> outer(inner(x)) for sync or async callables.

    If inner returns an awaitable, the composed function returns a coroutine
    that awaits it before calling outer. Otherwise outer is called directly.

    Example:
        >>> listener = compose(save_index, build_index)
        >>> indexed = posts.subscribe(listener)
    """

    async def _chain(pending: Awaitable[Any]) -> Any:
        result = outer(await pending)
        if inspect.isawaitable(result):
            result = await result
        return result

    def composed(value: Any) -> Any:
        intermediate = inner(value)
        if inspect.isawaitable(intermediate):
            return _chain(intermediate)
        return outer(intermediate)

    return composed
