from __future__ import annotations

import asyncio

import pytest

from promisemitter.core.events.helpers import compose, wait_all, with_timeout
from promisemitter.core.exceptions import UNKNOWN_LISTENER, ListenerTimeoutError


async def _later(value, delay: float = 0.01):
    await asyncio.sleep(delay)
    return value


async def _fail_later(error: Exception, delay: float = 0.01):
    await asyncio.sleep(delay)
    raise error


@pytest.mark.asyncio
async def test_wait_all_empty_resolves_immediately() -> None:
    combined = wait_all([])

    assert combined.done()
    assert await combined is None


@pytest.mark.asyncio
async def test_wait_all_waits_for_every_input() -> None:
    finished: list[int] = []

    async def step(n: int, delay: float) -> None:
        await asyncio.sleep(delay)
        finished.append(n)

    await wait_all([step(1, 0.02), step(2, 0.01)])

    assert finished == [2, 1]


@pytest.mark.asyncio
async def test_wait_all_fails_fast_without_cancelling_siblings() -> None:
    loop = asyncio.get_running_loop()
    slow = asyncio.ensure_future(_later("slow", 0.2))
    start = loop.time()

    with pytest.raises(ValueError, match="boom"):
        await wait_all([slow, _fail_later(ValueError("boom"), 0.01)])

    assert loop.time() - start < 0.15
    assert not slow.done()
    assert await slow == "slow"


@pytest.mark.asyncio
async def test_wait_all_reports_only_the_first_failure() -> None:
    second = asyncio.ensure_future(_fail_later(RuntimeError("second"), 0.03))

    with pytest.raises(KeyError):
        await wait_all([_fail_later(KeyError("first"), 0.01), second])

    await asyncio.sleep(0.04)
    assert second.done()


@pytest.mark.asyncio
async def test_wait_all_cancelled_input_cancels_combined() -> None:
    loop = asyncio.get_running_loop()
    cancelled, pending = loop.create_future(), loop.create_future()
    combined = wait_all([cancelled, pending])

    cancelled.cancel()
    await asyncio.sleep(0)

    assert combined.cancelled()
    assert not pending.done()
    pending.set_result(None)


@pytest.mark.asyncio
async def test_with_timeout_passes_result_through() -> None:
    assert await with_timeout(_later(5, 0.001), 100) == 5


@pytest.mark.asyncio
async def test_with_timeout_passes_failure_through() -> None:
    with pytest.raises(ValueError, match="nope"):
        await with_timeout(_fail_later(ValueError("nope"), 0.001), 100)


@pytest.mark.asyncio
async def test_with_timeout_expires_without_cancelling_input() -> None:
    source = asyncio.ensure_future(_later("done", 0.05))

    with pytest.raises(ListenerTimeoutError) as info:
        await with_timeout(source, 10)

    assert isinstance(info.value, TimeoutError)
    assert info.value.timed_out_listener == UNKNOWN_LISTENER
    assert info.value.timeout_ms == 10
    assert await source == "done"


def test_compose_sync_callables() -> None:
    composed = compose(lambda x: x * 10, lambda x: x + 1)

    assert composed(1) == 20


@pytest.mark.asyncio
async def test_compose_async_inner() -> None:
    async def increment(x: int) -> int:
        await asyncio.sleep(0)
        return x + 1

    composed = compose(lambda x: x * 10, increment)

    assert await composed(1) == 20


@pytest.mark.asyncio
async def test_compose_async_inner_and_outer() -> None:
    async def increment(x: int) -> int:
        return x + 1

    async def double(x: int) -> int:
        return x * 2

    assert await compose(double, increment)(1) == 4
