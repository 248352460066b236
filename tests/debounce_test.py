"""
Tests for the keyed Debouncer.
"""
import asyncio

import pytest

from application.resilience import Debouncer


class Counter:
    def __init__(self, value="scanned", exc: Exception = None):
        self.calls = 0
        self.value = value
        self.exc = exc

    async def __call__(self):
        self.calls += 1
        if self.exc:
            raise self.exc
        return self.value


@pytest.mark.asyncio
async def test_execute_coalesces_calls_in_window():
    debouncer = Debouncer(default_delay_ms=20)
    operation = Counter()

    first = debouncer.execute(operation, key="scan")
    second = debouncer.execute(operation, key="scan")

    assert await first == "scanned"
    assert await second == "scanned"
    assert operation.calls == 1


@pytest.mark.asyncio
async def test_cancelling_one_caller_keeps_the_shared_run():
    debouncer = Debouncer(default_delay_ms=20)
    operation = Counter()

    first = debouncer.execute(operation, key="scan")
    second = debouncer.execute(operation, key="scan")
    first.cancel()

    assert await second == "scanned"
    assert first.cancelled()
    assert operation.calls == 1


@pytest.mark.asyncio
async def test_execute_shares_rejection():
    debouncer = Debouncer(default_delay_ms=10)
    operation = Counter(exc=RuntimeError("boom"))

    first = debouncer.execute(operation, key="scan")
    second = debouncer.execute(operation, key="scan")

    with pytest.raises(RuntimeError, match="boom"):
        await first
    with pytest.raises(RuntimeError, match="boom"):
        await second
    assert operation.calls == 1


@pytest.mark.asyncio
async def test_execute_accepts_sync_function():
    debouncer = Debouncer(default_delay_ms=5)
    assert await debouncer.execute(lambda: 41 + 1) == 42


@pytest.mark.asyncio
async def test_keys_are_independent():
    debouncer = Debouncer(default_delay_ms=10)
    a, b = Counter("a"), Counter("b")
    fa = debouncer.execute(a, key="a")
    fb = debouncer.execute(b, key="b")
    assert fa is not fb
    assert await asyncio.gather(fa, fb) == ["a", "b"]


@pytest.mark.asyncio
async def test_new_window_after_fire():
    debouncer = Debouncer(default_delay_ms=5)
    operation = Counter()
    first = debouncer.execute(operation, key="scan")
    await first
    second = debouncer.execute(operation, key="scan")
    assert second is not first
    await second
    assert operation.calls == 2


@pytest.mark.asyncio
async def test_clear_drops_pending_without_settling():
    debouncer = Debouncer(default_delay_ms=10)
    operation = Counter()

    future = debouncer.execute(operation, key="scan")
    assert debouncer.pending("scan")
    debouncer.clear("scan")
    await asyncio.sleep(0.05)

    assert not future.done()
    assert not debouncer.pending("scan")
    assert operation.calls == 0


@pytest.mark.asyncio
async def test_clear_all_keys():
    debouncer = Debouncer(default_delay_ms=10)
    operation = Counter()
    debouncer.execute(operation, key="a")
    debouncer.execute(operation, key="b")
    debouncer.clear()
    await asyncio.sleep(0.05)
    assert operation.calls == 0


@pytest.mark.asyncio
async def test_debounce_runs_last_call_only():
    debouncer = Debouncer()
    seen = []
    trigger = debouncer.debounce("refresh", seen.append, delay_ms=10)

    trigger(1)
    trigger(2)
    trigger(3)
    await asyncio.sleep(0.05)

    assert seen == [3]


@pytest.mark.asyncio
async def test_debounce_awaits_coroutine_functions():
    debouncer = Debouncer(default_delay_ms=5)
    done = asyncio.Event()

    async def refresh(value):
        done.set()

    debouncer.debounce("refresh", refresh)("x")
    await asyncio.wait_for(done.wait(), timeout=1)
