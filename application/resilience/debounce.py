"""
Keyed debouncer on the asyncio event loop.

Used to collapse bursts of data-change events into a single notification
scan. Both primitives must be called from inside a running event loop.
"""
import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional, Union

Operation = Callable[[], Union[Any, Awaitable[Any]]]


class Debouncer:
    def __init__(self, default_delay_ms: int = 0):
        self.default_delay_ms = default_delay_ms
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._pending: dict[str, asyncio.Future] = {}
        # Strong references to running callbacks
        self._tasks: set[asyncio.Task] = set()

    def _delay_seconds(self, delay_ms: Optional[int]) -> float:
        return (self.default_delay_ms if delay_ms is None else delay_ms) / 1000

    def _cancel_timer(self, key: str) -> None:
        timer = self._timers.pop(key, None)
        if timer is not None:
            timer.cancel()

    def _spawn(self, result: Any) -> None:
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    def debounce(self, key: str, fn: Callable[..., Any], delay_ms: Optional[int] = None) -> Callable[..., None]:
        """
        Return a trigger for ``fn``. Each call restarts the timer for ``key``;
        only the last call inside the window runs, with its own arguments.
        """
        def trigger(*args: Any, **kwargs: Any) -> None:
            loop = asyncio.get_running_loop()
            self._cancel_timer(key)

            def fire() -> None:
                self._timers.pop(key, None)
                self._spawn(fn(*args, **kwargs))

            self._timers[key] = loop.call_later(self._delay_seconds(delay_ms), fire)

        return trigger

    def execute(self, fn: Operation, key: str = "default", delay_ms: Optional[int] = None) -> asyncio.Future:
        """
        Schedule ``fn`` after the window, restarting it on every call.

        Every call made before the timer fires waits on the same run and sees
        its result (or exception). Each caller gets its own shielded view, so
        cancelling one awaiting caller leaves the run and the others intact.
        """
        loop = asyncio.get_running_loop()
        self._cancel_timer(key)

        future = self._pending.get(key)
        if future is None:
            future = loop.create_future()
            self._pending[key] = future

        self._timers[key] = loop.call_later(self._delay_seconds(delay_ms), self._fire, key, fn, future)
        return asyncio.shield(future)

    def _fire(self, key: str, fn: Operation, future: asyncio.Future) -> None:
        self._timers.pop(key, None)
        # Calls arriving while fn runs start a new window
        if self._pending.get(key) is future:
            del self._pending[key]
        task = asyncio.ensure_future(self._run(fn, future))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    @staticmethod
    async def _run(fn: Operation, future: asyncio.Future) -> None:
        try:
            result = fn()
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            if not future.done():
                future.set_exception(e)
        else:
            if not future.done():
                future.set_result(result)

    def clear(self, key: Optional[str] = None) -> None:
        """
        Cancel the pending timer for ``key`` (every key when omitted).

        Pending futures are dropped without being settled: callers still
        awaiting them will wait forever and must treat them as abandoned.
        """
        if key is not None:
            self._cancel_timer(key)
            self._pending.pop(key, None)
            return
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._pending.clear()

    def pending(self, key: str) -> bool:
        return key in self._timers
