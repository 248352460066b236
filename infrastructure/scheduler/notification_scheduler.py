"""
Periodic notification scan on the asyncio event loop.

The scan runs every ``interval_seconds``; data-change events call
``trigger()``, which coalesces bursts into one extra scan.
"""
import asyncio
import contextlib
import time
from typing import Awaitable, Callable, Optional

from application.resilience import Debouncer
from domain.config import SchedulerConfig, get_scheduler_config
from domain.interfaces import LoggingPort, bind_or_noop
from domain.results import ScanReport

ScanRunner = Callable[[], Awaitable[ScanReport]]

TRIGGER_KEY = "notification_scan"


class NotificationScheduler:
    def __init__(
        self,
        run_scan: ScanRunner,
        config: Optional[SchedulerConfig] = None,
        logging_port: Optional[LoggingPort] = None,
    ):
        """
        Args:
            run_scan: Coroutine function running one scan pass with its own storage session
            config: Interval and debounce window (defaults to env config)
            logging_port: Logging port for structured logging (optional)
        """
        self.run_scan = run_scan
        self.config = config or get_scheduler_config()
        self.log = bind_or_noop(logging_port, step="notification_scheduler")
        self.debouncer = Debouncer(self.config.debounce_ms)
        self._task: Optional[asyncio.Task] = None
        # Scheduled and triggered passes never overlap
        self._lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> Optional[ScanReport]:
        """Run one pass. Failures are logged and reported as None."""
        async with self._lock:
            start_time = time.time()
            try:
                report = await self.run_scan()
            except Exception as e:
                self.log.error("scheduled_scan_failed", exc_info=True, error=str(e), error_type=type(e).__name__)
                return None
            self.log.info(
                "scheduled_scan_completed",
                duration_ms=round((time.time() - start_time) * 1000, 2),
                created=len(report.created),
                skipped=len(report.skipped),
                failed=len(report.failed),
            )
            return report

    def trigger(self) -> asyncio.Future:
        """
        Request a scan after the debounce window.

        All triggers inside one window wait on the same scan run.
        """
        return self.debouncer.execute(self.run_once, key=TRIGGER_KEY)

    async def _loop(self) -> None:
        while True:
            await self.run_once()
            await asyncio.sleep(self.config.interval_seconds)

    def start(self) -> None:
        if self.running:
            return
        self.log.info("scheduler_started", interval_seconds=self.config.interval_seconds)
        self._task = asyncio.get_running_loop().create_task(self._loop())

    async def stop(self) -> None:
        self.debouncer.clear()
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        self.log.info("scheduler_stopped")
