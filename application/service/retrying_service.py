from typing import Awaitable, Callable, Optional, TypeVar

from application.resilience import with_retry
from domain.config import get_scheduler_config
from domain.interfaces import BoundLogger
from domain.results import RetryResult

T = TypeVar("T")


class RetryingService:
    """Base for use cases whose storage calls go through with_retry."""

    def __init__(self, max_retries: Optional[int] = None, retry_delay_ms: Optional[int] = None):
        config = get_scheduler_config()
        self.max_retries = config.max_retries if max_retries is None else max_retries
        self.retry_delay_ms = config.retry_delay_ms if retry_delay_ms is None else retry_delay_ms

    async def _call(
        self,
        operation: Callable[[], Awaitable[T]],
        operation_name: str,
        log: BoundLogger,
    ) -> RetryResult[T]:
        return await with_retry(
            operation,
            max_retries=self.max_retries,
            base_delay_ms=self.retry_delay_ms,
            operation_name=operation_name,
            log=log,
        )
