"""
Retry wrapper for storage calls issued by the scan and payment paths.

Failures are converted into RetryResult values so that one failing record
never aborts a whole pass. Backoff is linear: the wait after attempt ``n`` is
``base_delay_ms * n``.
"""
from typing import Awaitable, Callable, Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from domain.exceptions import NotFoundError, StorageError, ValidationError
from domain.interfaces import BoundLogger, NoOpLogger
from domain.results import RetryResult

T = TypeVar("T")


def _log_failed_attempt(log: BoundLogger, operation_name: str, max_retries: int):
    def before_sleep(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        log.warning(
            "operation_attempt_failed",
            operation=operation_name,
            attempt=retry_state.attempt_number,
            max_retries=max_retries,
            next_wait_ms=round(retry_state.next_action.sleep * 1000) if retry_state.next_action else None,
            error=str(exc),
        )
    return before_sleep


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    base_delay_ms: int = 1000,
    operation_name: str = "operation",
    log: Optional[BoundLogger] = None,
) -> RetryResult[T]:
    """
    Run ``operation`` up to ``max_retries`` times.

    Args:
        operation: Zero-argument coroutine function to invoke
        max_retries: Total number of attempts (values below 1 mean 1)
        base_delay_ms: Base delay; the wait after attempt n is base_delay_ms * n
        operation_name: Name used in log events and error messages
        log: Bound logger (no-op when omitted)

    Returns:
        RetryResult. ValidationError and NotFoundError are never retried
        and come back as is; any other exception is retried and, once
        attempts run out, comes back wrapped in StorageError. Nothing is
        raised.
    """
    log = log or NoOpLogger()
    max_retries = max(1, max_retries)
    base_delay = base_delay_ms / 1000
    attempts = 0

    try:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(max_retries),
            wait=wait_incrementing(start=base_delay, increment=base_delay),
            retry=retry_if_not_exception_type((ValidationError, NotFoundError)),
            before_sleep=_log_failed_attempt(log, operation_name, max_retries),
            reraise=True,
        ):
            with attempt:
                attempts = attempt.retry_state.attempt_number
                data = await operation()
    except (ValidationError, NotFoundError) as e:
        log.warning("operation_rejected", operation=operation_name, error=str(e), context=e.context)
        return RetryResult.failed(e, attempts)
    except Exception as e:
        log.error(
            "operation_failed_after_retries",
            operation=operation_name,
            attempts=attempts,
            error=str(e),
            error_type=type(e).__name__,
        )
        if isinstance(e, StorageError):
            return RetryResult.failed(e, attempts)
        error = StorageError(
            f"{operation_name} failed after {attempts} attempts: {e}",
            context={"operation": operation_name, "attempts": attempts},
            original=e,
        )
        return RetryResult.failed(error, attempts)

    return RetryResult.ok(data, attempts)
