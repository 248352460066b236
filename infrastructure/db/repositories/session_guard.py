import functools
from typing import Any, Awaitable, Callable, TypeVar

T = TypeVar("T")


def rollback_on_error(method: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """
    Roll the repository session back when a call fails, then re-raise.

    A failed flush or commit leaves the AsyncSession in an inactive transaction
    that rejects every later statement until ``rollback()`` is called. The
    retry layer and the rest of a scan share that session, so each repository
    call resets it before the error leaves the adapter.
    """

    @functools.wraps(method)
    async def wrapper(self: Any, *args: Any, **kwargs: Any) -> T:
        try:
            return await method(self, *args, **kwargs)
        except Exception:
            await self.db.rollback()
            raise

    return wrapper
