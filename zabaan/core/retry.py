"""Retry helpers with exponential backoff for database writes."""
import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.exc import DBAPIError, OperationalError

from zabaan.core.config import get_settings
from zabaan.core.errors import PersistenceError

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_ERRORS = (OperationalError, DBAPIError, ConnectionError, TimeoutError)


async def with_backoff(
    fn: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 10.0,
    label: str = "db write",
    on_retry: Callable[[int, Exception], Awaitable[None] | None] | None = None,
) -> T:
    """Await ``fn()`` until it succeeds, sleeping ``base_delay * 2**attempt`` between tries.

    Only transient database/connection errors are retried; anything else
    propagates immediately. When every attempt fails a ``PersistenceError``
    is raised from the last error.
    """
    for attempt in range(max_attempts):
        try:
            return await fn()
        except RETRYABLE_ERRORS as exc:
            if attempt == max_attempts - 1:
                logger.error("%s failed after %d attempts: %s", label, max_attempts, exc)
                raise PersistenceError() from exc

            delay = min(base_delay * (2 ** attempt), max_delay)
            logger.warning("%s attempt %d failed (%s); retrying in %.1fs", label, attempt + 1, exc, delay)
            if on_retry is not None:
                result = on_retry(attempt + 1, exc)
                if asyncio.iscoroutine(result):
                    await result
            await asyncio.sleep(delay)

    # max_attempts < 1
    raise PersistenceError()


async def with_db_retry(db, fn: Callable[[], Awaitable[T]], label: str, refresh: list | None = None) -> T:
    """``with_backoff`` using configured limits; rolls the session back between attempts."""
    settings = get_settings()

    async def reset(attempt: int, exc: Exception) -> None:
        await db.rollback()
        for obj in refresh or []:
            await db.refresh(obj)

    return await with_backoff(
        fn,
        max_attempts=settings.retry_max_attempts,
        base_delay=settings.retry_base_delay,
        max_delay=settings.retry_max_delay,
        label=label,
        on_retry=reset,
    )
