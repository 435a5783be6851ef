"""Retry utilities for async operations.

Provides exponential backoff retry logic for transient failures of outbound
calls (identity provider key fetches).
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

DEFAULT_ATTEMPTS = 2
DEFAULT_BASE_DELAY = 0.2  # seconds


def _calculate_delay(attempt: int, base_delay: float = DEFAULT_BASE_DELAY) -> float:
    """Return the backoff delay (base_delay * 2^attempt) for a zero-indexed attempt."""
    return base_delay * (2**attempt)


async def with_retry[T](
    fn: Callable[[], Awaitable[T]],
    attempts: int = DEFAULT_ATTEMPTS,
    exceptions: tuple[type[Exception], ...] = (Exception,),
    base_delay: float = DEFAULT_BASE_DELAY,
) -> T:
    """Execute async function with exponential backoff retry.

    Args:
        fn: Async function to execute (typically a closure)
        attempts: Maximum number of attempts
        exceptions: Exception types that trigger a retry; anything else
            propagates immediately
        base_delay: Base delay in seconds for exponential backoff

    Returns:
        Result from successful function execution

    Raises:
        The last exception if all attempts fail
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    for attempt in range(attempts):
        try:
            return await fn()
        except exceptions as e:
            if attempt == attempts - 1:
                raise
            delay = _calculate_delay(attempt, base_delay)
            logger.warning(
                "Attempt %d/%d failed with %s, retrying in %.2fs",
                attempt + 1,
                attempts,
                type(e).__name__,
                delay,
            )
            await asyncio.sleep(delay)

    raise AssertionError("unreachable")
