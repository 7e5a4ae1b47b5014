"""
Simplified error handling strategies.

This module provides the retry helper used by the collectors: a fixed number
of additional attempts with a linear backoff between them. Sleeping happens
on the event loop, so a retry loop is cancelled as promptly as any other
await.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')

DEFAULT_BACKOFF_SECONDS = 0.25


async def async_retry(
    func: Callable[[], Awaitable[T]],
    retries: int = 2,
    backoff: float = DEFAULT_BACKOFF_SECONDS,
    context: str = "operation",
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
) -> T:
    """
    Await ``func()`` and retry it on failure with linear backoff.

    The first call is followed by up to ``retries`` additional attempts; the
    n-th retry waits ``backoff * n`` seconds first. Cancellation is never
    retried.

    Args:
        func: Zero-argument coroutine factory to retry
        retries: Number of additional attempts after the first failure
        backoff: Base delay in seconds, multiplied by the attempt number
        context: Context description for log messages
        retry_on: Exception types that trigger a retry

    Returns:
        Result from func if any attempt succeeds

    Raises:
        Exception: The last exception if all attempts fail
    """
    attempts = max(0, retries) + 1
    for attempt in range(1, attempts + 1):
        try:
            result = await func()
            if attempt > 1:
                logger.info(f"Operation '{context}' succeeded on attempt {attempt}")
            return result
        except retry_on as e:
            if attempt >= attempts:
                logger.warning(f"All {attempts} attempts failed for {context}: {e}")
                raise
            logger.debug(f"Attempt {attempt} failed for {context}: {e}")
            await asyncio.sleep(backoff * attempt)

    raise RuntimeError(f"No attempts made for {context}")
