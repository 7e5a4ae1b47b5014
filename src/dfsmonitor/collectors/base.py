"""
Shared plumbing for the asynchronous collectors.

Every provider call goes through `BaseCollector._query`: it runs on the
provider thread pool, is bounded by a timeout and is retried with linear
backoff. Collectors fan out over their units of work with a semaphore so at
most ``maxParallelism`` units are in flight.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable, List, TypeVar

from ..executor import ManagedThreadPoolExecutor
from ..models.config import MonitorConfig
from ..providers import TopologyQueryProvider
from ..validation import async_retry

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")

MIN_PROBE_TIMEOUT_SECONDS = 2.0


def describe_error(error: BaseException) -> str:
    return str(error) or error.__class__.__name__


class BaseCollector:
    """Holds the provider and pool, and runs bounded, retried provider calls."""

    def __init__(self, provider: TopologyQueryProvider, executor: ManagedThreadPoolExecutor):
        self.provider = provider
        self.executor = executor

    async def _call(self, timeout: float, fn: Callable[..., T], *args: Any) -> T:
        return await asyncio.wait_for(self.executor.run_async(fn, *args), timeout)

    async def _query(
        self, config: MonitorConfig, context: str, fn: Callable[..., T], *args: Any
    ) -> T:
        """Run a provider query with the configured timeout and retry count."""
        timeout = float(config.collection.request_timeout_seconds)
        return await async_retry(
            lambda: self._call(timeout, fn, *args),
            retries=config.collection.retry_count,
            context=context,
        )

    @staticmethod
    async def _bounded_map(
        limit: int, func: Callable[[U], Awaitable[T]], units: Iterable[U]
    ) -> List[T]:
        """Apply ``func`` to every unit with at most ``limit`` running at once, keeping order."""
        semaphore = asyncio.Semaphore(max(1, limit))

        async def run(unit: U) -> T:
            async with semaphore:
                return await func(unit)

        return list(await asyncio.gather(*(run(unit) for unit in units)))
