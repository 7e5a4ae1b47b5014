"""
Thread pool for blocking topology provider calls.

Provider implementations are synchronous: they shell out, call management
APIs or touch remote shares. The collectors run them on a bounded pool and
await the results from the event loop, so a hung call occupies a worker
thread but never the loop itself.
"""

import asyncio
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Set

from ..validation import handle_error, ErrorSeverity

logger = logging.getLogger(__name__)


@dataclass
class ThreadPoolConfig:
    """Configuration for the provider thread pool."""

    max_workers: int = 8
    thread_name_prefix: str = "ProviderWorker"
    shutdown_timeout: float = 10.0


class ManagedThreadPoolExecutor:
    """
    ThreadPoolExecutor wrapper with lifecycle checks and call statistics.

    The pool must be started before use, either explicitly or as a context
    manager:

        with ManagedThreadPoolExecutor(ThreadPoolConfig(max_workers=4)) as pool:
            result = await pool.run_async(provider.probe_target, unc_path)
    """

    def __init__(self, config: Optional[ThreadPoolConfig] = None):
        self.config = config or ThreadPoolConfig()
        self.executor: Optional[ThreadPoolExecutor] = None
        self.active_futures: Set[Future] = set()
        self.is_shutdown = False
        self._lock = threading.Lock()
        self.stats = dict.fromkeys(
            ("tasks_submitted", "tasks_completed", "tasks_failed", "tasks_cancelled"), 0
        )

    @property
    def is_running(self) -> bool:
        return self.executor is not None and not self.is_shutdown

    def start(self) -> None:
        """
        Create the worker threads' executor.

        Raises:
            RuntimeError: If the pool was already started
        """
        if self.executor is not None:
            raise RuntimeError("Provider thread pool already started")

        try:
            self.executor = ThreadPoolExecutor(
                max_workers=self.config.max_workers,
                thread_name_prefix=self.config.thread_name_prefix,
            )
        except Exception as e:
            handle_error(
                error=e,
                context="starting provider thread pool",
                severity=ErrorSeverity.ERROR,
                reraise=True,
                logger=logger,
            )
        self.is_shutdown = False
        logger.info(f"Started provider thread pool with {self.config.max_workers} workers")

    def submit(self, fn: Callable, *args, **kwargs) -> Future:
        """
        Queue a blocking call on the pool.

        Raises:
            RuntimeError: If the pool is not running
        """
        if self.executor is None:
            raise RuntimeError("Provider thread pool not started")
        if self.is_shutdown:
            raise RuntimeError("Provider thread pool is shut down")

        future = self.executor.submit(fn, *args, **kwargs)
        with self._lock:
            self.stats["tasks_submitted"] += 1
            self.active_futures.add(future)
        future.add_done_callback(self._on_done)
        return future

    async def run_async(self, fn: Callable, *args, **kwargs) -> Any:
        """
        Run a blocking call on the pool and await its result.

        Cancelling the awaiting task cancels the pooled call if it has not
        started yet; a call that is already running finishes in the
        background and its result is discarded.
        """
        return await asyncio.wrap_future(self.submit(fn, *args, **kwargs))

    def shutdown(self, wait: bool = True, cancel_futures: bool = False) -> None:
        """
        Stop accepting calls and release the worker threads.

        Args:
            wait: Block until running calls have finished
            cancel_futures: Drop queued calls that have not started
        """
        if self.executor is None or self.is_shutdown:
            return

        self.is_shutdown = True
        try:
            self.executor.shutdown(wait=wait, cancel_futures=cancel_futures)
            logger.info(f"Provider thread pool shut down (waited: {wait})")
        except Exception as e:
            handle_error(
                error=e,
                context="shutting down provider thread pool",
                severity=ErrorSeverity.WARNING,
                reraise=False,
                logger=logger,
            )
        finally:
            self.executor = None
            with self._lock:
                self.active_futures.clear()

    def get_stats(self) -> Dict[str, Any]:
        """Snapshot of call counters plus pool state."""
        with self._lock:
            stats = dict(self.stats, active_futures=len(self.active_futures))
        stats["is_shutdown"] = self.is_shutdown
        stats["success_rate"] = stats["tasks_completed"] * 100 / max(1, stats["tasks_submitted"])
        return stats

    def _on_done(self, future: Future) -> None:
        if future.cancelled():
            outcome = "tasks_cancelled"
        elif future.exception() is not None:
            outcome = "tasks_failed"
        else:
            outcome = "tasks_completed"
        with self._lock:
            self.active_futures.discard(future)
            self.stats[outcome] += 1

    def __enter__(self) -> "ManagedThreadPoolExecutor":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown(wait=True)
