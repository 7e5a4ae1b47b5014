"""
Unit tests for the provider thread pool.

Tests the pool configuration, lifecycle management, statistics and
awaiting pooled calls from the event loop.
"""

import threading

import pytest

from dfsmonitor.executor import ManagedThreadPoolExecutor, ThreadPoolConfig


@pytest.mark.unit
class TestThreadPoolConfig:
    """Test cases for ThreadPoolConfig."""

    def test_thread_pool_config_defaults(self):
        """Test ThreadPoolConfig default values."""
        config = ThreadPoolConfig()

        assert config.max_workers == 8
        assert config.thread_name_prefix == "ProviderWorker"
        assert config.shutdown_timeout == 10.0


@pytest.mark.unit
class TestManagedThreadPoolExecutor:
    """Test cases for ManagedThreadPoolExecutor."""

    def test_initialization(self):
        """Test ManagedThreadPoolExecutor initialization."""
        config = ThreadPoolConfig(max_workers=2)
        executor = ManagedThreadPoolExecutor(config)

        assert executor.config == config
        assert executor.executor is None
        assert executor.is_shutdown is False
        assert executor.is_running is False
        assert executor.stats["tasks_submitted"] == 0

    def test_start_twice_raises(self):
        executor = ManagedThreadPoolExecutor(ThreadPoolConfig(max_workers=1))
        executor.start()
        try:
            with pytest.raises(RuntimeError, match="already started"):
                executor.start()
        finally:
            executor.shutdown()

    def test_submit_before_start_raises(self):
        executor = ManagedThreadPoolExecutor()

        with pytest.raises(RuntimeError, match="not started"):
            executor.submit(lambda: None)

    def test_submit_runs_on_named_worker(self):
        with ManagedThreadPoolExecutor(ThreadPoolConfig(max_workers=1)) as executor:
            name = executor.submit(lambda: threading.current_thread().name).result(timeout=5)

        assert name.startswith("ProviderWorker")
        assert executor.is_shutdown
        assert executor.executor is None

    def test_stats_track_success_and_failure(self):
        def fail():
            raise ValueError("boom")

        with ManagedThreadPoolExecutor(ThreadPoolConfig(max_workers=2)) as executor:
            executor.submit(lambda: 1).result(timeout=5)
            failing = executor.submit(fail)
            with pytest.raises(ValueError):
                failing.result(timeout=5)

        stats = executor.get_stats()

        assert stats["tasks_submitted"] == 2
        assert stats["tasks_completed"] == 1
        assert stats["tasks_failed"] == 1
        assert stats["success_rate"] == 50.0
        assert stats["active_futures"] == 0
        assert stats["is_shutdown"] is True

    def test_shutdown_is_idempotent(self):
        executor = ManagedThreadPoolExecutor(ThreadPoolConfig(max_workers=1))
        executor.start()
        executor.shutdown()
        executor.shutdown()

        with pytest.raises(RuntimeError):
            executor.submit(lambda: None)

    @pytest.mark.asyncio
    async def test_run_async_returns_result(self, executor):
        result = await executor.run_async(lambda a, b: a + b, 2, 3)

        assert result == 5

    @pytest.mark.asyncio
    async def test_run_async_propagates_exception(self, executor):
        def fail():
            raise OSError("share offline")

        with pytest.raises(OSError, match="share offline"):
            await executor.run_async(fail)
