"""
Unit tests for the worker wake channel.
"""

import asyncio
import threading

import pytest

from dfsmonitor.orchestration import WAKE_SHUTDOWN, WAKE_SIGNAL, WAKE_TIMER, WakeChannel


@pytest.mark.unit
class TestWakeChannel:
    """Test cases for WakeChannel."""

    @pytest.mark.asyncio
    async def test_timer_elapses(self):
        channel = WakeChannel()

        assert await channel.wait(0.05, asyncio.Event()) == WAKE_TIMER

    @pytest.mark.asyncio
    async def test_pending_signal_returns_immediately(self):
        channel = WakeChannel()
        assert channel.signal() is True

        assert await channel.wait(10, asyncio.Event()) == WAKE_SIGNAL
        assert channel.pending is False

    @pytest.mark.asyncio
    async def test_signals_are_coalesced(self):
        channel = WakeChannel()

        assert channel.signal() is True
        assert channel.signal() is False
        assert await channel.wait(10, asyncio.Event()) == WAKE_SIGNAL
        assert await channel.wait(0.05, asyncio.Event()) == WAKE_TIMER

    @pytest.mark.asyncio
    async def test_shutdown_wins_over_signal(self):
        channel = WakeChannel()
        shutdown = asyncio.Event()
        channel.signal()
        shutdown.set()

        assert await channel.wait(10, shutdown) == WAKE_SHUTDOWN

    @pytest.mark.asyncio
    async def test_shutdown_interrupts_wait(self):
        channel = WakeChannel()
        shutdown = asyncio.Event()

        waiter = asyncio.create_task(channel.wait(10, shutdown))
        await asyncio.sleep(0.01)
        shutdown.set()

        assert await asyncio.wait_for(waiter, timeout=2) == WAKE_SHUTDOWN

    @pytest.mark.asyncio
    async def test_signal_from_another_thread(self):
        channel = WakeChannel()

        waiter = asyncio.create_task(channel.wait(10, asyncio.Event()))
        await asyncio.sleep(0.01)
        thread = threading.Thread(target=channel.signal)
        thread.start()
        thread.join()

        assert await asyncio.wait_for(waiter, timeout=2) == WAKE_SIGNAL

    def test_clear_discards_pending_signal(self):
        channel = WakeChannel()
        channel.signal()

        channel.clear()

        assert channel.pending is False
        assert channel.signal() is True
