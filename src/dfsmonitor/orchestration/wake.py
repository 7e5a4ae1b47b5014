"""
Early-wake channel for the worker loop.

The worker sleeps between collection runs. Anything that wants a run sooner
(the command poller, an in-process caller) signals the channel. A single
wait resolves on whichever comes first: the timer, a wake signal or
shutdown. Signals that arrive while one is already pending are coalesced.
"""

import asyncio
import logging
import threading
from typing import Optional

logger = logging.getLogger(__name__)

WAKE_TIMER = "timer"
WAKE_SIGNAL = "signal"
WAKE_SHUTDOWN = "shutdown"


class WakeChannel:
    """Coalescing wake-up signal that may be raised from any thread."""

    def __init__(self):
        self._event = asyncio.Event()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._lock = threading.Lock()
        self._pending = False

    @property
    def pending(self) -> bool:
        return self._pending

    def signal(self) -> bool:
        """
        Request an early wake.

        Returns:
            False when a signal was already pending and this one was coalesced
        """
        with self._lock:
            if self._pending:
                return False
            self._pending = True

        loop = self._loop
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if loop is not None and running is not loop and not loop.is_closed():
            loop.call_soon_threadsafe(self._event.set)
        else:
            self._event.set()
        logger.debug("Wake channel signalled")
        return True

    def clear(self) -> None:
        """Discard a pending signal."""
        with self._lock:
            self._pending = False
            self._event.clear()

    async def wait(self, timeout: float, shutdown_event: asyncio.Event) -> str:
        """
        Wait for the first of timer, wake signal or shutdown.

        Returns:
            ``"timer"``, ``"signal"`` or ``"shutdown"``. Shutdown wins when
            it coincides with a signal.
        """
        self._loop = asyncio.get_running_loop()
        if shutdown_event.is_set():
            return WAKE_SHUTDOWN
        if self._event.is_set():
            self.clear()
            return WAKE_SIGNAL

        wake_task = asyncio.create_task(self._event.wait())
        stop_task = asyncio.create_task(shutdown_event.wait())
        try:
            await asyncio.wait(
                {wake_task, stop_task}, timeout=max(0.0, timeout), return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (wake_task, stop_task):
                task.cancel()
            await asyncio.gather(wake_task, stop_task, return_exceptions=True)

        if shutdown_event.is_set():
            return WAKE_SHUTDOWN
        if self._event.is_set():
            self.clear()
            return WAKE_SIGNAL
        return WAKE_TIMER
