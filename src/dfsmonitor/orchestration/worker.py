"""
Long-running collection worker loop.

Each cycle loads the configuration, drains the collect-now command queue,
runs one collection and then sleeps until the polling interval elapses, a
wake signal arrives or shutdown is requested. A background poller turns
command files written by other processes into wake signals. The loop only
ends on shutdown; any other failure is logged and followed by a fixed
backoff.
"""

import asyncio
import logging
from typing import List, Optional, Tuple

from ..models.config import MonitorConfig
from ..models.runtime import CollectNowCommand
from ..models.results import Snapshot
from ..storage import CommandQueue
from ..validation import CollectionCancelledError, handle_error, ErrorSeverity
from .orchestrator import TRIGGER_MANUAL, TRIGGER_SCHEDULE, CollectorOrchestrator
from .wake import WAKE_SHUTDOWN, WakeChannel

logger = logging.getLogger(__name__)

DEFAULT_COMMAND_POLL_INTERVAL = 5.0
DEFAULT_MINIMUM_INTERVAL = 10.0
DEFAULT_ERROR_BACKOFF = 15.0


class CollectionWorker:
    """
    Drives the orchestrator on a schedule and on demand.

    Args:
        orchestrator: Runs the individual collections
        command_queue: Source of collect-now commands
        wake_channel: Early-wake signal shared with the command poller
        command_poll_interval: Seconds between command directory polls
        minimum_interval: Lower bound of the idle wait between runs
        error_backoff: Idle wait after a failed cycle
    """

    def __init__(
        self,
        orchestrator: CollectorOrchestrator,
        command_queue: CommandQueue,
        wake_channel: Optional[WakeChannel] = None,
        command_poll_interval: float = DEFAULT_COMMAND_POLL_INTERVAL,
        minimum_interval: float = DEFAULT_MINIMUM_INTERVAL,
        error_backoff: float = DEFAULT_ERROR_BACKOFF,
    ):
        self.orchestrator = orchestrator
        self.command_queue = command_queue
        self.wake_channel = wake_channel or WakeChannel()
        self.command_poll_interval = command_poll_interval
        self.minimum_interval = minimum_interval
        self.error_backoff = error_backoff

        self._shutdown = asyncio.Event()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self.cycles_completed = 0
        self.cycles_failed = 0
        self.last_trigger: Optional[str] = None

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown.is_set()

    def request_shutdown(self) -> None:
        """Ask the loop to stop. Safe to call from signal handlers and other threads."""
        logger.info("Worker shutdown requested")
        loop = self._loop
        if loop is not None and not loop.is_closed():
            loop.call_soon_threadsafe(self._shutdown.set)
        else:
            self._shutdown.set()

    def idle_interval(self, config: MonitorConfig) -> float:
        return max(self.minimum_interval, float(config.collection.polling_interval_seconds))

    def drain_commands(self) -> List[CollectNowCommand]:
        """Dequeue pending commands, stopping early when shutdown is requested."""
        self.wake_channel.clear()
        processed = []
        for command in self.command_queue.dequeue_all():
            if self._shutdown.is_set():
                logger.info("Shutdown requested, leaving remaining commands unprocessed")
                break
            logger.info(
                f"Collect-now command {command.id} from {command.requested_by}"
                + (f": {command.reason}" if command.reason else "")
            )
            processed.append(command)
        return processed

    async def run_cycle(self) -> Tuple[MonitorConfig, Snapshot]:
        """
        Execute one worker cycle.

        Returns:
            ``(config, snapshot)`` of the completed run
        """
        loop = asyncio.get_running_loop()
        config = await loop.run_in_executor(None, self.orchestrator.load_config)
        commands = self.drain_commands()
        trigger = TRIGGER_MANUAL if commands else TRIGGER_SCHEDULE
        self.last_trigger = trigger
        snapshot = await self.orchestrator.run_collection(config, trigger, self._shutdown)
        return config, snapshot

    async def _run_cycle_until_shutdown(self) -> Tuple[MonitorConfig, Snapshot]:
        """
        Run one cycle, cancelling it as soon as shutdown is requested.

        Raises:
            CollectionCancelledError: If shutdown interrupted the cycle
        """
        cycle = asyncio.create_task(self.run_cycle(), name="collection-cycle")
        stopped = asyncio.create_task(self._shutdown.wait(), name="shutdown-wait")
        try:
            await asyncio.wait({cycle, stopped}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            stopped.cancel()
            if not cycle.done():
                logger.info("Shutdown requested, cancelling collection in progress")
                cycle.cancel()
                await asyncio.gather(cycle, return_exceptions=True)
        if cycle.cancelled():
            raise CollectionCancelledError("Shutdown requested during collection")
        return cycle.result()

    async def run(self) -> None:
        """Run cycles until shutdown is requested."""
        self._loop = asyncio.get_running_loop()
        poller = asyncio.create_task(self._poll_commands(), name="command-poller")
        logger.info("Collection worker started")
        try:
            while not self._shutdown.is_set():
                try:
                    config, _ = await self._run_cycle_until_shutdown()
                    self.cycles_completed += 1
                    delay = self.idle_interval(config)
                except CollectionCancelledError:
                    break
                except Exception as e:
                    self.cycles_failed += 1
                    handle_error(
                        error=e,
                        context="collection worker cycle",
                        severity=ErrorSeverity.ERROR,
                        reraise=False,
                        logger=logger,
                    )
                    delay = self.error_backoff

                reason = await self.wake_channel.wait(delay, self._shutdown)
                logger.debug(f"Worker woke up: {reason}")
                if reason == WAKE_SHUTDOWN:
                    break
        finally:
            poller.cancel()
            await asyncio.gather(poller, return_exceptions=True)
            logger.info(
                f"Collection worker stopped after {self.cycles_completed} run(s), {self.cycles_failed} failure(s)"
            )

    async def _poll_commands(self) -> None:
        while not self._shutdown.is_set():
            try:
                await asyncio.wait_for(self._shutdown.wait(), timeout=self.command_poll_interval)
                return
            except asyncio.TimeoutError:
                pass
            try:
                if self.command_queue.pending_count() > 0:
                    self.wake_channel.signal()
            except OSError as e:
                logger.warning(f"Could not poll command directory {self.command_queue.directory}: {e}")
