"""
Signal handling for the orchestration module.

This module maps SIGINT/SIGTERM to a graceful shutdown of every registered
collection worker, using a global registry pattern since signal handlers
cannot be bound to instances directly.
"""

import logging
import signal
import threading
from typing import TYPE_CHECKING, Any, Dict

if TYPE_CHECKING:
    from .worker import CollectionWorker

logger = logging.getLogger(__name__)

_active_workers: Dict[int, "CollectionWorker"] = {}
_active_workers_lock = threading.Lock()


class SignalHandler:
    """
    Manages signal registration and cleanup for CollectionWorker instances.

    Usage:
        handler = SignalHandler()
        handler.register_worker(id(worker), worker)
        handler.setup_signal_handlers()
        try:
            asyncio.run(worker.run())
        finally:
            handler.cleanup_signal_handlers()
            handler.unregister_worker(id(worker))
    """

    def __init__(self):
        self._original_sigint_handler = None
        self._original_sigterm_handler = None
        self._signal_handlers_set = False

    def setup_signal_handlers(self) -> None:
        try:
            self._original_sigint_handler = signal.signal(signal.SIGINT, self._global_signal_handler)
            self._original_sigterm_handler = signal.signal(signal.SIGTERM, self._global_signal_handler)
            self._signal_handlers_set = True
            logger.debug("Signal handlers set up for collection worker")
        except (ValueError, OSError) as e:
            logger.warning(f"Failed to set up signal handlers: {e}")

    def cleanup_signal_handlers(self) -> None:
        """Restore original signal handlers."""
        if not self._signal_handlers_set:
            return

        try:
            if self._original_sigint_handler is not None:
                signal.signal(signal.SIGINT, self._original_sigint_handler)
            if self._original_sigterm_handler is not None:
                signal.signal(signal.SIGTERM, self._original_sigterm_handler)
            logger.debug("Signal handlers restored")
        except (ValueError, OSError) as e:
            logger.warning(f"Failed to restore signal handlers: {e}")
        finally:
            self._signal_handlers_set = False

    def register_worker(self, worker_id: int, worker: "CollectionWorker") -> None:
        with _active_workers_lock:
            _active_workers[worker_id] = worker
            logger.debug(f"Registered worker {worker_id} for signal handling")

    def unregister_worker(self, worker_id: int) -> None:
        with _active_workers_lock:
            if _active_workers.pop(worker_id, None) is not None:
                logger.debug(f"Unregistered worker {worker_id} from signal handling")

    @staticmethod
    def _global_signal_handler(signum: int, frame: Any) -> None:
        """Request shutdown of every registered worker."""
        logger.warning(f"Signal {signum} received. Requesting shutdown of all active workers.")
        with _active_workers_lock:
            for worker_id, worker in _active_workers.items():
                logger.info(f"Requesting shutdown for worker {worker_id}")
                worker.request_shutdown()
