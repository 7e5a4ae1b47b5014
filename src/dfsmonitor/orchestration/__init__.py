"""
Orchestration module for the collection service.

Components:
- CollectorOrchestrator: runs one collection and keeps the runtime state current
- CollectionWorker: the scheduled/on-demand driver loop
- WakeChannel: coalescing early-wake signal for the driver loop
- SignalHandler: SIGINT/SIGTERM to graceful worker shutdown
"""

from .orchestrator import (
    RESULT_CANCELLED,
    RESULT_FAILED,
    RESULT_RUNNING,
    TRIGGER_MANUAL,
    TRIGGER_SCHEDULE,
    CollectorOrchestrator,
)
from .signal_handler import SignalHandler
from .wake import WAKE_SHUTDOWN, WAKE_SIGNAL, WAKE_TIMER, WakeChannel
from .worker import CollectionWorker

__all__ = [
    "CollectorOrchestrator",
    "CollectionWorker",
    "SignalHandler",
    "WakeChannel",
    "RESULT_CANCELLED",
    "RESULT_FAILED",
    "RESULT_RUNNING",
    "TRIGGER_MANUAL",
    "TRIGGER_SCHEDULE",
    "WAKE_SHUTDOWN",
    "WAKE_SIGNAL",
    "WAKE_TIMER",
]
