"""
Storage module for the collection service's persisted state.

This module provides the file-based persistence layer:
- Crash-safe atomic writes and JSON helpers shared by every store
- Exclusive lock files for shared remote locations
- The runtime state record of the last collection run
- The durable collect-now command queue
- The snapshot store with its local outbox to the remote status root

Expected remote conditions are reported as a `StoreResult` status rather
than raised.
"""

from .atomic import atomic_write, dumps_json, read_json, write_json
from .command_queue import CommandQueue
from .locking import FileLock
from .result import StoreResult, StoreStatus
from .runtime_store import RuntimeStateStore
from .status_store import StatusStore, flatten_relative_path, snapshot_relative_path

__all__ = [
    "atomic_write",
    "dumps_json",
    "read_json",
    "write_json",
    "CommandQueue",
    "FileLock",
    "StoreResult",
    "StoreStatus",
    "RuntimeStateStore",
    "StatusStore",
    "flatten_relative_path",
    "snapshot_relative_path",
]
