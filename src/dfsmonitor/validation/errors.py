"""
Error taxonomy for collection and persistence.

Provider errors are isolated per namespace or replication group. Remote
persistence problems are not exceptions at all: the stores report them as a
`StoreStatus` (see ``storage.result``). The exceptions below are reserved for
callers that explicitly ask for them and for hard failures such as corrupt
data.
"""

from typing import Optional

from .exceptions import DfsMonitorError


class ProviderError(DfsMonitorError):
    """A topology query or probe failed (command failure, bad output, timeout)."""

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message)
        self.operation = operation


class StoreError(DfsMonitorError):
    """Base class for persistence errors."""


class ConfigConflictError(StoreError):
    """The remote configuration was saved by someone else in the meantime."""

    def __init__(self, message: str, current_version: int, attempted_version: int):
        super().__init__(message)
        self.current_version = current_version
        self.attempted_version = attempted_version


class LockTimeoutError(StoreError, TimeoutError):
    """The remote configuration lock could not be acquired in time."""


class ConfigCorruptError(StoreError):
    """No usable configuration copy could be read."""


class CollectionCancelledError(DfsMonitorError):
    """A collection run stopped because shutdown was requested."""
