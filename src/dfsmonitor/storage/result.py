"""
Outcome of a store operation that touches a remote location.

Remote locations are expected to be unavailable from time to time, so the
stores report that as a status instead of raising. Only callers that want
exceptions call `StoreResult.raise_for_status`.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..validation import ConfigConflictError, LockTimeoutError


class StoreStatus(Enum):
    OK = "ok"
    # Remote location unreachable; the local copy is authoritative and the
    # remote write is deferred.
    UNREACHABLE = "unreachable"
    # Remote document is newer than the one the caller edited.
    CONFLICT = "conflict"
    # Remote lock could not be acquired in time.
    TIMEOUT = "timeout"


@dataclass
class StoreResult:
    status: StoreStatus
    # The document that was persisted (locally at least), when applicable.
    value: Any = None
    message: str = ""
    current_version: Optional[int] = None
    attempted_version: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.status is StoreStatus.OK

    def raise_for_status(self) -> "StoreResult":
        """
        Raise for rejected saves, return self otherwise.

        ``UNREACHABLE`` is not an error: the change is safe in the local cache.

        Raises:
            ConfigConflictError: For ``CONFLICT``
            LockTimeoutError: For ``TIMEOUT``
        """
        if self.status is StoreStatus.CONFLICT:
            raise ConfigConflictError(
                self.message,
                current_version=self.current_version if self.current_version is not None else -1,
                attempted_version=self.attempted_version if self.attempted_version is not None else -1,
            )
        if self.status is StoreStatus.TIMEOUT:
            raise LockTimeoutError(self.message)
        return self
