"""
Runtime data models.

This module contains the side-channel records used while the worker is
running: the single runtime state record and the collect-now commands
submitted by external callers.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from .config import new_id
from .serialization import parse_timestamp, to_json_value, utc_now


@dataclass
class RuntimeState:
    """
    Last-run bookkeeping, overwritten in place by the worker loop.

    The zero value (nothing has ever run) is what a missing file loads as.
    """

    is_running: bool = False
    last_started_at: Optional[datetime] = None
    last_completed_at: Optional[datetime] = None
    last_result: str = "Never run"
    last_error: Optional[str] = None
    last_trigger: Optional[str] = None
    updated_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return to_json_value(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RuntimeState":
        return cls(
            is_running=bool(data.get("isRunning", False)),
            last_started_at=parse_timestamp(data.get("lastStartedAt")),
            last_completed_at=parse_timestamp(data.get("lastCompletedAt")),
            last_result=data.get("lastResult", "Never run"),
            last_error=data.get("lastError"),
            last_trigger=data.get("lastTrigger"),
            updated_at=parse_timestamp(data.get("updatedAt")) or utc_now(),
        )


@dataclass
class CollectNowCommand:
    """A request for an immediate collection run."""

    requested_by: str = "api"
    reason: Optional[str] = None
    id: str = field(default_factory=new_id)
    requested_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return to_json_value(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CollectNowCommand":
        command_id = data.get("id")
        if not command_id:
            raise ValueError("Command payload has no id")
        return cls(
            id=str(command_id),
            requested_by=str(data.get("requestedBy") or "api"),
            reason=data.get("reason"),
            requested_at=parse_timestamp(data.get("requestedAt")) or utc_now(),
        )
