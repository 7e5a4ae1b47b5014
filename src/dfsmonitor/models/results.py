"""
Collection results data models and health aggregation.

This module defines the snapshot produced by one collection run and the
per-namespace / per-replication-group results it aggregates. Snapshots are
written once by the run that produced them and read back by the reporting
layer, so every model can round-trip through its JSON form.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from .serialization import items, parse_timestamp, to_json_value, utc_now


class HealthState(Enum):
    """Health of a target, namespace, member, connection, group or run."""

    OK = "Ok"
    WARN = "Warn"
    CRITICAL = "Critical"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: Any) -> "HealthState":
        if isinstance(value, HealthState):
            return value
        text = str(value or "").strip().lower()
        for state in cls:
            if state.value.lower() == text:
                return state
        return cls.UNKNOWN


def aggregate_health(states: Iterable[HealthState]) -> HealthState:
    """
    Combine child health values.

    Any ``Critical`` child makes the result ``Critical``; otherwise any
    ``Warn`` child makes it ``Warn``; otherwise it is ``Ok``. ``Unknown``
    children do not degrade the result.
    """
    seen = set(states)
    if HealthState.CRITICAL in seen:
        return HealthState.CRITICAL
    if HealthState.WARN in seen:
        return HealthState.WARN
    return HealthState.OK


@dataclass
class TargetResult:
    unc_path: str
    server: str
    share: str
    priority_class: str
    priority_rank: Optional[int]
    ordering_score: int
    raw_state: Optional[str]
    reachable: bool
    latency_ms: Optional[int] = None
    last_error: Optional[str] = None
    last_checked_at: datetime = field(default_factory=utc_now)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TargetResult":
        return cls(
            unc_path=data.get("uncPath", ""),
            server=data.get("server", ""),
            share=data.get("share", ""),
            priority_class=data.get("priorityClass", "Unknown"),
            priority_rank=data.get("priorityRank"),
            ordering_score=int(data.get("orderingScore", 0)),
            raw_state=data.get("rawState"),
            reachable=bool(data.get("reachable", False)),
            latency_ms=data.get("latencyMs"),
            last_error=data.get("lastError"),
            last_checked_at=parse_timestamp(data.get("lastCheckedAt")) or utc_now(),
        )


@dataclass
class FolderResult:
    folder_path: str
    targets: List[TargetResult] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FolderResult":
        return cls(
            folder_path=data.get("folderPath", ""),
            targets=[TargetResult.from_dict(t) for t in items(data, "targets")],
        )


@dataclass
class NamespaceResult:
    namespace_id: str
    path: str
    health: HealthState = HealthState.UNKNOWN
    last_checked_at: datetime = field(default_factory=utc_now)
    folders: List[FolderResult] = field(default_factory=list)
    # Namespace-level failure (folder query failed after all retries).
    error: Optional[str] = None

    def all_targets(self) -> List[TargetResult]:
        return [target for folder in self.folders for target in folder.targets]

    def unreachable_count(self) -> int:
        return sum(1 for target in self.all_targets() if not target.reachable)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NamespaceResult":
        return cls(
            namespace_id=data.get("namespaceId", ""),
            path=data.get("path", ""),
            health=HealthState.parse(data.get("health")),
            last_checked_at=parse_timestamp(data.get("lastCheckedAt")) or utc_now(),
            folders=[FolderResult.from_dict(f) for f in items(data, "folders")],
            error=data.get("error"),
        )


@dataclass
class MemberResult:
    name: str
    service_state: str = "Unknown"
    health: HealthState = HealthState.UNKNOWN
    recent_warnings: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MemberResult":
        return cls(
            name=data.get("name", ""),
            service_state=data.get("serviceState", "Unknown"),
            health=HealthState.parse(data.get("health")),
            recent_warnings=[str(w) for w in items(data, "recentWarnings")],
        )


@dataclass
class ConnectionResult:
    source: str
    destination: str
    replicated_folder: Optional[str] = None
    backlog_count: Optional[int] = None
    backlog_state: HealthState = HealthState.UNKNOWN
    details: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConnectionResult":
        return cls(
            source=data.get("source", ""),
            destination=data.get("destination", ""),
            replicated_folder=data.get("replicatedFolder"),
            backlog_count=data.get("backlogCount"),
            backlog_state=HealthState.parse(data.get("backlogState")),
            details=data.get("details"),
        )


@dataclass
class GroupResult:
    group_name: str
    health: HealthState = HealthState.UNKNOWN
    members: List[MemberResult] = field(default_factory=list)
    connections: List[ConnectionResult] = field(default_factory=list)
    # Group-level failure (member/topology query failed after all retries).
    error: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GroupResult":
        return cls(
            group_name=data.get("groupName", ""),
            health=HealthState.parse(data.get("health")),
            members=[MemberResult.from_dict(m) for m in items(data, "members")],
            connections=[ConnectionResult.from_dict(c) for c in items(data, "connections")],
            error=data.get("error"),
        )


@dataclass
class Snapshot:
    """
    Point-in-time result of one completed collection run.

    Snapshots are never modified after they are persisted; ``created_at``
    determines where they are stored and in which order they are published.
    """

    created_at: datetime = field(default_factory=utc_now)
    overall_health: HealthState = HealthState.UNKNOWN
    namespaces: List[NamespaceResult] = field(default_factory=list)
    replication_groups: List[GroupResult] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def compute_overall_health(self) -> HealthState:
        return aggregate_health(
            [ns.health for ns in self.namespaces]
            + [group.health for group in self.replication_groups]
        )

    def to_dict(self) -> Dict[str, Any]:
        return to_json_value(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Snapshot":
        created_at = parse_timestamp(data.get("createdAt"))
        if created_at is None:
            raise ValueError("Snapshot payload has no createdAt timestamp")
        return cls(
            created_at=created_at,
            overall_health=HealthState.parse(data.get("overallHealth")),
            namespaces=[NamespaceResult.from_dict(n) for n in items(data, "namespaces")],
            replication_groups=[
                GroupResult.from_dict(g) for g in items(data, "replicationGroups")
            ],
            errors=[str(e) for e in items(data, "errors")],
        )
