"""
Configuration data models.

This module contains the monitor configuration document, which is persisted
as JSON by the config store and governs what the collectors visit and how
their results are scored.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List

from .serialization import to_json_value, utc_now


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class StorageOptions:
    """Where snapshots and runtime bookkeeping are written."""

    # Remote (shared) root receiving the status/<y>/<m>/<d>/ tree.
    status_root_path: str = "remote/status"
    # Durable local root holding caches, the outbox and the command queue.
    local_cache_root_path: str = "cache"
    # Runtime state file, relative to the local cache root.
    runtime_state_path: str = "runtime-state.json"


@dataclass
class ThresholdOptions:
    warn_unreachable_targets: int = 1
    critical_unreachable_targets: int = 3
    warn_backlog: int = 50
    critical_backlog: int = 250


@dataclass
class CollectionOptions:
    polling_interval_seconds: int = 300
    request_timeout_seconds: int = 15
    # Additional attempts after the first failed provider query.
    retry_count: int = 2
    max_parallelism: int = 8
    event_sample_count: int = 100
    thresholds: ThresholdOptions = field(default_factory=ThresholdOptions)


@dataclass
class MonitoredNamespace:
    path: str
    id: str = field(default_factory=new_id)
    enabled: bool = True


@dataclass
class ReplicationOptions:
    auto_discover_groups: bool = True
    explicit_groups: List[str] = field(default_factory=list)


@dataclass
class CollectorToggles:
    namespace: bool = True
    replication: bool = True
    event_log: bool = True


@dataclass
class MonitorConfig:
    """
    The root monitor configuration document.

    ``version`` increases on every successful save; the config store rejects
    saves that were based on an older version than the one persisted remotely.
    """

    storage: StorageOptions = field(default_factory=StorageOptions)
    collection: CollectionOptions = field(default_factory=CollectionOptions)
    namespaces: List[MonitoredNamespace] = field(default_factory=list)
    replication: ReplicationOptions = field(default_factory=ReplicationOptions)
    collectors: CollectorToggles = field(default_factory=CollectorToggles)
    version: int = 1
    updated_at: datetime = field(default_factory=utc_now)

    @property
    def thresholds(self) -> ThresholdOptions:
        return self.collection.thresholds

    def enabled_namespaces(self) -> List[MonitoredNamespace]:
        return [ns for ns in self.namespaces if ns.enabled]

    def to_dict(self) -> Dict[str, Any]:
        return to_json_value(self)
