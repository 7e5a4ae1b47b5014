"""
Data models and structures for the monitoring service.

This module provides the data models used throughout the application,
organized by their functional purpose and lifecycle:

Configuration Models:
- Monitor configuration document (namespaces, replication groups, tuning,
  thresholds, collector toggles)
- Service bootstrap settings loaded from TOML

Result Models:
- Snapshots of one collection run
- Namespace, folder and target results
- Replication group, member and connection results
- Health states and aggregation rules

Runtime Models:
- Runtime state record of the worker loop
- Collect-now commands

All models are dataclasses with camelCase JSON conversion.
"""

# Configuration models
from .config import (
    CollectionOptions,
    CollectorToggles,
    MonitorConfig,
    MonitoredNamespace,
    ReplicationOptions,
    StorageOptions,
    ThresholdOptions,
)

# Result models
from .results import (
    ConnectionResult,
    FolderResult,
    GroupResult,
    HealthState,
    MemberResult,
    NamespaceResult,
    Snapshot,
    TargetResult,
    aggregate_health,
)

# Runtime models
from .runtime import CollectNowCommand, RuntimeState

# Settings models
from .settings import (
    LoggingSettings,
    ProviderSettings,
    ServiceSettings,
    StorageSettings,
    WorkerSettings,
)

__all__ = [
    # Configuration
    "CollectionOptions",
    "CollectorToggles",
    "MonitorConfig",
    "MonitoredNamespace",
    "ReplicationOptions",
    "StorageOptions",
    "ThresholdOptions",
    # Results
    "ConnectionResult",
    "FolderResult",
    "GroupResult",
    "HealthState",
    "MemberResult",
    "NamespaceResult",
    "Snapshot",
    "TargetResult",
    "aggregate_health",
    # Runtime
    "CollectNowCommand",
    "RuntimeState",
    # Settings
    "LoggingSettings",
    "ProviderSettings",
    "ServiceSettings",
    "StorageSettings",
    "WorkerSettings",
]
