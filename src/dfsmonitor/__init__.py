"""
dfsmonitor: namespace and replication health collection service.

This package periodically probes a distributed file namespace and its
replication topology, scores their health and publishes point-in-time
snapshots for a separate reporting layer.

The package is organized into specialized modules:
- config: Service settings, monitor configuration validation and the config store
- models: Data structures and their JSON form
- validation: Input validation, error taxonomy and retry strategy
- storage: Atomic files, runtime state, command queue and snapshot outbox
- executor: Thread pool for blocking provider calls
- providers: Topology query providers
- collectors: Namespace and replication collectors and scoring rules
- orchestration: Collection runs, worker loop and signal handling
- reporting: Tabular target reports
- cli: Command-line interface

Usage:
    From command line:
        dfsmonitor --config conf/config.toml run

    Programmatically:
        from dfsmonitor import MonitorService, get_settings
        with MonitorService.from_settings(get_settings()) as service:
            snapshot = asyncio.run(service.run_collection())
"""

# Main interfaces
from .config import ConfigStore, clear_settings_cache, get_settings, set_settings_path
from .service import MonitorService

# Model classes for external use
from .models import (
    CollectNowCommand,
    HealthState,
    MonitorConfig,
    RuntimeState,
    ServiceSettings,
    Snapshot,
)

# Persistence results
from .storage import StoreResult, StoreStatus

# Validation utilities
from .validation import (
    ConfigConflictError,
    ConfigCorruptError,
    LockTimeoutError,
    ProviderError,
    ValidationError,
)

__version__ = "1.0.0"

__all__ = [
    # Main interfaces
    "ConfigStore",
    "MonitorService",
    "get_settings",
    "clear_settings_cache",
    "set_settings_path",
    # Models
    "CollectNowCommand",
    "HealthState",
    "MonitorConfig",
    "RuntimeState",
    "ServiceSettings",
    "Snapshot",
    # Storage
    "StoreResult",
    "StoreStatus",
    # Errors
    "ConfigConflictError",
    "ConfigCorruptError",
    "LockTimeoutError",
    "ProviderError",
    "ValidationError",
]
