"""
Service settings models, loaded from `config.toml`.

These are the process bootstrap settings: they tell the service where the
monitor configuration document lives, which topology provider to use and how
to log. Everything that governs collection itself lives in the monitor
configuration document instead.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass
class StorageSettings:
    # [storage]
    # Remote (shared) monitor configuration document.
    config_path: Path = Path("remote/config.json")
    # Durable local root: config cache, status tree, outbox, runtime state, commands.
    local_cache_root: Path = Path("cache")

    @property
    def command_queue_dir(self) -> Path:
        return self.local_cache_root / "commands"


@dataclass
class WorkerSettings:
    # [worker]
    command_poll_interval_seconds: float = 5.0
    error_backoff_seconds: float = 15.0
    minimum_interval_seconds: float = 10.0
    # Threads available to blocking provider calls.
    provider_threads: int = 16


@dataclass
class ProviderSettings:
    # [provider]
    type: str = "static"
    # Inventory file for the static provider.
    inventory_path: Optional[Path] = None


@dataclass
class LoggingSettings:
    # [logging]
    level: str = "INFO"
    log_dir: Optional[Path] = None
    retention_days: int = 14


@dataclass
class ServiceSettings:
    """
    The root settings object that aggregates all loaded sections.
    """

    storage: StorageSettings = field(default_factory=StorageSettings)
    worker: WorkerSettings = field(default_factory=WorkerSettings)
    provider: ProviderSettings = field(default_factory=ProviderSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
