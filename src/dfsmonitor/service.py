"""
Service facade used by the command line and by external API layers.

`MonitorService.from_settings` wires every store, the provider, the thread
pool, the collectors and the orchestrator once at process start. Callers
then use the facade instead of the individual components.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .collectors import NamespaceCollector, ReplicationCollector
from .config import ConfigStore
from .executor import ManagedThreadPoolExecutor, ThreadPoolConfig
from .models.config import MonitorConfig
from .models.results import GroupResult, HealthState, NamespaceResult, Snapshot
from .models.runtime import CollectNowCommand, RuntimeState
from .models.serialization import format_timestamp
from .models.settings import ServiceSettings, WorkerSettings
from .orchestration import TRIGGER_MANUAL, CollectionWorker, CollectorOrchestrator, WakeChannel
from .providers import TopologyQueryProvider, create_provider
from .reporting import export_report
from .storage import CommandQueue, RuntimeStateStore, StatusStore, StoreResult

logger = logging.getLogger(__name__)


class MonitorService:
    """
    Entry point to the collection service.

    The thread pool is started lazily by `start` (or the context manager)
    and must be running for collections.
    """

    def __init__(
        self,
        config_store: ConfigStore,
        command_queue: CommandQueue,
        orchestrator: CollectorOrchestrator,
        status_store: StatusStore,
        runtime_store: RuntimeStateStore,
        executor: Optional[ManagedThreadPoolExecutor] = None,
        provider: Optional[TopologyQueryProvider] = None,
        wake_channel: Optional[WakeChannel] = None,
        worker_settings: Optional[WorkerSettings] = None,
    ):
        self.config_store = config_store
        self.command_queue = command_queue
        self.orchestrator = orchestrator
        self.status_store = status_store
        self.runtime_store = runtime_store
        self.executor = executor
        self.provider = provider
        self.wake_channel = wake_channel or WakeChannel()
        self.worker_settings = worker_settings or WorkerSettings()

    @classmethod
    def from_settings(
        cls, settings: ServiceSettings, provider: Optional[TopologyQueryProvider] = None
    ) -> "MonitorService":
        """
        Build the full component graph from service settings.

        Args:
            settings: Loaded service settings
            provider: Provider to use instead of the configured one
        """
        provider = provider or create_provider(settings.provider)
        executor = ManagedThreadPoolExecutor(
            ThreadPoolConfig(max_workers=settings.worker.provider_threads)
        )
        config_store = ConfigStore(settings.storage.config_path, settings.storage.local_cache_root)
        status_store = StatusStore()
        runtime_store = RuntimeStateStore()
        orchestrator = CollectorOrchestrator(
            config_store=config_store,
            namespace_collector=NamespaceCollector(provider, executor),
            replication_collector=ReplicationCollector(provider, executor),
            status_store=status_store,
            runtime_store=runtime_store,
        )
        return cls(
            config_store=config_store,
            command_queue=CommandQueue(settings.storage.command_queue_dir),
            orchestrator=orchestrator,
            status_store=status_store,
            runtime_store=runtime_store,
            executor=executor,
            provider=provider,
            worker_settings=settings.worker,
        )

    def start(self) -> None:
        if self.executor is not None and not self.executor.is_running:
            self.executor.start()

    def close(self) -> None:
        if self.executor is not None:
            self.executor.shutdown(wait=False, cancel_futures=True)
        if self.provider is not None:
            self.provider.close()

    def __enter__(self) -> "MonitorService":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # --- Configuration ---

    def load_config(self) -> MonitorConfig:
        return self.config_store.load()

    def save_config(self, config: MonitorConfig) -> StoreResult:
        return self.config_store.save(config)

    # --- Collection ---

    async def run_collection(self, trigger: str = TRIGGER_MANUAL) -> Snapshot:
        """Run one collection immediately with the current configuration."""
        config = self.load_config()
        return await self.orchestrator.run_collection(config, trigger)

    def create_worker(self) -> CollectionWorker:
        return CollectionWorker(
            orchestrator=self.orchestrator,
            command_queue=self.command_queue,
            wake_channel=self.wake_channel,
            command_poll_interval=self.worker_settings.command_poll_interval_seconds,
            minimum_interval=self.worker_settings.minimum_interval_seconds,
            error_backoff=self.worker_settings.error_backoff_seconds,
        )

    def enqueue_collect_now(self, requested_by: str = "api", reason: Optional[str] = None) -> CollectNowCommand:
        """Queue a collect-now command and wake an in-process worker."""
        command = CollectNowCommand(requested_by=requested_by, reason=reason)
        self.command_queue.enqueue(command)
        self.wake_channel.signal()
        return command

    def get_runtime_state(self) -> RuntimeState:
        return self.orchestrator.get_runtime_state(self.load_config())

    # --- Results ---

    def load_latest_snapshot(self) -> Optional[Snapshot]:
        config = self.load_config()
        return self.status_store.load_latest(
            config.storage.status_root_path, config.storage.local_cache_root_path
        )

    def get_health_summary(self) -> Dict[str, Any]:
        """
        Summarize the latest snapshot and the runtime state.

        Returns:
            Dictionary with overall health, per-health counts of namespaces
            and replication groups, the error count and the last run outcome
        """
        snapshot = self.load_latest_snapshot()
        state = self.get_runtime_state()

        def counts(states):
            result = {health.value: 0 for health in HealthState}
            for health in states:
                result[health.value] += 1
            return result

        summary: Dict[str, Any] = {
            "overallHealth": HealthState.UNKNOWN.value,
            "createdAt": None,
            "namespaces": counts([]),
            "replicationGroups": counts([]),
            "errorCount": 0,
            "isRunning": state.is_running,
            "lastResult": state.last_result,
            "lastCompletedAt": format_timestamp(state.last_completed_at) if state.last_completed_at else None,
        }
        if snapshot is not None:
            summary.update(
                overallHealth=snapshot.overall_health.value,
                createdAt=format_timestamp(snapshot.created_at),
                namespaces=counts(ns.health for ns in snapshot.namespaces),
                replicationGroups=counts(group.health for group in snapshot.replication_groups),
                errorCount=len(snapshot.errors),
            )
        return summary

    def get_namespace_status(self, namespace_id: str) -> Optional[NamespaceResult]:
        snapshot = self.load_latest_snapshot()
        if snapshot is None:
            return None
        key = namespace_id.casefold()
        return next((ns for ns in snapshot.namespaces if ns.namespace_id.casefold() == key), None)

    def get_group_status(self, group_name: str) -> Optional[GroupResult]:
        snapshot = self.load_latest_snapshot()
        if snapshot is None:
            return None
        key = group_name.casefold()
        return next(
            (group for group in snapshot.replication_groups if group.group_name.casefold() == key), None
        )

    def export_report(self, path: Union[str, Path], format_type: str = "csv") -> int:
        """Export the latest snapshot's target report; returns the row count."""
        return export_report(self.load_latest_snapshot(), path, format_type)
