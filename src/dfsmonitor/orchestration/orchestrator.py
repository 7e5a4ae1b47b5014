"""
Collection run orchestration.

One run loads nothing by itself: it receives the configuration, marks the
runtime state as running, executes the enabled collectors one after another,
aggregates their results into a snapshot and persists it. The runtime state
record is updated on entry and on every exit path.
"""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

from ..collectors import NamespaceCollector, ReplicationCollector
from ..collectors.base import describe_error
from ..config.store import ConfigStore
from ..models.config import MonitorConfig
from ..models.results import GroupResult, NamespaceResult, Snapshot
from ..models.runtime import RuntimeState
from ..models.serialization import utc_now
from ..storage import RuntimeStateStore, StatusStore
from ..validation import CollectionCancelledError

logger = logging.getLogger(__name__)

RESULT_RUNNING = "Running"
RESULT_FAILED = "Failed"
RESULT_CANCELLED = "Cancelled"

TRIGGER_SCHEDULE = "schedule"
TRIGGER_MANUAL = "manual"


class CollectorOrchestrator:
    """
    Runs one collection cycle at a time and keeps the runtime state current.

    All collaborators are injected so that tests can substitute fakes.
    """

    def __init__(
        self,
        config_store: ConfigStore,
        namespace_collector: NamespaceCollector,
        replication_collector: ReplicationCollector,
        status_store: StatusStore,
        runtime_store: RuntimeStateStore,
    ):
        self.config_store = config_store
        self.namespace_collector = namespace_collector
        self.replication_collector = replication_collector
        self.status_store = status_store
        self.runtime_store = runtime_store

    def load_config(self) -> MonitorConfig:
        return self.config_store.load()

    @staticmethod
    def local_root(config: MonitorConfig) -> Path:
        return Path(config.storage.local_cache_root_path)

    def get_runtime_state(self, config: MonitorConfig) -> RuntimeState:
        return self.runtime_store.load(self.local_root(config), config.storage.runtime_state_path)

    def _save_state(self, config: MonitorConfig, state: RuntimeState) -> None:
        self.runtime_store.save(self.local_root(config), config.storage.runtime_state_path, state)

    @staticmethod
    def _check_stop(stop_event: Optional[asyncio.Event], stage: str) -> None:
        if stop_event is not None and stop_event.is_set():
            raise CollectionCancelledError(f"Shutdown requested before {stage}")

    async def run_collection(
        self,
        config: MonitorConfig,
        trigger: str = TRIGGER_SCHEDULE,
        stop_event: Optional[asyncio.Event] = None,
    ) -> Snapshot:
        """
        Execute one collection run and persist its snapshot.

        Args:
            config: Monitor configuration for this run
            trigger: Why the run happens (``schedule`` or ``manual``)
            stop_event: Cooperative stop signal checked between stages

        Returns:
            The persisted snapshot

        Raises:
            CollectionCancelledError: If ``stop_event`` was set mid-run
            asyncio.CancelledError: If the task was cancelled
            OSError: If the snapshot could not be written locally
        """
        state = self.get_runtime_state(config)
        state.is_running = True
        state.last_started_at = utc_now()
        state.last_result = RESULT_RUNNING
        state.last_error = None
        state.last_trigger = trigger
        self._save_state(config, state)
        logger.info(f"Collection run started (trigger: {trigger})")

        try:
            snapshot = await self._collect(config, stop_event)
            self._check_stop(stop_event, "persisting the snapshot")
            loop = asyncio.get_running_loop()
            result = await loop.run_in_executor(
                None,
                self.status_store.save_snapshot,
                snapshot,
                config.storage.status_root_path,
                self.local_root(config),
            )
            if not result.ok:
                logger.warning(
                    f"Snapshot kept locally, remote publication deferred: {result.status.value} {result.message}"
                )
        except (asyncio.CancelledError, CollectionCancelledError):
            state.last_result = RESULT_CANCELLED
            logger.info("Collection run cancelled")
            raise
        except Exception as e:
            state.last_result = RESULT_FAILED
            state.last_error = describe_error(e)
            logger.error(f"Collection run failed: {state.last_error}")
            raise
        else:
            state.last_result = f"Completed ({snapshot.overall_health.value})"
            logger.info(
                f"Collection run completed: {snapshot.overall_health.value}, "
                f"{len(snapshot.namespaces)} namespace(s), {len(snapshot.replication_groups)} group(s), "
                f"{len(snapshot.errors)} error(s)"
            )
            return snapshot
        finally:
            state.is_running = False
            state.last_completed_at = utc_now()
            self._save_state(config, state)

    async def _collect(self, config: MonitorConfig, stop_event: Optional[asyncio.Event]) -> Snapshot:
        namespaces: List[NamespaceResult] = []
        groups: List[GroupResult] = []
        errors: List[str] = []

        if config.collectors.namespace:
            self._check_stop(stop_event, "namespace collection")
            try:
                namespaces = await self.namespace_collector.collect(config)
            except Exception as e:
                logger.error(f"Namespace collector failed: {describe_error(e)}")
                errors.append(f"namespace: {describe_error(e)}")

        if config.collectors.replication:
            self._check_stop(stop_event, "replication collection")
            try:
                groups = await self.replication_collector.collect(config)
            except Exception as e:
                logger.error(f"Replication collector failed: {describe_error(e)}")
                errors.append(f"replication: {describe_error(e)}")

        errors.extend(f"namespace {ns.path}: {ns.error}" for ns in namespaces if ns.error)
        errors.extend(f"group {group.group_name}: {group.error}" for group in groups if group.error)

        snapshot = Snapshot(
            created_at=utc_now(),
            namespaces=namespaces,
            replication_groups=groups,
            errors=errors,
        )
        snapshot.overall_health = snapshot.compute_overall_health()
        return snapshot
