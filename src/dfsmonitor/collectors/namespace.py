"""
Namespace collector.

Visits every enabled namespace, lists its folder targets through the
provider, probes each target and scores the result. Namespaces are isolated
from each other: a namespace whose folder query fails is reported as
``Critical`` with its error while the others are collected normally.
"""

import asyncio
import logging
import time
from typing import Dict, List

from ..models.config import MonitorConfig, MonitoredNamespace
from ..models.results import FolderResult, HealthState, NamespaceResult, TargetResult
from ..models.serialization import utc_now
from ..providers import FolderTargetFact
from .base import MIN_PROBE_TIMEOUT_SECONDS, BaseCollector, describe_error
from .scoring import namespace_health, ordering_score, parse_unc

logger = logging.getLogger(__name__)

UNKNOWN_PRIORITY_CLASS = "Unknown"


class NamespaceCollector(BaseCollector):
    """Collects reachability and referral ordering of namespace targets."""

    async def collect(self, config: MonitorConfig) -> List[NamespaceResult]:
        namespaces = config.enabled_namespaces()
        if not namespaces:
            logger.debug("No enabled namespaces to collect")
            return []

        logger.info(
            f"Collecting {len(namespaces)} namespace(s) with parallelism {config.collection.max_parallelism}"
        )
        return await self._bounded_map(
            config.collection.max_parallelism,
            lambda namespace: self._collect_namespace(namespace, config),
            namespaces,
        )

    async def _collect_namespace(
        self, namespace: MonitoredNamespace, config: MonitorConfig
    ) -> NamespaceResult:
        result = NamespaceResult(namespace_id=namespace.id, path=namespace.path, last_checked_at=utc_now())
        try:
            facts = await self._query(
                config,
                f"list folder targets of {namespace.path}",
                self.provider.list_folder_targets,
                namespace.path,
            )
        except Exception as e:
            logger.error(f"Namespace collection failed for {namespace.path}: {describe_error(e)}")
            result.health = HealthState.CRITICAL
            result.error = describe_error(e)
            return result

        folders: Dict[str, FolderResult] = {}
        probe_timeout = max(MIN_PROBE_TIMEOUT_SECONDS, float(config.collection.request_timeout_seconds))
        for fact in facts:
            folder = folders.get(fact.folder_path.casefold())
            if folder is None:
                folder = FolderResult(folder_path=fact.folder_path)
                folders[fact.folder_path.casefold()] = folder
            folder.targets.append(await self._probe(fact, probe_timeout))

        result.folders = list(folders.values())
        result.health = namespace_health(result.unreachable_count(), config.thresholds)
        result.last_checked_at = utc_now()
        logger.debug(
            f"Namespace {namespace.path}: {len(result.all_targets())} target(s), "
            f"{result.unreachable_count()} unreachable, health {result.health.value}"
        )
        return result

    async def _probe(self, fact: FolderTargetFact, timeout: float) -> TargetResult:
        server, share = parse_unc(fact.unc_path)
        target = TargetResult(
            unc_path=fact.unc_path,
            server=server,
            share=share,
            priority_class=fact.priority_class or UNKNOWN_PRIORITY_CLASS,
            priority_rank=fact.priority_rank,
            ordering_score=ordering_score(fact.priority_class, fact.priority_rank, fact.state),
            raw_state=fact.state,
            reachable=False,
        )

        started = time.monotonic()
        try:
            probe = await self._call(timeout, self.provider.probe_target, fact.unc_path)
        except asyncio.TimeoutError:
            target.last_error = f"Probe timed out after {timeout:g}s"
        except Exception as e:
            target.last_error = describe_error(e)
        else:
            target.reachable = probe.reachable
            target.last_error = probe.error
            if probe.latency_ms is not None:
                target.latency_ms = int(round(probe.latency_ms))

        if target.latency_ms is None:
            target.latency_ms = int(round((time.monotonic() - started) * 1000))
        target.last_checked_at = utc_now()
        return target
