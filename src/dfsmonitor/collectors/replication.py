"""
Replication collector.

For every replication group it gathers member service state and recent
warnings, the connection topology and the backlog of every connection for
every replicated folder, then scores the group. Groups are isolated from each
other; only a failure of group discovery itself aborts the collector.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from ..models.config import MonitorConfig
from ..models.results import ConnectionResult, GroupResult, HealthState, MemberResult
from ..providers import ConnectionFact, MemberFact
from .base import BaseCollector, describe_error
from .scoring import backlog_state, group_health, member_health

logger = logging.getLogger(__name__)

APPROXIMATE_TOPOLOGY = "Approximate topology: no connections reported, linear chain assumed from member order"


def dedupe_names(names: Iterable[str]) -> List[str]:
    """Remove case-insensitive duplicates, keeping the first spelling and order."""
    seen = set()
    result = []
    for name in names:
        key = name.casefold()
        if key not in seen:
            seen.add(key)
            result.append(name)
    return result


def dedupe_connections(connections: Iterable[ConnectionFact]) -> List[Tuple[str, str]]:
    seen = set()
    result = []
    for conn in connections:
        key = (conn.source.casefold(), conn.destination.casefold())
        if key not in seen:
            seen.add(key)
            result.append((conn.source, conn.destination))
    return result


def linear_chain(members: List[MemberFact]) -> List[Tuple[str, str]]:
    return [(members[i].name, members[i + 1].name) for i in range(len(members) - 1)]


class ReplicationCollector(BaseCollector):
    """Collects member, connection and backlog health of replication groups."""

    async def resolve_groups(self, config: MonitorConfig) -> List[str]:
        """
        Discovered groups (when enabled) followed by explicit groups.

        Raises:
            Exception: If discovery fails after all retries
        """
        discovered: List[str] = []
        if config.replication.auto_discover_groups:
            discovered = await self._query(
                config, "discover replication groups", self.provider.discover_replication_groups
            )
        return dedupe_names(list(discovered) + list(config.replication.explicit_groups))

    async def collect(self, config: MonitorConfig) -> List[GroupResult]:
        groups = await self.resolve_groups(config)
        if not groups:
            logger.debug("No replication groups to collect")
            return []

        logger.info(
            f"Collecting {len(groups)} replication group(s) with parallelism {config.collection.max_parallelism}"
        )
        return await self._bounded_map(
            config.collection.max_parallelism,
            lambda group: self._collect_group(group, config),
            groups,
        )

    async def _collect_group(self, group: str, config: MonitorConfig) -> GroupResult:
        result = GroupResult(group_name=group)
        try:
            members = await self._query(config, f"list members of {group}", self.provider.list_members, group)
            connections = await self._query(
                config, f"list connections of {group}", self.provider.list_connections, group
            )
            folders = await self._query(
                config, f"list replicated folders of {group}", self.provider.list_replicated_folders, group
            )
        except Exception as e:
            logger.error(f"Replication collection failed for group {group}: {describe_error(e)}")
            result.health = HealthState.CRITICAL
            result.error = describe_error(e)
            return result

        result.members = [self._member_result(member, config) for member in members]

        pairs = dedupe_connections(connections)
        approximate = False
        if not pairs:
            pairs = linear_chain(members)
            approximate = bool(pairs)

        folder_names: List[Optional[str]] = list(dedupe_names(folders)) or [None]
        for source, destination in pairs:
            for folder in folder_names:
                result.connections.append(
                    await self._connection_result(group, source, destination, folder, approximate, config)
                )

        result.health = group_health(
            [m.health for m in result.members], [c.backlog_state for c in result.connections]
        )
        logger.debug(
            f"Group {group}: {len(result.members)} member(s), {len(result.connections)} connection(s), "
            f"health {result.health.value}"
        )
        return result

    @staticmethod
    def _member_result(member: MemberFact, config: MonitorConfig) -> MemberResult:
        warnings: List[str] = []
        if config.collectors.event_log:
            warnings = list(member.warnings)[: config.collection.event_sample_count]
        return MemberResult(
            name=member.name,
            service_state=member.service_state,
            health=member_health(member.service_state, warnings),
            recent_warnings=warnings,
        )

    async def _connection_result(
        self,
        group: str,
        source: str,
        destination: str,
        folder: Optional[str],
        approximate: bool,
        config: MonitorConfig,
    ) -> ConnectionResult:
        connection = ConnectionResult(source=source, destination=destination, replicated_folder=folder)
        notes = [APPROXIMATE_TOPOLOGY] if approximate else []
        try:
            backlog = await self._query(
                config,
                f"query backlog {source} -> {destination} ({folder or 'all folders'}) in {group}",
                self.provider.query_backlog,
                group,
                source,
                destination,
                folder,
            )
        except Exception as e:
            logger.warning(f"Backlog query failed for {source} -> {destination} in {group}: {describe_error(e)}")
            notes.append(f"Backlog query failed: {describe_error(e)}")
        else:
            connection.backlog_count = backlog.count
            if backlog.details:
                notes.append(backlog.details)

        connection.backlog_state = backlog_state(connection.backlog_count, config.thresholds)
        connection.details = "; ".join(notes) or None
        return connection
