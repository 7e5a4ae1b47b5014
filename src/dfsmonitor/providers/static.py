"""
Static topology provider backed by an inventory file.

The inventory describes namespaces, their folder targets and how each target
answers a probe, plus replication groups with their members, connections and
backlog counts. It is used for lab setups, demonstrations and tests, where
no management surface is available. Name lookups are case-insensitive.

Inventory layout (TOML):

    [[namespaces]]
    path = '\\\\corp.example\\files'

    [[namespaces.folders]]
    path = '\\\\corp.example\\files\\Public'

    [[namespaces.folders.targets]]
    unc_path = '\\\\fs01\\public'
    priority_class = "SiteCostNormal"
    priority_rank = 0
    state = "Online"
    reachable = true
    latency_ms = 4.0

    [[replication_groups]]
    name = "RG-Public"
    folders = ["Public"]
    members = [{ name = "FS01", service_state = "Running", warnings = [] }]
    connections = [{ source = "FS01", destination = "FS02" }]
    backlog = [{ source = "FS01", destination = "FS02", folder = "Public", count = 12 }]

A namespace or group entry with an ``error`` key makes every query against it
fail with that message. A group with ``discoverable = false`` is only
collected when listed explicitly in the monitor configuration.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..config.loader import load_inventory_file
from ..validation import ProviderError
from .base import (
    BacklogFact,
    ConnectionFact,
    FolderTargetFact,
    MemberFact,
    ProbeResult,
    TopologyQueryProvider,
)

logger = logging.getLogger(__name__)


def _key(name: Optional[str]) -> str:
    return (name or "").casefold()


class StaticTopologyProvider(TopologyQueryProvider):
    """Answers topology queries from an in-memory inventory document."""

    name = "static"

    def __init__(self, inventory: Dict[str, Any]):
        self._namespaces: Dict[str, Dict[str, Any]] = {}
        self._targets: Dict[str, Dict[str, Any]] = {}
        self._groups: Dict[str, Dict[str, Any]] = {}
        self._group_order: List[str] = []

        for namespace in inventory.get("namespaces", []):
            self._namespaces[_key(namespace["path"])] = namespace
            for folder in namespace.get("folders", []):
                for target in folder.get("targets", []):
                    self._targets[_key(target["unc_path"])] = target

        for group in inventory.get("replication_groups", []):
            key = _key(group["name"])
            self._groups[key] = group
            self._group_order.append(key)

        logger.info(
            f"Static inventory loaded: {len(self._namespaces)} namespace(s), "
            f"{len(self._targets)} target(s), {len(self._groups)} replication group(s)"
        )

    @classmethod
    def from_file(cls, inventory_path: Union[str, Path]) -> "StaticTopologyProvider":
        return cls(load_inventory_file(Path(inventory_path)))

    def _namespace(self, namespace_path: str) -> Dict[str, Any]:
        namespace = self._namespaces.get(_key(namespace_path))
        if namespace is None:
            raise ProviderError(f"Namespace not found: {namespace_path}", operation="list_folder_targets")
        if namespace.get("error"):
            raise ProviderError(str(namespace["error"]), operation="list_folder_targets")
        return namespace

    def _group(self, group: str, operation: str) -> Dict[str, Any]:
        entry = self._groups.get(_key(group))
        if entry is None:
            raise ProviderError(f"Replication group not found: {group}", operation=operation)
        if entry.get("error"):
            raise ProviderError(str(entry["error"]), operation=operation)
        return entry

    def list_folder_targets(self, namespace_path: str) -> List[FolderTargetFact]:
        facts = []
        for folder in self._namespace(namespace_path).get("folders", []):
            for target in folder.get("targets", []):
                facts.append(
                    FolderTargetFact(
                        folder_path=folder["path"],
                        unc_path=target["unc_path"],
                        priority_class=target.get("priority_class"),
                        priority_rank=target.get("priority_rank"),
                        state=target.get("state"),
                    )
                )
        return facts

    def probe_target(self, unc_path: str) -> ProbeResult:
        target = self._targets.get(_key(unc_path))
        if target is None:
            return ProbeResult(reachable=False, error=f"Unknown target {unc_path}")
        reachable = bool(target.get("reachable", True))
        return ProbeResult(
            reachable=reachable,
            latency_ms=target.get("latency_ms"),
            error=None if reachable else target.get("probe_error", "SMB path not reachable"),
        )

    def discover_replication_groups(self) -> List[str]:
        return [
            self._groups[key]["name"]
            for key in self._group_order
            if self._groups[key].get("discoverable", True)
        ]

    def list_members(self, group: str) -> List[MemberFact]:
        return [
            MemberFact(
                name=member["name"],
                service_state=member.get("service_state", "Unknown"),
                warnings=list(member.get("warnings", [])),
            )
            for member in self._group(group, "list_members").get("members", [])
        ]

    def list_connections(self, group: str) -> List[ConnectionFact]:
        return [
            ConnectionFact(source=conn["source"], destination=conn["destination"])
            for conn in self._group(group, "list_connections").get("connections", [])
        ]

    def list_replicated_folders(self, group: str) -> List[str]:
        return list(self._group(group, "list_replicated_folders").get("folders", []))

    def query_backlog(
        self, group: str, source: str, destination: str, folder: Optional[str]
    ) -> BacklogFact:
        for entry in self._group(group, "query_backlog").get("backlog", []):
            if (
                _key(entry.get("source")) == _key(source)
                and _key(entry.get("destination")) == _key(destination)
                and _key(entry.get("folder")) == _key(folder)
            ):
                if entry.get("error"):
                    raise ProviderError(str(entry["error"]), operation="query_backlog")
                return BacklogFact(
                    count=entry.get("count"),
                    state=entry.get("state"),
                    details=entry.get("details"),
                )
        return BacklogFact(count=None, state="Unknown", details="No backlog data in inventory")
