"""
Defines the fact structures and abstract interface for topology providers.

This module provides:
- Fact dataclasses: the raw answers a provider gives about namespaces,
  targets and replication groups, before any scoring.
- TopologyQueryProvider: an abstract base class (ABC) that defines the
  interface every provider implementation must adhere to (e.g. a static
  inventory file, or a client of the management surface).

Providers are synchronous and may block; the collectors run them on the
provider thread pool. Any failure is reported by raising `ProviderError`.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

logger = logging.getLogger(__name__)


@dataclass
class FolderTargetFact:
    """
    One target of one namespace folder, as reported by the provider.

    Attributes:
        folder_path: Full path of the namespace folder the target backs.
        unc_path: UNC path of the target share (e.g. ``\\\\fs01\\public``).
        priority_class: Referral priority class name, if any.
        priority_rank: Referral priority rank within the class, if any.
        state: Raw target state (``Online``, ``Offline``...), if reported.
    """

    folder_path: str
    unc_path: str
    priority_class: Optional[str] = None
    priority_rank: Optional[int] = None
    state: Optional[str] = None


@dataclass
class ProbeResult:
    reachable: bool
    latency_ms: Optional[float] = None
    error: Optional[str] = None


@dataclass
class MemberFact:
    name: str
    service_state: str
    # Most recent first.
    warnings: List[str] = field(default_factory=list)


@dataclass
class ConnectionFact:
    source: str
    destination: str


@dataclass
class BacklogFact:
    """
    Backlog between two members for one replicated folder.

    ``count`` is None when the provider could not determine it. ``state`` is
    the provider's own status text and is kept for diagnostics only.
    """

    count: Optional[int] = None
    state: Optional[str] = None
    details: Optional[str] = None


class TopologyQueryProvider(ABC):
    """
    Abstract base class for topology query providers.

    Implementations answer questions about the namespace and replication
    topology. They never score anything: reachability, ordering and health
    are derived by the collectors from the facts returned here.
    """

    name = "abstract"

    @abstractmethod
    def list_folder_targets(self, namespace_path: str) -> List[FolderTargetFact]:
        """Return every folder target of the namespace rooted at ``namespace_path``."""

    @abstractmethod
    def probe_target(self, unc_path: str) -> ProbeResult:
        """Check whether a target share is reachable and how long it took."""

    @abstractmethod
    def discover_replication_groups(self) -> List[str]:
        """Return the names of all replication groups visible to the provider."""

    @abstractmethod
    def list_members(self, group: str) -> List[MemberFact]:
        """Return the members of a replication group with their recent warnings."""

    @abstractmethod
    def list_connections(self, group: str) -> List[ConnectionFact]:
        """Return the directed replication connections of a group."""

    @abstractmethod
    def list_replicated_folders(self, group: str) -> List[str]:
        """Return the replicated folder names of a group."""

    @abstractmethod
    def query_backlog(
        self, group: str, source: str, destination: str, folder: Optional[str]
    ) -> BacklogFact:
        """
        Query the backlog from ``source`` to ``destination``.

        Args:
            group: Replication group name
            source: Sending member
            destination: Receiving member
            folder: Replicated folder, or None when the group has none listed
        """

    def close(self) -> None:
        """Release provider resources. The default implementation does nothing."""
