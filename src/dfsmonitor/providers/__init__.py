"""
Topology query providers.

A provider answers raw questions about the namespace and replication
topology; the collectors turn those answers into scored results.
"""

from .base import (
    BacklogFact,
    ConnectionFact,
    FolderTargetFact,
    MemberFact,
    ProbeResult,
    TopologyQueryProvider,
)
from .factory import SUPPORTED_PROVIDERS, create_provider
from .static import StaticTopologyProvider

__all__ = [
    "BacklogFact",
    "ConnectionFact",
    "FolderTargetFact",
    "MemberFact",
    "ProbeResult",
    "TopologyQueryProvider",
    "SUPPORTED_PROVIDERS",
    "create_provider",
    "StaticTopologyProvider",
]
