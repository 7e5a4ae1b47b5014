"""
Collectors for the dfsmonitor package.

Collectors turn provider facts into scored results. Each collector runs its
units of work (namespaces or replication groups) concurrently up to the
configured parallelism and isolates their failures from one another.
"""

from .base import BaseCollector
from .namespace import NamespaceCollector
from .replication import ReplicationCollector, dedupe_names
from .scoring import (
    backlog_state,
    class_weight,
    group_health,
    member_health,
    namespace_health,
    ordering_score,
    parse_unc,
    target_enabled,
)

__all__ = [
    "BaseCollector",
    "NamespaceCollector",
    "ReplicationCollector",
    "dedupe_names",
    "backlog_state",
    "class_weight",
    "group_health",
    "member_health",
    "namespace_health",
    "ordering_score",
    "parse_unc",
    "target_enabled",
]
