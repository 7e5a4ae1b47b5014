"""
Scoring rules shared by the collectors.

Pure functions only: target ordering, UNC path parsing and the health
classification of namespaces, members, backlogs and replication groups.
"""

from typing import Iterable, Optional, Tuple

from ..models.config import ThresholdOptions
from ..models.results import HealthState, aggregate_health

# Referral priority class -> weight. Lower weight sorts first.
CLASS_WEIGHTS = {
    "globalhigh": 0,
    "sitecosthigh": 1,
    "sitecostnormal": 2,
    "sitecostlow": 3,
    "globallow": 4,
}
UNKNOWN_CLASS_WEIGHT = 4

ENABLED_BONUS = 100000
CLASS_STEP = 1000
ENABLED_STATES = {"online", "enabled"}
RUNNING_STATE = "running"


def _normalize_class(priority_class: Optional[str]) -> str:
    text = (priority_class or "").lower()
    for ch in "-_ ":
        text = text.replace(ch, "")
    return text


def class_weight(priority_class: Optional[str]) -> int:
    """Weight of a referral priority class; unrecognized classes weigh 4."""
    return CLASS_WEIGHTS.get(_normalize_class(priority_class), UNKNOWN_CLASS_WEIGHT)


def target_enabled(raw_state: Optional[str]) -> bool:
    """A target is enabled when its state is missing, Online or Enabled."""
    if raw_state is None:
        return True
    return raw_state.strip().lower() in ENABLED_STATES


def ordering_score(
    priority_class: Optional[str], priority_rank: Optional[int], raw_state: Optional[str]
) -> int:
    """
    Referral ordering score of a target, higher sorts first.

    ``(enabled ? 100000 : 0) + (5 - classWeight) * 1000 - rank``
    """
    score = ENABLED_BONUS if target_enabled(raw_state) else 0
    score += (5 - class_weight(priority_class)) * CLASS_STEP
    return score - (priority_rank or 0)


def parse_unc(unc_path: str) -> Tuple[str, str]:
    """Split ``\\\\server\\share\\...`` into ``(server, share)``."""
    parts = [p for p in unc_path.replace("/", "\\").strip("\\").split("\\") if p]
    server = parts[0] if parts else ""
    share = parts[1] if len(parts) > 1 else ""
    return server, share


def namespace_health(unreachable: int, thresholds: ThresholdOptions) -> HealthState:
    if unreachable >= thresholds.critical_unreachable_targets:
        return HealthState.CRITICAL
    if unreachable >= thresholds.warn_unreachable_targets:
        return HealthState.WARN
    return HealthState.OK


def backlog_state(count: Optional[int], thresholds: ThresholdOptions) -> HealthState:
    if count is None:
        return HealthState.UNKNOWN
    if count >= thresholds.critical_backlog:
        return HealthState.CRITICAL
    if count >= thresholds.warn_backlog:
        return HealthState.WARN
    return HealthState.OK


def member_health(service_state: Optional[str], recent_warnings: Iterable[str]) -> HealthState:
    if (service_state or "").strip().lower() != RUNNING_STATE:
        return HealthState.CRITICAL
    if any(True for _ in recent_warnings):
        return HealthState.WARN
    return HealthState.OK


def group_health(
    member_states: Iterable[HealthState], connection_states: Iterable[HealthState]
) -> HealthState:
    return aggregate_health(list(member_states) + list(connection_states))
