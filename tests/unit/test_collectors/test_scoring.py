"""
Unit tests for target ordering and health classification.
"""

import pytest

from dfsmonitor.collectors.scoring import (
    backlog_state,
    class_weight,
    group_health,
    member_health,
    namespace_health,
    ordering_score,
    parse_unc,
    target_enabled,
)
from dfsmonitor.models.config import ThresholdOptions
from dfsmonitor.models.results import HealthState


@pytest.mark.unit
class TestOrderingScore:
    """Test cases for referral ordering."""

    def test_enabled_global_high(self):
        assert ordering_score("GlobalHigh", 0, "Online") == 105000

    def test_rank_is_subtracted(self):
        assert ordering_score("GlobalHigh", 10, "Online") == 104990

    def test_offline_target_loses_enabled_bonus(self):
        assert ordering_score("GlobalHigh", 0, "Offline") == 5000

    def test_missing_state_counts_as_enabled(self):
        assert ordering_score("SiteCostLow", None, None) == 102000

    def test_unknown_class_weighs_like_global_low(self):
        assert ordering_score("Whatever", 0, "Enabled") == ordering_score("GlobalLow", 0, "Enabled")

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("GlobalHigh", 0),
            ("site-cost-high", 1),
            ("Site_Cost_Normal", 2),
            ("SITECOSTLOW", 3),
            ("global low", 4),
            (None, 4),
        ],
    )
    def test_class_weight_normalization(self, value, expected):
        assert class_weight(value) == expected

    def test_enabled_states(self):
        assert target_enabled(" online ")
        assert target_enabled("ENABLED")
        assert not target_enabled("Offline")


@pytest.mark.unit
class TestParseUnc:
    """Test cases for UNC path parsing."""

    def test_server_and_share(self):
        assert parse_unc(r"\\fs01\public\sub\dir") == ("fs01", "public")

    def test_forward_slashes(self):
        assert parse_unc("//fs01/public") == ("fs01", "public")

    def test_server_only(self):
        assert parse_unc(r"\\fs01") == ("fs01", "")

    def test_empty(self):
        assert parse_unc("") == ("", "")


@pytest.mark.unit
class TestHealthRules:
    """Test cases for namespace, backlog, member and group health."""

    def test_namespace_thresholds(self):
        thresholds = ThresholdOptions(warn_unreachable_targets=1, critical_unreachable_targets=3)

        assert namespace_health(0, thresholds) == HealthState.OK
        assert namespace_health(1, thresholds) == HealthState.WARN
        assert namespace_health(2, thresholds) == HealthState.WARN
        assert namespace_health(3, thresholds) == HealthState.CRITICAL

    def test_backlog_thresholds(self):
        thresholds = ThresholdOptions(warn_backlog=50, critical_backlog=250)

        assert backlog_state(None, thresholds) == HealthState.UNKNOWN
        assert backlog_state(0, thresholds) == HealthState.OK
        assert backlog_state(50, thresholds) == HealthState.WARN
        assert backlog_state(250, thresholds) == HealthState.CRITICAL

    def test_member_health(self):
        assert member_health("Running", []) == HealthState.OK
        assert member_health("running", ["event 4012"]) == HealthState.WARN
        assert member_health("Stopped", []) == HealthState.CRITICAL
        assert member_health(None, []) == HealthState.CRITICAL

    def test_group_health_takes_worst(self):
        assert group_health([HealthState.OK, HealthState.WARN], [HealthState.OK]) == HealthState.WARN
        assert group_health([HealthState.OK], [HealthState.CRITICAL]) == HealthState.CRITICAL

    def test_unknown_backlog_does_not_degrade_group(self):
        assert group_health([HealthState.OK], [HealthState.UNKNOWN]) == HealthState.OK
