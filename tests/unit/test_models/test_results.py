"""
Unit tests for result models, health aggregation and JSON conventions.
"""

from datetime import datetime, timezone

import pytest

from dfsmonitor.models import (
    CollectNowCommand,
    GroupResult,
    HealthState,
    MemberResult,
    NamespaceResult,
    RuntimeState,
    Snapshot,
)
from dfsmonitor.models.results import aggregate_health
from dfsmonitor.models.serialization import camel_case, parse_timestamp, to_json_value


@pytest.mark.unit
class TestSerialization:
    """Test cases for the camelCase JSON helpers."""

    def test_camel_case(self):
        assert camel_case("namespace_id") == "namespaceId"
        assert camel_case("last_checked_at") == "lastCheckedAt"
        assert camel_case("version") == "version"

    def test_none_fields_are_omitted(self):
        member = MemberResult(name="FS01", service_state="Running", health=HealthState.OK)
        result = NamespaceResult(namespace_id="a", path=r"\\corp\files", health=HealthState.OK)

        data = to_json_value(result)

        assert "error" not in data
        assert data["health"] == "Ok"
        assert to_json_value(member)["serviceState"] == "Running"

    def test_parse_timestamp_variants(self):
        expected = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

        assert parse_timestamp("2024-05-01T12:00:00Z") == expected
        assert parse_timestamp("2024-05-01T12:00:00+00:00") == expected
        assert parse_timestamp("2024-05-01T12:00:00") == expected
        assert parse_timestamp(None) is None

    def test_parse_timestamp_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_timestamp("yesterday")


@pytest.mark.unit
class TestHealthAggregation:
    """Test cases for health aggregation."""

    def test_critical_wins(self):
        assert aggregate_health([HealthState.OK, HealthState.WARN, HealthState.CRITICAL]) == HealthState.CRITICAL

    def test_warn_without_critical(self):
        # Members [Ok, Warn], connections [Ok].
        assert aggregate_health([HealthState.OK, HealthState.WARN] + [HealthState.OK]) == HealthState.WARN

    def test_all_ok(self):
        assert aggregate_health([HealthState.OK, HealthState.OK]) == HealthState.OK

    def test_empty_is_ok(self):
        assert aggregate_health([]) == HealthState.OK

    def test_unknown_does_not_degrade(self):
        assert aggregate_health([HealthState.OK, HealthState.UNKNOWN]) == HealthState.OK

    def test_parse_is_case_insensitive(self):
        assert HealthState.parse("critical") == HealthState.CRITICAL
        assert HealthState.parse("bogus") == HealthState.UNKNOWN

    def test_snapshot_overall_health(self):
        snapshot = Snapshot(
            namespaces=[NamespaceResult(namespace_id="a", path="p", health=HealthState.OK)],
            replication_groups=[GroupResult(group_name="g", health=HealthState.WARN)],
        )
        assert snapshot.compute_overall_health() == HealthState.WARN


@pytest.mark.unit
class TestSnapshotRoundTrip:
    """Test cases for snapshot JSON conversion."""

    def test_snapshot_to_dict_and_back(self):
        created = datetime(2024, 5, 1, 12, 30, 15, 123456, tzinfo=timezone.utc)
        snapshot = Snapshot(
            created_at=created,
            overall_health=HealthState.CRITICAL,
            namespaces=[
                NamespaceResult(
                    namespace_id="ns1",
                    path=r"\\corp\files",
                    health=HealthState.CRITICAL,
                    error="boom",
                )
            ],
            errors=["namespace \\\\corp\\files: boom"],
        )

        data = snapshot.to_dict()
        assert data["createdAt"] == "2024-05-01T12:30:15.123456+00:00"
        assert data["overallHealth"] == "Critical"
        assert data["replicationGroups"] == []

        restored = Snapshot.from_dict(data)
        assert restored.created_at == created
        assert restored.namespaces[0].error == "boom"
        assert restored.namespaces[0].health == HealthState.CRITICAL

    def test_snapshot_without_created_at_is_rejected(self):
        with pytest.raises(ValueError):
            Snapshot.from_dict({"overallHealth": "Ok"})


@pytest.mark.unit
class TestRuntimeModels:
    """Test cases for runtime state and commands."""

    def test_runtime_state_zero_value(self):
        state = RuntimeState()
        assert state.is_running is False
        assert state.last_result == "Never run"
        assert "lastStartedAt" not in state.to_dict()

    def test_command_round_trip(self):
        command = CollectNowCommand(requested_by="ops", reason="after patching")
        restored = CollectNowCommand.from_dict(command.to_dict())

        assert restored.id == command.id
        assert restored.requested_by == "ops"
        assert restored.reason == "after patching"
        assert len(command.id) == 32

    def test_command_without_id_is_rejected(self):
        with pytest.raises(ValueError):
            CollectNowCommand.from_dict({"requestedBy": "ops"})
