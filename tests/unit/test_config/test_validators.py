"""
Unit tests for configuration document and settings validation.
"""

from pathlib import Path

import pytest

from dfsmonitor.config import validate_monitor_config, validate_service_settings
from dfsmonitor.validation import ValidationError


@pytest.mark.unit
class TestMonitorConfigValidation:
    """Test cases for validate_monitor_config."""

    def test_empty_document_gets_defaults(self):
        config = validate_monitor_config({})

        assert config.version == 1
        assert config.collection.polling_interval_seconds == 300
        assert config.collection.request_timeout_seconds == 15
        assert config.collection.retry_count == 2
        assert config.collection.max_parallelism == 8
        assert config.collection.event_sample_count == 100
        assert config.thresholds.warn_unreachable_targets == 1
        assert config.thresholds.critical_unreachable_targets == 3
        assert config.thresholds.warn_backlog == 50
        assert config.thresholds.critical_backlog == 250
        assert config.replication.auto_discover_groups is True
        assert config.collectors.event_log is True
        assert config.namespaces == []

    def test_full_document(self):
        config = validate_monitor_config(
            {
                "version": 7,
                "updatedAt": "2024-05-01T12:00:00Z",
                "storage": {"statusRootPath": "/srv/status", "localCacheRootPath": "/var/cache/dfs"},
                "collection": {"maxParallelism": 2, "thresholds": {"warnBacklog": 10, "criticalBacklog": 20}},
                "namespaces": [{"id": "abc", "path": r"\\corp\files", "enabled": False}],
                "replication": {"autoDiscoverGroups": False, "explicitGroups": ["RG1"]},
                "collectors": {"eventLog": False},
                "unknownKey": {"ignored": True},
            }
        )

        assert config.version == 7
        assert config.storage.status_root_path == "/srv/status"
        assert config.collection.max_parallelism == 2
        assert config.thresholds.critical_backlog == 20
        assert config.namespaces[0].id == "abc"
        assert config.namespaces[0].enabled is False
        assert config.enabled_namespaces() == []
        assert config.replication.explicit_groups == ["RG1"]
        assert config.collectors.event_log is False

    def test_namespace_without_id_gets_fresh_id(self):
        config = validate_monitor_config({"namespaces": [{"path": r"\\corp\a"}, {"path": r"\\corp\b"}]})

        ids = [ns.id for ns in config.namespaces]
        assert all(len(i) == 32 for i in ids)
        assert ids[0] != ids[1]

    def test_critical_below_warn_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_monitor_config(
                {"collection": {"thresholds": {"warnUnreachableTargets": 5, "criticalUnreachableTargets": 2}}}
            )
        assert "criticalUnreachableTargets" in exc_info.value.field_name

    def test_non_positive_values_are_rejected(self):
        with pytest.raises(ValidationError):
            validate_monitor_config({"collection": {"pollingIntervalSeconds": 0}})

    def test_duplicate_namespace_ids_are_rejected(self):
        with pytest.raises(ValidationError):
            validate_monitor_config(
                {"namespaces": [{"id": "x", "path": r"\\a\b"}, {"id": "x", "path": r"\\a\c"}]}
            )

    def test_non_object_document_is_rejected(self):
        with pytest.raises(ValidationError):
            validate_monitor_config(["not", "an", "object"])


@pytest.mark.unit
class TestServiceSettingsValidation:
    """Test cases for validate_service_settings."""

    def test_defaults_resolved_against_base_dir(self, temp_dir):
        settings = validate_service_settings({}, base_dir=temp_dir)

        assert settings.storage.config_path == temp_dir / "remote" / "config.json"
        assert settings.storage.local_cache_root == temp_dir / "cache"
        assert settings.storage.command_queue_dir == temp_dir / "cache" / "commands"
        assert settings.worker.command_poll_interval_seconds == 5.0
        assert settings.worker.error_backoff_seconds == 15.0
        assert settings.worker.minimum_interval_seconds == 10.0
        assert settings.provider.type == "static"
        assert settings.provider.inventory_path is None
        assert settings.logging.level == "INFO"
        assert settings.logging.log_dir is None

    def test_absolute_paths_are_kept(self, temp_dir):
        absolute = temp_dir / "elsewhere" / "config.json"
        settings = validate_service_settings(
            {"storage": {"config_path": str(absolute)}, "logging": {"level": "debug", "log_dir": "logs"}},
            base_dir=Path("/unused"),
        )

        assert settings.storage.config_path == absolute
        assert settings.logging.level == "DEBUG"
        assert settings.logging.log_dir == Path("/unused") / "logs"

    def test_invalid_log_level(self, temp_dir):
        with pytest.raises(ValidationError):
            validate_service_settings({"logging": {"level": "LOUD"}}, base_dir=temp_dir)
