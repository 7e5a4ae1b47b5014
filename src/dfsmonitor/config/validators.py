"""
Configuration validation utilities.

This module turns raw documents into validated model objects: the monitor
configuration document (JSON, camelCase) and the service settings (TOML,
snake_case sections).
"""

import logging
from pathlib import Path
from typing import Any, Dict, List

from ..models.config import (
    CollectionOptions,
    CollectorToggles,
    MonitorConfig,
    MonitoredNamespace,
    ReplicationOptions,
    StorageOptions,
    ThresholdOptions,
    new_id,
)
from ..models.serialization import items, parse_timestamp, section, utc_now
from ..models.settings import (
    LoggingSettings,
    ProviderSettings,
    ServiceSettings,
    StorageSettings,
    WorkerSettings,
)
from ..validation import (
    ValidationError,
    validate_bool,
    validate_enum_choice,
    validate_non_empty_string,
    validate_positive_float,
    validate_positive_integer,
)

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _validate_thresholds(data: Dict[str, Any]) -> ThresholdOptions:
    defaults = ThresholdOptions()
    thresholds = ThresholdOptions(
        warn_unreachable_targets=validate_positive_integer(
            data.get("warnUnreachableTargets", defaults.warn_unreachable_targets),
            field_name="collection.thresholds.warnUnreachableTargets",
        ),
        critical_unreachable_targets=validate_positive_integer(
            data.get("criticalUnreachableTargets", defaults.critical_unreachable_targets),
            field_name="collection.thresholds.criticalUnreachableTargets",
        ),
        warn_backlog=validate_positive_integer(
            data.get("warnBacklog", defaults.warn_backlog),
            field_name="collection.thresholds.warnBacklog",
        ),
        critical_backlog=validate_positive_integer(
            data.get("criticalBacklog", defaults.critical_backlog),
            field_name="collection.thresholds.criticalBacklog",
        ),
    )
    if thresholds.critical_unreachable_targets < thresholds.warn_unreachable_targets:
        raise ValidationError(
            "collection.thresholds.criticalUnreachableTargets must be >= warnUnreachableTargets",
            field_name="collection.thresholds.criticalUnreachableTargets",
        )
    if thresholds.critical_backlog < thresholds.warn_backlog:
        raise ValidationError(
            "collection.thresholds.criticalBacklog must be >= warnBacklog",
            field_name="collection.thresholds.criticalBacklog",
        )
    return thresholds


def _validate_collection(data: Dict[str, Any]) -> CollectionOptions:
    defaults = CollectionOptions()
    return CollectionOptions(
        polling_interval_seconds=validate_positive_integer(
            data.get("pollingIntervalSeconds", defaults.polling_interval_seconds),
            field_name="collection.pollingIntervalSeconds",
        ),
        request_timeout_seconds=validate_positive_integer(
            data.get("requestTimeoutSeconds", defaults.request_timeout_seconds),
            field_name="collection.requestTimeoutSeconds",
        ),
        retry_count=validate_positive_integer(
            data.get("retryCount", defaults.retry_count),
            min_value=0,
            max_value=10,
            field_name="collection.retryCount",
        ),
        max_parallelism=validate_positive_integer(
            data.get("maxParallelism", defaults.max_parallelism),
            max_value=128,
            field_name="collection.maxParallelism",
        ),
        event_sample_count=validate_positive_integer(
            data.get("eventSampleCount", defaults.event_sample_count),
            min_value=0,
            field_name="collection.eventSampleCount",
        ),
        thresholds=_validate_thresholds(section(data, "thresholds")),
    )


def _validate_namespaces(raw: List[Any]) -> List[MonitoredNamespace]:
    namespaces = []
    seen_ids = set()
    for i, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise ValidationError(f"namespaces[{i}] must be an object", field_name=f"namespaces[{i}]")
        namespace = MonitoredNamespace(
            path=validate_non_empty_string(entry.get("path"), field_name=f"namespaces[{i}].path"),
            id=str(entry.get("id") or new_id()),
            enabled=validate_bool(entry.get("enabled", True), field_name=f"namespaces[{i}].enabled"),
        )
        if namespace.id in seen_ids:
            raise ValidationError(
                f"namespaces[{i}].id '{namespace.id}' is not unique",
                field_name=f"namespaces[{i}].id",
                value=namespace.id,
            )
        seen_ids.add(namespace.id)
        namespaces.append(namespace)
    return namespaces


def _validate_replication(data: Dict[str, Any]) -> ReplicationOptions:
    groups = []
    for i, group in enumerate(items(data, "explicitGroups")):
        groups.append(validate_non_empty_string(group, field_name=f"replication.explicitGroups[{i}]"))
    return ReplicationOptions(
        auto_discover_groups=validate_bool(
            data.get("autoDiscoverGroups", True), field_name="replication.autoDiscoverGroups"
        ),
        explicit_groups=groups,
    )


def _validate_toggles(data: Dict[str, Any]) -> CollectorToggles:
    return CollectorToggles(
        namespace=validate_bool(data.get("namespace", True), field_name="collectors.namespace"),
        replication=validate_bool(data.get("replication", True), field_name="collectors.replication"),
        event_log=validate_bool(data.get("eventLog", True), field_name="collectors.eventLog"),
    )


def _validate_storage(data: Dict[str, Any]) -> StorageOptions:
    defaults = StorageOptions()
    return StorageOptions(
        status_root_path=validate_non_empty_string(
            data.get("statusRootPath", defaults.status_root_path), field_name="storage.statusRootPath"
        ),
        local_cache_root_path=validate_non_empty_string(
            data.get("localCacheRootPath", defaults.local_cache_root_path),
            field_name="storage.localCacheRootPath",
        ),
        runtime_state_path=validate_non_empty_string(
            data.get("runtimeStatePath", defaults.runtime_state_path), field_name="storage.runtimeStatePath"
        ),
    )


def validate_monitor_config(data: Dict[str, Any]) -> MonitorConfig:
    """
    Validate and create a MonitorConfig from a raw JSON document.

    Missing sections and keys take their defaults; unknown keys are ignored.

    Args:
        data: Parsed JSON document with camelCase keys

    Returns:
        Validated MonitorConfig instance

    Raises:
        ValidationError: If validation fails
    """
    if not isinstance(data, dict):
        raise ValidationError("monitor configuration must be a JSON object")

    try:
        updated_at = parse_timestamp(data.get("updatedAt")) or utc_now()
    except ValueError as e:
        raise ValidationError(f"updatedAt is not a valid timestamp: {e}", field_name="updatedAt")

    return MonitorConfig(
        storage=_validate_storage(section(data, "storage")),
        collection=_validate_collection(section(data, "collection")),
        namespaces=_validate_namespaces(items(data, "namespaces")),
        replication=_validate_replication(section(data, "replication")),
        collectors=_validate_toggles(section(data, "collectors")),
        version=validate_positive_integer(data.get("version", 1), min_value=0, field_name="version"),
        updated_at=updated_at,
    )


def validate_service_settings(data: Dict[str, Any], base_dir: Path) -> ServiceSettings:
    """
    Validate and create ServiceSettings from a parsed TOML document.

    Relative paths are resolved against ``base_dir`` (the directory of the
    settings file).

    Raises:
        ValidationError: If validation fails
    """
    storage_data = section(data, "storage")
    worker_data = section(data, "worker")
    provider_data = section(data, "provider")
    logging_data = section(data, "logging")

    def resolve(value: Any, field_name: str) -> Path:
        path = Path(validate_non_empty_string(value, field_name=field_name))
        return path if path.is_absolute() else base_dir / path

    storage_defaults = StorageSettings()
    storage = StorageSettings(
        config_path=resolve(
            storage_data.get("config_path", str(storage_defaults.config_path)), "storage.config_path"
        ),
        local_cache_root=resolve(
            storage_data.get("local_cache_root", str(storage_defaults.local_cache_root)),
            "storage.local_cache_root",
        ),
    )

    worker_defaults = WorkerSettings()
    worker = WorkerSettings(
        command_poll_interval_seconds=validate_positive_float(
            worker_data.get("command_poll_interval_seconds", worker_defaults.command_poll_interval_seconds),
            min_value=0.1,
            field_name="worker.command_poll_interval_seconds",
        ),
        error_backoff_seconds=validate_positive_float(
            worker_data.get("error_backoff_seconds", worker_defaults.error_backoff_seconds),
            field_name="worker.error_backoff_seconds",
        ),
        minimum_interval_seconds=validate_positive_float(
            worker_data.get("minimum_interval_seconds", worker_defaults.minimum_interval_seconds),
            field_name="worker.minimum_interval_seconds",
        ),
        provider_threads=validate_positive_integer(
            worker_data.get("provider_threads", worker_defaults.provider_threads),
            max_value=256,
            field_name="worker.provider_threads",
        ),
    )

    inventory = provider_data.get("inventory_path")
    provider = ProviderSettings(
        type=validate_non_empty_string(provider_data.get("type", "static"), field_name="provider.type"),
        inventory_path=resolve(inventory, "provider.inventory_path") if inventory else None,
    )

    log_dir = logging_data.get("log_dir")
    logging_settings = LoggingSettings(
        level=validate_enum_choice(
            logging_data.get("level", "INFO"), LOG_LEVELS, field_name="logging.level", case_sensitive=False
        ),
        log_dir=resolve(log_dir, "logging.log_dir") if log_dir else None,
        retention_days=validate_positive_integer(
            logging_data.get("retention_days", 14), field_name="logging.retention_days"
        ),
    )

    return ServiceSettings(storage=storage, worker=worker, provider=provider, logging=logging_settings)
