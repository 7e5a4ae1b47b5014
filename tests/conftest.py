"""
Pytest configuration and shared fixtures for the dfsmonitor test suite.

This module provides common fixtures, an in-memory topology provider and
configuration helpers for all test modules.
"""

import shutil
import sys
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dfsmonitor.executor import ManagedThreadPoolExecutor, ThreadPoolConfig  # noqa: E402
from dfsmonitor.models.config import (  # noqa: E402
    CollectionOptions,
    MonitorConfig,
    MonitoredNamespace,
    ReplicationOptions,
    StorageOptions,
)
from dfsmonitor.providers import (  # noqa: E402
    BacklogFact,
    ConnectionFact,
    FolderTargetFact,
    MemberFact,
    ProbeResult,
    TopologyQueryProvider,
)


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def remote_root(temp_dir):
    path = temp_dir / "remote"
    path.mkdir()
    return path


@pytest.fixture
def local_root(temp_dir):
    path = temp_dir / "cache"
    path.mkdir()
    return path


@pytest.fixture
def executor():
    """A started provider thread pool."""
    pool = ManagedThreadPoolExecutor(ThreadPoolConfig(max_workers=4))
    pool.start()
    yield pool
    pool.shutdown(wait=False, cancel_futures=True)


# ============================================================================
# Fake provider
# ============================================================================


class FakeProvider(TopologyQueryProvider):
    """
    In-memory provider for tests.

    Every table maps a key to either the value to return or an exception to
    raise. ``failures_before_success`` makes a query fail a number of times
    before answering, to exercise retries.
    """

    name = "fake"

    def __init__(self):
        self.folder_targets: Dict[str, Union[List[FolderTargetFact], Exception]] = {}
        self.probes: Dict[str, Union[ProbeResult, Exception]] = {}
        self.groups: Union[List[str], Exception] = []
        self.members: Dict[str, Union[List[MemberFact], Exception]] = {}
        self.connections: Dict[str, Union[List[ConnectionFact], Exception]] = {}
        self.folders: Dict[str, Union[List[str], Exception]] = {}
        self.backlogs: Dict[tuple, Union[BacklogFact, Exception]] = {}
        self.failures_before_success: Dict[str, int] = {}
        self.calls: List[tuple] = []

    @staticmethod
    def _answer(value: Any) -> Any:
        if isinstance(value, Exception):
            raise value
        return value

    def _maybe_fail(self, key: str) -> None:
        remaining = self.failures_before_success.get(key, 0)
        if remaining > 0:
            self.failures_before_success[key] = remaining - 1
            from dfsmonitor.validation import ProviderError

            raise ProviderError(f"transient failure for {key}")

    def list_folder_targets(self, namespace_path: str) -> List[FolderTargetFact]:
        self.calls.append(("list_folder_targets", namespace_path))
        self._maybe_fail(namespace_path)
        return self._answer(self.folder_targets.get(namespace_path, []))

    def probe_target(self, unc_path: str) -> ProbeResult:
        self.calls.append(("probe_target", unc_path))
        return self._answer(self.probes.get(unc_path, ProbeResult(reachable=True, latency_ms=1.0)))

    def discover_replication_groups(self) -> List[str]:
        self.calls.append(("discover_replication_groups",))
        return list(self._answer(self.groups))

    def list_members(self, group: str) -> List[MemberFact]:
        self.calls.append(("list_members", group))
        self._maybe_fail(group)
        return self._answer(self.members.get(group, []))

    def list_connections(self, group: str) -> List[ConnectionFact]:
        self.calls.append(("list_connections", group))
        return self._answer(self.connections.get(group, []))

    def list_replicated_folders(self, group: str) -> List[str]:
        self.calls.append(("list_replicated_folders", group))
        return self._answer(self.folders.get(group, []))

    def query_backlog(self, group: str, source: str, destination: str, folder: Optional[str]) -> BacklogFact:
        self.calls.append(("query_backlog", group, source, destination, folder))
        return self._answer(self.backlogs.get((group, source, destination, folder), BacklogFact(count=0)))


@pytest.fixture
def fake_provider():
    return FakeProvider()


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def monitor_config(remote_root, local_root):
    """A monitor configuration with fast retries, rooted in the temp dir."""
    return MonitorConfig(
        storage=StorageOptions(
            status_root_path=str(remote_root / "status"),
            local_cache_root_path=str(local_root),
        ),
        collection=CollectionOptions(request_timeout_seconds=2, retry_count=1, max_parallelism=4),
        namespaces=[MonitoredNamespace(path=r"\\corp\files", id="ns-files")],
        replication=ReplicationOptions(auto_discover_groups=True, explicit_groups=[]),
    )


@pytest.fixture
def settings_file(temp_dir):
    """Write a service settings file with a static inventory next to it."""
    import toml

    inventory_file = temp_dir / "inventory.toml"
    inventory = {
        "namespaces": [
            {
                "path": r"\\corp\files",
                "folders": [
                    {
                        "path": r"\\corp\files\Public",
                        "targets": [
                            {
                                "unc_path": r"\\fs01\public",
                                "priority_class": "GlobalHigh",
                                "priority_rank": 0,
                                "state": "Online",
                                "reachable": True,
                                "latency_ms": 3.0,
                            },
                            {
                                "unc_path": r"\\fs02\public",
                                "priority_class": "SiteCostLow",
                                "priority_rank": 5,
                                "state": "Online",
                                "reachable": False,
                            },
                        ],
                    }
                ],
            }
        ],
        "replication_groups": [
            {
                "name": "RG-Public",
                "folders": ["Public"],
                "members": [
                    {"name": "FS01", "service_state": "Running", "warnings": []},
                    {"name": "FS02", "service_state": "Running", "warnings": []},
                ],
                "connections": [{"source": "FS01", "destination": "FS02"}],
                "backlog": [{"source": "FS01", "destination": "FS02", "folder": "Public", "count": 7}],
            }
        ],
    }
    with open(inventory_file, "w") as f:
        toml.dump(inventory, f)

    settings_path = temp_dir / "config.toml"
    settings = {
        "storage": {"config_path": "remote/config.json", "local_cache_root": "cache"},
        "worker": {
            "command_poll_interval_seconds": 0.1,
            "error_backoff_seconds": 0.2,
            "minimum_interval_seconds": 0.1,
        },
        "provider": {"type": "static", "inventory_path": "inventory.toml"},
        "logging": {"level": "DEBUG"},
    }
    with open(settings_path, "w") as f:
        toml.dump(settings, f)
    return settings_path


@pytest.fixture(autouse=True)
def clear_settings_after_test():
    """Automatically clear the settings cache after each test."""
    original_settings_path = Path(__file__).parent.parent / "conf" / "config.toml"

    yield

    from dfsmonitor.config import clear_settings_cache, set_settings_path

    clear_settings_cache()
    set_settings_path(original_settings_path)
