"""
Unit tests for snapshot persistence and the pending-sync outbox.
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from dfsmonitor.models import HealthState, Snapshot
from dfsmonitor.storage import (
    StatusStore,
    StoreStatus,
    flatten_relative_path,
    snapshot_relative_path,
    write_json,
)

BASE_TIME = datetime(2024, 5, 1, 23, 59, 58, 500000, tzinfo=timezone.utc)


def make_snapshot(offset_seconds: int = 0, health: HealthState = HealthState.OK) -> Snapshot:
    return Snapshot(created_at=BASE_TIME + timedelta(seconds=offset_seconds), overall_health=health)


def remote_files(remote_root):
    return sorted(p.relative_to(remote_root).as_posix() for p in remote_root.rglob("collector-*.json"))


@pytest.mark.unit
class TestSnapshotPaths:
    """Test cases for the snapshot path layout."""

    def test_relative_path(self):
        relative = snapshot_relative_path(BASE_TIME)

        assert relative.as_posix() == "2024/05/01/collector-20240501T235958500000Z.json"

    def test_naive_timestamp_is_treated_as_utc(self):
        naive = BASE_TIME.replace(tzinfo=None)

        assert snapshot_relative_path(naive) == snapshot_relative_path(BASE_TIME)

    def test_flattened_name(self):
        relative = snapshot_relative_path(BASE_TIME)

        assert flatten_relative_path(relative) == "2024_05_01_collector-20240501T235958500000Z.json"


@pytest.mark.unit
class TestStatusStoreSave:
    """Test cases for save_snapshot and flush_pending."""

    def test_save_writes_local_and_remote(self, remote_root, local_root):
        store = StatusStore()

        result = store.save_snapshot(make_snapshot(), remote_root, local_root)

        assert result.status == StoreStatus.OK
        assert result.value == 1
        assert (local_root / "status" / "2024" / "05" / "01").is_dir()
        assert remote_files(remote_root) == ["2024/05/01/collector-20240501T235958500000Z.json"]
        assert store.pending_count(local_root) == 0

    def test_outbox_delivers_in_order_after_outage(self, temp_dir, local_root):
        store = StatusStore()
        blocker = temp_dir / "share"
        blocker.write_text("remote share is offline")
        remote_root = blocker / "status"

        for offset in (0, 1, 2):
            result = store.save_snapshot(make_snapshot(offset), remote_root, local_root)
            assert result.status == StoreStatus.UNREACHABLE

        assert store.pending_count(local_root) == 3
        assert len(list((local_root / "status").rglob("collector-*.json"))) == 3

        blocker.unlink()
        result = store.flush_pending(remote_root, local_root)

        assert result.status == StoreStatus.OK
        assert result.value == 3
        assert store.pending_count(local_root) == 0
        assert remote_files(remote_root) == [
            "2024/05/01/collector-20240501T235958500000Z.json",
            "2024/05/01/collector-20240501T235959500000Z.json",
            "2024/05/02/collector-20240502T000000500000Z.json",
        ]

    def test_flush_stops_at_first_failure(self, temp_dir, local_root, monkeypatch):
        store = StatusStore()
        blocker = temp_dir / "share"
        blocker.write_text("offline")
        for offset in (0, 1):
            store.save_snapshot(make_snapshot(offset), blocker / "status", local_root)
        blocker.unlink()
        remote_root = temp_dir / "remote"

        from dfsmonitor.storage import status_store

        real_write = status_store.atomic_write
        calls = []

        def flaky_write(path, data):
            calls.append(path)
            if len(calls) == 2:
                raise OSError("connection reset")
            real_write(path, data)

        monkeypatch.setattr(status_store, "atomic_write", flaky_write)
        result = store.flush_pending(remote_root, local_root)

        assert result.status == StoreStatus.UNREACHABLE
        assert result.value == 1
        assert store.pending_count(local_root) == 1
        assert remote_files(remote_root) == ["2024/05/01/collector-20240501T235958500000Z.json"]

    def test_malformed_pending_file_is_quarantined(self, remote_root, local_root):
        store = StatusStore()
        pending_dir = local_root / "pending-sync"
        pending_dir.mkdir()
        (pending_dir / "2024_01_01_collector-20240101T000000000000Z.json").write_text("{ broken")

        result = store.save_snapshot(make_snapshot(), remote_root, local_root)

        assert result.status == StoreStatus.OK
        assert result.value == 1
        assert store.pending_count(local_root) == 0
        assert (pending_dir / "2024_01_01_collector-20240101T000000000000Z.json.bad").exists()

    def test_failed_quarantine_does_not_fail_save(self, remote_root, local_root, monkeypatch):
        store = StatusStore()
        pending_dir = local_root / "pending-sync"
        pending_dir.mkdir()
        broken = pending_dir / "2024_01_01_collector-20240101T000000000000Z.json"
        broken.write_text("{ broken")

        def read_only_replace(self, target):
            raise PermissionError("read-only outbox")

        monkeypatch.setattr(Path, "replace", read_only_replace)
        result = store.save_snapshot(make_snapshot(), remote_root, local_root)

        assert result.status == StoreStatus.OK
        assert result.value == 1
        assert broken.exists()
        assert remote_files(remote_root) == ["2024/05/01/collector-20240501T235958500000Z.json"]


@pytest.mark.unit
class TestStatusStoreLoadLatest:
    """Test cases for load_latest."""

    def test_prefers_newer_remote_copy(self, temp_dir, remote_root, local_root):
        store = StatusStore()
        older = make_snapshot(0, HealthState.OK)
        newer = make_snapshot(60, HealthState.CRITICAL)
        store.save_snapshot(older, temp_dir / "unused-remote", local_root)
        write_json(remote_root / snapshot_relative_path(newer.created_at), newer.to_dict())

        latest = store.load_latest(remote_root, local_root)

        assert latest.created_at == newer.created_at
        assert latest.overall_health == HealthState.CRITICAL

    def test_falls_back_to_local_when_remote_empty(self, temp_dir, local_root):
        store = StatusStore()
        blocker = temp_dir / "share"
        blocker.write_text("offline")
        snapshot = make_snapshot(5, HealthState.WARN)
        store.save_snapshot(snapshot, blocker / "status", local_root)

        latest = store.load_latest(blocker / "status", local_root)

        assert latest.created_at == snapshot.created_at
        assert latest.overall_health == HealthState.WARN

    def test_latest_is_greatest_path(self, remote_root, local_root):
        store = StatusStore()
        for offset in (0, 7200 * 12, 3600):
            store.save_snapshot(make_snapshot(offset), remote_root, local_root)

        latest = store.load_latest(remote_root, local_root)

        assert latest.created_at == BASE_TIME + timedelta(seconds=7200 * 12)

    def test_nothing_saved_returns_none(self, remote_root, local_root):
        assert StatusStore().load_latest(remote_root, local_root) is None
