"""
Snapshot persistence with store-and-forward publication.

Every snapshot is written to the durable local tree first and a copy is
dropped into the flat pending-sync outbox. The outbox is then flushed to the
remote root oldest-first. Flushing stops at the first remote failure so the
remote tree never receives snapshots out of order, and resumes on the next
save or flush once the remote location is reachable again.

Layout (relative to each root):
    status/<yyyy>/<MM>/<dd>/collector-<yyyyMMdd>T<HHmmssffffff>Z.json   (local)
    <yyyy>/<MM>/<dd>/collector-<yyyyMMdd>T<HHmmssffffff>Z.json          (remote status root)
    pending-sync/<yyyy>_<MM>_<dd>_collector-...json                     (local outbox)
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import List, Optional, Union

from ..models.results import Snapshot
from ..models.serialization import parse_timestamp
from .atomic import atomic_write, dumps_json, read_json
from .result import StoreResult, StoreStatus

logger = logging.getLogger(__name__)

STATUS_DIR = "status"
PENDING_DIR = "pending-sync"
SNAPSHOT_GLOB = "collector-*.json"
QUARANTINE_SUFFIX = ".bad"


def snapshot_relative_path(created_at: datetime) -> PurePosixPath:
    """Derive the canonical year/month/day/time path of a snapshot."""
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    ts = created_at.astimezone(timezone.utc)
    return PurePosixPath(
        f"{ts:%Y}", f"{ts:%m}", f"{ts:%d}", f"collector-{ts:%Y%m%dT%H%M%S%f}Z.json"
    )


def flatten_relative_path(relative: PurePosixPath) -> str:
    """Turn a relative snapshot path into a single, sortable file name."""
    return "_".join(relative.parts)


class StatusStore:
    """Local-first snapshot store with an outbox to the remote status root."""

    def save_snapshot(
        self,
        snapshot: Snapshot,
        remote_root: Union[str, Path],
        local_root: Union[str, Path],
    ) -> StoreResult:
        """
        Persist a snapshot locally, queue it for the remote root and flush.

        Local write failures propagate. Remote failures are reported as
        ``UNREACHABLE`` and retried on the next call.
        """
        local_root = Path(local_root)
        relative = snapshot_relative_path(snapshot.created_at)
        payload = dumps_json(snapshot.to_dict())

        atomic_write(local_root / STATUS_DIR / Path(relative), payload)
        atomic_write(local_root / PENDING_DIR / flatten_relative_path(relative), payload)
        logger.debug(f"Saved snapshot {relative} locally and queued it for sync")

        return self.flush_pending(remote_root, local_root)

    def _pending_files(self, local_root: Path) -> List[Path]:
        pending_dir = local_root / PENDING_DIR
        if not pending_dir.is_dir():
            return []
        return sorted(pending_dir.glob("*.json"), key=lambda p: p.name)

    def pending_count(self, local_root: Union[str, Path]) -> int:
        return len(self._pending_files(Path(local_root)))

    def flush_pending(
        self, remote_root: Union[str, Path], local_root: Union[str, Path]
    ) -> StoreResult:
        """
        Forward queued snapshots to the remote root, oldest first.

        Returns:
            ``OK`` with the number of flushed files as ``value`` when the
            outbox was drained, ``UNREACHABLE`` when flushing stopped early.
        """
        remote_root = Path(remote_root)
        local_root = Path(local_root)
        flushed = 0

        for pending in self._pending_files(local_root):
            try:
                payload = pending.read_text(encoding="utf-8")
                created_at = parse_timestamp(json.loads(payload).get("createdAt"))
                if created_at is None:
                    raise ValueError("missing createdAt")
            except FileNotFoundError:
                continue
            except (ValueError, AttributeError) as e:
                self._quarantine(pending, e)
                continue

            relative = snapshot_relative_path(created_at)
            try:
                atomic_write(remote_root / Path(relative), payload)
            except OSError as e:
                logger.warning(
                    f"Remote status root {remote_root} unavailable, "
                    f"{len(self._pending_files(local_root))} snapshot(s) pending: {e}"
                )
                return StoreResult(StoreStatus.UNREACHABLE, value=flushed, message=str(e))

            try:
                pending.unlink()
            except FileNotFoundError:
                pass
            flushed += 1

        if flushed:
            logger.info(f"Flushed {flushed} pending snapshot(s) to {remote_root}")
        return StoreResult(StoreStatus.OK, value=flushed)

    @staticmethod
    def _quarantine(pending: Path, reason: Exception) -> None:
        target = pending.with_name(pending.name + QUARANTINE_SUFFIX)
        logger.error(f"Moving malformed pending snapshot {pending.name} aside: {reason}")
        try:
            pending.replace(target)
        except OSError as e:
            logger.warning(f"Could not quarantine {pending.name}, skipping it: {e}")

    @staticmethod
    def _find_latest(root: Path) -> Optional[Path]:
        if not root.is_dir():
            return None
        candidates = list(root.rglob(SNAPSHOT_GLOB))
        if not candidates:
            return None
        return max(candidates, key=lambda p: p.name)

    def load_latest(
        self, remote_root: Union[str, Path], local_root: Union[str, Path]
    ) -> Optional[Snapshot]:
        """
        Load the most recent snapshot, preferring the remote tree.

        Falls back to the local tree when the remote tree is empty, missing,
        unreadable or holds an unparsable latest file.
        """
        for label, root in (("remote", Path(remote_root)), ("local", Path(local_root) / STATUS_DIR)):
            try:
                latest = self._find_latest(root)
                if latest is None:
                    continue
                data = read_json(latest)
                return Snapshot.from_dict(data)
            except (OSError, ValueError, AttributeError) as e:
                logger.warning(f"Could not read latest {label} snapshot under {root}: {e}")
        return None
