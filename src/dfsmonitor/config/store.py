"""
Monitor configuration persistence.

The configuration document lives on a shared remote location and is mirrored
to a local cache. Reads prefer the remote copy and fall back to the cache.
Writes always land in the cache first; the remote write is guarded by a lock
file and an optimistic version check so that a stale editor can never
overwrite a newer document.
"""

import dataclasses
import json
import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from ..models.config import MonitorConfig, StorageOptions
from ..models.serialization import utc_now
from ..storage.atomic import read_json, write_json
from ..storage.locking import DEFAULT_LOCK_TIMEOUT, DEFAULT_POLL_INTERVAL, FileLock
from ..storage.result import StoreResult, StoreStatus
from ..validation import ConfigCorruptError, LockTimeoutError, ValidationError
from .validators import validate_monitor_config

logger = logging.getLogger(__name__)

CACHE_FILENAME = "config.cache.json"
BACKUP_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S%f"


class ConfigStore:
    """
    Remote-first, cache-backed store for the monitor configuration document.

    Args:
        config_path: Remote configuration file (``config.json``)
        local_cache_root: Durable local root holding ``config.cache.json``
        lock_timeout: Seconds to wait for the remote lock file
        lock_poll_interval: Seconds between lock attempts
    """

    def __init__(
        self,
        config_path: Union[str, Path],
        local_cache_root: Union[str, Path],
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
        lock_poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        self.config_path = Path(config_path)
        self.local_cache_root = Path(local_cache_root)
        self.lock_timeout = lock_timeout
        self.lock_poll_interval = lock_poll_interval

    @property
    def cache_path(self) -> Path:
        return self.local_cache_root / CACHE_FILENAME

    @property
    def lock_path(self) -> Path:
        return self.config_path.with_name(self.config_path.name + ".lock")

    def backup_path(self, timestamp: datetime) -> Path:
        stem = self.config_path.stem
        return self.config_path.with_name(
            f"{stem}_{timestamp.strftime(BACKUP_TIMESTAMP_FORMAT)}{self.config_path.suffix}"
        )

    def default_config(self) -> MonitorConfig:
        return MonitorConfig(
            storage=StorageOptions(
                status_root_path=str(self.config_path.parent / "status"),
                local_cache_root_path=str(self.local_cache_root),
            )
        )

    @staticmethod
    def _read(path: Path) -> MonitorConfig:
        data = read_json(path)
        return validate_monitor_config(data)

    def _read_remote(self) -> Optional[MonitorConfig]:
        """
        Read the remote copy.

        Returns None when the file does not exist.

        Raises:
            OSError: If the remote location is unreachable
            json.JSONDecodeError: If the remote file is corrupt
        """
        try:
            return self._read(self.config_path)
        except FileNotFoundError:
            return None

    def load(self) -> MonitorConfig:
        """
        Load the configuration, preferring the remote copy.

        Falls back to the local cache when the remote copy is missing or
        unreadable. A cache holding a newer version than the remote copy is
        a save whose remote write was deferred: it is returned and published
        to the remote location again. When no copy exists at all, defaults
        are saved and returned.

        Raises:
            ConfigCorruptError: If no readable copy exists but one is present
            ValidationError: If a readable copy holds invalid values
        """
        remote_usable = True
        try:
            remote = self._read_remote()
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Remote configuration {self.config_path} unreadable, using local cache: {e}")
            remote, remote_usable = None, False

        if remote is not None:
            try:
                cached = self._read(self.cache_path)
            except (OSError, json.JSONDecodeError, ValidationError):
                cached = None
            if cached is not None and cached.version > remote.version:
                self._publish_deferred(cached, remote.version)
                return cached
            self._refresh_cache(remote)
            return remote

        if self.cache_path.exists():
            try:
                config = self._read(self.cache_path)
            except (OSError, json.JSONDecodeError) as e:
                raise ConfigCorruptError(
                    f"Local configuration cache {self.cache_path} is corrupt and the remote copy is unusable: {e}"
                ) from e
            logger.info(f"Loaded configuration version {config.version} from local cache")
            if remote_usable:
                self._publish_deferred(config, None)
            return config

        if not remote_usable:
            raise ConfigCorruptError(
                f"No usable configuration: remote {self.config_path} unreadable and no local cache"
            )

        logger.info(f"No configuration found, creating defaults at {self.config_path}")
        result = self.save(self.default_config())
        if not result.ok:
            logger.warning(f"Default configuration kept locally only: {result.status.value} {result.message}")
        return result.value

    def _refresh_cache(self, config: MonitorConfig) -> None:
        try:
            write_json(self.cache_path, config.to_dict())
        except OSError as e:
            logger.warning(f"Could not refresh local configuration cache {self.cache_path}: {e}")

    def save(self, config: MonitorConfig) -> StoreResult:
        """
        Save a new version of the configuration.

        The local cache is always written. The outcome of the remote write is
        reported through the returned `StoreResult` status: ``OK``,
        ``UNREACHABLE``, ``CONFLICT`` (remote holds a newer version, left
        untouched) or ``TIMEOUT`` (lock not acquired).

        Raises:
            OSError: If the local cache cannot be written
        """
        saved = dataclasses.replace(config, version=config.version + 1, updated_at=utc_now())
        write_json(self.cache_path, saved.to_dict())

        result = self._write_remote(saved)
        if result.status is StoreStatus.CONFLICT:
            result.value = config
        return result

    def _publish_deferred(self, cached: MonitorConfig, remote_version: Optional[int]) -> None:
        logger.info(
            f"Local configuration version {cached.version} is newer than remote "
            f"version {remote_version}, retrying deferred save"
        )
        result = self._write_remote(cached)
        if not result.ok:
            logger.warning(
                f"Deferred configuration version {cached.version} still not published: "
                f"{result.status.value} {result.message}"
            )

    def _write_remote(self, saved: MonitorConfig) -> StoreResult:
        """
        Write ``saved`` to the remote location under the lock file.

        ``saved`` was derived from version ``saved.version - 1``; a remote
        copy newer than that belongs to another editor and is left untouched. The previous remote copy is backed up before replacing it.
        """
        base_version = saved.version - 1
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with FileLock(self.lock_path, timeout=self.lock_timeout, poll_interval=self.lock_poll_interval):
                current_version = self._remote_version()
                if current_version is not None and current_version > base_version:
                    logger.warning(
                        f"Rejected configuration save based on version {base_version}: "
                        f"remote is at version {current_version}"
                    )
                    return StoreResult(
                        StoreStatus.CONFLICT,
                        value=saved,
                        message=(
                            f"Configuration was changed by someone else "
                            f"(remote version {current_version}, edited version {base_version})"
                        ),
                        current_version=current_version,
                        attempted_version=base_version,
                    )

                if self.config_path.exists():
                    shutil.copy2(self.config_path, self.backup_path(utc_now()))
                write_json(self.config_path, saved.to_dict())
        except LockTimeoutError as e:
            logger.warning(f"Configuration version {saved.version} kept locally: {e}")
            return StoreResult(StoreStatus.TIMEOUT, value=saved, message=str(e))
        except OSError as e:
            logger.warning(f"Remote configuration unreachable, version {saved.version} kept locally: {e}")
            return StoreResult(StoreStatus.UNREACHABLE, value=saved, message=str(e))

        logger.info(f"Saved configuration version {saved.version} to {self.config_path}")
        return StoreResult(StoreStatus.OK, value=saved)

    def _remote_version(self) -> Optional[int]:
        try:
            data = read_json(self.config_path)
        except FileNotFoundError:
            return None
        except json.JSONDecodeError as e:
            logger.warning(f"Remote configuration {self.config_path} is corrupt and will be replaced: {e}")
            return None
        if not isinstance(data, dict):
            return None
        version = data.get("version")
        return version if isinstance(version, int) and not isinstance(version, bool) else None
