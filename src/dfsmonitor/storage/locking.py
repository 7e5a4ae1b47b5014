"""
Exclusive lock files for shared remote locations.

The lock is a sibling file created with ``O_CREAT | O_EXCL``, which is
atomic on local and SMB/NFS file systems alike. Acquisition polls until a
bounded deadline and then fails with `LockTimeoutError`. A lock file older
than ``stale_after`` seconds was left behind by a crashed holder and is
broken.
"""

import logging
import os
import time
from pathlib import Path
from typing import Optional, Union

from ..validation import LockTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TIMEOUT = 5.0
DEFAULT_POLL_INTERVAL = 0.15
DEFAULT_STALE_AFTER = 60.0


class FileLock:
    """
    Short-lived exclusive lock backed by a lock file.

    Usage:
        with FileLock(config_path.with_name("config.json.lock")):
            ...
    """

    def __init__(
        self,
        lock_path: Union[str, Path],
        timeout: float = DEFAULT_LOCK_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        stale_after: float = DEFAULT_STALE_AFTER,
    ):
        self.lock_path = Path(lock_path)
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.stale_after = stale_after
        self._fd: Optional[int] = None

    @property
    def is_locked(self) -> bool:
        return self._fd is not None

    def acquire(self) -> None:
        """
        Acquire the lock, waiting up to ``timeout`` seconds.

        Raises:
            LockTimeoutError: If the lock is still held by someone else at the deadline
            OSError: If the lock location itself is unusable
        """
        if self._fd is not None:
            raise RuntimeError(f"Lock already held: {self.lock_path}")

        deadline = time.monotonic() + self.timeout
        while True:
            try:
                fd = os.open(str(self.lock_path), os.O_CREAT | os.O_EXCL | os.O_RDWR, 0o644)
            except FileExistsError:
                if self._break_if_stale():
                    continue
                if time.monotonic() >= deadline:
                    raise LockTimeoutError(
                        f"Timed out after {self.timeout}s waiting for lock {self.lock_path}"
                    )
                time.sleep(self.poll_interval)
                continue

            try:
                os.write(fd, str(os.getpid()).encode("ascii"))
            except OSError:
                os.close(fd)
                self._unlink()
                raise
            self._fd = fd
            logger.debug(f"Acquired lock {self.lock_path}")
            return

    def _break_if_stale(self) -> bool:
        try:
            age = time.time() - self.lock_path.stat().st_mtime
        except FileNotFoundError:
            # Released between our open and stat; try again right away.
            return True
        if age < self.stale_after:
            return False
        logger.warning(f"Breaking stale lock {self.lock_path} ({age:.0f}s old)")
        self._unlink()
        return True

    def _unlink(self) -> None:
        try:
            os.unlink(self.lock_path)
        except FileNotFoundError:
            pass

    def release(self) -> None:
        if self._fd is None:
            return
        try:
            os.close(self._fd)
        finally:
            self._fd = None
            if not self.lock_path.exists():
                logger.warning(f"Lock file {self.lock_path} vanished before release")
            self._unlink()
        logger.debug(f"Released lock {self.lock_path}")

    def __enter__(self) -> "FileLock":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()
