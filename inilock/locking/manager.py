"""Lock manager: exclusive advisory lock with stale-lock reclaim.

Protocol (shared with the shell and PHP tools that use the same lock files):

1. Derive the lock path from the target (see ``inilock.locking.paths``).
2. A lock file whose mtime is older than ``stale_after`` is deleted with a
   warning. The holder is presumed dead; there is no heartbeat, so a live
   holder that keeps the lock longer than the threshold can be overtaken.
3. Create the lock file exclusively with mode 0600. Losing that race is
   normal: someone else just created it.
4. Take ``flock(LOCK_EX | LOCK_NB)`` on the open descriptor, retrying a
   fixed number of times with a fixed sleep in between. A lock taken on a
   file that was unlinked meanwhile does not count.
5. Release unlinks the lock file, then unlocks and closes the descriptor.

Concurrency:
- Bounded wait of roughly ``retries * retry_wait`` seconds
- No fairness between waiters
"""

from __future__ import annotations

import errno
import fcntl
import logging
import os
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from inilock.config import IniConfig
from inilock.errors import LockOpenError, LockPathUnwritableError, LockTimeoutError
from inilock.locking.paths import lock_path_for, resolve_target

logger = logging.getLogger(__name__)

LOCK_FILE_MODE = 0o600


@dataclass
class LockHandle:
    """A held lock: the lock file path and the descriptor carrying the flock."""

    target: Path
    lock_path: Path
    fd: int

    @property
    def released(self) -> bool:
        return self.fd < 0


class LockManager:
    """Acquire and release the lock that guards one INI file.

    Parameters
    ----------
    config : IniConfig | None
        Timing and placement settings. Defaults to ``IniConfig()``.
    """

    def __init__(self, config: IniConfig | None = None) -> None:
        self.config = config or IniConfig()

    def lock_path(self, target: str | Path) -> Path:
        return lock_path_for(
            target,
            fallback_dir=self.config.fallback_lock_dir,
            prefix=self.config.lock_prefix,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def acquire(self, target: str | Path) -> LockHandle:
        """Acquire the exclusive lock for *target*.

        Raises:
            LockPathUnwritableError: The lock directory is not writable.
            LockOpenError: The lock file cannot be opened or created.
            LockTimeoutError: Every retry found the lock held by someone else.
        """
        resolved = resolve_target(target)
        lock_path = self.lock_path(resolved)

        if not os.access(lock_path.parent, os.W_OK):
            raise LockPathUnwritableError(
                f"Lock directory is not writable: {lock_path.parent} (target: {resolved})"
            )

        self._reclaim_if_stale(lock_path)

        for attempt in range(1, self.config.retries + 1):
            fd = self._open_lock_file(lock_path)
            try:
                fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
            except BlockingIOError:
                os.close(fd)
                logger.debug(
                    "Lock busy: %s (attempt %d/%d)", lock_path, attempt, self.config.retries
                )
            except OSError as exc:
                os.close(fd)
                raise LockOpenError(f"Cannot lock {lock_path}: {exc}") from exc
            else:
                if self._still_linked(fd, lock_path):
                    # Refresh mtime so staleness counts from this acquisition
                    os.utime(fd)
                    logger.debug("Lock acquired: %s", lock_path)
                    return LockHandle(target=resolved, lock_path=lock_path, fd=fd)
                # The previous holder unlinked the file between our open and
                # our flock; the lock we got is on a dead inode.
                fcntl.flock(fd, fcntl.LOCK_UN)
                os.close(fd)
                logger.debug("Lock file replaced while acquiring: %s", lock_path)

            if attempt < self.config.retries:
                time.sleep(self.config.retry_wait)

        raise LockTimeoutError(
            f"Could not acquire lock {lock_path} after {self.config.retries} attempts "
            f"({self.config.max_wait:.1f}s). Another process may be holding it."
        )

    def release(self, handle: LockHandle) -> None:
        """Delete the lock file, then unlock and close its descriptor.

        A lock file that is already gone (reclaimed as stale by another
        process) is not an error. Releasing twice is a no-op.
        """
        if handle.released:
            return

        # Unlink while still locked: a waiter that wins the flock afterwards
        # sees the path gone and retries instead of holding a dead inode.
        try:
            handle.lock_path.unlink(missing_ok=True)
        except OSError as exc:
            logger.debug("Could not remove lock file %s: %s", handle.lock_path, exc)

        try:
            fcntl.flock(handle.fd, fcntl.LOCK_UN)
        except OSError as exc:
            logger.debug("Error unlocking %s: %s", handle.lock_path, exc)
        finally:
            os.close(handle.fd)
            handle.fd = -1
        logger.debug("Lock released: %s", handle.lock_path)

    @contextmanager
    def hold(self, target: str | Path) -> Iterator[LockHandle]:
        """Hold the lock for *target* for the duration of a ``with`` block.

        Example:
            >>> manager = LockManager()
            >>> with manager.hold("settings.ini"):
            ...     ...  # only this process mutates settings.ini here
        """
        handle = self.acquire(target)
        try:
            yield handle
        finally:
            self.release(handle)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _reclaim_if_stale(self, lock_path: Path) -> None:
        try:
            mtime = lock_path.stat().st_mtime
        except FileNotFoundError:
            return
        except OSError as exc:
            raise LockOpenError(f"Cannot inspect lock file {lock_path}: {exc}") from exc

        age = time.time() - mtime
        if age <= self.config.stale_after:
            return

        logger.warning(
            "Removing stale lock file %s (%.0fs old, timeout: %.0fs)",
            lock_path,
            age,
            self.config.stale_after,
        )
        try:
            lock_path.unlink(missing_ok=True)
        except OSError as exc:
            raise LockOpenError(f"Cannot remove stale lock file {lock_path}: {exc}") from exc

    def _open_lock_file(self, lock_path: Path) -> int:
        """Open the lock file, creating it exclusively when absent.

        Raises LockTimeoutError when the file keeps vanishing between the
        create and the open for ``retries`` rounds.
        """
        for _ in range(self.config.retries):
            try:
                return os.open(lock_path, os.O_RDWR | os.O_CREAT | os.O_EXCL, LOCK_FILE_MODE)
            except FileExistsError:
                pass
            except OSError as exc:
                raise LockOpenError(f"Cannot create lock file {lock_path}: {exc}") from exc

            try:
                return os.open(lock_path, os.O_RDWR)
            except FileNotFoundError:
                # Released between our create and open; try the create again
                logger.debug("Lock file vanished while opening: %s", lock_path)
            except OSError as exc:
                if exc.errno in (errno.EACCES, errno.EPERM):
                    raise LockOpenError(f"Permission denied opening lock file {lock_path}") from exc
                raise LockOpenError(f"Cannot open lock file {lock_path}: {exc}") from exc

        raise LockTimeoutError(
            f"Could not open lock file {lock_path}: it was removed and recreated "
            f"{self.config.retries} times in a row"
        )

    @staticmethod
    def _still_linked(fd: int, lock_path: Path) -> bool:
        """True when *fd* still refers to the file at *lock_path*."""
        try:
            current = os.stat(lock_path)
        except FileNotFoundError:
            return False
        opened = os.fstat(fd)
        return (current.st_dev, current.st_ino) == (opened.st_dev, opened.st_ino)
