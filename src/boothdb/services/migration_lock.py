"""File-based lock that serializes startup migrations.

Only one process (or one task within a process) may inspect and migrate
a given store at a time. The lock file lives beside the store.
"""

import asyncio
import contextlib
import os
from collections.abc import AsyncIterator
from datetime import UTC, datetime
from pathlib import Path
from uuid import uuid4

from loguru import logger

from boothdb.errors import LockTimeoutError
from boothdb.utils.retry import poll_until_true

_LOCK_SUFFIX = ".migrate.lock"
_LOCK_TMP_SUFFIX = ".migrate.lock.tmp"


class MigrationLock:
    """PID+timestamp file lock for exclusive migration.

    The lock file holds the owner's PID, a UTC timestamp and an owner
    token on separate lines. The token tells two holders in the same
    process apart. Staleness is determined by checking whether the PID
    is still alive and whether the timestamp has expired.

    Acquisition uses ``O_CREAT | O_EXCL`` for atomicity. Replacement
    of a stale lock uses a temp file + ``os.replace()``.
    """

    def __init__(self, db_path: Path, stale_seconds: float = 300) -> None:
        self._lock_path = db_path.with_name(db_path.name + _LOCK_SUFFIX)
        self._tmp_path = db_path.with_name(f"{db_path.name}{_LOCK_TMP_SUFFIX}.{uuid4().hex}")
        self.stale_seconds = stale_seconds
        self._token = uuid4().hex
        self._held = False

    @property
    def lock_path(self) -> Path:
        """Return the lock file path (useful for tests)."""
        return self._lock_path

    async def acquire(self, timeout_seconds: float, poll_interval_seconds: float) -> None:
        """Wait for the lock, polling at a fixed interval.

        Raises:
            LockTimeoutError: If the lock is still held by someone else
                after ``timeout_seconds``.
        """

        @poll_until_true(max_time=timeout_seconds, interval=poll_interval_seconds)
        async def migration_lock() -> bool:
            return self.try_acquire()

        if not await migration_lock():
            raise LockTimeoutError(self._lock_path, timeout_seconds)
        logger.debug("Migration lock acquired: {}", self._lock_path)

    def try_acquire(self) -> bool:
        """Try to acquire the lock once.

        Returns:
            True if this holder now owns the lock.
        """
        if self._held:
            return True

        self._lock_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            fd = os.open(
                str(self._lock_path),
                os.O_CREAT | os.O_EXCL | os.O_WRONLY,
                0o644,
            )
            try:
                os.write(fd, self._lock_content().encode())
            finally:
                os.close(fd)
            self._held = True
            return True
        except FileExistsError:
            pass

        lock_info = self._read_lock(self._lock_path)
        if lock_info is None:
            # Malformed lock file, or it vanished between open and read
            return self._replace_stale_lock()

        pid, timestamp, _ = lock_info
        if self._is_stale(pid, timestamp):
            return self._replace_stale_lock()

        return False

    def release(self) -> None:
        """Release the lock by deleting the file. No-op if not held."""
        if not self._held:
            return
        self._held = False
        if not self._owns_lock_file():
            logger.warning("Migration lock was taken over before release: {}", self._lock_path)
            return
        try:
            self._lock_path.unlink()
            logger.debug("Migration lock released")
        except FileNotFoundError:
            pass

    def is_held(self) -> bool:
        """Check if this holder owns the lock."""
        return self._held

    def heartbeat(self) -> None:
        """Refresh the lock timestamp so a long run is not judged stale."""
        if not self._held:
            return
        self._write_lock_atomic()
        logger.trace("Migration lock heartbeat updated")

    @contextlib.asynccontextmanager
    async def keep_fresh(self, interval_seconds: float | None = None) -> AsyncIterator[None]:
        """Refresh the lock from a background task while the body runs.

        Args:
            interval_seconds: Seconds between refreshes. Defaults to a
                quarter of ``stale_seconds``.
        """
        interval = interval_seconds or self.stale_seconds / 4
        task = asyncio.create_task(self._refresh_periodically(interval))
        try:
            yield
        finally:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def _refresh_periodically(self, interval: float) -> None:
        while self._held:
            await asyncio.sleep(interval)
            try:
                self.heartbeat()
            except OSError:
                logger.opt(exception=True).warning("Failed to refresh migration lock")

    def _is_stale(self, pid: int, timestamp: datetime) -> bool:
        """Determine if a lock is stale based on PID liveness and timestamp age."""
        if not self._is_process_alive(pid):
            logger.debug("Lock holder PID {} is dead, lock is stale", pid)
            return True

        age = (datetime.now(UTC) - timestamp).total_seconds()
        if age > self.stale_seconds:
            logger.debug(
                "Lock timestamp is {}s old (threshold {}s), lock is stale",
                int(age),
                self.stale_seconds,
            )
            return True

        return False

    def _replace_stale_lock(self) -> bool:
        """Replace a stale lock file atomically.

        Returns:
            True if replacement succeeded and this holder's token survived.
        """
        try:
            self._write_lock_atomic()
        except OSError:
            logger.opt(exception=True).warning("Failed to replace stale migration lock")
            return False

        # Another waiter may have replaced the same stale file concurrently
        if not self._owns_lock_file():
            return False
        self._held = True
        logger.info("Replaced stale migration lock: {}", self._lock_path)
        return True

    def _owns_lock_file(self) -> bool:
        lock_info = self._read_lock(self._lock_path)
        return lock_info is not None and lock_info[2] == self._token

    def _lock_content(self) -> str:
        return f"{os.getpid()}\n{datetime.now(UTC).isoformat()}\n{self._token}\n"

    def _write_lock_atomic(self) -> None:
        """Write lock content to a temp file and atomically replace."""
        tmp = str(self._tmp_path)
        fd = os.open(tmp, os.O_CREAT | os.O_WRONLY | os.O_TRUNC, 0o644)
        try:
            os.write(fd, self._lock_content().encode())
        finally:
            os.close(fd)
        Path(tmp).replace(self._lock_path)

    @staticmethod
    def _read_lock(path: Path) -> tuple[int, datetime, str | None] | None:
        """Read PID, timestamp and owner token from a lock file.

        Returns:
            (pid, timestamp, token) tuple, or None if the file is missing
            or malformed. The token is None for files without one.
        """
        try:
            text = path.read_text().strip()
        except (FileNotFoundError, PermissionError):
            return None

        lines = text.splitlines()
        if len(lines) < 2:
            return None

        try:
            pid = int(lines[0])
            timestamp = datetime.fromisoformat(lines[1])
        except ValueError:
            return None
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=UTC)
        token = lines[2] if len(lines) > 2 else None
        return pid, timestamp, token

    @staticmethod
    def _is_process_alive(pid: int) -> bool:
        """Check whether a process with the given PID is running.

        Uses ``os.kill(pid, 0)`` which sends no signal but checks existence.
        """
        try:
            os.kill(pid, 0)
            return True
        except ProcessLookupError:
            return False
        except PermissionError:
            # Process exists but belongs to another user
            return True
        except (OSError, OverflowError):
            return False
