"""Advisory lock serializing whole batch runs.

Two runs against the same repos_base_dir would operate on the same working
copies. The lock file lives in that directory and is held for the whole run.
"""

import logging
import os
from typing import Optional

# Import fcntl for POSIX file locking (not available on Windows)
try:
    import fcntl
    HAS_FCNTL = True
except ImportError:
    HAS_FCNTL = False

from src.git_client.errors import SyncError

logger = logging.getLogger(__name__)

LOCK_FILE_NAME = ".fork-sync.lock"


class RunInProgressError(SyncError):
    """Raised when another sync run holds the lock."""

    def __init__(self, lock_path: str):
        super().__init__(f"Another sync run is in progress (lock held on {lock_path})")
        self.lock_path = lock_path


class RunLock:
    """Non-blocking exclusive lock on `<repos_base_dir>/.fork-sync.lock`.

    Example:
        >>> with RunLock(config.repos_base_dir):
        ...     orchestrator.run(account)
    """

    def __init__(self, base_dir: str):
        self.lock_path = os.path.join(os.path.abspath(base_dir), LOCK_FILE_NAME)
        self._lock_file = None

    def acquire(self) -> None:
        """Take the lock.

        Raises:
            RunInProgressError: If another process holds the lock
        """
        os.makedirs(os.path.dirname(self.lock_path), exist_ok=True)
        # Append mode leaves the holder's PID intact when the lock is taken
        lock_file = open(self.lock_path, 'a')

        if not HAS_FCNTL:
            logger.warning(
                "File locking not available on this platform. "
                "Concurrent sync runs are not prevented."
            )
            self._lock_file = lock_file
            return

        try:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except (BlockingIOError, PermissionError):
            lock_file.close()
            raise RunInProgressError(self.lock_path)

        lock_file.truncate(0)
        lock_file.write(str(os.getpid()))
        lock_file.flush()
        self._lock_file = lock_file
        logger.debug(f"Run lock acquired: {self.lock_path}")

    def release(self) -> None:
        lock_file: Optional[object] = self._lock_file
        if lock_file is None:
            return

        try:
            if HAS_FCNTL:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)
        except OSError as e:
            logger.warning(f"Failed to release lock: {e}")
        finally:
            lock_file.close()
            self._lock_file = None
        logger.debug("Run lock released")

    @property
    def locked(self) -> bool:
        return self._lock_file is not None

    def __enter__(self) -> 'RunLock':
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()
