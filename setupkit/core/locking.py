"""
Cross-process locking for installation directories.

The in-process IdempotencyCache guarantees one installation per key inside a
single process. This module covers the process boundary: two SetupKit
processes installing into the same directory (for example two CI steps on a
shared runner) serialize on a file lock next to that directory.

Usage:
    from setupkit.core.locking import install_lock

    with install_lock(install_dir, timeout=600):
        extract_archive(archive, install_dir)
"""

import logging
from contextlib import contextmanager
from pathlib import Path

from filelock import FileLock, Timeout as LockTimeout

logger = logging.getLogger(__name__)


class InstallLockTimeout(Exception):
    """Raised when an installation lock cannot be acquired within the timeout."""

    pass


def lock_path_for(directory: Path) -> Path:
    """Lock file used for an installation directory."""
    directory = Path(directory)
    return directory.parent / f".{directory.name}.lock"


@contextmanager
def install_lock(directory: Path, timeout: int = 600):
    """
    Acquire the lock guarding an installation directory.

    Args:
        directory: Directory that is about to be written
        timeout: Maximum wait time in seconds

    Yields:
        None

    Raises:
        InstallLockTimeout: If the lock can't be acquired within timeout
    """
    lock_path = lock_path_for(directory)
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    lock = FileLock(str(lock_path), timeout=timeout)

    try:
        with lock:
            logger.debug(f"Acquired install lock: {lock_path}")
            yield
            logger.debug(f"Released install lock: {lock_path}")
    except LockTimeout as e:
        raise InstallLockTimeout(
            f"Could not acquire install lock {lock_path} after {timeout}s. "
            "Another SetupKit process may be installing into the same directory."
        ) from e
