"""
Lock management for signoff.

Uses flock for a global governance lock and per-initiative locks. Each
acquisition opens its own file description, so the locks exclude concurrent
threads of one process as well as separate processes.
"""

import fcntl
import logging
import os
import time
from contextlib import contextmanager
from pathlib import Path

from signoff.lib.errors import LockTimeout

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.1


@contextmanager
def _acquire_lock(lock_file: Path, timeout: float, lock_name: str):
    """
    Internal helper to acquire a file lock.

    Args:
        lock_file: Path to the lock file
        timeout: Seconds to wait for lock
        lock_name: Human-readable name for error messages
    """
    lock_file.parent.mkdir(parents=True, exist_ok=True)

    # Lock files are never deleted: unlinking lets two holders lock different
    # inodes under the same path.
    fd = open(lock_file, "a")
    start = time.monotonic()

    while True:
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
            break
        except BlockingIOError:
            if time.monotonic() - start > timeout:
                fd.close()
                raise LockTimeout(f"Could not acquire {lock_name} within {timeout}s")
            time.sleep(POLL_INTERVAL)

    logger.debug(f"[LOCK] acquired {lock_name} (pid {os.getpid()})")
    try:
        yield
    finally:
        fcntl.flock(fd, fcntl.LOCK_UN)
        fd.close()
        logger.debug(f"[LOCK] released {lock_name}")


@contextmanager
def initiative_lock(locks_dir: Path, key: str, timeout: float = 30):
    """
    Acquire per-initiative lock, yield, release on exit.

    Guards the load -> mutate -> persist cycle of one initiative; different
    initiatives proceed in parallel.
    """
    lock_file = locks_dir / "initiatives" / f"{key}.lock"
    with _acquire_lock(lock_file, timeout, f"lock for {key}"):
        yield


@contextmanager
def governance_lock(locks_dir: Path, timeout: float = 30):
    """
    Acquire the global governance lock, yield, release on exit.
    """
    lock_file = locks_dir / "governance.lock"
    with _acquire_lock(lock_file, timeout, "governance lock"):
        yield
