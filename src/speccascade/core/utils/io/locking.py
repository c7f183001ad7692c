"""Exclusive writer locks.

A lock on ``path`` is an ``fcntl.flock`` held on the sidecar ``<path>.lock``.
``flock`` does not exclude threads that share a process reliably, so each
sidecar also gets an in-process mutex that is taken first.
"""
from __future__ import annotations

import fcntl
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Any, Dict, Iterator

from .core import PathLike, ensure_directory

DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_POLL_INTERVAL_SECONDS = 0.05

_MUTEXES: Dict[str, threading.Lock] = {}
_MUTEXES_GUARD = threading.Lock()


class LockTimeoutError(TimeoutError):
    """Raised when a lock is still held by someone else after the timeout."""


def lock_path_for(target: PathLike) -> Path:
    target = Path(target)
    return target.with_name(target.name + ".lock")


def _mutex_for(sidecar: Path) -> threading.Lock:
    key = str(sidecar.resolve())
    with _MUTEXES_GUARD:
        return _MUTEXES.setdefault(key, threading.Lock())


def _try_flock(fh: IO[Any]) -> bool:
    try:
        fcntl.flock(fh.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
    except BlockingIOError:
        return False
    return True


@contextmanager
def acquire_file_lock(
    target: PathLike,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    *,
    poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
) -> Iterator[IO[Any]]:
    """Hold the exclusive lock for ``target`` for the duration of the block.

    The sidecar file is left in place after release.

    Raises:
        ValueError: If ``timeout`` or ``poll_interval`` is not positive
        LockTimeoutError: If the lock is not free within ``timeout`` seconds
    """
    if timeout <= 0 or poll_interval <= 0:
        raise ValueError(f"timeout and poll_interval must be positive (got {timeout}, {poll_interval})")

    sidecar = lock_path_for(target)
    ensure_directory(sidecar.parent)
    deadline = time.monotonic() + timeout

    mutex = _mutex_for(sidecar)
    if not mutex.acquire(timeout=timeout):
        raise LockTimeoutError(f"Timed out after {timeout}s waiting for lock on {target}")
    try:
        with sidecar.open("a+") as fh:
            while not _try_flock(fh):
                if time.monotonic() >= deadline:
                    raise LockTimeoutError(f"Timed out after {timeout}s waiting for lock on {target}")
                time.sleep(poll_interval)
            try:
                yield fh
            finally:
                fcntl.flock(fh.fileno(), fcntl.LOCK_UN)
    finally:
        mutex.release()


def is_locked(target: PathLike) -> bool:
    """True when some holder currently owns the lock for ``target``."""
    sidecar = lock_path_for(target)
    if not sidecar.is_file():
        return False
    with sidecar.open("a+") as fh:
        if not _try_flock(fh):
            return True
        fcntl.flock(fh.fileno(), fcntl.LOCK_UN)
    return False


__all__ = ["LockTimeoutError", "acquire_file_lock", "is_locked", "lock_path_for"]
