"""Filesystem primitives shared by the parser, config loader and store.

Writes that replace a file go through ``atomic_write``: the new bytes land in
a hidden temp file beside the target, are fsync'd, and are then published with
``os.replace``. Readers see either the old file or the complete new one.
"""
from __future__ import annotations

import fcntl
import os
import tempfile
from pathlib import Path
from typing import IO, Callable, Optional, Union

PathLike = Union[str, Path]


def ensure_parent_dir(path: PathLike) -> Path:
    """Create the folder that will hold ``path``; return that folder."""
    parent = Path(path).parent
    parent.mkdir(parents=True, exist_ok=True)
    return parent


def ensure_directory(path: PathLike) -> Path:
    """Create ``path`` (and parents) if needed.

    Raises:
        NotADirectoryError: If something other than a folder is in the way
    """
    folder = Path(path)
    if folder.exists() and not folder.is_dir():
        raise NotADirectoryError(f"Not a directory: {folder}")
    folder.mkdir(parents=True, exist_ok=True)
    return folder


def _fsync_dir(folder: Path) -> None:
    # Persist the rename itself; not every platform lets a folder be opened.
    try:
        fd = os.open(str(folder), os.O_RDONLY)
    except OSError:
        return
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


def atomic_write(path: PathLike, write_fn: Callable[[IO[bytes]], None]) -> None:
    """Publish whatever ``write_fn`` writes as the new content of ``path``.

    ``write_fn`` receives a binary file object. On any failure the temp file is
    removed and ``path`` is left as it was.
    """
    target = Path(path)
    folder = ensure_parent_dir(target)

    tmp_name: Optional[str] = None
    try:
        with tempfile.NamedTemporaryFile(
            "wb", dir=str(folder), prefix=f".{target.name}.", suffix=".tmp", delete=False
        ) as fh:
            tmp_name = fh.name
            fcntl.flock(fh.fileno(), fcntl.LOCK_EX)
            write_fn(fh)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, str(target))
        tmp_name = None
        _fsync_dir(folder)
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)


def write_bytes(path: PathLike, data: bytes) -> None:
    """Atomically replace ``path`` with ``data``."""
    atomic_write(path, lambda fh: fh.write(data))


def write_text(path: PathLike, content: str) -> None:
    """Atomically replace ``path`` with UTF-8 ``content``."""
    write_bytes(path, content.encode("utf-8"))


def read_text(path: PathLike) -> str:
    """Return the UTF-8 text of ``path``.

    Raises:
        FileNotFoundError: If ``path`` is not a file
    """
    source = Path(path)
    if not source.is_file():
        raise FileNotFoundError(f"No such file: {source}")
    return source.read_text(encoding="utf-8")


__all__ = [
    "PathLike",
    "atomic_write",
    "ensure_directory",
    "ensure_parent_dir",
    "read_text",
    "write_bytes",
    "write_text",
]
