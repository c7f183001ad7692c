"""I/O utilities.

This package provides safe, atomic file operations:
- Core: atomic writes, directory management, text/bytes I/O
- YAML: locked reads, plain-scalar loading, block-style dumping
- Locking: file locking primitives
"""
from __future__ import annotations

from .core import (
    PathLike,
    atomic_write,
    ensure_directory,
    ensure_parent_dir,
    read_text,
    write_bytes,
    write_text,
)
from .locking import LockTimeoutError, acquire_file_lock, is_locked, lock_path_for
from .yaml import (
    dump_yaml_string,
    iter_yaml_files,
    load_plain_yaml,
    read_yaml,
)

__all__ = [
    # core
    "PathLike",
    "ensure_parent_dir",
    "ensure_directory",
    "atomic_write",
    "read_text",
    "write_text",
    "write_bytes",
    # yaml
    "read_yaml",
    "load_plain_yaml",
    "dump_yaml_string",
    "iter_yaml_files",
    # locking
    "acquire_file_lock",
    "is_locked",
    "LockTimeoutError",
    "lock_path_for",
]
