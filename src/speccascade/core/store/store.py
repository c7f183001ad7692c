"""Content-addressed generation store.

Layout under ``<root>/.speccascade/``::

    objects/ab/cdef...          content-addressed blobs
    logs/generations.jsonl      append-only generation log

The store root is always passed in explicitly; nothing here walks the
filesystem looking for it.

``append_log`` does no locking of its own. Callers that write from several
threads or processes serialise each write+append pair, either with
``lock()`` or by going through ``record_generation`` which does so.
"""
from __future__ import annotations

import json
import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

from speccascade.core.config.models import StoreConfig, load_store_config
from speccascade.core.exceptions import (
    ObjectReferenceError,
    StorageIOError,
    StoreNotInitializedError,
)
from speccascade.core.utils.io import LockTimeoutError, acquire_file_lock, ensure_directory
from speccascade.core.utils.time import utc_timestamp

from .differ import Differ, FileDiff
from .log import GenerationLog, LogEntry, TokenUsage
from .objects import Content, ObjectStore

logger = logging.getLogger(__name__)

OBJECTS_DIR = "objects"
LOGS_DIR = "logs"
LOG_FILENAME = "generations.jsonl"
LOCK_NAME = "write"


@dataclass(frozen=True)
class SpecStatus:
    """Whether a spec's output still matches what was last recorded."""

    has_changes: bool
    last_hash: Optional[str]
    current_output_exists: bool
    current_hash: Optional[str] = None
    output_path: Optional[str] = None


class Store:
    """Versioned ledger of generated artifacts.

    Args:
        root: Workspace root; the store lives in ``root / config.dir_name``
        config: Store settings (defaults when omitted)
    """

    def __init__(self, root: Path | str, config: Optional[StoreConfig] = None) -> None:
        self.root = Path(root).resolve()
        self.config = config or StoreConfig()
        self.path = self.root / self.config.dir_name
        self.objects = ObjectStore(
            self.path / OBJECTS_DIR,
            algorithm=self.config.hash_algorithm,
            normalize_line_endings=self.config.normalize_line_endings,
        )
        self.log = GenerationLog(self.path / LOGS_DIR / LOG_FILENAME)
        self.differ = Differ(self.config.diff_context_lines)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def is_initialized(self) -> bool:
        return self.objects.objects_dir.is_dir()

    def init(self) -> bool:
        """Create the store layout and an empty log.

        On an already initialised store this is a no-op: nothing is created,
        repaired or truncated. Returns True when the store was created.

        Raises:
            StorageIOError: If the layout cannot be created
        """
        if self.is_initialized():
            logger.debug("Store at %s already initialised", self.path)
            return False
        try:
            ensure_directory(self.path / LOGS_DIR)
            self.log.create()
            # The objects folder is created last: its presence marks the store
            # as initialised.
            ensure_directory(self.objects.objects_dir)
        except OSError as exc:
            raise StorageIOError(
                f"Failed to initialise store at {self.path}: {exc}",
                context={"path": str(self.path)},
            ) from exc
        logger.debug("Initialised store at %s", self.path)
        return True

    def _require_initialized(self) -> None:
        if not self.is_initialized():
            raise StoreNotInitializedError(
                f"No store at {self.path}; run init() first", context={"path": str(self.path)}
            )

    @contextmanager
    def lock(self) -> Iterator[None]:
        """Exclusive writer lock for a write_object + append_log pair.

        Raises:
            StorageIOError: If the lock cannot be taken within the configured timeout
        """
        self._require_initialized()
        try:
            with acquire_file_lock(self.path / LOCK_NAME, timeout=self.config.lock_timeout_seconds):
                yield
        except LockTimeoutError as exc:
            raise StorageIOError(str(exc), context={"path": str(self.path)}) from exc

    # ------------------------------------------------------------------
    # Objects
    # ------------------------------------------------------------------
    def hash_content(self, content: Content) -> str:
        """Hash ``content`` exactly as ``write_object`` would."""
        return self.objects.hash_content(content)

    def write_object(self, content: Content) -> str:
        """Store ``content`` and return its hash; idempotent."""
        self._require_initialized()
        return self.objects.write(content)

    def object_exists(self, object_hash: str) -> bool:
        self._require_initialized()
        return self.objects.exists(object_hash)

    def read_object(self, object_hash: str) -> str:
        """Return an object's content as UTF-8 text."""
        self._require_initialized()
        return self.objects.read(object_hash).decode("utf-8", errors="replace")

    def read_object_bytes(self, object_hash: str) -> bytes:
        self._require_initialized()
        return self.objects.read(object_hash)

    # ------------------------------------------------------------------
    # Log
    # ------------------------------------------------------------------
    def append_log(self, entry: LogEntry) -> None:
        """Append ``entry`` after checking both of its objects exist.

        Raises:
            ObjectReferenceError: If ``hash`` or ``content_hash`` is not stored;
                the log is left untouched
            StoreCorruptError: If the log is missing or ends mid-record
        """
        self._require_initialized()
        for field_name in ("hash", "content_hash"):
            object_hash = getattr(entry, field_name)
            if not self.objects.exists(object_hash):
                raise ObjectReferenceError(
                    f"Log entry {field_name} {object_hash!r} does not reference a stored object",
                    context={"hash": object_hash, "field": field_name, "spec_path": entry.spec_path},
                )
        self.log.append(entry)

    def read_log(self) -> List[LogEntry]:
        """Return every log entry, oldest first."""
        self._require_initialized()
        return self.log.read()

    def spec_key(self, path: Path | str) -> str:
        """Canonical log key for ``path``.

        Relative to the store root (POSIX separators) when inside it,
        absolute otherwise.
        """
        absolute = Path(os.path.normpath(os.path.abspath(str(path))))
        try:
            return absolute.relative_to(self.root).as_posix()
        except ValueError:
            return str(absolute)

    def _absolute(self, key: str) -> Path:
        path = Path(key)
        return path if path.is_absolute() else self.root / path

    def entries_for(self, spec_path: Path | str, limit: Optional[int] = None) -> List[LogEntry]:
        """Entries recorded for ``spec_path``, newest first."""
        key = self.spec_key(spec_path)
        entries = [e for e in reversed(self.read_log()) if e.spec_path == key]
        return entries if limit is None else entries[:limit]

    def latest_entry(self, spec_path: Path | str) -> Optional[LogEntry]:
        entries = self.entries_for(spec_path, limit=1)
        return entries[0] if entries else None

    def record_generation(
        self,
        spec_path: Path | str,
        output_path: Path | str,
        content: Content,
        *,
        message: str = "",
        model: str = "",
        tokens: Optional[TokenUsage] = None,
    ) -> LogEntry:
        """Store ``content`` and log it as the latest generation for ``spec_path``.

        The content object, the commit object and the log append all happen
        under the store's writer lock.
        """
        spec_key = self.spec_key(spec_path)
        output_key = self.spec_key(output_path)
        with self.lock():
            content_hash = self.objects.write(content)
            timestamp = utc_timestamp()
            commit = json.dumps(
                {
                    "message": message,
                    "spec_path": spec_key,
                    "output_path": output_key,
                    "content_hash": content_hash,
                    "timestamp": timestamp,
                    "model": model,
                },
                sort_keys=True,
            )
            entry = LogEntry(
                hash=self.objects.write(commit),
                message=message,
                spec_path=spec_key,
                output_path=output_key,
                content_hash=content_hash,
                timestamp=timestamp,
                model=model,
                tokens=tokens or TokenUsage(),
            )
            self.append_log(entry)
        return entry

    # ------------------------------------------------------------------
    # Status / diff
    # ------------------------------------------------------------------
    def _read_output(self, path: Path) -> Optional[bytes]:
        if not path.is_file():
            return None
        try:
            return path.read_bytes()
        except OSError as exc:
            raise StorageIOError(
                f"Failed to read output {path}: {exc}", context={"path": str(path)}
            ) from exc

    def _output_path_for(self, entry: Optional[LogEntry], output_path: Path | str | None) -> Optional[Path]:
        if output_path is not None:
            return Path(output_path)
        if entry is not None:
            return self._absolute(entry.output_path)
        return None

    def status(self, spec_path: Path | str, output_path: Path | str | None = None) -> SpecStatus:
        """Compare the current output's hash with the last recorded one.

        ``output_path`` defaults to the path recorded in the latest entry.
        With no history, an existing output counts as a change.
        """
        entry = self.latest_entry(spec_path)
        path = self._output_path_for(entry, output_path)
        data = self._read_output(path) if path is not None else None
        current_hash = self.hash_content(data) if data is not None else None
        last_hash = entry.content_hash if entry is not None else None
        return SpecStatus(
            has_changes=current_hash != last_hash,
            last_hash=last_hash,
            current_output_exists=data is not None,
            current_hash=current_hash,
            output_path=str(path) if path is not None else None,
        )

    def diff(self, spec_path: Path | str, output_path: Path | str | None = None) -> FileDiff:
        """Diff the last recorded output for ``spec_path`` against the file on disk."""
        entry = self.latest_entry(spec_path)
        path = self._output_path_for(entry, output_path)
        old = self.read_object(entry.content_hash) if entry is not None else ""
        data = self._read_output(path) if path is not None else None
        new = data.decode("utf-8", errors="replace") if data is not None else ""
        label = self.spec_key(path) if path is not None else self.spec_key(spec_path)
        return self.differ.diff(label, old, new)

    def diff_hashes(self, old_hash: str, new_hash: str, *, path: str = "") -> FileDiff:
        """Diff two stored objects."""
        return self.differ.diff(path or new_hash[:12], self.read_object(old_hash), self.read_object(new_hash))


def create_store(root: Path | str, *, config: Optional[StoreConfig] = None) -> Store:
    """Build a ``Store`` for ``root`` using its layered configuration."""
    return Store(root, config or load_store_config(Path(root)))


__all__ = ["Store", "SpecStatus", "create_store"]
