"""Append-only generation log (JSON Lines).

One record per generation event, oldest first. Records are only ever
appended; nothing here rewrites or truncates the file.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import jsonschema

from speccascade.core.exceptions import StorageIOError, StoreCorruptError, StoreError
from speccascade.data import get_schema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenUsage:
    input: int = 0
    output: int = 0


@dataclass(frozen=True)
class LogEntry:
    """One generation event.

    ``hash`` names the commit object describing the event; ``content_hash``
    names the generated artifact. Both must already be in the object table
    when the entry is appended.
    """

    hash: str
    message: str
    spec_path: str
    output_path: str
    content_hash: str
    timestamp: str
    model: str = ""
    tokens: TokenUsage = field(default_factory=TokenUsage)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogEntry":
        tokens = data.get("tokens") or {}
        return cls(
            hash=data["hash"],
            message=data["message"],
            spec_path=data["spec_path"],
            output_path=data["output_path"],
            content_hash=data["content_hash"],
            timestamp=data["timestamp"],
            model=data.get("model", ""),
            tokens=TokenUsage(input=int(tokens.get("input", 0)), output=int(tokens.get("output", 0))),
        )


def _validator() -> jsonschema.protocols.Validator:
    return jsonschema.Draft202012Validator(get_schema("log-entry"))


def validate_record(record: Any) -> None:
    """Raise ``jsonschema.ValidationError`` when ``record`` is not a log entry."""
    jsonschema.validate(record, get_schema("log-entry"), cls=jsonschema.Draft202012Validator)


class GenerationLog:
    """JSONL file of ``LogEntry`` records."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def create(self) -> None:
        """Create an empty log (never truncates an existing one)."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8"):
                pass
        except OSError as exc:
            raise StorageIOError(
                f"Failed to create log {self.path}: {exc}", context={"path": str(self.path)}
            ) from exc

    def append(self, entry: LogEntry) -> None:
        """Append ``entry`` as one JSON line and fsync.

        Raises:
            StoreError: If the entry does not match the record schema
            StoreCorruptError: If the log is missing or its last record is
                unterminated; nothing is written
            StorageIOError: If the write fails
        """
        record = entry.to_dict()
        try:
            validate_record(record)
        except jsonschema.ValidationError as exc:
            raise StoreError(
                f"Invalid log entry for {entry.spec_path}: {exc.message}",
                context={"hash": entry.hash, "spec_path": entry.spec_path},
            ) from exc
        data = (json.dumps(record, ensure_ascii=False, sort_keys=True) + "\n").encode("utf-8")
        try:
            # No O_CREAT: a deleted log must not be recreated as a fresh history.
            fd = os.open(str(self.path), os.O_RDWR | os.O_APPEND)
        except FileNotFoundError as exc:
            raise StoreCorruptError(
                f"Generation log is missing: {self.path}", context={"path": str(self.path)}
            ) from exc
        except OSError as exc:
            raise StorageIOError(
                f"Failed to open log {self.path}: {exc}", context={"path": str(self.path)}
            ) from exc
        try:
            size = os.fstat(fd).st_size
            if size and os.pread(fd, 1, size - 1) != b"\n":
                raise StoreCorruptError(
                    f"Generation log is truncated (last record has no line ending): {self.path}",
                    context={"path": str(self.path)},
                )
            view = memoryview(data)
            while view:
                view = view[os.write(fd, view):]
            os.fsync(fd)
        except OSError as exc:
            raise StorageIOError(
                f"Failed to append to log {self.path}: {exc}", context={"path": str(self.path)}
            ) from exc
        finally:
            os.close(fd)
        logger.debug("Appended log entry %s for %s", entry.hash, entry.spec_path)

    def read(self) -> List[LogEntry]:
        """Return every entry, oldest first.

        Raises:
            StoreCorruptError: If the log is missing, undecodable, truncated,
                or holds a record that is not a valid entry
            StorageIOError: If the file cannot be read
        """
        if not self.path.is_file():
            raise StoreCorruptError(
                f"Generation log is missing: {self.path}", context={"path": str(self.path)}
            )
        try:
            data = self.path.read_bytes()
        except OSError as exc:
            raise StorageIOError(
                f"Failed to read log {self.path}: {exc}", context={"path": str(self.path)}
            ) from exc

        if data and not data.endswith(b"\n"):
            raise StoreCorruptError(
                f"Generation log is truncated (last record has no line ending): {self.path}",
                context={"path": str(self.path), "line": data.count(b"\n") + 1},
            )
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise StoreCorruptError(
                f"Generation log is not valid UTF-8: {self.path}",
                context={"path": str(self.path), "offset": exc.start},
            ) from exc

        validator = _validator()
        entries: List[LogEntry] = []
        # Split on LF only: messages may hold other Unicode line separators.
        lines = text.split("\n")[:-1] if text else []
        for lineno, line in enumerate(lines, start=1):
            if not line.strip():
                raise StoreCorruptError(
                    f"Blank record at {self.path}:{lineno}",
                    context={"path": str(self.path), "line": lineno},
                )
            try:
                record = json.loads(line)
            except json.JSONDecodeError as exc:
                raise StoreCorruptError(
                    f"Undecodable record at {self.path}:{lineno}: {exc.msg}",
                    context={"path": str(self.path), "line": lineno},
                ) from exc
            error = jsonschema.exceptions.best_match(validator.iter_errors(record))
            if error is not None:
                raise StoreCorruptError(
                    f"Invalid record at {self.path}:{lineno}: {error.message}",
                    context={"path": str(self.path), "line": lineno},
                )
            entries.append(LogEntry.from_dict(record))
        return entries


__all__ = ["GenerationLog", "LogEntry", "TokenUsage", "validate_record"]
