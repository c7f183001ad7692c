"""Content-addressed store: objects, generation log, status and diff."""
from __future__ import annotations

from .differ import DiffHunk, Differ, FileDiff
from .log import GenerationLog, LogEntry, TokenUsage
from .objects import ObjectStore
from .store import SpecStatus, Store, create_store

__all__ = [
    "DiffHunk",
    "Differ",
    "FileDiff",
    "GenerationLog",
    "LogEntry",
    "ObjectStore",
    "SpecStatus",
    "Store",
    "TokenUsage",
    "create_store",
]
