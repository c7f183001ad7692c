"""Core API: parser, merge engine, cascading resolver and store."""
from __future__ import annotations

from .exceptions import (
    ChainError,
    ConfigError,
    ObjectReferenceError,
    ParseError,
    SpecCascadeError,
    StorageIOError,
    StoreCorruptError,
    StoreError,
    StoreNotInitializedError,
    StrategyError,
)
from .resolver import CascadingResolver, create_resolver
from .spec import ResolvedConfig, SpecFile, parse_content, parse_file
from .store import LogEntry, Store, TokenUsage
from .utils.merge import BodyStrategy, ListStrategy, merge_body, merge_sequence

__all__ = [
    "BodyStrategy",
    "CascadingResolver",
    "ChainError",
    "ConfigError",
    "ListStrategy",
    "LogEntry",
    "ObjectReferenceError",
    "ParseError",
    "ResolvedConfig",
    "SpecCascadeError",
    "SpecFile",
    "StorageIOError",
    "Store",
    "StoreCorruptError",
    "StoreError",
    "StoreNotInitializedError",
    "StrategyError",
    "TokenUsage",
    "create_resolver",
    "merge_body",
    "merge_sequence",
    "parse_content",
    "parse_file",
]
