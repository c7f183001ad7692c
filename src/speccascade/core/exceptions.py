from __future__ import annotations

from typing import Any, Dict, Mapping


class SpecCascadeError(Exception):
    """Base exception for speccascade."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class ParseError(SpecCascadeError, ValueError):
    """Raised when a spec document cannot be split into frontmatter and body."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        SpecCascadeError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class ChainError(SpecCascadeError):
    """Raised when an ancestor chain has a cycle or a missing ancestor."""


class ConfigError(SpecCascadeError, ValueError):
    """Raised when configuration cannot be loaded or fails validation."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        SpecCascadeError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class StrategyError(ConfigError):
    """Raised for an unknown merge strategy name."""


class StoreError(SpecCascadeError):
    """Base class for content-addressed store failures."""


class ObjectReferenceError(StoreError):
    """Raised when a log entry or read references an object the store does not hold."""


class StoreCorruptError(StoreError):
    """Raised when the generation log is unreadable or truncated."""


class StoreNotInitializedError(StoreError):
    """Raised when a store operation runs before ``init()``."""


class StorageIOError(StoreError, OSError):
    """Raised when the underlying filesystem read or write fails."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        StoreError.__init__(self, message, context=context)
        OSError.__init__(self, message)


__all__ = [
    "SpecCascadeError",
    "ParseError",
    "ChainError",
    "ConfigError",
    "StrategyError",
    "StoreError",
    "ObjectReferenceError",
    "StoreCorruptError",
    "StoreNotInitializedError",
    "StorageIOError",
]
