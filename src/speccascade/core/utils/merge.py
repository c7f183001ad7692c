"""Canonical merge utilities for cascading specs.

Pure functions, no I/O. Two entry points drive every cascade step:

- ``merge_sequence(parent, child, strategy)`` for ordered value lists
  (context references, skills, examples, any list-valued frontmatter field)
- ``merge_body(parent, child, strategy)`` for free-text instruction bodies

Strategy names are parsed into the closed ``ListStrategy`` / ``BodyStrategy``
enums when configuration is loaded; the merge functions themselves never
raise on a strategy value.
"""
from __future__ import annotations

import json
from enum import Enum
from typing import Any, Dict, Hashable, Iterable, List, Mapping, Optional, Sequence, TypeVar

from speccascade.core.exceptions import StrategyError

T = TypeVar("T")


class ListStrategy(str, Enum):
    """How a child's list combines with its parent's."""

    REPLACE = "replace"
    PREPEND = "prepend"
    CONCATENATE = "concatenate"
    DEDUPE = "dedupe"
    DEDUPE_LAST = "dedupe-last"

    @classmethod
    def parse(cls, name: Any, *, field: str = "") -> "ListStrategy":
        """Return the member called ``name``.

        Raises:
            StrategyError: If ``name`` is not a known list strategy
        """
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            raise StrategyError(
                f"Unknown list merge strategy {name!r}"
                + (f" for field '{field}'" if field else "")
                + f"; expected one of {', '.join(m.value for m in cls)}",
                context={"strategy": name, "field": field},
            ) from None


class BodyStrategy(str, Enum):
    """How a child's body text combines with its parent's."""

    REPLACE = "replace"
    PREPEND = "prepend"
    APPEND = "append"

    @classmethod
    def parse(cls, name: Any, *, field: str = "body") -> "BodyStrategy":
        """Return the member called ``name``.

        Raises:
            StrategyError: If ``name`` is not a known body strategy
        """
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            raise StrategyError(
                f"Unknown body merge strategy {name!r} for field '{field}'; "
                f"expected one of {', '.join(m.value for m in cls)}",
                context={"strategy": name, "field": field},
            ) from None


BODY_SEPARATOR = "\n\n"


def _identity(value: Any) -> Hashable:
    """Return a hashable key that is equal exactly when two values are equal.

    The type is part of the key so ``1``, ``1.0`` and ``True`` stay distinct.
    Unhashable values (lists, mappings) are keyed by canonical JSON.
    """
    try:
        hash(value)
    except TypeError:
        return ("json", json.dumps(value, sort_keys=True, default=repr))
    return (type(value).__name__, value)


def dedupe_first(values: Iterable[T]) -> List[T]:
    """Drop repeats, keeping each value at its first position."""
    seen: set = set()
    out: List[T] = []
    for value in values:
        key = _identity(value)
        if key in seen:
            continue
        seen.add(key)
        out.append(value)
    return out


def dedupe_last(values: Iterable[T]) -> List[T]:
    """Drop repeats, keeping each value at its last position."""
    items = list(values)
    last_index = {_identity(v): i for i, v in enumerate(items)}
    return [v for i, v in enumerate(items) if last_index[_identity(v)] == i]


def merge_sequence(parent: Sequence[T], child: Sequence[T], strategy: Any) -> List[T]:
    """Merge two ordered sequences under ``strategy``.

    Always returns a new list; inputs are never mutated. A ``strategy`` that is
    not a ``ListStrategy`` member (or its value) behaves as ``concatenate``.

    Example:
        >>> merge_sequence(["a", "b"], ["b", "c"], ListStrategy.DEDUPE)
        ['a', 'b', 'c']
        >>> merge_sequence(["a", "b"], ["b", "c"], ListStrategy.DEDUPE_LAST)
        ['a', 'b', 'c']
        >>> merge_sequence(["a"], ["b"], ListStrategy.PREPEND)
        ['b', 'a']
    """
    if strategy == ListStrategy.REPLACE:
        return list(child)
    if strategy == ListStrategy.PREPEND:
        return [*child, *parent]
    if strategy == ListStrategy.DEDUPE:
        return dedupe_first([*parent, *child])
    if strategy == ListStrategy.DEDUPE_LAST:
        return dedupe_last([*parent, *child])
    return [*parent, *child]


def merge_body(parent: str, child: str, strategy: Any = BodyStrategy.APPEND) -> str:
    """Merge two instruction bodies under ``strategy``.

    A side that is blank after trimming yields the other side unchanged,
    whatever the strategy. Anything that is not a ``BodyStrategy`` value
    behaves as ``append``.
    """
    if not parent.strip():
        return child
    if not child.strip():
        return parent

    if strategy == BodyStrategy.REPLACE:
        return child
    if strategy == BodyStrategy.PREPEND:
        return f"{child}{BODY_SEPARATOR}{parent}"
    return f"{parent}{BODY_SEPARATOR}{child}"


def merge_frontmatter(
    parent: Mapping[str, Any],
    child: Mapping[str, Any],
    *,
    field_strategies: Optional[Mapping[str, ListStrategy]] = None,
    default_list_strategy: ListStrategy = ListStrategy.CONCATENATE,
) -> Dict[str, Any]:
    """Merge child frontmatter over parent frontmatter without mutating either.

    - Scalars (and type mismatches): child wins
    - Lists on both sides: ``merge_sequence`` with the field's strategy, or
      ``default_list_strategy`` for fields without one
    - Mappings on both sides: merged recursively with the same rules
    - ``None`` child values leave the parent's value in place

    Example:
        >>> merge_frontmatter({"a": 1, "b": {"c": 2}}, {"b": {"d": 3}})
        {'a': 1, 'b': {'c': 2, 'd': 3}}
    """
    strategies = field_strategies or {}
    result: Dict[str, Any] = dict(parent)
    for key, value in child.items():
        if value is None:
            continue
        current = result.get(key)
        if isinstance(current, list) and isinstance(value, list):
            result[key] = merge_sequence(
                current, value, strategies.get(key, default_list_strategy)
            )
        elif isinstance(current, dict) and isinstance(value, dict):
            result[key] = merge_frontmatter(
                current, value, default_list_strategy=default_list_strategy
            )
        elif isinstance(value, list):
            result[key] = list(value)
        elif isinstance(value, dict):
            result[key] = dict(value)
        else:
            result[key] = value
    return result


__all__ = [
    "BODY_SEPARATOR",
    "BodyStrategy",
    "ListStrategy",
    "dedupe_first",
    "dedupe_last",
    "merge_body",
    "merge_frontmatter",
    "merge_sequence",
]
