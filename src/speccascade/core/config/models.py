"""Typed configuration views.

Strategy names become ``ListStrategy`` / ``BodyStrategy`` members here, once,
so a typo in configuration fails at load time instead of silently
concatenating during a merge.
"""
from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from speccascade.core.exceptions import ConfigError
from speccascade.core.utils.merge import BodyStrategy, ListStrategy

from .manager import ConfigManager

DISCOVERY_RULES = ("directory", "extends", "auto")


@dataclass(frozen=True)
class MergeStrategies:
    """Strategies used while folding a chain."""

    body: BodyStrategy = BodyStrategy.APPEND
    examples: ListStrategy = ListStrategy.DEDUPE
    lists: ListStrategy = ListStrategy.CONCATENATE
    fields: Mapping[str, ListStrategy] = field(
        default_factory=lambda: {
            "context": ListStrategy.DEDUPE,
            "skills": ListStrategy.DEDUPE,
            "examples": ListStrategy.DEDUPE,
        }
    )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MergeStrategies":
        """Build from a ``strategies`` section.

        Raises:
            StrategyError: For any unknown strategy name
        """
        defaults = cls()
        examples = ListStrategy.parse(data.get("examples", defaults.examples), field="examples")
        if "fields" in data:
            fields = {
                str(name): ListStrategy.parse(value, field=str(name))
                for name, value in (data.get("fields") or {}).items()
            }
        else:
            fields = {name: value for name, value in defaults.fields.items() if name != "examples"}
        # Frontmatter `examples:` lists follow the examples strategy unless a field entry names one.
        fields.setdefault("examples", examples)
        return cls(
            body=BodyStrategy.parse(data.get("body", defaults.body), field="body"),
            examples=examples,
            lists=ListStrategy.parse(data.get("lists", defaults.lists), field="lists"),
            fields=fields,
        )

    def for_field(self, name: str) -> ListStrategy:
        return self.fields.get(name, self.lists)

    def with_overrides(self, overrides: Mapping[str, Any]) -> "MergeStrategies":
        """Return strategies with a file's ``cascade:`` overrides applied.

        ``body`` and ``examples`` keys target those strategies; every other key
        names a frontmatter list field.

        Raises:
            StrategyError: For any unknown strategy name
        """
        if not overrides:
            return self
        body = self.body
        examples = self.examples
        fields: Dict[str, ListStrategy] = dict(self.fields)
        for key, value in overrides.items():
            name = str(key)
            if name == "body":
                body = BodyStrategy.parse(value, field="body")
            elif name == "examples":
                examples = ListStrategy.parse(value, field="examples")
                fields["examples"] = examples
            else:
                fields[name] = ListStrategy.parse(value, field=name)
        return MergeStrategies(body=body, examples=examples, lists=self.lists, fields=fields)


@dataclass(frozen=True)
class ResolverConfig:
    """Settings for ``CascadingResolver``."""

    base_filename: str = ".gen.md"
    spec_suffix: str = ".gen.md"
    discovery: str = "auto"
    extends_key: str = "extends"
    max_depth: int = 10
    resolve_paths: bool = True
    stop_at: Optional[Path] = None
    skip_dirs: Tuple[str, ...] = (".git", ".speccascade", "node_modules")
    strategies: MergeStrategies = field(default_factory=MergeStrategies)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ResolverConfig":
        discovery = str(data.get("discovery", "auto"))
        if discovery not in DISCOVERY_RULES:
            raise ConfigError(
                f"Unknown discovery rule '{discovery}'; expected one of {', '.join(DISCOVERY_RULES)}",
                context={"discovery": discovery},
            )
        stop_at = data.get("stop_at")
        return cls(
            base_filename=str(data.get("base_filename", cls.base_filename)),
            spec_suffix=str(data.get("spec_suffix", cls.spec_suffix)),
            discovery=discovery,
            extends_key=str(data.get("extends_key", cls.extends_key)),
            max_depth=int(data.get("max_depth", cls.max_depth)),
            resolve_paths=bool(data.get("resolve_paths", cls.resolve_paths)),
            stop_at=Path(stop_at) if stop_at else None,
            skip_dirs=tuple(data.get("skip_dirs", cls.skip_dirs)),
            strategies=MergeStrategies.from_dict(data.get("strategies") or {}),
        )


@dataclass(frozen=True)
class StoreConfig:
    """Settings for ``Store``."""

    dir_name: str = ".speccascade"
    hash_algorithm: str = "sha256"
    normalize_line_endings: bool = True
    lock_timeout_seconds: float = 10.0
    diff_context_lines: int = 3

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StoreConfig":
        algorithm = str(data.get("hash_algorithm", cls.hash_algorithm)).lower()
        # shake_* digests have no fixed length.
        if algorithm not in hashlib.algorithms_guaranteed or hashlib.new(algorithm).digest_size == 0:
            raise ConfigError(
                f"Unsupported hash algorithm '{algorithm}'",
                context={"hash_algorithm": algorithm},
            )
        return cls(
            dir_name=str(data.get("dir_name", cls.dir_name)),
            hash_algorithm=algorithm,
            normalize_line_endings=bool(data.get("normalize_line_endings", cls.normalize_line_endings)),
            lock_timeout_seconds=float(data.get("lock_timeout_seconds", cls.lock_timeout_seconds)),
            diff_context_lines=int(data.get("diff_context_lines", cls.diff_context_lines)),
        )


def load_resolver_config(repo_root: Optional[Path] = None) -> ResolverConfig:
    """Load ``ResolverConfig`` from the layered configuration of ``repo_root``."""
    cfg = ConfigManager(repo_root).load_config()
    return ResolverConfig.from_dict(cfg.get("resolver") or {})


def load_store_config(repo_root: Optional[Path] = None) -> StoreConfig:
    """Load ``StoreConfig`` from the layered configuration of ``repo_root``."""
    cfg = ConfigManager(repo_root).load_config()
    return StoreConfig.from_dict(cfg.get("store") or {})


__all__ = [
    "DISCOVERY_RULES",
    "MergeStrategies",
    "ResolverConfig",
    "StoreConfig",
    "load_resolver_config",
    "load_store_config",
]
