"""Cascading resolver.

Walks from a leaf spec up through its ancestors, then folds the chain root to
leaf through the merge engine:

    /project/.gen.md                    (root)
    /project/packages/.gen.md           (packages level)
    /project/packages/cli/app.gen.md    (leaf)

    chain: [root, packages, leaf]
    fold:  ((root <- packages) <- leaf)

The fold direction is fixed: the accumulator is always the parent and the
next file in the chain is always the child.
"""
from __future__ import annotations

import copy
import dataclasses
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set

from speccascade.core.config.models import MergeStrategies, ResolverConfig, load_resolver_config
from speccascade.core.exceptions import ChainError, SpecCascadeError
from speccascade.core.spec import CASCADE_KEY, ResolvedConfig, SpecFile, resolve_relative_paths
from speccascade.core.utils.merge import merge_body, merge_frontmatter, merge_sequence

from .discovery import AncestorDiscovery, FileSpecLoader, SpecLoader, build_discovery, normalize_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolutionResult:
    """Outcome of resolving one leaf in ``resolve_many``."""

    path: Path
    config: Optional[ResolvedConfig] = None
    error: Optional[SpecCascadeError | OSError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class CascadingResolver:
    """Resolve a leaf spec into one ``ResolvedConfig``.

    Args:
        config: Resolver settings (defaults when omitted)
        discovery: Ancestor rule; built from ``config.discovery`` when omitted
        loader: Spec source; the filesystem when omitted
    """

    def __init__(
        self,
        config: Optional[ResolverConfig] = None,
        *,
        discovery: Optional[AncestorDiscovery] = None,
        loader: Optional[SpecLoader] = None,
    ) -> None:
        self.config = config or ResolverConfig()
        self.discovery = discovery or build_discovery(self.config)
        self.loader = loader or FileSpecLoader()

    # ------------------------------------------------------------------
    # Chain discovery
    # ------------------------------------------------------------------
    def _load(self, path: Path) -> SpecFile:
        spec = self.loader.load(path)
        if self.config.resolve_paths:
            spec = resolve_relative_paths(spec)
        return spec

    def build_chain(self, leaf_path: Path | str) -> List[SpecFile]:
        """Return the chain for ``leaf_path``, root ancestor first.

        Raises:
            FileNotFoundError: If the leaf itself does not exist
            ChainError: On an ancestor cycle or a missing ancestor
        """
        leaf = self._load(Path(leaf_path))
        discovered: List[SpecFile] = [leaf]
        visited: Set[Path] = {normalize_path(leaf.file_path)}
        current = leaf

        while True:
            ancestor = self.discovery.ancestor_of(current)
            if ancestor is None:
                break

            key = normalize_path(ancestor)
            if key in visited:
                cycle = [str(spec.file_path) for spec in discovered] + [str(ancestor)]
                raise ChainError(
                    f"Ancestor cycle detected while resolving {leaf.file_path}: "
                    + " -> ".join(cycle),
                    context={"path": str(leaf.file_path), "cycle": cycle},
                )

            if len(discovered) > self.config.max_depth:
                logger.debug(
                    "Stopping chain for %s at max_depth=%d", leaf.file_path, self.config.max_depth
                )
                break

            try:
                current = self._load(ancestor)
            except FileNotFoundError as exc:
                raise ChainError(
                    f"Missing ancestor {ancestor} referenced by {current.file_path}",
                    context={"path": str(current.file_path), "ancestor": str(ancestor)},
                ) from exc

            logger.debug("Ancestor of %s: %s", discovered[-1].file_path, current.file_path)
            visited.add(key)
            discovered.append(current)

        discovered.reverse()
        return discovered

    # ------------------------------------------------------------------
    # Folding
    # ------------------------------------------------------------------
    def _strategies_for(self, spec: SpecFile) -> MergeStrategies:
        overrides = spec.cascade
        try:
            return self.config.strategies.with_overrides(overrides)
        except SpecCascadeError as exc:
            exc.context.setdefault("path", str(spec.file_path))
            raise

    @staticmethod
    def _own_frontmatter(spec: SpecFile) -> Dict[str, Any]:
        data = copy.deepcopy(dict(spec.frontmatter))
        data.pop(CASCADE_KEY, None)
        return data

    def fold(self, chain: Iterable[SpecFile]) -> ResolvedConfig:
        """Fold ``chain`` (root first) into a fresh ``ResolvedConfig``.

        Raises:
            ChainError: If ``chain`` is empty
            StrategyError: If a file declares an unknown ``cascade:`` strategy
        """
        specs = tuple(chain)
        if not specs:
            raise ChainError("Cannot fold an empty spec chain")

        # Validate every file's overrides before any merging happens.
        strategies = [self._strategies_for(spec) for spec in specs]

        root = specs[0]
        frontmatter = self._own_frontmatter(root)
        body = root.body
        examples = list(root.examples)

        for spec, active in zip(specs[1:], strategies[1:]):
            frontmatter = merge_frontmatter(
                frontmatter,
                self._own_frontmatter(spec),
                field_strategies=active.fields,
                default_list_strategy=active.lists,
            )
            body = merge_body(body, spec.body, active.body)
            examples = merge_sequence(examples, list(spec.examples), active.examples)

        return ResolvedConfig(
            file_path=specs[-1].file_path,
            frontmatter=frontmatter,
            body=body,
            examples=tuple(examples),
            chain=specs,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def resolve(self, leaf_path: Path | str) -> ResolvedConfig:
        """Resolve ``leaf_path`` into one merged configuration."""
        return self.fold(self.build_chain(leaf_path))

    def resolve_many(self, leaf_paths: Iterable[Path | str]) -> List[ResolutionResult]:
        """Resolve independent leaves; a failing leaf does not affect the others."""
        results: List[ResolutionResult] = []
        for leaf_path in leaf_paths:
            path = Path(leaf_path)
            try:
                results.append(ResolutionResult(path=path, config=self.resolve(path)))
            except (SpecCascadeError, OSError) as exc:
                logger.debug("Resolution failed for %s: %s", path, exc)
                results.append(ResolutionResult(path=path, error=exc))
        return results


def create_resolver(
    repo_root: Optional[Path] = None,
    *,
    config: Optional[ResolverConfig] = None,
    discovery: Optional[AncestorDiscovery] = None,
    loader: Optional[SpecLoader] = None,
) -> CascadingResolver:
    """Build a resolver from the layered configuration of ``repo_root``.

    When ``repo_root`` is given and no ``stop_at`` is configured, the
    workspace boundary is ``repo_root`` itself.
    """
    if config is None:
        config = load_resolver_config(repo_root)
    if repo_root is not None and config.stop_at is None:
        config = dataclasses.replace(config, stop_at=Path(repo_root))
    return CascadingResolver(config, discovery=discovery, loader=loader)


__all__ = ["CascadingResolver", "ResolutionResult", "create_resolver"]
