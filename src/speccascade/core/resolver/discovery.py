"""Ancestor discovery rules and spec loading.

The resolver asks a discovery rule one question per hop: "which file is this
spec's ancestor, if any?". Rules are small objects behind the
``AncestorDiscovery`` protocol so tests can swap in an in-memory fake.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator, List, Optional, Protocol, Sequence, runtime_checkable

from speccascade.core.config.models import ResolverConfig
from speccascade.core.spec import SpecFile, parse_file

logger = logging.getLogger(__name__)


@runtime_checkable
class AncestorDiscovery(Protocol):
    """Protocol for ancestor lookup."""

    def ancestor_of(self, spec: SpecFile) -> Optional[Path]:
        """Return the path of ``spec``'s ancestor, or None at the top of the chain."""
        ...


@runtime_checkable
class SpecLoader(Protocol):
    """Protocol for turning a path into a parsed ``SpecFile``."""

    def load(self, path: Path) -> SpecFile:
        """Load ``path``; raise ``FileNotFoundError`` when it does not exist."""
        ...


class FileSpecLoader:
    """Load specs from the filesystem."""

    def load(self, path: Path) -> SpecFile:
        return parse_file(path)


def normalize_path(path: Path | str) -> Path:
    """Absolute, lexically normalised form of ``path`` (symlinks untouched)."""
    return Path(os.path.normpath(os.path.abspath(str(path))))


def is_within(path: Path, boundary: Optional[Path]) -> bool:
    """True when ``path`` is ``boundary`` or lies below it (no boundary: always)."""
    if boundary is None:
        return True
    path = normalize_path(path)
    boundary = normalize_path(boundary)
    return path == boundary or boundary in path.parents


class DirectoryDiscovery:
    """Conventional per-directory base file (``.gen.md`` by default).

    A spec's ancestor is the nearest base file in its own folder or any folder
    above it. A base file's ancestor is searched from its parent folder.
    """

    def __init__(self, base_filename: str = ".gen.md", *, stop_at: Optional[Path] = None) -> None:
        self.base_filename = base_filename
        self.stop_at = normalize_path(stop_at) if stop_at is not None else None

    def ancestor_of(self, spec: SpecFile) -> Optional[Path]:
        path = normalize_path(spec.file_path)
        start = path.parent
        if path.name == self.base_filename:
            if start.parent == start:
                return None
            start = start.parent

        for directory in (start, *start.parents):
            if not is_within(directory, self.stop_at):
                return None
            candidate = directory / self.base_filename
            if candidate != path and candidate.is_file():
                return candidate
        return None


class ExtendsDiscovery:
    """Explicit reference held in frontmatter (``extends: ../base.gen.md``).

    Relative references are taken from the spec's folder. A reference that
    points outside ``stop_at`` ends the chain.
    """

    def __init__(self, key: str = "extends", *, stop_at: Optional[Path] = None) -> None:
        self.key = key
        self.stop_at = normalize_path(stop_at) if stop_at is not None else None

    def ancestor_of(self, spec: SpecFile) -> Optional[Path]:
        reference = spec.frontmatter.get(self.key)
        if reference is None or (isinstance(reference, str) and not reference.strip()):
            return None
        target = Path(str(reference))
        if not target.is_absolute():
            target = normalize_path(spec.directory) / target
        target = normalize_path(target)
        if not is_within(target, self.stop_at):
            logger.debug("Ignoring %s reference outside workspace: %s", self.key, target)
            return None
        return target


class FirstMatchDiscovery:
    """Ask each rule in turn; the first one that names an ancestor wins."""

    def __init__(self, rules: Sequence[AncestorDiscovery]) -> None:
        self.rules: List[AncestorDiscovery] = list(rules)

    def ancestor_of(self, spec: SpecFile) -> Optional[Path]:
        for rule in self.rules:
            found = rule.ancestor_of(spec)
            if found is not None:
                return found
        return None


def build_discovery(config: ResolverConfig) -> AncestorDiscovery:
    """Return the discovery rule named by ``config.discovery``."""
    directory = DirectoryDiscovery(config.base_filename, stop_at=config.stop_at)
    extends = ExtendsDiscovery(config.extends_key, stop_at=config.stop_at)
    if config.discovery == "directory":
        return directory
    if config.discovery == "extends":
        return extends
    return FirstMatchDiscovery([extends, directory])


def iter_spec_files(
    root: Path,
    suffix: str = ".gen.md",
    skip_dirs: Sequence[str] = (".git", ".speccascade", "node_modules"),
) -> Iterator[Path]:
    """Yield spec files under ``root`` in sorted, deterministic order.

    Files whose name ends with ``suffix`` are yielded (per-directory base
    files included); folders named in ``skip_dirs`` are not entered.
    """
    skip = set(skip_dirs)
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in skip)
        for name in sorted(filenames):
            if name.endswith(suffix):
                yield Path(dirpath) / name


__all__ = [
    "AncestorDiscovery",
    "DirectoryDiscovery",
    "ExtendsDiscovery",
    "FileSpecLoader",
    "FirstMatchDiscovery",
    "SpecLoader",
    "build_discovery",
    "is_within",
    "iter_spec_files",
    "normalize_path",
]
