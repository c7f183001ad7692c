"""YAML helpers for frontmatter and configuration files."""
from __future__ import annotations

import fcntl
from pathlib import Path
from typing import Any, List

import yaml

from .core import PathLike

TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class PlainScalarLoader(yaml.SafeLoader):
    """SafeLoader that leaves dates and timestamps as plain strings.

    Frontmatter values then stay inside str/int/float/bool/None/list/mapping,
    which keeps them comparable, JSON-encodable and stable on re-dump.
    """


PlainScalarLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class BlockStyleDumper(yaml.SafeDumper):
    """SafeDumper that writes multi-line strings as ``|`` literal blocks."""


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    style = "|" if "\n" in data else None
    return dumper.represent_scalar("tag:yaml.org,2002:str", data, style=style)


BlockStyleDumper.add_representer(str, _represent_str)


def load_plain_yaml(content: str) -> Any:
    """Parse YAML text without timestamp conversion.

    Raises:
        yaml.YAMLError: When ``content`` is not valid YAML
    """
    return yaml.load(content, Loader=PlainScalarLoader)  # noqa: S506 - SafeLoader subclass


def dump_yaml_string(data: Any, sort_keys: bool = True) -> str:
    """Dump ``data`` as block-style YAML, unicode kept as-is."""
    return yaml.dump(
        data,
        Dumper=BlockStyleDumper,
        default_flow_style=False,
        sort_keys=sort_keys,
        allow_unicode=True,
    )


def read_yaml(path: PathLike, default: Any = None, raise_on_error: bool = False) -> Any:
    """Load the YAML document at ``path`` under a shared lock.

    Missing files, unreadable files and invalid YAML return ``default``
    unless ``raise_on_error`` is set. An empty document also yields ``default``.
    """
    source = Path(path)
    try:
        with source.open("r", encoding="utf-8") as fh:
            fcntl.flock(fh.fileno(), fcntl.LOCK_SH)
            try:
                data = yaml.safe_load(fh)
            finally:
                fcntl.flock(fh.fileno(), fcntl.LOCK_UN)
    except (OSError, yaml.YAMLError):
        if raise_on_error:
            raise
        return default
    return default if data is None else data


def iter_yaml_files(dir_path: PathLike) -> List[Path]:
    """YAML files directly inside ``dir_path``, sorted by name.

    When ``<name>.yaml`` and ``<name>.yml`` both exist only ``.yaml`` is kept.
    """
    folder = Path(dir_path)
    if not folder.is_dir():
        return []
    by_stem = {}
    for candidate in sorted(folder.glob("*.yml")) + sorted(folder.glob("*.yaml")):
        if candidate.is_file():
            by_stem[candidate.stem] = candidate
    return [by_stem[stem] for stem in sorted(by_stem)]


__all__ = [
    "BlockStyleDumper",
    "PlainScalarLoader",
    "dump_yaml_string",
    "iter_yaml_files",
    "load_plain_yaml",
    "read_yaml",
]
