"""
Configuration management (YAML layers, environment overrides, schema validation).
"""
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

import jsonschema
import yaml

from speccascade.core.exceptions import ConfigError
from speccascade.core.utils.io import iter_yaml_files, read_yaml
from speccascade.core.utils.merge import ListStrategy, merge_frontmatter
from speccascade.data import get_data_path, get_schema

logger = logging.getLogger(__name__)

ENV_PREFIX = "SPECCASCADE_"
PROJECT_CONFIG_DIR = ".speccascade"
INT_PATTERN = re.compile(r"[-+]?\d+")
FLOAT_PATTERN = re.compile(r"[-+]?(?:\d+\.\d*|\.\d+)")


class ConfigManager:
    """Load, merge, and validate configuration.

    Configuration sources (highest to lowest priority):
    1. Environment variables: SPECCASCADE_<section>__<key>
    2. Project config: <repo_root>/.speccascade/config/*.yaml (alphabetical order)
    3. Bundled defaults: speccascade.data/config/*.yaml (alphabetical order)

    Mappings merge recursively; any other value in a higher layer replaces
    the lower one outright (lists included).
    """

    def __init__(self, repo_root: Optional[Path] = None, *, environ: Optional[Dict[str, str]] = None) -> None:
        self.repo_root = Path(repo_root) if repo_root is not None else None
        self.core_config_dir = get_data_path("config")
        self.project_config_dir = (
            self.repo_root / PROJECT_CONFIG_DIR / "config" if self.repo_root is not None else None
        )
        self._environ = environ

    def deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge dictionaries; lists in ``override`` replace."""
        return merge_frontmatter(base, override, default_list_strategy=ListStrategy.REPLACE)

    def load_yaml(self, path: Path) -> Dict[str, Any]:
        # Fail closed: configuration must never silently ignore invalid YAML.
        try:
            data = read_yaml(path, default={}, raise_on_error=True)
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(
                f"Cannot load configuration file {path}: {exc}", context={"path": str(path)}
            ) from exc
        if not isinstance(data, dict):
            raise ConfigError(
                f"Configuration file {path} must hold a mapping, got {type(data).__name__}",
                context={"path": str(path)},
            )
        return data

    def _merge_directory(self, base: Dict[str, Any], directory: Optional[Path]) -> Dict[str, Any]:
        if directory is None or not directory.exists():
            return base
        cfg = base
        for path in iter_yaml_files(directory):
            logger.debug("Merging config layer %s", path)
            cfg = self.deep_merge(cfg, self.load_yaml(path))
        return cfg

    # ------------------------------------------------------------------
    # Environment overrides
    # ------------------------------------------------------------------
    @staticmethod
    def coerce_env_value(raw: str) -> Any:
        """Turn an environment string into bool, int, float or JSON when it reads as one."""
        text = raw.strip()
        if text.lower() in ("true", "false"):
            return text.lower() == "true"
        if INT_PATTERN.fullmatch(text):
            return int(text)
        if FLOAT_PATTERN.fullmatch(text):
            return float(text)
        if text[:1] + text[-1:] in ("{}", "[]"):
            try:
                return json.loads(text)
            except json.JSONDecodeError:
                pass
        return text

    def _iter_env_overrides(self) -> Iterator[Tuple[List[str], Any]]:
        environ = self._environ if self._environ is not None else os.environ
        for key in sorted(environ.keys()):
            if not key.startswith(ENV_PREFIX):
                continue
            raw = key[len(ENV_PREFIX):]
            segments = raw.split("__")
            if not raw or any(seg == "" for seg in segments):
                raise ConfigError(f"Malformed {ENV_PREFIX}* key: '{key}'", context={"key": key})
            yield [seg.lower() for seg in segments], self.coerce_env_value(environ[key])

    def _set_nested(self, root: Dict[str, Any], path: List[str], value: Any) -> None:
        node: Union[Dict[str, Any], Any] = root
        for seg in path[:-1]:
            child = node.get(seg)
            if not isinstance(child, dict):
                child = {}
                node[seg] = child
            node = child
        node[path[-1]] = value

    def _apply_env_overrides(self, cfg: Dict[str, Any]) -> Dict[str, Any]:
        overrides: Dict[str, Any] = {}
        for path, value in self._iter_env_overrides():
            self._set_nested(overrides, path, value)
        if not overrides:
            return cfg
        return self.deep_merge(cfg, overrides)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def validate(self, config: Dict[str, Any]) -> None:
        """Validate ``config`` against the bundled configuration schema.

        Raises:
            ConfigError: Listing the first violation and its location
        """
        validator = jsonschema.Draft202012Validator(get_schema("config"))
        errors = sorted(validator.iter_errors(config), key=lambda e: [str(p) for p in e.path])
        if errors:
            first = errors[0]
            location = "/".join(str(p) for p in first.path) or "<root>"
            raise ConfigError(
                f"Invalid configuration at {location}: {first.message}",
                context={"location": location, "errors": len(errors)},
            )

    def load_config(self, *, validate: bool = True) -> Dict[str, Any]:
        """Return the merged configuration mapping."""
        cfg = self._merge_directory({}, self.core_config_dir)
        cfg = self._merge_directory(cfg, self.project_config_dir)
        cfg = self._apply_env_overrides(cfg)
        if validate:
            self.validate(cfg)
        return cfg


__all__ = ["ConfigManager", "ENV_PREFIX", "PROJECT_CONFIG_DIR"]
