"""Layered configuration."""
from __future__ import annotations

from .manager import ENV_PREFIX, PROJECT_CONFIG_DIR, ConfigManager
from .models import (
    DISCOVERY_RULES,
    MergeStrategies,
    ResolverConfig,
    StoreConfig,
    load_resolver_config,
    load_store_config,
)

__all__ = [
    "ConfigManager",
    "DISCOVERY_RULES",
    "ENV_PREFIX",
    "MergeStrategies",
    "PROJECT_CONFIG_DIR",
    "ResolverConfig",
    "StoreConfig",
    "load_resolver_config",
    "load_store_config",
]
