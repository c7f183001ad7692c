"""Cascading resolver and ancestor discovery."""
from __future__ import annotations

from .discovery import (
    AncestorDiscovery,
    DirectoryDiscovery,
    ExtendsDiscovery,
    FileSpecLoader,
    FirstMatchDiscovery,
    SpecLoader,
    build_discovery,
    iter_spec_files,
)
from .resolver import CascadingResolver, ResolutionResult, create_resolver

__all__ = [
    "AncestorDiscovery",
    "CascadingResolver",
    "DirectoryDiscovery",
    "ExtendsDiscovery",
    "FileSpecLoader",
    "FirstMatchDiscovery",
    "ResolutionResult",
    "SpecLoader",
    "build_discovery",
    "create_resolver",
    "iter_spec_files",
]
