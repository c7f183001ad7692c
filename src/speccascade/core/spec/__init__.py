"""Spec documents: data model and parser."""
from __future__ import annotations

from .models import (
    CASCADE_KEY,
    Example,
    Frontmatter,
    FrontmatterValue,
    ResolvedConfig,
    SEQUENCE_FIELDS,
    SpecFile,
)
from .parser import (
    extract_examples,
    format_spec,
    normalize_frontmatter,
    parse_content,
    parse_file,
    resolve_relative_paths,
)

__all__ = [
    "CASCADE_KEY",
    "Example",
    "Frontmatter",
    "FrontmatterValue",
    "ResolvedConfig",
    "SEQUENCE_FIELDS",
    "SpecFile",
    "extract_examples",
    "format_spec",
    "normalize_frontmatter",
    "parse_content",
    "parse_file",
    "resolve_relative_paths",
]
