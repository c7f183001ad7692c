"""Text helpers."""
from __future__ import annotations

from .frontmatter import (
    ParsedDocument,
    format_frontmatter,
    has_frontmatter,
    parse_frontmatter,
    split_frontmatter,
)

__all__ = [
    "ParsedDocument",
    "format_frontmatter",
    "has_frontmatter",
    "parse_frontmatter",
    "split_frontmatter",
]
