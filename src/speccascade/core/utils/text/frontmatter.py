"""YAML frontmatter parsing utilities.

The frontmatter is a YAML mapping delimited by ``---`` marker lines at the
very start of a document:

    ```yaml
    ---
    name: api-docs
    context: ["./openapi.json"]
    ---

    Generate the API reference.
    ```

A document that opens the block but never closes it is rejected with
``ParseError``. Invalid YAML inside a closed block is not an error: the raw
text is kept and ``ParsedDocument.error`` says why it could not be read.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import yaml

from speccascade.core.exceptions import ParseError
from speccascade.core.utils.io.yaml import dump_yaml_string, load_plain_yaml

OPEN_MARKER = re.compile(r"\A\ufeff?---[ \t]*(?:\r?\n|\Z)")
CLOSE_MARKER = re.compile(r"^---[ \t]*(?:\r?\n|\Z)", re.MULTILINE)


@dataclass
class ParsedDocument:
    """Result of parsing a document with YAML frontmatter.

    Attributes:
        frontmatter: Parsed YAML frontmatter as a dictionary
        content: The text after the frontmatter block
        raw_frontmatter: The raw YAML string ("" when there is no block)
        error: Why the block could not be read as a mapping, if it could not
    """

    frontmatter: Dict[str, Any]
    content: str
    raw_frontmatter: str
    error: Optional[str] = None


def split_frontmatter(content: str, identifier: str = "<string>") -> Tuple[Optional[str], str]:
    """Split ``content`` into (raw frontmatter, remainder).

    Returns ``(None, content)`` when the document has no leading block.

    Raises:
        ParseError: If the opening marker has no matching closing marker
    """
    opened = OPEN_MARKER.match(content)
    if not opened:
        return None, content

    closed = CLOSE_MARKER.search(content, opened.end())
    if not closed:
        raise ParseError(
            f"Unterminated frontmatter block in {identifier}",
            context={"path": identifier},
        )

    raw = content[opened.end():closed.start()]
    return raw.rstrip("\r\n"), content[closed.end():]


def parse_frontmatter(content: str, identifier: str = "<string>") -> ParsedDocument:
    """Parse YAML frontmatter from document text.

    Raises:
        ParseError: If the frontmatter block is opened but never closed
    """
    raw_yaml, remaining = split_frontmatter(content, identifier)
    if raw_yaml is None:
        return ParsedDocument(frontmatter={}, content=content, raw_frontmatter="")

    if not raw_yaml.strip():
        return ParsedDocument(frontmatter={}, content=remaining, raw_frontmatter=raw_yaml)

    try:
        parsed = load_plain_yaml(raw_yaml)
    except yaml.YAMLError as exc:
        return ParsedDocument(
            frontmatter={},
            content=remaining,
            raw_frontmatter=raw_yaml,
            error=f"Invalid YAML in frontmatter: {exc}",
        )

    if parsed is None:
        parsed = {}
    if not isinstance(parsed, dict):
        return ParsedDocument(
            frontmatter={},
            content=remaining,
            raw_frontmatter=raw_yaml,
            error=f"Frontmatter must be a YAML mapping, got {type(parsed).__name__}",
        )

    return ParsedDocument(frontmatter=parsed, content=remaining, raw_frontmatter=raw_yaml)


def format_frontmatter(data: Dict[str, Any], *, exclude_none: bool = True) -> str:
    """Format a dictionary as YAML frontmatter wrapped in ``---`` markers.

    Insertion order is preserved. An empty mapping yields an empty block.
    """
    if exclude_none:
        data = {k: v for k, v in data.items() if v is not None}
    if not data:
        return "---\n---\n"
    return f"---\n{dump_yaml_string(data, sort_keys=False)}---\n"


def has_frontmatter(content: str) -> bool:
    """Return True if ``content`` opens with a frontmatter marker line."""
    return bool(OPEN_MARKER.match(content))


__all__ = [
    "ParsedDocument",
    "split_frontmatter",
    "parse_frontmatter",
    "format_frontmatter",
    "has_frontmatter",
]
