"""Spec document parser.

A spec document is UTF-8 text made of an optional ``---`` frontmatter block
followed by free text. The free text may hold one ``<input>...</input>``
region (the instructions proper) and any number of one-shot examples:

    <example>
    input text
    ---
    expected output
    </example>
"""
from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from speccascade.core.utils.io import read_text
from speccascade.core.utils.text.frontmatter import format_frontmatter, parse_frontmatter

from .models import PATH_FIELDS, SEQUENCE_FIELDS, Example, SpecFile

logger = logging.getLogger(__name__)

INPUT_REGION = re.compile(r"<input>(.*?)</input>", re.DOTALL)
EXAMPLE_BLOCK = re.compile(r"<example>(.*?)</example>", re.DOTALL)
EXAMPLE_SEPARATOR = re.compile(r"\n---[ \t]*\n")


def normalize_frontmatter(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a copy where one-or-many fields are always lists.

    Absent fields stay absent; nothing is defaulted.
    """
    normalized = dict(data)
    for key in SEQUENCE_FIELDS:
        if key in normalized and normalized[key] is not None and not isinstance(normalized[key], list):
            normalized[key] = [normalized[key]]
    return normalized


def extract_examples(text: str) -> Tuple[List[Example], str]:
    """Pull ``<example>`` blocks out of ``text``.

    Returns the examples in document order and the text with the blocks removed.
    The first ``---`` line inside a block splits input from output; a block
    without one is all input.
    """
    examples: List[Example] = []
    for match in EXAMPLE_BLOCK.finditer(text):
        content = match.group(1).strip()
        parts = EXAMPLE_SEPARATOR.split(content, maxsplit=1)
        if len(parts) == 2:
            examples.append(Example(input=parts[0].strip(), output=parts[1].strip()))
        else:
            examples.append(Example(input=content, output=""))
    return examples, EXAMPLE_BLOCK.sub("", text)


def extract_body(text: str) -> str:
    """Return the trimmed ``<input>`` region, or all of ``text`` trimmed."""
    match = INPUT_REGION.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def parse_content(raw: str, identifier: str | Path = "<string>") -> SpecFile:
    """Parse spec text into a ``SpecFile``.

    Args:
        raw: Full document text
        identifier: Path or label recorded as ``file_path`` and used in errors

    Raises:
        ParseError: If the frontmatter block is opened but never closed
    """
    label = str(identifier)
    doc = parse_frontmatter(raw, label)
    if doc.error:
        logger.debug("Unreadable frontmatter in %s: %s", label, doc.error)

    examples, remaining = extract_examples(doc.content)
    return SpecFile(
        file_path=Path(identifier),
        frontmatter=normalize_frontmatter(doc.frontmatter),
        body=extract_body(remaining),
        examples=tuple(examples),
        raw=raw,
        raw_frontmatter=doc.raw_frontmatter,
        frontmatter_error=doc.error,
    )


def parse_file(path: str | Path) -> SpecFile:
    """Read and parse the spec at ``path`` (recorded as an absolute path).

    Raises:
        FileNotFoundError: If ``path`` does not exist
        ParseError: If the frontmatter block is opened but never closed
    """
    absolute = Path(path).resolve()
    return parse_content(read_text(absolute), absolute)


def _absolutize(value: str, base: Path) -> str:
    if os.path.isabs(value):
        return value
    return str((base / value).resolve())


def resolve_relative_paths(spec: SpecFile) -> SpecFile:
    """Return a copy of ``spec`` with path fields made absolute.

    ``context``, ``skills`` and ``output`` entries are taken relative to the
    spec's folder. Entries that are already absolute are left alone.
    """
    base = spec.directory
    frontmatter = dict(spec.frontmatter)
    for key in PATH_FIELDS:
        value = frontmatter.get(key)
        if isinstance(value, list):
            frontmatter[key] = [_absolutize(str(v), base) for v in value]
        elif isinstance(value, str):
            frontmatter[key] = _absolutize(value, base)
    return SpecFile(
        file_path=spec.file_path,
        frontmatter=frontmatter,
        body=spec.body,
        examples=spec.examples,
        raw=spec.raw,
        raw_frontmatter=spec.raw_frontmatter,
        frontmatter_error=spec.frontmatter_error,
    )


def format_spec(
    frontmatter: Mapping[str, Any],
    body: str,
    examples: Iterable[Example] = (),
    *,
    explicit_input: bool = True,
) -> str:
    """Serialise frontmatter, body and examples back into spec text.

    ``parse_content(format_spec(fm, body, examples))`` yields the same
    frontmatter (after one-or-many normalisation), body and examples.
    """
    parts: List[str] = []
    if frontmatter:
        parts.append(format_frontmatter(dict(frontmatter), exclude_none=False))
    if explicit_input:
        parts.append(f"<input>\n{body.strip()}\n</input>\n")
    elif body.strip():
        parts.append(f"{body.strip()}\n")
    for example in examples:
        if example.output:
            parts.append(f"\n<example>\n{example.input}\n---\n{example.output}\n</example>\n")
        else:
            parts.append(f"\n<example>\n{example.input}\n</example>\n")
    return "".join(parts)


__all__ = [
    "extract_body",
    "extract_examples",
    "format_spec",
    "normalize_frontmatter",
    "parse_content",
    "parse_file",
    "resolve_relative_paths",
]
