from __future__ import annotations

import pytest

from speccascade.core.exceptions import ParseError
from speccascade.core.utils.text import format_frontmatter, has_frontmatter, split_frontmatter


def test_split_without_block_returns_none() -> None:
    assert split_frontmatter("plain text") == (None, "plain text")


def test_split_requires_marker_at_document_start() -> None:
    raw, rest = split_frontmatter("intro\n---\nname: x\n---\n")
    assert raw is None
    assert rest.startswith("intro")


def test_split_accepts_bom() -> None:
    raw, rest = split_frontmatter("\ufeff---\nname: x\n---\nbody")
    assert raw == "name: x"
    assert rest == "body"


def test_unclosed_block_raises() -> None:
    with pytest.raises(ParseError):
        split_frontmatter("---\nname: x\n", "doc.md")


def test_format_empty_mapping_is_empty_block() -> None:
    assert format_frontmatter({}) == "---\n---\n"


def test_format_drops_none_by_default_and_keeps_order() -> None:
    text = format_frontmatter({"b": 1, "a": None, "c": "x"})
    assert text == "---\nb: 1\nc: x\n---\n"


def test_has_frontmatter() -> None:
    assert has_frontmatter("---\n---\n")
    assert not has_frontmatter(" ---\n")
