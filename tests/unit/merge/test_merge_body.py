from __future__ import annotations

import pytest

from speccascade.core.exceptions import StrategyError
from speccascade.core.utils.merge import BodyStrategy, merge_body


@pytest.mark.parametrize("strategy", list(BodyStrategy))
def test_blank_parent_returns_child_unchanged(strategy: BodyStrategy) -> None:
    assert merge_body("", "X", strategy) == "X"
    assert merge_body("  \n\t", "X", strategy) == "X"


@pytest.mark.parametrize("strategy", list(BodyStrategy))
def test_blank_child_returns_parent_unchanged(strategy: BodyStrategy) -> None:
    assert merge_body("X", "", strategy) == "X"
    assert merge_body("X", "\n\n", strategy) == "X"


def test_append_is_default() -> None:
    assert merge_body("parent", "child") == "parent\n\nchild"


def test_prepend_puts_child_first() -> None:
    assert merge_body("parent", "child", BodyStrategy.PREPEND) == "child\n\nparent"


def test_replace_returns_child() -> None:
    assert merge_body("parent", "child", BodyStrategy.REPLACE) == "child"


def test_unknown_strategy_appends() -> None:
    assert merge_body("parent", "child", "weird") == "parent\n\nchild"


def test_parse_rejects_list_only_strategy() -> None:
    with pytest.raises(StrategyError):
        BodyStrategy.parse("dedupe")
