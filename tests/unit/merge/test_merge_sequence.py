from __future__ import annotations

import pytest

from speccascade.core.exceptions import StrategyError
from speccascade.core.utils.merge import ListStrategy, merge_sequence


def test_replace_keeps_child_only() -> None:
    assert merge_sequence(["a", "b"], ["c"], ListStrategy.REPLACE) == ["c"]


def test_replace_with_empty_child_clears() -> None:
    assert merge_sequence(["a", "b"], [], ListStrategy.REPLACE) == []


def test_prepend_puts_child_first() -> None:
    assert merge_sequence(["a", "b"], ["c", "d"], ListStrategy.PREPEND) == ["c", "d", "a", "b"]


@pytest.mark.parametrize(
    "parent, child",
    [
        ([], []),
        (["a"], []),
        ([], ["a"]),
        (["a", "b"], ["b", "c", "c"]),
        ([1, 2], [{"k": 1}, [3]]),
    ],
)
def test_concatenate_is_parent_then_child(parent, child) -> None:
    result = merge_sequence(parent, child, ListStrategy.CONCATENATE)
    assert result == [*parent, *child]
    assert len(result) == len(parent) + len(child)


def test_dedupe_keeps_first_seen_order_parent_then_child() -> None:
    result = merge_sequence(["a", "b", "a"], ["c", "b", "d"], ListStrategy.DEDUPE)
    assert result == ["a", "b", "c", "d"]


def test_dedupe_result_is_subset_without_repeats() -> None:
    parent = ["x", "y", "x", "z"]
    child = ["z", "w", "y"]
    result = merge_sequence(parent, child, ListStrategy.DEDUPE)

    assert set(result) <= set(parent) | set(child)
    assert len(result) == len(set(result))


def test_dedupe_last_keeps_last_occurrence_position() -> None:
    result = merge_sequence(["a", "b", "c"], ["a", "d"], ListStrategy.DEDUPE_LAST)
    assert result == ["b", "c", "a", "d"]


def test_dedupe_handles_unhashable_values() -> None:
    parent = [{"input": "q", "output": "a"}, ["x"]]
    child = [{"output": "a", "input": "q"}, ["x"], {"input": "q2"}]
    result = merge_sequence(parent, child, ListStrategy.DEDUPE)
    assert result == [{"input": "q", "output": "a"}, ["x"], {"input": "q2"}]


def test_dedupe_distinguishes_values_of_different_types() -> None:
    result = merge_sequence([1, "1"], [True, 1.0, 1], ListStrategy.DEDUPE)
    assert result == [1, "1", True, 1.0]


def test_strategy_value_strings_dispatch_like_members() -> None:
    assert merge_sequence(["a"], ["b"], "prepend") == ["b", "a"]
    assert merge_sequence(["a", "b"], ["b"], "dedupe") == ["a", "b"]


def test_unrecognised_strategy_behaves_as_concatenate() -> None:
    assert merge_sequence(["a"], ["a", "b"], "no-such-strategy") == ["a", "a", "b"]
    assert merge_sequence(["a"], ["b"], None) == ["a", "b"]


def test_inputs_are_never_mutated() -> None:
    parent = ["a", "b"]
    child = ["b", "c"]
    for strategy in ListStrategy:
        out = merge_sequence(parent, child, strategy)
        assert out is not parent and out is not child
    assert parent == ["a", "b"]
    assert child == ["b", "c"]


def test_parse_accepts_known_names_case_insensitively() -> None:
    assert ListStrategy.parse("Dedupe-Last") is ListStrategy.DEDUPE_LAST
    assert ListStrategy.parse(ListStrategy.REPLACE) is ListStrategy.REPLACE


def test_parse_rejects_unknown_name_with_field_context() -> None:
    with pytest.raises(StrategyError) as excinfo:
        ListStrategy.parse("union", field="context")

    assert excinfo.value.context == {"strategy": "union", "field": "context"}
    assert "context" in str(excinfo.value)
