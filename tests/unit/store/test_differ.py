from __future__ import annotations

from speccascade.core.store import Differ


def test_identical_content_has_no_hunks() -> None:
    diff = Differ().diff("a.md", "x\ny\n", "x\ny")
    assert not diff.has_changes
    assert Differ().format_diff(diff) == "No changes"


def test_new_file_is_all_additions() -> None:
    diff = Differ().diff("a.md", "", "one\ntwo\n")

    assert diff.is_new
    assert Differ.count_changes(diff) == (2, 0)
    assert diff.hunks[0].header == "@@ -0,0 +1,2 @@"


def test_deleted_file_is_all_deletions() -> None:
    diff = Differ().diff("a.md", "one\n", "")
    assert diff.is_deleted
    assert Differ.count_changes(diff) == (0, 1)


def test_context_lines_bound_hunks() -> None:
    old = "".join(f"line {i}\n" for i in range(20))
    new = old.replace("line 2\n", "LINE 2\n").replace("line 17\n", "LINE 17\n")

    diff = Differ(context_lines=1).diff("a.md", old, new)

    assert len(diff.hunks) == 2
    assert diff.hunks[0].lines == (" line 1", "-line 2", "+LINE 2", " line 3")
    assert diff.hunks[0].header == "@@ -2,3 +2,3 @@"


def test_format_diff_renders_headers() -> None:
    differ = Differ()
    text = differ.format_diff(differ.diff("docs/a.md", "a\n", "b\n"))

    assert text.splitlines() == [
        "diff --speccascade a/docs/a.md b/docs/a.md",
        "--- a/docs/a.md (recorded)",
        "+++ b/docs/a.md (current)",
        "@@ -1,1 +1,1 @@",
        "-a",
        "+b",
    ]


def test_unified_diff_matches_difflib_format() -> None:
    text = Differ().unified_diff("a.md", "a\nb\n", "a\nc\n")
    assert text.startswith("--- a/a.md\n+++ b/a.md\n")
    assert "-b\n+c\n" in text


def test_crlf_is_not_a_change() -> None:
    assert not Differ().diff("a.md", "a\r\nb\r\n", "a\nb\n").has_changes
