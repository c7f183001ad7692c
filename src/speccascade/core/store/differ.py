"""Line-based diffs between recorded and current artifact content."""
from __future__ import annotations

import difflib
from dataclasses import dataclass, field
from typing import List, Tuple


@dataclass(frozen=True)
class DiffHunk:
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    lines: Tuple[str, ...]

    @property
    def header(self) -> str:
        return f"@@ -{self.old_start},{self.old_lines} +{self.new_start},{self.new_lines} @@"


@dataclass(frozen=True)
class FileDiff:
    path: str
    old_content: str
    new_content: str
    hunks: Tuple[DiffHunk, ...] = field(default_factory=tuple)
    is_new: bool = False
    is_deleted: bool = False

    @property
    def has_changes(self) -> bool:
        return bool(self.hunks)


def _normalize(content: str) -> str:
    if not content:
        return ""
    content = content.replace("\r\n", "\n").replace("\r", "\n")
    return content if content.endswith("\n") else content + "\n"


def _lines(content: str) -> List[str]:
    return content.split("\n")[:-1] if content else []


def _range_start(start: int, length: int) -> int:
    # Unified diff convention: an empty range points at the line before it.
    return start + 1 if length else start


class Differ:
    """Build and render line diffs.

    Args:
        context_lines: Unchanged lines kept around each change
    """

    def __init__(self, context_lines: int = 3) -> None:
        self.context_lines = context_lines

    def diff(self, path: str, old_content: str, new_content: str) -> FileDiff:
        old = _normalize(old_content)
        new = _normalize(new_content)
        old_lines = _lines(old)
        new_lines = _lines(new)

        matcher = difflib.SequenceMatcher(None, old_lines, new_lines, autojunk=False)
        hunks: List[DiffHunk] = []
        for group in matcher.get_grouped_opcodes(self.context_lines):
            i1, i2 = group[0][1], group[-1][2]
            j1, j2 = group[0][3], group[-1][4]
            lines: List[str] = []
            for tag, a1, a2, b1, b2 in group:
                if tag == "equal":
                    lines.extend(" " + line for line in old_lines[a1:a2])
                    continue
                if tag in ("replace", "delete"):
                    lines.extend("-" + line for line in old_lines[a1:a2])
                if tag in ("replace", "insert"):
                    lines.extend("+" + line for line in new_lines[b1:b2])
            hunks.append(
                DiffHunk(
                    old_start=_range_start(i1, i2 - i1),
                    old_lines=i2 - i1,
                    new_start=_range_start(j1, j2 - j1),
                    new_lines=j2 - j1,
                    lines=tuple(lines),
                )
            )

        return FileDiff(
            path=path,
            old_content=old,
            new_content=new,
            hunks=tuple(hunks),
            is_new=not old_content,
            is_deleted=not new_content,
        )

    def format_diff(self, diff: FileDiff, *, old_label: str = "recorded", new_label: str = "current") -> str:
        """Render ``diff`` as plain text ("No changes" when there are none)."""
        if not diff.hunks:
            return "No changes"

        lines = [f"diff --speccascade a/{diff.path} b/{diff.path}"]
        if diff.is_new:
            lines.append("new file")
        elif diff.is_deleted:
            lines.append("deleted file")
        lines.append(f"--- a/{diff.path} ({old_label})")
        lines.append(f"+++ b/{diff.path} ({new_label})")
        for hunk in diff.hunks:
            lines.append(hunk.header)
            lines.extend(hunk.lines)
        return "\n".join(lines)

    def unified_diff(self, path: str, old_content: str, new_content: str) -> str:
        """Return a ``git apply`` compatible unified diff."""
        return "".join(
            difflib.unified_diff(
                [line + "\n" for line in _lines(_normalize(old_content))],
                [line + "\n" for line in _lines(_normalize(new_content))],
                fromfile=f"a/{path}",
                tofile=f"b/{path}",
                n=self.context_lines,
            )
        )

    @staticmethod
    def count_changes(diff: FileDiff) -> Tuple[int, int]:
        """Return ``(additions, deletions)``."""
        additions = sum(1 for h in diff.hunks for line in h.lines if line.startswith("+"))
        deletions = sum(1 for h in diff.hunks for line in h.lines if line.startswith("-"))
        return additions, deletions


__all__ = ["DiffHunk", "Differ", "FileDiff"]
