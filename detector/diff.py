"""Unified diff parsing and GitHub review-comment positions.

GitHub anchors a pull request review comment by ``position``: the number of
lines below the first ``@@`` hunk header of the file's patch. The line right
after that header is position 1, and the count keeps going through removed
lines, later hunk headers and ``\\ No newline at end of file`` markers until
the end of the file's patch. It never restarts per hunk.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from detector.errors import UnresolvablePosition

logger = logging.getLogger(__name__)

_HUNK_RE = re.compile(
    r"^@@\s+-(?P<old_start>\d+)(?:,(?P<old_count>\d+))?\s+"
    r"\+(?P<new_start>\d+)(?:,(?P<new_count>\d+))?\s+@@(?P<section>.*)$"
)
_DIFF_GIT_RE = re.compile(r"^diff --git a/(?P<old>.+?) b/(?P<new>.+)$")


class LineKind(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    CONTEXT = "context"
    MARKER = "marker"  # "\ No newline at end of file"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class DiffLine:
    """One body line of a hunk with its GitHub position and line numbers."""

    kind: LineKind
    text: str
    position: int
    new_line: Optional[int] = None
    old_line: Optional[int] = None


@dataclass
class DiffHunk:
    """A hunk header's ranges plus the body lines that belong to it."""

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    section: str = ""
    position: int = 0  # position of the "@@" line itself
    lines: list[DiffLine] = field(default_factory=list)

    @property
    def added_lines(self) -> list[DiffLine]:
        return [line for line in self.lines if line.kind == LineKind.ADDED]

    @property
    def removed_lines(self) -> list[DiffLine]:
        return [line for line in self.lines if line.kind == LineKind.REMOVED]


def parse_patch(patch: Optional[str]) -> list[DiffHunk]:
    """
    Parse one file's patch text into hunks with positions assigned.

    Anything before the first hunk header (``diff --git``, ``index``,
    ``---``/``+++``) is ignored. A missing count in a header means 1.
    """
    hunks: list[DiffHunk] = []
    if not patch:
        return hunks

    current: Optional[DiffHunk] = None
    position = -1
    new_line = old_line = 0

    for raw in patch.splitlines():
        match = _HUNK_RE.match(raw)
        if match:
            position += 1
            old_start = int(match.group("old_start"))
            new_start = int(match.group("new_start"))
            current = DiffHunk(
                old_start=old_start,
                old_count=int(match.group("old_count") or 1),
                new_start=new_start,
                new_count=int(match.group("new_count") or 1),
                section=match.group("section").strip(),
                position=position,
            )
            hunks.append(current)
            old_line, new_line = old_start, new_start
            continue

        if current is None:
            continue

        position += 1
        if raw.startswith("+"):
            current.lines.append(DiffLine(LineKind.ADDED, raw[1:], position, new_line=new_line))
            new_line += 1
        elif raw.startswith("-"):
            current.lines.append(DiffLine(LineKind.REMOVED, raw[1:], position, old_line=old_line))
            old_line += 1
        elif raw.startswith("\\"):
            current.lines.append(DiffLine(LineKind.MARKER, raw, position))
        else:
            # Context line; some tools strip the leading space from blank ones.
            current.lines.append(
                DiffLine(LineKind.CONTEXT, raw[1:], position, new_line=new_line, old_line=old_line)
            )
            new_line += 1
            old_line += 1

    return hunks


class DiffPositionMapper:
    """
    Maps new-file line numbers to diff positions for one file's patch.

    The patch is parsed once; lookups are dictionary hits. Only added and
    context lines resolve. Everything else (removed lines, lines outside any
    hunk, an empty patch) resolves to None.
    """

    def __init__(self, patch: Optional[str], path: Optional[str] = None) -> None:
        self.path = path
        self.hunks = parse_patch(patch)
        self._positions: dict[int, int] = {}
        for hunk in self.hunks:
            for line in hunk.lines:
                if line.new_line is not None:
                    self._positions[line.new_line] = line.position
        logger.debug(
            "Mapped patch for %s: %d hunk(s), %d anchorable line(s)",
            path or "<patch>",
            len(self.hunks),
            len(self._positions),
        )

    def __contains__(self, line: int) -> bool:
        return line in self._positions

    @property
    def line_positions(self) -> dict[int, int]:
        """Copy of the new-file line -> position map."""
        return dict(self._positions)

    @property
    def first_position(self) -> Optional[int]:
        """Position 1 when the patch has any body line, else None."""
        for hunk in self.hunks:
            if hunk.lines:
                return 1
        return None

    def position_for(self, line: int) -> Optional[int]:
        return self._positions.get(line)

    def require_position(self, line: int) -> int:
        """Like position_for, but raises UnresolvablePosition instead of returning None."""
        position = self._positions.get(line)
        if position is None:
            raise UnresolvablePosition(line, self.path)
        return position


def map_line_to_position(patch: Optional[str], line: int) -> Optional[int]:
    """GitHub diff position of new-file line in patch, or None if it cannot be anchored."""
    return DiffPositionMapper(patch).position_for(line)


def split_diff(diff_text: str) -> dict[str, str]:
    """
    Split a multi-file ``git diff`` into {path: patch}.

    The key is the new path (the old path for deletions). Each patch starts
    at the file's first hunk header; files without hunks (binary changes,
    pure renames, mode changes) map to an empty string. File order is kept.
    """
    patches: dict[str, list[str]] = {}
    current: Optional[str] = None
    in_hunks = False

    for raw in diff_text.splitlines():
        header = _DIFF_GIT_RE.match(raw)
        if header:
            current = header.group("new")
            patches[current] = []
            in_hunks = False
            continue
        if current is None:
            continue
        if not in_hunks:
            if raw.startswith("+++ ") and raw[4:].strip() == "/dev/null":
                # deletion: keep the key diff --git gave us (old == new there)
                continue
            if raw.startswith("+++ b/"):
                renamed = raw[len("+++ b/"):].strip()
                if renamed != current:
                    patches[renamed] = patches.pop(current)
                    current = renamed
                continue
            if not _HUNK_RE.match(raw):
                continue
            in_hunks = True
        patches[current].append(raw)

    return {path: "\n".join(lines) for path, lines in patches.items()}
