"""Parsed unified diff models."""

from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property


class LineRole(Enum):
    """Role of one physical line inside a file diff."""

    CONTEXT = "context"
    ADDED = "added"
    REMOVED = "removed"
    HUNK_HEADER = "hunkHeader"


@dataclass(frozen=True)
class DiffLine:
    """One physical line of a file's unified diff."""

    role: LineRole
    diff_position: int  # 1-based, hunk headers included
    old_line_number: int | None = None
    new_line_number: int | None = None
    text: str = ""


@dataclass(frozen=True)
class Hunk:
    """Header values of one hunk."""

    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    section: str = ""
    diff_position: int = 0


@dataclass(frozen=True)
class FileDiff:
    """Ordered diff lines for a single file.

    A malformed diff carries no lines and cannot anchor comments.
    """

    path: str
    lines: tuple[DiffLine, ...] = ()
    hunks: tuple[Hunk, ...] = ()
    malformed: bool = False
    error: str | None = field(default=None, compare=False)

    @property
    def is_placeable(self) -> bool:
        """Check if comments can be anchored in this diff."""
        return not self.malformed and bool(self.lines)

    @cached_property
    def new_line_index(self) -> dict[int, int]:
        """Map new-file line number -> diff position (added and context lines)."""
        index: dict[int, int] = {}
        for line in self.lines:
            if line.role in (LineRole.ADDED, LineRole.CONTEXT) and line.new_line_number is not None:
                index.setdefault(line.new_line_number, line.diff_position)
        return index

    @cached_property
    def old_line_index(self) -> dict[int, int]:
        """Map old-file line number -> diff position (removed and context lines)."""
        index: dict[int, int] = {}
        for line in self.lines:
            if line.role in (LineRole.REMOVED, LineRole.CONTEXT) and line.old_line_number is not None:
                index.setdefault(line.old_line_number, line.diff_position)
        return index

    @property
    def added_lines(self) -> list[DiffLine]:
        return [line for line in self.lines if line.role == LineRole.ADDED]

    @property
    def removed_lines(self) -> list[DiffLine]:
        return [line for line in self.lines if line.role == LineRole.REMOVED]

    @property
    def is_deletion(self) -> bool:
        """True when the diff only removes lines (e.g. a deleted file)."""
        return bool(self.lines) and not self.new_line_index and bool(self.old_line_index)
