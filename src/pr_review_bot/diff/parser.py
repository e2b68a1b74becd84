"""Unified diff parsing.

Positions follow the review-comment convention: every physical line of a
file's diff text is counted, hunk headers included, starting at 1 for the
first line. Positions never reset between hunks.

Example::

    @@ -1,3 +1,4 @@      position 1 (hunk header)
     line1               position 2 (context, old=1, new=1)
    -line2               position 3 (removed, old=2)
    +line2-changed       position 4 (added, new=2)
"""

import logging
import re

from pr_review_bot.models.diff import DiffLine, FileDiff, Hunk, LineRole

logger = logging.getLogger(__name__)

_HUNK_RE = re.compile(
    r"^@@ -(?P<old_start>\d+)(?:,(?P<old_lines>\d+))? "
    r"\+(?P<new_start>\d+)(?:,(?P<new_lines>\d+))? @@(?P<section>.*)$"
)

# Lines git emits before the first hunk of a file
_PREAMBLE_PREFIXES = (
    "diff --git ",
    "index ",
    "--- ",
    "+++ ",
    "new file mode",
    "deleted file mode",
    "old mode",
    "new mode",
    "similarity index",
    "dissimilarity index",
    "rename from",
    "rename to",
    "copy from",
    "copy to",
    "Binary files",
)

_NO_NEWLINE_MARKER = "\\"


class MalformedHunkError(ValueError):
    """Raised internally when a hunk header cannot be parsed."""

    pass


def parse_hunk_header(line: str) -> Hunk:
    """Parse an ``@@ -a,b +c,d @@`` header.

    Args:
        line: The raw header line

    Returns:
        Parsed hunk values (omitted counts default to 1)

    Raises:
        MalformedHunkError: If the numbers cannot be parsed
    """
    match = _HUNK_RE.match(line)
    if not match:
        raise MalformedHunkError(f"Malformed hunk header: {line!r}")

    old_lines = match.group("old_lines")
    new_lines = match.group("new_lines")
    return Hunk(
        old_start=int(match.group("old_start")),
        old_lines=int(old_lines) if old_lines is not None else 1,
        new_start=int(match.group("new_start")),
        new_lines=int(new_lines) if new_lines is not None else 1,
        section=match.group("section").strip(),
    )


class DiffParser:
    """Parses the unified diff of one file into a FileDiff."""

    def parse(self, diff_text: str, path: str = "") -> FileDiff:
        """Parse a single file's unified diff body.

        Args:
            diff_text: Diff text for exactly one file (e.g. a PR file ``patch``)
            path: File path the diff belongs to

        Returns:
            FileDiff with one DiffLine per recorded line. A malformed hunk
            header yields an empty FileDiff flagged ``malformed`` instead of
            raising.
        """
        lines: list[DiffLine] = []
        hunks: list[Hunk] = []
        position = 0
        old_line = 0
        new_line = 0
        in_hunk = False

        for raw in (diff_text or "").splitlines():
            if raw.startswith("@@"):
                position += 1
                try:
                    hunk = parse_hunk_header(raw)
                except MalformedHunkError as e:
                    logger.warning(f"Cannot place comments in {path or '<diff>'}: {e}")
                    return FileDiff(path=path, malformed=True, error=str(e))

                hunks.append(
                    Hunk(
                        old_start=hunk.old_start,
                        old_lines=hunk.old_lines,
                        new_start=hunk.new_start,
                        new_lines=hunk.new_lines,
                        section=hunk.section,
                        diff_position=position,
                    )
                )
                lines.append(DiffLine(role=LineRole.HUNK_HEADER, diff_position=position, text=raw))
                old_line = hunk.old_start
                new_line = hunk.new_start
                in_hunk = True
                continue

            if not in_hunk:
                if not raw.startswith(_PREAMBLE_PREFIXES):
                    logger.debug(f"Skipping unexpected line before first hunk: {raw!r}")
                continue

            position += 1
            prefix = raw[:1]

            if prefix == "+":
                lines.append(
                    DiffLine(
                        role=LineRole.ADDED,
                        diff_position=position,
                        new_line_number=new_line,
                        text=raw[1:],
                    )
                )
                new_line += 1
            elif prefix == "-":
                lines.append(
                    DiffLine(
                        role=LineRole.REMOVED,
                        diff_position=position,
                        old_line_number=old_line,
                        text=raw[1:],
                    )
                )
                old_line += 1
            elif prefix in (" ", ""):
                # Empty lines are context lines whose leading space was stripped
                lines.append(
                    DiffLine(
                        role=LineRole.CONTEXT,
                        diff_position=position,
                        old_line_number=old_line,
                        new_line_number=new_line,
                        text=raw[1:],
                    )
                )
                old_line += 1
                new_line += 1
            elif prefix == _NO_NEWLINE_MARKER:
                # "\ No newline at end of file" occupies a position but anchors nothing
                continue
            else:
                logger.debug(f"Unrecognized diff line at position {position}: {raw!r}")

        return FileDiff(path=path, lines=tuple(lines), hunks=tuple(hunks))

    def parse_many(self, patches: dict[str, str | None]) -> dict[str, FileDiff]:
        """Parse per-file diff bodies.

        Args:
            patches: Mapping of file path to diff body (None for binary or
                oversized files the code host did not return a patch for)

        Returns:
            Mapping of file path to FileDiff, in input order
        """
        diffs: dict[str, FileDiff] = {}
        for path, patch in patches.items():
            if patch is None:
                diffs[path] = FileDiff(path=path)
                continue
            diffs[path] = self.parse(patch, path=path)
        return diffs


def _strip_prefix(path: str) -> str:
    path = path.strip()
    if path.startswith(("a/", "b/")):
        return path[2:]
    return path


def split_patch_set(diff_text: str) -> dict[str, str]:
    """Split a multi-file ``git diff`` into per-file diff bodies.

    The body of each file starts at its first hunk header, matching the
    ``patch`` field code hosts return for each changed file.

    Args:
        diff_text: Full output of ``git diff``

    Returns:
        Mapping of file path (new path, or old path for deletions) to body
    """
    bodies: dict[str, list[str]] = {}
    current: str | None = None
    old_path: str | None = None
    in_body = False

    for raw in (diff_text or "").splitlines():
        if raw.startswith("diff --git "):
            parts = raw.split()
            current = _strip_prefix(parts[3]) if len(parts) >= 4 else None
            old_path = _strip_prefix(parts[2]) if len(parts) >= 4 else None
            in_body = False
            if current is not None:
                bodies.setdefault(current, [])
            continue

        if not in_body:
            if raw.startswith("--- "):
                source = raw[4:].strip()
                if source != "/dev/null":
                    old_path = _strip_prefix(source)
                continue
            if raw.startswith("+++ "):
                target = raw[4:].strip()
                new_path = old_path if target == "/dev/null" else _strip_prefix(target)
                if new_path and new_path != current:
                    if current is not None and not bodies.get(current):
                        bodies.pop(current, None)
                    current = new_path
                    bodies.setdefault(current, [])
                continue
            if raw.startswith("@@") and current is not None:
                in_body = True
            else:
                continue

        if current is not None:
            bodies[current].append(raw)

    return {path: "\n".join(body) for path, body in bodies.items()}
