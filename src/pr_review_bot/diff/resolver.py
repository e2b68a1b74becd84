"""Map file line numbers to diff positions."""

import logging

from pr_review_bot.models.diff import FileDiff

logger = logging.getLogger(__name__)


class PositionResolver:
    """Resolves the diff position that anchors an inline comment."""

    def resolve(
        self,
        file_diff: FileDiff,
        new_line: int | None = None,
        old_line: int | None = None,
    ) -> int | None:
        """Find the diff position for a line.

        The new-file line is tried first against added and context lines;
        the old-file line is the fallback against removed and context lines.

        Args:
            file_diff: Parsed diff of the file
            new_line: Line number in the new version of the file
            old_line: Line number in the old version of the file

        Returns:
            1-based diff position, or None when the line is not in the diff
        """
        if file_diff.malformed:
            return None

        if new_line is not None:
            position = file_diff.new_line_index.get(new_line)
            if position is not None:
                return position

        if old_line is not None:
            position = file_diff.old_line_index.get(old_line)
            if position is not None:
                return position

        logger.debug(
            f"No diff position for {file_diff.path or '<diff>'} "
            f"(new_line={new_line}, old_line={old_line})"
        )
        return None
