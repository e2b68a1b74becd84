"""Inline comment planning."""

import logging
from collections.abc import Callable

from pr_review_bot.diff.resolver import PositionResolver
from pr_review_bot.github.formatter import ReviewFormatter
from pr_review_bot.models.comments import CommentPlan, CommentTarget, UnplacedReason
from pr_review_bot.models.diff import FileDiff
from pr_review_bot.models.issues import AggregatedIssue

logger = logging.getLogger(__name__)


class CommentPlanner:
    """Decides which aggregated issues become inline comments.

    Every issue ends up either as a CommentTarget or in ``unplaced`` with a
    reason. Planning never touches the network or the filesystem.
    """

    def __init__(
        self,
        resolver: PositionResolver | None = None,
        render: Callable[[AggregatedIssue], str] | None = None,
        max_comments: int | None = None,
    ) -> None:
        """Initialize the planner.

        Args:
            resolver: Line to diff position resolver
            render: Builds the comment body for an issue
            max_comments: Optional cap on inline comments; the overflow is
                reported as unplaced
        """
        self.resolver = resolver or PositionResolver()
        self.render = render or ReviewFormatter().format_issue_comment
        self.max_comments = max_comments

    def plan(
        self,
        aggregated: list[AggregatedIssue],
        file_diffs: dict[str, FileDiff],
    ) -> CommentPlan:
        """Plan inline comments for aggregated issues.

        Args:
            aggregated: Issues in their final order
            file_diffs: Parsed diffs keyed by file path

        Returns:
            CommentPlan covering every input issue exactly once
        """
        plan = CommentPlan()

        for issue in aggregated:
            position, reason = self._locate(issue, file_diffs)

            if position is not None and self.max_comments is not None:
                if len(plan.placed) >= self.max_comments:
                    position, reason = None, UnplacedReason.COMMENT_LIMIT

            if position is None:
                plan.unplaced.append(issue)
                plan.reasons[issue.id] = reason
                continue

            plan.placed.append(
                CommentTarget(
                    file_path=issue.file_path,
                    diff_position=position,
                    body=self.render(issue),
                    issue_id=issue.id,
                )
            )

        logger.info(f"Planned {len(plan.placed)} inline comments, {len(plan.unplaced)} unplaced")
        return plan

    def _locate(
        self, issue: AggregatedIssue, file_diffs: dict[str, FileDiff]
    ) -> tuple[int | None, UnplacedReason | None]:
        line = issue.start_line
        if line is None:
            return None, UnplacedReason.NO_LINE

        file_diff = file_diffs.get(issue.file_path)
        if file_diff is None:
            return None, UnplacedReason.NO_DIFF
        if file_diff.malformed:
            return None, UnplacedReason.MALFORMED_DIFF
        if not file_diff.lines:
            return None, UnplacedReason.NO_DIFF

        if file_diff.is_deletion:
            position = self.resolver.resolve(file_diff, new_line=line, old_line=line)
        else:
            position = self.resolver.resolve(file_diff, new_line=line)

        if position is None:
            return None, UnplacedReason.LINE_NOT_IN_DIFF
        return position, None
