"""Comment placement models."""

from dataclasses import dataclass, field
from enum import Enum

from pr_review_bot.models.issues import AggregatedIssue


class UnplacedReason(Enum):
    """Why an issue could not become an inline comment."""

    NO_LINE = "no_line"  # Issue has no start line
    NO_DIFF = "no_diff"  # File has no diff in this pull request
    MALFORMED_DIFF = "malformed_diff"
    LINE_NOT_IN_DIFF = "line_not_in_diff"
    COMMENT_LIMIT = "comment_limit"


@dataclass(frozen=True)
class CommentTarget:
    """An inline comment ready to be posted."""

    file_path: str
    diff_position: int
    body: str
    issue_id: str = ""


@dataclass
class CommentPlan:
    """Result of planning inline comments."""

    placed: list[CommentTarget] = field(default_factory=list)
    unplaced: list[AggregatedIssue] = field(default_factory=list)
    reasons: dict[str, UnplacedReason] = field(default_factory=dict)

    def reason_for(self, issue: AggregatedIssue) -> UnplacedReason | None:
        """Get the recorded reason an issue was not placed."""
        return self.reasons.get(issue.id)
