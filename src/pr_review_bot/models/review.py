"""Review run models."""

from dataclasses import dataclass, field
from datetime import datetime

from pr_review_bot.models.comments import CommentPlan
from pr_review_bot.models.diff import FileDiff
from pr_review_bot.models.issues import AggregatedIssue, IssueSummary, IssueType, Severity


@dataclass(frozen=True)
class ChangedFile:
    """A file touched by the pull request."""

    path: str
    status: str  # "added", "modified", "removed", "renamed"
    patch: str | None = None
    content: str | None = None

    @property
    def is_removed(self) -> bool:
        return self.status == "removed"


@dataclass(frozen=True)
class AnalyzerFailure:
    """An analyzer that failed on one file."""

    agent: str
    file_path: str
    error: str

    def describe(self) -> str:
        return f"{self.agent} on {self.file_path} ({self.error})"


@dataclass
class ReviewResult:
    """Final output of a review run."""

    id: str
    created_at: datetime
    repo: str
    pr_number: int

    issues: list[AggregatedIssue]
    plan: CommentPlan
    summary: IssueSummary

    files_reviewed: int = 0
    total_review_time_ms: int = 0
    failures: list[AnalyzerFailure] = field(default_factory=list)
    file_diffs: dict[str, FileDiff] = field(default_factory=dict)

    @property
    def findings_by_severity(self) -> dict[Severity, int]:
        """Count issues by severity level."""
        return self.summary.by_severity

    @property
    def findings_by_type(self) -> dict[IssueType, int]:
        """Count issues by type."""
        return self.summary.by_type

    @property
    def has_critical_issues(self) -> bool:
        """Check if review has any critical issues."""
        return any(issue.severity == Severity.CRITICAL for issue in self.issues)

    @property
    def unplaced_issues(self) -> list[AggregatedIssue]:
        """Issues that must be surfaced in the summary instead of inline."""
        return self.plan.unplaced
