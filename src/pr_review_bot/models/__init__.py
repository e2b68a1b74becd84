"""Data models for PR Review Bot."""

from pr_review_bot.models.comments import CommentPlan, CommentTarget, UnplacedReason
from pr_review_bot.models.diff import DiffLine, FileDiff, Hunk, LineRole
from pr_review_bot.models.issues import (
    AggregatedIssue,
    CodeIssue,
    IssueLocation,
    IssueSummary,
    IssueType,
    Severity,
)
from pr_review_bot.models.review import AnalyzerFailure, ChangedFile, ReviewResult

__all__ = [
    "AggregatedIssue",
    "AnalyzerFailure",
    "ChangedFile",
    "CodeIssue",
    "CommentPlan",
    "CommentTarget",
    "DiffLine",
    "FileDiff",
    "Hunk",
    "IssueLocation",
    "IssueSummary",
    "IssueType",
    "LineRole",
    "ReviewResult",
    "Severity",
    "UnplacedReason",
]
