"""Issue models produced by analyzers and merged by the aggregator."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Severity(Enum):
    """Severity levels for issues.

    - CRITICAL: Must fix before merge.
    - ERROR: Almost certainly wrong; should be fixed.
    - WARNING: Likely problem or risky construct.
    - INFO: Informational or style-level observation.
    """

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Sort rank; lower is more severe."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.CRITICAL: 0,
    Severity.ERROR: 1,
    Severity.WARNING: 2,
    Severity.INFO: 3,
}

# Most severe first
SEVERITY_ORDER = sorted(Severity, key=lambda s: s.rank)


class IssueType(Enum):
    """Categories of issues."""

    SECURITY = "security"
    STYLE = "style"
    BUG = "bug"
    OPTIMIZATION = "optimization"
    OTHER = "other"


TYPE_ORDER = [
    IssueType.SECURITY,
    IssueType.BUG,
    IssueType.OPTIMIZATION,
    IssueType.STYLE,
    IssueType.OTHER,
]


@dataclass(frozen=True)
class IssueLocation:
    """Location of an issue inside a file."""

    file_path: str
    start_line: int | None = None
    end_line: int | None = None
    start_column: int | None = None
    end_column: int | None = None

    @property
    def line_range(self) -> tuple[int, int] | None:
        """Inclusive ``(start, end)`` range, or None for file-level issues."""
        if self.start_line is None:
            return None
        end = self.end_line if self.end_line is not None else self.start_line
        return (min(self.start_line, end), max(self.start_line, end))

    def describe(self) -> str:
        """Human readable ``path:start-end`` reference."""
        line_range = self.line_range
        if line_range is None:
            return self.file_path
        start, end = line_range
        if start == end:
            return f"{self.file_path}:{start}"
        return f"{self.file_path}:{start}-{end}"


@dataclass(frozen=True)
class CodeIssue:
    """A single finding reported by one analyzer."""

    id: str
    title: str
    description: str
    severity: Severity
    type: IssueType
    location: IssueLocation
    agent: str
    suggested_fix: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def file_path(self) -> str:
        return self.location.file_path

    @property
    def start_line(self) -> int | None:
        return self.location.start_line


@dataclass(frozen=True)
class AggregatedIssue:
    """An issue merged from one or more equivalent findings."""

    id: str
    issue: CodeIssue  # Highest-severity contributor
    agents: tuple[str, ...]
    location: IssueLocation
    sources: tuple[CodeIssue, ...] = ()

    @property
    def title(self) -> str:
        return self.issue.title

    @property
    def description(self) -> str:
        return self.issue.description

    @property
    def suggested_fix(self) -> str | None:
        return self.issue.suggested_fix

    @property
    def severity(self) -> Severity:
        return self.issue.severity

    @property
    def type(self) -> IssueType:
        return self.issue.type

    @property
    def file_path(self) -> str:
        return self.location.file_path

    @property
    def start_line(self) -> int | None:
        return self.location.start_line

    @property
    def sort_key(self) -> tuple:
        """Total ordering key: severity, path, start line, type, title, id."""
        line = self.location.start_line
        return (
            self.severity.rank,
            self.file_path,
            -1 if line is None else line,
            self.type.value,
            self.title,
            self.id,
        )


@dataclass
class IssueSummary:
    """Aggregate counts used by summary comments and reports."""

    total: int
    by_severity: dict[Severity, int]
    by_type: dict[IssueType, int]

    @property
    def has_blocking_issues(self) -> bool:
        """Check if any critical or error level issue was found."""
        return bool(self.by_severity.get(Severity.CRITICAL) or self.by_severity.get(Severity.ERROR))
