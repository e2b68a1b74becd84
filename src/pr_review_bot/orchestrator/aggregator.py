"""Issue aggregator for combining findings from multiple analyzers."""

import hashlib
import logging
from collections.abc import Callable, Hashable, Iterable
from typing import TypeVar

from pr_review_bot.models.issues import (
    SEVERITY_ORDER,
    TYPE_ORDER,
    AggregatedIssue,
    CodeIssue,
    IssueSummary,
    IssueType,
    Severity,
)

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)


def normalize_title(title: str) -> str:
    """Case- and whitespace-insensitive form of a title."""
    return " ".join(title.lower().split())


class IssueAggregator:
    """Merges equivalent findings and orders the result deterministically.

    Two issues are equivalent when they share type and file and their
    inclusive line ranges overlap. Equivalence is closed transitively, so a
    chain ``[1,3] [3,5] [5,7]`` collapses into a single issue regardless of
    the order the analyzers reported it in. Issues without a start line only
    merge with other line-less issues of the same type, file and title.
    """

    def aggregate(self, issues: Iterable[CodeIssue]) -> list[AggregatedIssue]:
        """Deduplicate and sort issues.

        Args:
            issues: Findings from every analyzer, in analyzer/file order

        Returns:
            Aggregated issues sorted by severity, file, line, type, title and id
        """
        indexed = list(enumerate(issues))
        if not indexed:
            return []

        buckets: dict[tuple[str, IssueType], list[tuple[int, CodeIssue]]] = {}
        for entry in indexed:
            issue = entry[1]
            buckets.setdefault((issue.file_path, issue.type), []).append(entry)

        groups: list[list[tuple[int, CodeIssue]]] = []
        for bucket in buckets.values():
            groups.extend(self._group_ranged(bucket))
            groups.extend(self._group_lineless(bucket))

        aggregated = [self._merge(group) for group in groups]
        aggregated.sort(key=lambda a: a.sort_key)

        logger.debug(f"Aggregated {len(indexed)} issues into {len(aggregated)}")
        return aggregated

    def _group_ranged(
        self, bucket: list[tuple[int, CodeIssue]]
    ) -> list[list[tuple[int, CodeIssue]]]:
        """Interval-merge issues that carry a line range."""
        ranged = []
        for index, issue in bucket:
            line_range = issue.location.line_range
            if line_range is not None:
                ranged.append((line_range[0], line_range[1], index, issue))
        ranged.sort(key=lambda r: (r[0], r[1], r[2]))

        groups: list[list[tuple[int, CodeIssue]]] = []
        current_end = None
        for start, end, index, issue in ranged:
            if current_end is not None and start <= current_end:
                groups[-1].append((index, issue))
                current_end = max(current_end, end)
            else:
                groups.append([(index, issue)])
                current_end = end

        return [sorted(group, key=lambda e: e[0]) for group in groups]

    def _group_lineless(
        self, bucket: list[tuple[int, CodeIssue]]
    ) -> list[list[tuple[int, CodeIssue]]]:
        """Group file-level issues by normalized title."""
        groups: dict[str, list[tuple[int, CodeIssue]]] = {}
        for index, issue in bucket:
            if issue.location.line_range is None:
                groups.setdefault(normalize_title(issue.title), []).append((index, issue))
        return list(groups.values())

    def _merge(self, group: list[tuple[int, CodeIssue]]) -> AggregatedIssue:
        """Merge one equivalence group (sorted by input order)."""
        _, survivor = min(group, key=lambda e: (e[1].severity.rank, e[0]))

        agents: list[str] = []
        for _, issue in group:
            if issue.agent not in agents:
                agents.append(issue.agent)

        key = f"{survivor.file_path}:{survivor.type.value}:{survivor.start_line}:{survivor.id}"
        return AggregatedIssue(
            id=f"issue-{hashlib.md5(key.encode()).hexdigest()[:12]}",
            issue=survivor,
            agents=tuple(agents),
            location=survivor.location,
            sources=tuple(issue for _, issue in group),
        )

    def group_by_file(self, aggregated: list[AggregatedIssue]) -> dict[str, list[AggregatedIssue]]:
        """Partition issues by file path, preserving order."""
        return _partition(aggregated, lambda a: a.file_path)

    def group_by_type(
        self, aggregated: list[AggregatedIssue]
    ) -> dict[IssueType, list[AggregatedIssue]]:
        """Partition issues by type, preserving order."""
        return _partition(aggregated, lambda a: a.type)

    def group_by_severity(
        self, aggregated: list[AggregatedIssue]
    ) -> dict[Severity, list[AggregatedIssue]]:
        """Partition issues by severity, preserving order."""
        return _partition(aggregated, lambda a: a.severity)

    def summarize(self, aggregated: list[AggregatedIssue]) -> IssueSummary:
        """Count issues per severity and per type."""
        by_severity = {severity: 0 for severity in SEVERITY_ORDER}
        by_type = {issue_type: 0 for issue_type in TYPE_ORDER}
        for issue in aggregated:
            by_severity[issue.severity] += 1
            by_type[issue.type] += 1
        return IssueSummary(total=len(aggregated), by_severity=by_severity, by_type=by_type)


def _partition(
    aggregated: list[AggregatedIssue], key: Callable[[AggregatedIssue], K]
) -> dict[K, list[AggregatedIssue]]:
    groups: dict[K, list[AggregatedIssue]] = {}
    for issue in aggregated:
        groups.setdefault(key(issue), []).append(issue)
    return groups
