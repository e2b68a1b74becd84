"""Markdown and JSON rendering of review results."""

import json
from typing import Any

from pr_review_bot.models.comments import UnplacedReason
from pr_review_bot.models.issues import (
    SEVERITY_ORDER,
    TYPE_ORDER,
    AggregatedIssue,
    IssueType,
    Severity,
)
from pr_review_bot.models.review import ReviewResult

SEVERITY_EMOJI = {
    Severity.CRITICAL: "🔴",
    Severity.ERROR: "🟠",
    Severity.WARNING: "🟡",
    Severity.INFO: "🔵",
}

TYPE_EMOJI = {
    IssueType.SECURITY: "🔒",
    IssueType.BUG: "🐛",
    IssueType.OPTIMIZATION: "⚡",
    IssueType.STYLE: "💅",
    IssueType.OTHER: "📝",
}

REASON_TEXT = {
    UnplacedReason.NO_LINE: "no line number",
    UnplacedReason.NO_DIFF: "file has no diff",
    UnplacedReason.MALFORMED_DIFF: "diff could not be parsed",
    UnplacedReason.LINE_NOT_IN_DIFF: "line is outside the diff",
    UnplacedReason.COMMENT_LIMIT: "inline comment limit reached",
}

GROUP_BY_CHOICES = ("file", "type", "severity", "none")

BOT_SIGNATURE = "PR Review Bot"


def _title(value: str) -> str:
    return value.replace("_", " ").title()


class ReviewFormatter:
    """Formats review results for GitHub comments and report files."""

    def format_issue_comment(self, issue: AggregatedIssue) -> str:
        """Render the body of one inline comment.

        Args:
            issue: Aggregated issue

        Returns:
            Markdown comment body
        """
        lines = [
            f"{SEVERITY_EMOJI[issue.severity]} **{issue.title}**",
            "",
            f"_{_title(issue.severity.value)} · {TYPE_EMOJI[issue.type]} {_title(issue.type.value)}_",
            "",
            issue.description,
        ]

        if issue.suggested_fix:
            lines.extend(["", "**Suggested fix:**", "```", issue.suggested_fix, "```"])

        agents = ", ".join(f"`{agent}`" for agent in issue.agents)
        lines.extend(["", f"<sub>Reported by {agents}</sub>"])
        return "\n".join(lines)

    def format_summary(self, result: ReviewResult) -> str:
        """Render the summary comment posted on the pull request.

        Issues that could not be placed inline are listed here so nothing
        is lost.
        """
        lines = [f"## 🤖 {BOT_SIGNATURE}", ""]

        if not result.issues:
            lines.append(f"✅ No issues found in {result.files_reviewed} files. LGTM!")
        else:
            lines.append(
                f"Found **{result.summary.total}** issues in {result.files_reviewed} files "
                f"({len(result.plan.placed)} posted inline)."
            )
            lines.append("")
            lines.extend(self._count_table(result))

        if result.unplaced_issues:
            lines.extend(["", "### Issues outside the diff", ""])
            for issue in result.unplaced_issues:
                reason = result.plan.reason_for(issue)
                reason_text = f" _({REASON_TEXT[reason]})_" if reason else ""
                lines.append(
                    f"- {SEVERITY_EMOJI[issue.severity]} **{issue.title}** "
                    f"`{issue.location.describe()}`{reason_text}"
                )

        if result.failures:
            lines.extend(["", "### ⚠️ Analyzer failures", ""])
            lines.extend(f"- {failure.describe()}" for failure in result.failures)

        lines.extend(["", "---", f"*{BOT_SIGNATURE} · review `{result.id}`*"])
        return "\n".join(lines)

    def format_report(self, result: ReviewResult, group_by: str = "file") -> str:
        """Render a standalone Markdown report.

        Args:
            result: Review result
            group_by: One of "file", "type", "severity" or "none"

        Returns:
            Markdown document
        """
        if group_by not in GROUP_BY_CHOICES:
            raise ValueError(f"group_by must be one of {', '.join(GROUP_BY_CHOICES)}")

        lines = [
            "# PR Review Results",
            "",
            f"**Repository:** {result.repo}  ",
            f"**Pull request:** #{result.pr_number}  ",
            f"**Generated:** {result.created_at.isoformat(timespec='seconds')}",
            "",
            "## Summary",
            "",
            f"Total issues: **{result.summary.total}**",
            "",
        ]
        lines.extend(self._count_table(result))
        lines.append("")

        if not result.issues:
            lines.extend(["No issues found. ✅", ""])
        elif group_by == "none":
            lines.extend(["## Issues", ""])
            for issue in result.issues:
                lines.extend(self._report_entry(issue))
        else:
            for heading, issues in self._groups(result.issues, group_by):
                lines.extend([f"## {heading}", ""])
                for issue in issues:
                    lines.extend(self._report_entry(issue))

        if result.unplaced_issues:
            lines.extend(["## Issues outside the diff", ""])
            for issue in result.unplaced_issues:
                reason = result.plan.reason_for(issue)
                reason_text = f": {REASON_TEXT[reason]}" if reason else ""
                lines.append(f"- `{issue.location.describe()}` {issue.title}{reason_text}")
            lines.append("")

        if result.failures:
            lines.extend(["## Analyzer failures", ""])
            lines.extend(f"- {failure.describe()}" for failure in result.failures)
            lines.append("")

        return "\n".join(lines)

    def _count_table(self, result: ReviewResult) -> list[str]:
        lines = ["| Severity | Count |", "|----------|-------|"]
        for severity in SEVERITY_ORDER:
            count = result.summary.by_severity.get(severity, 0)
            if count:
                lines.append(f"| {SEVERITY_EMOJI[severity]} {_title(severity.value)} | {count} |")

        lines.extend(["", "| Type | Count |", "|------|-------|"])
        for issue_type in TYPE_ORDER:
            count = result.summary.by_type.get(issue_type, 0)
            if count:
                lines.append(f"| {TYPE_EMOJI[issue_type]} {_title(issue_type.value)} | {count} |")
        return lines

    def _groups(
        self, issues: list[AggregatedIssue], group_by: str
    ) -> list[tuple[str, list[AggregatedIssue]]]:
        from pr_review_bot.orchestrator.aggregator import IssueAggregator

        aggregator = IssueAggregator()
        if group_by == "file":
            return [(f"📄 {path}", group) for path, group in aggregator.group_by_file(issues).items()]
        if group_by == "type":
            return [
                (f"{TYPE_EMOJI[issue_type]} {_title(issue_type.value)}", group)
                for issue_type, group in aggregator.group_by_type(issues).items()
            ]
        return [
            (f"{SEVERITY_EMOJI[severity]} {_title(severity.value)}", group)
            for severity, group in aggregator.group_by_severity(issues).items()
        ]

    def _report_entry(self, issue: AggregatedIssue) -> list[str]:
        lines = [
            f"### {SEVERITY_EMOJI[issue.severity]} {issue.title}",
            "",
            f"- **Location:** `{issue.location.describe()}`",
            f"- **Type:** {_title(issue.type.value)}",
            f"- **Severity:** {_title(issue.severity.value)}",
            f"- **Reported by:** {', '.join(issue.agents)}",
            "",
            issue.description,
            "",
        ]
        if issue.suggested_fix:
            lines.extend(["**Suggested fix:**", "", "```", issue.suggested_fix, "```", ""])
        return lines


def issue_to_dict(issue: AggregatedIssue, reason: UnplacedReason | None = None) -> dict[str, Any]:
    """Convert an aggregated issue to a JSON-serializable dict."""
    return {
        "id": issue.id,
        "title": issue.title,
        "description": issue.description,
        "severity": issue.severity.value,
        "type": issue.type.value,
        "file_path": issue.file_path,
        "line_start": issue.location.start_line,
        "line_end": issue.location.end_line,
        "suggested_fix": issue.suggested_fix,
        "agents": list(issue.agents),
        "unplaced_reason": reason.value if reason else None,
    }


def format_review_as_json(result: ReviewResult) -> str:
    """Format a review result as JSON.

    Args:
        result: Review result

    Returns:
        JSON string
    """
    data = {
        "id": result.id,
        "created_at": result.created_at.isoformat(),
        "repo": result.repo,
        "pr_number": result.pr_number,
        "files_reviewed": result.files_reviewed,
        "total_review_time_ms": result.total_review_time_ms,
        "summary": {
            "total": result.summary.total,
            "by_severity": {s.value: c for s, c in result.summary.by_severity.items()},
            "by_type": {t.value: c for t, c in result.summary.by_type.items()},
        },
        "issues": [issue_to_dict(issue, result.plan.reason_for(issue)) for issue in result.issues],
        "comments": [
            {"path": c.file_path, "position": c.diff_position, "issue_id": c.issue_id}
            for c in result.plan.placed
        ],
        "failures": [
            {"agent": f.agent, "file_path": f.file_path, "error": f.error} for f in result.failures
        ],
    }
    return json.dumps(data, indent=2)
