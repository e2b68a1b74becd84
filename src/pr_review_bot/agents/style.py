"""Style and formatting analyzer."""

import json
import logging

from pr_review_bot.agents.base import JS_EXTENSIONS, PatternAnalyzer, file_extension, rule
from pr_review_bot.models.issues import CodeIssue, IssueType, Severity

logger = logging.getLogger(__name__)

MAX_LINE_LENGTH = {
    ".js": 100,
    ".jsx": 100,
    ".ts": 100,
    ".tsx": 100,
    ".py": 88,
    ".java": 100,
    ".html": 120,
    ".xml": 120,
}


def _long_line_rule(limit: int, extensions: set[str]):
    return rule(
        rf"^.{{{limit + 1},}}$",
        "Line too long",
        f"Line exceeds {limit} characters, which hurts readability.",
        Severity.INFO,
        f"Break the line so it stays under {limit} characters.",
        extensions,
    )


class StyleAnalyzer(PatternAnalyzer):
    """Flags debugging leftovers, overlong lines and formatting problems."""

    NAME = "style"
    ISSUE_TYPE = IssueType.STYLE

    RULES = [
        rule(
            r"console\.log\s*\(",
            "Console statement",
            "console.log statements should be removed before merging.",
            Severity.INFO,
            "Remove the console.log statement or use a proper logging library.",
            JS_EXTENSIONS,
        ),
        rule(
            r"(?://|/\*|\*).*\b(?:TODO|FIXME)\b",
            "TODO comment",
            "Unresolved TODO/FIXME comment.",
            Severity.INFO,
            "Resolve the TODO or track it in an issue.",
            JS_EXTENSIONS,
        ),
        rule(
            r"^\s*print\s*\(",
            "Print statement",
            "print statements should be replaced by logging in production code.",
            Severity.INFO,
            "Use the logging module instead of print.",
            {".py"},
        ),
        rule(
            r"System\.(?:out|err)\.print",
            "System.out statement",
            "System.out/System.err calls should be replaced by a logger.",
            Severity.INFO,
            "Use a logging framework such as SLF4J.",
            {".java"},
        ),
        rule(
            r"!important",
            "Use of !important",
            "!important overrides the cascade and makes styles hard to maintain.",
            Severity.INFO,
            "Increase selector specificity instead of using !important.",
            {".css", ".scss", ".less"},
        ),
        rule(
            r"[ \t]+$",
            "Trailing whitespace",
            "Line ends with trailing whitespace.",
            Severity.INFO,
            "Remove the trailing whitespace.",
        ),
        _long_line_rule(100, JS_EXTENSIONS | {".java"}),
        _long_line_rule(88, {".py"}),
        _long_line_rule(120, {".html", ".xml"}),
    ]

    def check_file(self, file_path: str, content: str) -> list[CodeIssue]:
        """Check line endings and JSON validity."""
        issues = []

        crlf = content.count("\r\n")
        lf = content.count("\n") - crlf
        if crlf and lf:
            issues.append(
                self.create_issue(
                    "Mixed line endings",
                    f"File mixes CRLF ({crlf}) and LF ({lf}) line endings.",
                    self.ISSUE_TYPE,
                    Severity.WARNING,
                    file_path,
                    suggested_fix="Normalize line endings, e.g. with a .gitattributes rule.",
                )
            )

        if file_extension(file_path) == ".json":
            try:
                json.loads(content)
            except json.JSONDecodeError as e:
                logger.debug(f"Invalid JSON in {file_path}: {e}")
                issues.append(
                    self.create_issue(
                        "Invalid JSON",
                        f"The file is not valid JSON: {e.msg}.",
                        self.ISSUE_TYPE,
                        Severity.ERROR,
                        file_path,
                        e.lineno,
                        e.lineno,
                        "Fix the JSON syntax error.",
                    )
                )

        return issues
