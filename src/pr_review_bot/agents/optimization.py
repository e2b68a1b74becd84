"""Performance and optimization analyzers."""

import re

from pr_review_bot.agents.base import JS_EXTENSIONS, AIAnalyzer, PatternAnalyzer, file_extension, rule
from pr_review_bot.models.issues import CodeIssue, IssueType, Severity

_LOOP_RE = re.compile(r"^\s*(?:for|while)\b")
_STRING_CONCAT_RE = re.compile(r"""\w+\s*\+=\s*(?:[rbf]?['"]|str\()""")

LOOP_EXTENSIONS = JS_EXTENSIONS | {".py", ".java"}


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip())


class OptimizationAnalyzer(PatternAnalyzer):
    """Flags loop shapes with avoidable cost."""

    NAME = "optimization"
    ISSUE_TYPE = IssueType.OPTIMIZATION

    RULES = [
        rule(
            r"for\s*\(.*;\s*\w+\s*<=?\s*[\w.]+\.length\s*;",
            "Array length in loop condition",
            "The array length is re-evaluated on every iteration.",
            Severity.INFO,
            "Cache the length in a variable before the loop, or use for...of.",
            JS_EXTENSIONS,
        ),
        rule(
            r"\brange\s*\(\s*len\s*\(",
            "range(len(...)) iteration",
            "Iterating over indices is slower and less readable than iterating directly.",
            Severity.INFO,
            "Iterate over the sequence directly, or use enumerate() when the index is needed.",
            {".py"},
        ),
    ]

    def check_file(self, file_path: str, content: str) -> list[CodeIssue]:
        """Find nested loops and string building inside loops.

        Loop nesting is tracked by indentation, which holds for Python and
        for conventionally formatted brace languages.
        """
        if file_extension(file_path) not in LOOP_EXTENSIONS:
            return []

        issues = []
        open_loops: list[int] = []

        for line_number, line in enumerate(content.split("\n"), start=1):
            line = line.rstrip("\r")
            stripped = line.strip()
            if not stripped or stripped.startswith(("#", "//", "*", "/*")):
                continue

            indent = _indent(line)
            while open_loops and indent <= open_loops[-1]:
                open_loops.pop()

            if _LOOP_RE.match(line):
                if open_loops:
                    issues.append(
                        self.create_issue(
                            "Nested loop detected",
                            "Nested loops can lead to O(n²) time complexity, which may cause "
                            "performance issues for large datasets.",
                            self.ISSUE_TYPE,
                            Severity.WARNING,
                            file_path,
                            line_number,
                            line_number,
                            "Consider a lookup table (dict/Map/Set) to avoid the inner loop.",
                        )
                    )
                open_loops.append(indent)
            elif open_loops and _STRING_CONCAT_RE.search(line):
                issues.append(
                    self.create_issue(
                        "String concatenation in loop",
                        "Building a string with += inside a loop copies it on every iteration.",
                        self.ISSUE_TYPE,
                        Severity.INFO,
                        file_path,
                        line_number,
                        line_number,
                        "Collect the parts in a list and join them once after the loop.",
                    )
                )

        return issues


class OptimizationAIAnalyzer(AIAnalyzer):
    """Asks the model for performance improvements."""

    NAME = "optimization-ai"
    ISSUE_TYPE = IssueType.OPTIMIZATION
    DEFAULT_SEVERITY = Severity.INFO

    ROLE = "You are a performance optimization expert."
    FOCUS = [
        "Algorithmic complexity (unnecessary O(n²) or worse)",
        "Redundant computation inside loops",
        "Inefficient data structures",
        "Memory usage and unnecessary copies",
        "Blocking I/O where async or batching is possible",
        "N+1 queries and missing caching",
    ]
