"""Analyzer capability and the two shared analyzer implementations."""

import hashlib
import json
import logging
import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any, Protocol, runtime_checkable

from pr_review_bot.connectors.base import AIConnector
from pr_review_bot.models.issues import CodeIssue, IssueLocation, IssueType, Severity

logger = logging.getLogger(__name__)

LANGUAGES = {
    ".js": "JavaScript",
    ".jsx": "JavaScript (React)",
    ".ts": "TypeScript",
    ".tsx": "TypeScript (React)",
    ".py": "Python",
    ".java": "Java",
    ".php": "PHP",
    ".rb": "Ruby",
    ".go": "Go",
    ".rs": "Rust",
    ".c": "C",
    ".cpp": "C++",
    ".cs": "C#",
    ".html": "HTML",
    ".xml": "XML",
    ".css": "CSS",
    ".scss": "SCSS",
    ".less": "Less",
    ".json": "JSON",
    ".yml": "YAML",
    ".yaml": "YAML",
    ".md": "Markdown",
    ".sh": "Shell",
}

JS_EXTENSIONS = frozenset({".js", ".jsx", ".ts", ".tsx"})


def file_extension(file_path: str) -> str:
    """Lowercase extension of a repository path."""
    return PurePosixPath(file_path).suffix.lower()


def detect_language(file_path: str) -> str | None:
    """Get the language name for a file based on its extension."""
    return LANGUAGES.get(file_extension(file_path))


def make_issue_id(agent: str, issue_type: IssueType, file_path: str, line: int | None, title: str) -> str:
    """Build a stable identifier for an issue."""
    digest = hashlib.md5(f"{agent}:{file_path}:{line}:{title}".encode()).hexdigest()[:8]
    line_part = f"-L{line}" if line else ""
    return f"{agent}-{issue_type.value}-{PurePosixPath(file_path).name}{line_part}-{digest}"


@runtime_checkable
class Analyzer(Protocol):
    """Anything that can inspect one file and report issues."""

    @property
    def name(self) -> str:
        """Analyzer name recorded on every issue it reports."""
        ...

    async def analyze(self, file_path: str, content: str) -> list[CodeIssue]:
        """Analyze a file and return its issues."""
        ...


class IssueFactory:
    """Mixin building CodeIssues stamped with the analyzer's name."""

    NAME: str = "base"

    @property
    def name(self) -> str:
        return self.NAME

    def create_issue(
        self,
        title: str,
        description: str,
        issue_type: IssueType,
        severity: Severity,
        file_path: str,
        start_line: int | None = None,
        end_line: int | None = None,
        suggested_fix: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> CodeIssue:
        """Create an issue reported by this analyzer."""
        return CodeIssue(
            id=make_issue_id(self.name, issue_type, file_path, start_line, title),
            title=title,
            description=description,
            severity=severity,
            type=issue_type,
            location=IssueLocation(file_path=file_path, start_line=start_line, end_line=end_line),
            agent=self.name,
            suggested_fix=suggested_fix,
            metadata=metadata or {},
        )


@dataclass(frozen=True)
class PatternRule:
    """A per-line regex heuristic."""

    pattern: re.Pattern[str]
    title: str
    description: str
    severity: Severity
    suggested_fix: str | None = None
    extensions: frozenset[str] | None = None  # None applies to every file

    def applies_to(self, extension: str) -> bool:
        return self.extensions is None or extension in self.extensions


def rule(
    pattern: str,
    title: str,
    description: str,
    severity: Severity,
    suggested_fix: str | None = None,
    extensions: set[str] | frozenset[str] | None = None,
    flags: int = 0,
) -> PatternRule:
    """Shorthand for declaring a PatternRule."""
    return PatternRule(
        pattern=re.compile(pattern, flags),
        title=title,
        description=description,
        severity=severity,
        suggested_fix=suggested_fix,
        extensions=frozenset(extensions) if extensions is not None else None,
    )


class PatternAnalyzer(IssueFactory):
    """Analyzer driven by per-line regex rules."""

    ISSUE_TYPE: IssueType = IssueType.OTHER
    RULES: list[PatternRule] = []

    async def analyze(self, file_path: str, content: str) -> list[CodeIssue]:
        """Run every applicable rule against each line of the file.

        Args:
            file_path: Repository-relative path
            content: Full file content

        Returns:
            One issue per (rule, matching line) plus any file-level checks
        """
        if not content.strip():
            return []

        extension = file_extension(file_path)
        rules = [r for r in self.RULES if r.applies_to(extension)]
        issues: list[CodeIssue] = []

        for line_number, line in enumerate(content.split("\n"), start=1):
            line = line.rstrip("\r")
            for r in rules:
                if r.pattern.search(line):
                    issues.append(
                        self.create_issue(
                            r.title,
                            r.description,
                            self.ISSUE_TYPE,
                            r.severity,
                            file_path,
                            line_number,
                            line_number,
                            r.suggested_fix,
                        )
                    )

        issues.extend(self.check_file(file_path, content))
        return issues

    def check_file(self, file_path: str, content: str) -> list[CodeIssue]:
        """File-level checks; subclasses override."""
        return []


_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


def parse_ai_response(content: str) -> list[dict[str, Any]]:
    """Extract the list of raw issue objects from a model response.

    Args:
        content: Raw model output, optionally wrapped in a code fence

    Returns:
        Raw issue dicts; an empty list when the response is not parseable
    """
    content = (content or "").strip()

    match = _FENCE_RE.search(content)
    if match:
        content = match.group(1).strip()

    array_match = _ARRAY_RE.search(content)
    if array_match:
        content = array_match.group(0)

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse AI response JSON: {e}")
        return []

    if isinstance(data, dict):
        data = data.get("issues", data.get("findings", []))
    if not isinstance(data, list):
        logger.warning(f"AI response is not a list of issues: {type(data).__name__}")
        return []

    return [item for item in data if isinstance(item, dict)]


def _optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    number = int(value)
    return number if number >= 1 else None


def _optional_text(value: Any) -> str | None:
    return value if isinstance(value, str) and value.strip() else None


class AIAnalyzer(IssueFactory):
    """Analyzer that asks a language model to review a file."""

    ISSUE_TYPE: IssueType = IssueType.OTHER
    DEFAULT_SEVERITY: Severity = Severity.WARNING
    ROLE: str = "You are an expert code reviewer."
    FOCUS: list[str] = []
    MAX_CONTENT_CHARS: int = 50000

    def __init__(self, connector: AIConnector) -> None:
        """Initialize the analyzer.

        Args:
            connector: AI connector used for every request
        """
        self.connector = connector

    async def analyze(self, file_path: str, content: str) -> list[CodeIssue]:
        """Ask the model for issues in one file.

        Connector errors (after retries) propagate to the caller; an
        unparsable response yields no issues.
        """
        if not content.strip():
            return []

        prompt = self.build_prompt(file_path, content)
        response = await self.connector.generate_response(prompt)
        return self.parse_issues(response, file_path)

    def build_prompt(self, file_path: str, content: str) -> str:
        """Build the review prompt for a file."""
        language = detect_language(file_path) or "Unknown"
        focus = "\n".join(f"{i}. {item}" for i, item in enumerate(self.FOCUS, start=1))
        return f"""{self.ROLE} Please review the following {language} code from the file {file_path} and identify any issues, including but not limited to:

{focus}

For each issue, provide:
- A brief title
- A detailed description
- The line number(s) where the issue occurs
- The severity (info, warning, error, critical)
- A suggested fix

Format your response as a JSON array of issues, with each issue having the following structure:
```json
[
  {{
    "title": "Issue title",
    "description": "Detailed description",
    "lineStart": 10,
    "lineEnd": 15,
    "severity": "{self.DEFAULT_SEVERITY.value}",
    "suggestedFix": "Code suggestion to fix the issue"
  }}
]
```

Here is the code to review:

```{language}
{content[: self.MAX_CONTENT_CHARS]}
```

If no issues are found, return an empty array: []
"""

    def parse_issues(self, response: str, file_path: str) -> list[CodeIssue]:
        """Convert a model response into CodeIssues."""
        issues = []
        for raw in parse_ai_response(response):
            try:
                severity_raw = str(raw.get("severity", "")).lower()
                try:
                    severity = Severity(severity_raw)
                except ValueError:
                    severity = self.DEFAULT_SEVERITY

                start = _optional_int(raw.get("lineStart", raw.get("line_start")))
                end = _optional_int(raw.get("lineEnd", raw.get("line_end")))
                issues.append(
                    self.create_issue(
                        str(raw["title"]),
                        str(raw.get("description", "")),
                        self.ISSUE_TYPE,
                        severity,
                        file_path,
                        start,
                        end,
                        _optional_text(raw.get("suggestedFix", raw.get("suggested_fix"))),
                        metadata={"source": "ai"},
                    )
                )
            except (KeyError, ValueError, TypeError, OverflowError) as e:
                logger.warning(f"Failed to parse issue from {self.name}: {e}, raw: {raw}")
                continue
        return issues
