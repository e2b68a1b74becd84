"""Bug detection analyzers."""

from pr_review_bot.agents.base import JS_EXTENSIONS, AIAnalyzer, PatternAnalyzer, rule
from pr_review_bot.models.issues import IssueType, Severity


class BugDetectionAnalyzer(PatternAnalyzer):
    """Detects constructs that frequently hide bugs."""

    NAME = "bug-detection"
    ISSUE_TYPE = IssueType.BUG

    RULES = [
        rule(
            r"[^=!<>]==[^=]|!=[^=]",
            "Use of loose equality",
            "Using == or != instead of === or !== can lead to unexpected type coercion.",
            Severity.WARNING,
            "Replace == with === (and != with !==) for strict comparison.",
            JS_EXTENSIONS,
        ),
        rule(
            r"def\s+\w+\s*\(.*=\s*(?:\[\s*\]|\{\s*\}|set\(\s*\)).*\)",
            "Mutable default argument",
            "Using mutable objects as default arguments can lead to unexpected behavior.",
            Severity.WARNING,
            "Use None as the default and initialize the mutable object inside the function.",
            {".py"},
        ),
        rule(
            r"^\s*except\s*:",
            "Bare except clause",
            "Using a bare except clause can catch unexpected exceptions and hide errors.",
            Severity.WARNING,
            "Specify the exceptions you want to catch: except (TypeError, ValueError):",
            {".py"},
        ),
        rule(
            r"catch\s*(?:\([^)]*\))?\s*\{\s*\}",
            "Empty catch block",
            "Empty catch blocks suppress exceptions without handling them.",
            Severity.WARNING,
            "Either handle the exception or log it.",
            JS_EXTENSIONS | {".java"},
        ),
    ]


class BugDetectionAIAnalyzer(AIAnalyzer):
    """Asks the model for logic errors and runtime failures."""

    NAME = "bug-detection-ai"
    ISSUE_TYPE = IssueType.BUG
    DEFAULT_SEVERITY = Severity.WARNING

    ROLE = "You are an expert bug hunter."
    FOCUS = [
        "Logic errors and incorrect conditions",
        "Null/undefined dereferences",
        "Off-by-one errors and index out of bounds",
        "Race conditions and concurrency issues",
        "Resource leaks (files, connections, memory)",
        "Incorrect error handling",
        "Type mismatches and unexpected coercions",
        "Infinite loops or recursion",
    ]
