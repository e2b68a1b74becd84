"""Pytest configuration and shared fixtures."""

import pytest

# Single-hunk diff from the position convention example
SIMPLE_DIFF = """\
@@ -1,3 +1,4 @@
 line1
-line2
+line2-changed
+line3
 line4"""

MULTI_HUNK_DIFF = """\
@@ -1,3 +1,3 @@ def first():
 a = 1
-b = 2
+b = 3
 c = 4
@@ -20,2 +20,3 @@ def second():
 x = 1
+y = 2
 z = 3"""

DELETED_FILE_DIFF = """\
@@ -1,3 +0,0 @@
-import os
-
-print(os.getcwd())"""

PATCH_SET = """\
diff --git a/auth/login.py b/auth/login.py
index 1234567..abcdefg 100644
--- a/auth/login.py
+++ b/auth/login.py
@@ -10,3 +10,5 @@ def authenticate(username: str, password: str) -> bool:
     hashed = hash_password(password)
     return db.verify_user(username, hashed)
+
+API_KEY = "sk-live-1234567890abcdef"
diff --git a/old/legacy.py b/old/legacy.py
deleted file mode 100644
index 1111111..0000000
--- a/old/legacy.py
+++ /dev/null
@@ -1,2 +0,0 @@
-def legacy():
-    pass
diff --git a/docs/new.md b/docs/new.md
new file mode 100644
index 0000000..2222222
--- /dev/null
+++ b/docs/new.md
@@ -0,0 +1,2 @@
+# New
+Hello
"""

VULNERABLE_PY = """\
import pickle
import subprocess

API_KEY = "sk-live-1234567890abcdef"


def load(data):
    return pickle.loads(data)


def run(cmd):
    subprocess.run(cmd, shell=True)
"""


@pytest.fixture
def simple_diff() -> str:
    """The four-line example diff (positions 1..6)."""
    return SIMPLE_DIFF


@pytest.fixture
def multi_hunk_diff() -> str:
    """A diff with two hunks."""
    return MULTI_HUNK_DIFF


@pytest.fixture
def deleted_file_diff() -> str:
    """A diff that only removes lines."""
    return DELETED_FILE_DIFF


@pytest.fixture
def patch_set() -> str:
    """Multi-file git diff with a modification, a deletion and an addition."""
    return PATCH_SET


@pytest.fixture
def vulnerable_py() -> str:
    """Python source with several security problems."""
    return VULNERABLE_PY


@pytest.fixture
def make_issue():
    """Factory for CodeIssues with sensible defaults."""
    from pr_review_bot.models.issues import CodeIssue, IssueLocation, IssueType, Severity

    counter = iter(range(1, 10_000))

    def _make(
        title: str = "Issue",
        file_path: str = "a.ts",
        start_line: int | None = 10,
        end_line: int | None = None,
        severity: Severity = Severity.WARNING,
        issue_type: IssueType = IssueType.BUG,
        agent: str = "bug-detection",
        description: str = "Something is wrong",
        suggested_fix: str | None = None,
    ) -> CodeIssue:
        return CodeIssue(
            id=f"{agent}-{next(counter)}",
            title=title,
            description=description,
            severity=severity,
            type=issue_type,
            location=IssueLocation(file_path=file_path, start_line=start_line, end_line=end_line),
            agent=agent,
            suggested_fix=suggested_fix,
        )

    return _make


@pytest.fixture
def no_sleep():
    """Recording replacement for asyncio.sleep."""
    delays: list[float] = []

    async def _sleep(delay: float) -> None:
        delays.append(delay)

    _sleep.delays = delays
    return _sleep


@pytest.fixture
def make_result(make_issue):
    """Factory for ReviewResults built through the real aggregator and planner."""
    from datetime import datetime

    from pr_review_bot.diff.parser import DiffParser
    from pr_review_bot.models.review import ReviewResult
    from pr_review_bot.orchestrator.aggregator import IssueAggregator
    from pr_review_bot.orchestrator.planner import CommentPlanner

    def _make(issues=None, diffs=None, failures=None, max_comments=None) -> ReviewResult:
        aggregator = IssueAggregator()
        aggregated = aggregator.aggregate(issues or [])
        file_diffs = DiffParser().parse_many(diffs or {})
        plan = CommentPlanner(max_comments=max_comments).plan(aggregated, file_diffs)
        return ReviewResult(
            id="review-test",
            created_at=datetime(2024, 5, 1, 12, 0, 0),
            repo="acme/widgets",
            pr_number=7,
            issues=aggregated,
            plan=plan,
            summary=aggregator.summarize(aggregated),
            files_reviewed=len(file_diffs) or 1,
            failures=failures or [],
            file_diffs=file_diffs,
        )

    return _make
