"""Tests for the analyzer orchestrator."""

import asyncio

import pytest


class FakeAnalyzer:
    """Analyzer stub with scripted behaviour."""

    def __init__(self, name, issues=None, delay=0.0, error=None):
        self.name = name
        self._issues = issues or {}
        self._delay = delay
        self._error = error
        self.seen = []

    async def analyze(self, file_path, content):
        self.seen.append(file_path)
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error:
            raise self._error
        return list(self._issues.get(file_path, []))


class TestReviewOrchestrator:
    """Tests for ReviewOrchestrator."""

    @pytest.mark.asyncio
    async def test_results_follow_input_order(self, make_issue):
        """Test issues come back ordered by file, then analyzer."""
        from pr_review_bot.orchestrator import ReviewOrchestrator

        a1 = make_issue(file_path="a.py", agent="slow")
        a2 = make_issue(file_path="a.py", agent="fast")
        b1 = make_issue(file_path="b.py", agent="slow")

        slow = FakeAnalyzer("slow", {"a.py": [a1], "b.py": [b1]}, delay=0.05)
        fast = FakeAnalyzer("fast", {"a.py": [a2]})

        outcome = await ReviewOrchestrator([slow, fast]).analyze({"a.py": "x", "b.py": "y"})

        assert outcome.issues == [a1, a2, b1]
        assert outcome.failures == []

    @pytest.mark.asyncio
    async def test_analyzers_run_in_parallel(self):
        """Test that analyzers on one file overlap in time."""
        from pr_review_bot.orchestrator import ReviewOrchestrator

        analyzers = [FakeAnalyzer(f"a{i}", delay=0.1) for i in range(4)]

        loop = asyncio.get_running_loop()
        start = loop.time()
        await ReviewOrchestrator(analyzers).analyze({"a.py": "x"})
        elapsed = loop.time() - start

        assert elapsed < 0.35

    @pytest.mark.asyncio
    async def test_timeout_is_recorded(self, make_issue):
        """Test a slow analyzer becomes a failure without losing others."""
        from pr_review_bot.orchestrator import ReviewOrchestrator

        found = make_issue(file_path="a.py", agent="quick")
        slow = FakeAnalyzer("sleepy", delay=1.0)
        quick = FakeAnalyzer("quick", {"a.py": [found]})

        outcome = await ReviewOrchestrator([slow, quick], timeout_seconds=0.05).analyze({"a.py": "x"})

        assert outcome.issues == [found]
        assert [(f.agent, f.file_path, f.error) for f in outcome.failures] == [("sleepy", "a.py", "timeout")]

    @pytest.mark.asyncio
    async def test_exception_is_recorded(self, make_issue):
        """Test a raising analyzer is recorded per file."""
        from pr_review_bot.orchestrator import ReviewOrchestrator

        found = make_issue(file_path="b.py", agent="ok")
        broken = FakeAnalyzer("broken", error=RuntimeError("kaput"))
        ok = FakeAnalyzer("ok", {"b.py": [found]})

        outcome = await ReviewOrchestrator([broken, ok]).analyze({"a.py": "x", "b.py": "y"})

        assert outcome.issues == [found]
        assert [f.file_path for f in outcome.failures] == ["a.py", "b.py"]
        assert outcome.failures[0].error == "RuntimeError: kaput"
        assert "broken on a.py" in outcome.failures[0].describe()

    @pytest.mark.asyncio
    async def test_file_concurrency_is_bounded(self):
        """Test max_parallel_files limits files in flight."""
        from pr_review_bot.orchestrator import OrchestratorConfig, ReviewOrchestrator

        in_flight = 0
        peak = 0

        class Counting:
            name = "counting"

            async def analyze(self, file_path, content):
                nonlocal in_flight, peak
                in_flight += 1
                peak = max(peak, in_flight)
                await asyncio.sleep(0.01)
                in_flight -= 1
                return []

        config = OrchestratorConfig(max_parallel_files=2)
        files = {f"f{i}.py": "x" for i in range(6)}

        await ReviewOrchestrator([Counting()], config=config).analyze(files)

        assert peak == 2

    @pytest.mark.asyncio
    async def test_no_files(self):
        """Test that an empty input yields an empty outcome."""
        from pr_review_bot.orchestrator import ReviewOrchestrator

        outcome = await ReviewOrchestrator([FakeAnalyzer("x")]).analyze({})

        assert outcome.issues == []
        assert outcome.failures == []
