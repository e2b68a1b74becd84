"""Analyzer orchestrator for parallel per-file analysis."""

import asyncio
import logging
from dataclasses import dataclass, field

from pr_review_bot.agents.base import Analyzer
from pr_review_bot.models.issues import CodeIssue
from pr_review_bot.models.review import AnalyzerFailure

logger = logging.getLogger(__name__)


@dataclass
class OrchestratorConfig:
    """Configuration for the orchestrator."""

    timeout_seconds: float = 120
    max_parallel_files: int = 5


@dataclass
class AnalysisOutcome:
    """Issues and failures collected from one analysis run."""

    issues: list[CodeIssue] = field(default_factory=list)
    failures: list[AnalyzerFailure] = field(default_factory=list)


class ReviewOrchestrator:
    """Runs every analyzer on every file with bounded concurrency."""

    def __init__(
        self,
        analyzers: list[Analyzer],
        timeout_seconds: float = 120,
        max_parallel_files: int = 5,
        config: OrchestratorConfig | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            analyzers: Analyzers to run on each file
            timeout_seconds: Maximum time for one analyzer on one file
            max_parallel_files: Number of files analyzed concurrently
            config: Optional full configuration (overrides other params)
        """
        self.analyzers = analyzers
        self.config = config or OrchestratorConfig(
            timeout_seconds=timeout_seconds,
            max_parallel_files=max_parallel_files,
        )

    async def analyze(self, files: dict[str, str]) -> AnalysisOutcome:
        """Analyze file contents.

        A failing or timed out analyzer contributes no issues for that file
        and is recorded as a failure; other files and analyzers are
        unaffected. Results are returned in input order (files, then
        analyzers) regardless of completion order.

        Args:
            files: Mapping of file path to content

        Returns:
            Collected issues and failures
        """
        logger.info(f"Analyzing {len(files)} files with {len(self.analyzers)} analyzers")

        semaphore = asyncio.Semaphore(max(1, self.config.max_parallel_files))

        async def analyze_file(path: str, content: str) -> list[list[CodeIssue] | BaseException]:
            async with semaphore:
                return await asyncio.gather(
                    *(self._run_analyzer(analyzer, path, content) for analyzer in self.analyzers),
                    return_exceptions=True,
                )

        per_file = await asyncio.gather(
            *(analyze_file(path, content) for path, content in files.items())
        )

        outcome = AnalysisOutcome()
        for path, results in zip(files, per_file):
            for analyzer, result in zip(self.analyzers, results):
                if isinstance(result, list):
                    outcome.issues.extend(result)
                    logger.debug(f"{analyzer.name} found {len(result)} issues in {path}")
                elif isinstance(result, asyncio.TimeoutError):
                    outcome.failures.append(AnalyzerFailure(analyzer.name, path, "timeout"))
                    logger.warning(f"Analyzer {analyzer.name} timed out on {path}")
                elif isinstance(result, Exception):
                    outcome.failures.append(
                        AnalyzerFailure(analyzer.name, path, f"{type(result).__name__}: {result}")
                    )
                    logger.error(f"Analyzer {analyzer.name} failed on {path}: {result}")
                else:
                    # CancelledError and other BaseExceptions propagate
                    raise result

        logger.info(
            f"Analysis complete: {len(outcome.issues)} issues, {len(outcome.failures)} failures"
        )
        return outcome

    async def _run_analyzer(self, analyzer: Analyzer, path: str, content: str) -> list[CodeIssue]:
        """Run a single analyzer with timeout.

        Raises:
            asyncio.TimeoutError: If the analyzer exceeds the timeout
        """
        return await asyncio.wait_for(
            analyzer.analyze(path, content),
            timeout=self.config.timeout_seconds,
        )
