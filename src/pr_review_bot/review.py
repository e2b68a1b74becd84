"""End-to-end review flow: fetch, analyze, aggregate, plan and publish.

The pure steps (diff parsing, aggregation, comment planning) are shared by
pull request reviews and local diff reviews; only the source of changed
files and the output differ.
"""

import asyncio
import fnmatch
import logging
import time
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from uuid import uuid4

from github.PullRequest import PullRequest

from pr_review_bot.agents import Analyzer, build_analyzers
from pr_review_bot.config import Config
from pr_review_bot.connectors import BaseAIConnector, create_connector
from pr_review_bot.diff.parser import DiffParser, split_patch_set
from pr_review_bot.errors import ReviewError
from pr_review_bot.github.client import GitHubClient
from pr_review_bot.github.formatter import ReviewFormatter
from pr_review_bot.models.review import ChangedFile, ReviewResult
from pr_review_bot.orchestrator.aggregator import IssueAggregator
from pr_review_bot.orchestrator.orchestrator import OrchestratorConfig, ReviewOrchestrator
from pr_review_bot.orchestrator.planner import CommentPlanner
from pr_review_bot.retry import RetryableCall, RetryPolicy

logger = logging.getLogger(__name__)


def is_ignored(path: str, patterns: Iterable[str]) -> bool:
    """Check a path against glob ignore patterns."""
    return any(fnmatch.fnmatch(path, pattern) for pattern in patterns)


def retry_policy_from_config(config: Config) -> RetryPolicy:
    """Build the shared retry policy."""
    return RetryPolicy(
        max_attempts=config.retry.max_attempts,
        base_delay_ms=config.retry.base_delay_ms,
        jitter_ms=config.retry.jitter_ms,
    )


def create_connector_from_config(config: Config) -> BaseAIConnector | None:
    """Create the configured AI connector, or None when AI analysis is off."""
    if not config.ai.enabled:
        logger.info("AI analysis disabled, running pattern analyzers only")
        return None
    return create_connector(
        config.ai.provider,
        api_key=config.ai.api_key,
        model=config.ai.model,
        base_url=config.ai.base_url,
        timeout=config.ai.timeout_seconds,
        retry_policy=retry_policy_from_config(config),
    )


class ReviewPipeline:
    """Runs analyzers over changed files and plans the resulting comments."""

    def __init__(
        self,
        analyzers: list[Analyzer],
        orchestrator_config: OrchestratorConfig | None = None,
        max_inline_comments: int | None = None,
        ignore_patterns: Iterable[str] = (),
    ) -> None:
        """Initialize the pipeline.

        Args:
            analyzers: Analyzers to run on every reviewed file
            orchestrator_config: Concurrency and timeout settings
            max_inline_comments: Optional cap on inline comments
            ignore_patterns: Glob patterns of paths that are not analyzed
        """
        self.orchestrator = ReviewOrchestrator(analyzers, config=orchestrator_config)
        self.parser = DiffParser()
        self.aggregator = IssueAggregator()
        self.planner = CommentPlanner(max_comments=max_inline_comments)
        self.ignore_patterns = list(ignore_patterns)

    @classmethod
    def from_config(cls, config: Config, connector: BaseAIConnector | None = None) -> "ReviewPipeline":
        """Build a pipeline from application configuration."""
        return cls(
            analyzers=build_analyzers(config.agents, connector),
            orchestrator_config=OrchestratorConfig(
                timeout_seconds=config.orchestrator.timeout_seconds,
                max_parallel_files=config.orchestrator.max_parallel_files,
            ),
            max_inline_comments=config.output.max_inline_comments,
            ignore_patterns=config.review_policy.ignore_patterns,
        )

    async def run(self, files: list[ChangedFile], repo: str = "local", pr_number: int = 0) -> ReviewResult:
        """Review a set of changed files.

        Args:
            files: Changed files with patches and head contents
            repo: Repository name recorded in the result
            pr_number: Pull request number recorded in the result

        Returns:
            ReviewResult with sorted issues and the comment plan
        """
        start_time = time.time()

        file_diffs = self.parser.parse_many({f.path: f.patch for f in files})

        contents: dict[str, str] = {}
        for f in files:
            if f.is_removed:
                continue
            if is_ignored(f.path, self.ignore_patterns):
                logger.debug(f"Ignoring {f.path}")
                continue
            if f.content is None:
                logger.debug(f"No content for {f.path}, skipping analysis")
                continue
            contents[f.path] = f.content

        outcome = await self.orchestrator.analyze(contents)

        aggregated = self.aggregator.aggregate(outcome.issues)
        summary = self.aggregator.summarize(aggregated)
        plan = self.planner.plan(aggregated, file_diffs)

        result = ReviewResult(
            id=f"review-{uuid4().hex[:8]}",
            created_at=datetime.now(),
            repo=repo,
            pr_number=pr_number,
            issues=aggregated,
            plan=plan,
            summary=summary,
            files_reviewed=len(contents),
            total_review_time_ms=int((time.time() - start_time) * 1000),
            failures=outcome.failures,
            file_diffs=file_diffs,
        )

        logger.info(
            f"Review complete: {summary.total} issues in {result.files_reviewed} files "
            f"in {result.total_review_time_ms}ms"
        )
        return result


async def _github_call(retry: RetryableCall, description: str, fn, *args, **kwargs):
    """Run a blocking PyGithub call in a thread with retries."""
    return await retry.run(lambda: asyncio.to_thread(fn, *args, **kwargs), description=description)


async def review_pull_request(
    config: Config,
    repo: str,
    pr_number: int | None = None,
    branch: str | None = None,
    github: GitHubClient | None = None,
    connector: BaseAIConnector | None = None,
) -> tuple[PullRequest, ReviewResult]:
    """Review a GitHub pull request.

    Args:
        config: Application configuration
        repo: Repository in "owner/name" format
        pr_number: Pull request number; looked up from ``branch`` when omitted
        branch: Head branch used to find the pull request
        github: Optional pre-built GitHub client
        connector: Optional AI connector (defaults to the configured one)

    Returns:
        The pull request and the review result

    Raises:
        ReviewError: If no pull request can be found
    """
    gh = github or GitHubClient(config.github.token, base_url=config.github.base_url)
    retry = RetryableCall(retry_policy_from_config(config))

    if pr_number is not None:
        pr = await _github_call(retry, "fetch pull request", gh.get_pull_request, repo, pr_number)
    elif branch:
        pr = await _github_call(retry, "find pull request", gh.find_pull_request_for_branch, repo, branch)
        if pr is None:
            raise ReviewError(f"No open pull request for branch {branch} in {repo}")
    else:
        raise ReviewError("Either a pull request number or a branch is required")

    logger.info(f"Reviewing PR #{pr.number} in {repo}: {pr.title}")
    files = await _github_call(retry, "list changed files", gh.get_changed_files, pr)

    own_connector = connector is None
    if own_connector:
        connector = create_connector_from_config(config)
    try:
        pipeline = ReviewPipeline.from_config(config, connector)
        result = await pipeline.run(files, repo=repo, pr_number=pr.number)
    finally:
        if own_connector and connector is not None:
            await connector.close()

    return pr, result


def load_local_changes(diff_text: str, root: Path) -> list[ChangedFile]:
    """Build changed files from a multi-file diff and a working tree.

    Args:
        diff_text: Output of ``git diff``
        root: Working tree the diff applies to

    Returns:
        Changed files; a path missing from the tree is treated as removed
    """
    files = []
    for path, body in split_patch_set(diff_text).items():
        file_path = root / path
        if not file_path.is_file():
            files.append(ChangedFile(path=path, status="removed", patch=body))
            continue
        try:
            content = file_path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            logger.debug(f"Skipping binary file {path}")
            content = None
        files.append(ChangedFile(path=path, status="modified", patch=body, content=content))
    return files


async def review_local_diff(
    config: Config,
    diff_text: str,
    root: Path = Path("."),
    connector: BaseAIConnector | None = None,
) -> ReviewResult:
    """Review a local diff against the working tree.

    Args:
        config: Application configuration
        diff_text: Output of ``git diff``
        root: Working tree root
        connector: Optional AI connector (defaults to the configured one)

    Returns:
        ReviewResult for the local changes
    """
    files = load_local_changes(diff_text, root)
    logger.info(f"Reviewing {len(files)} locally changed files under {root}")

    own_connector = connector is None
    if own_connector:
        connector = create_connector_from_config(config)
    try:
        pipeline = ReviewPipeline.from_config(config, connector)
        return await pipeline.run(files, repo=str(root.resolve().name), pr_number=0)
    finally:
        if own_connector and connector is not None:
            await connector.close()


async def publish_review(
    github: GitHubClient,
    pr: PullRequest,
    result: ReviewResult,
    formatter: ReviewFormatter | None = None,
    retry: RetryableCall | None = None,
) -> None:
    """Post the summary comment and one review with the placed comments.

    Args:
        github: GitHub client
        pr: Pull request to comment on
        result: Review result to publish
        formatter: Formatter for the summary body
        retry: Retry wrapper for GitHub calls
    """
    formatter = formatter or ReviewFormatter()
    retry = retry or RetryableCall()

    summary = formatter.format_summary(result)
    await _github_call(retry, "post summary comment", github.post_summary_comment, pr, summary)

    if result.plan.placed:
        await _github_call(
            retry,
            "post review",
            github.post_review,
            pr,
            result.plan.placed,
            body=f"{len(result.plan.placed)} inline comments from review `{result.id}`",
        )
    else:
        logger.info("No inline comments to post")
