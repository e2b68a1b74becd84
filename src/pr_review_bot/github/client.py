"""GitHub API client for PR operations."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from github import Github
from github.GithubException import GithubException, RateLimitExceededException, UnknownObjectException
from github.PullRequest import PullRequest
from github.Repository import Repository

from pr_review_bot.errors import RateLimitError
from pr_review_bot.models.comments import CommentTarget
from pr_review_bot.models.review import ChangedFile

logger = logging.getLogger(__name__)


def github_position(diff_position: int) -> int:
    """Convert a diff position to the one GitHub's review API expects.

    Internal positions count the first hunk header as 1; GitHub starts
    counting at the line just below it.
    """
    return diff_position - 1


@contextmanager
def _rate_limit_errors() -> Iterator[None]:
    """Translate GitHub rate limiting into RateLimitError."""
    try:
        yield
    except RateLimitExceededException as e:
        raise RateLimitError(f"GitHub API rate limit exceeded: {e.data}", status=e.status) from e
    except GithubException as e:
        if e.status == 429:
            raise RateLimitError(f"GitHub API rate limit exceeded: {e.data}") from e
        raise


class GitHubClient:
    """Client for GitHub API operations."""

    def __init__(self, token: str, base_url: str | None = None) -> None:
        """Initialize the GitHub client.

        Args:
            token: GitHub personal access token or app token
            base_url: Optional base URL for GitHub Enterprise
        """
        if base_url:
            self._gh = Github(token, base_url=base_url)
        else:
            self._gh = Github(token)

    def get_repo(self, repo_name: str) -> Repository:
        """Get a repository by name.

        Args:
            repo_name: Repository in "owner/name" format

        Returns:
            Repository object
        """
        with _rate_limit_errors():
            return self._gh.get_repo(repo_name)

    def get_pull_request(self, repo_name: str, pr_number: int) -> PullRequest:
        """Get a pull request.

        Args:
            repo_name: Repository in "owner/name" format
            pr_number: Pull request number

        Returns:
            PullRequest object
        """
        repo = self.get_repo(repo_name)
        with _rate_limit_errors():
            return repo.get_pull(pr_number)

    def find_pull_request_for_branch(self, repo_name: str, branch: str) -> PullRequest | None:
        """Find the open pull request whose head is ``branch``.

        Args:
            repo_name: Repository in "owner/name" format
            branch: Head branch name

        Returns:
            The first matching open PR, or None
        """
        repo = self.get_repo(repo_name)
        owner = repo_name.split("/")[0]
        with _rate_limit_errors():
            pulls = repo.get_pulls(state="open", head=f"{owner}:{branch}")
            for pr in pulls:
                logger.info(f"Found PR #{pr.number} for branch {branch}")
                return pr

        logger.warning(f"No open pull request found for branch {branch} in {repo_name}")
        return None

    def get_changed_files(self, pr: PullRequest, fetch_content: bool = True) -> list[ChangedFile]:
        """List the files changed by a PR with their patches.

        Args:
            pr: Pull request object
            fetch_content: Whether to download head contents of kept files

        Returns:
            Changed files in the order GitHub returns them
        """
        files: list[ChangedFile] = []
        repo = pr.base.repo

        with _rate_limit_errors():
            for file in pr.get_files():
                content = None
                if fetch_content and file.status != "removed":
                    content = self._get_content(repo, file.filename, pr.head.sha)
                files.append(
                    ChangedFile(
                        path=file.filename,
                        status=file.status,
                        patch=file.patch,
                        content=content,
                    )
                )

        logger.info(f"PR #{pr.number} changes {len(files)} files")
        return files

    def _get_content(self, repo: Repository, path: str, ref: str) -> str | None:
        try:
            content = repo.get_contents(path, ref=ref)
        except UnknownObjectException:
            logger.warning(f"Could not fetch {path} at {ref[:7]}")
            return None

        if isinstance(content, list):
            return None
        try:
            return content.decoded_content.decode("utf-8")
        except UnicodeDecodeError:
            logger.debug(f"Skipping binary file {path}")
            return None

    def post_review(
        self,
        pr: PullRequest,
        comments: list[CommentTarget],
        body: str = "",
        event: str = "COMMENT",
    ) -> None:
        """Post one review carrying all inline comments.

        Args:
            pr: Pull request to review
            comments: Planned inline comments
            body: Review body text
            event: Review event type (APPROVE, REQUEST_CHANGES, COMMENT)
        """
        logger.info(f"Posting review to PR #{pr.number} with {len(comments)} inline comments")

        review_comments = [
            {"path": c.file_path, "position": github_position(c.diff_position), "body": c.body}
            for c in comments
        ]

        try:
            with _rate_limit_errors():
                pr.create_review(body=body, event=event, comments=review_comments)
        except GithubException as e:
            if e.status == 422 and "pending review" in str(e.data).lower():
                logger.warning("User has a pending review, falling back to issue comment")
                self._post_as_comment(pr, body, comments)
            else:
                raise

    def _post_as_comment(self, pr: PullRequest, body: str, comments: list[CommentTarget]) -> None:
        """Post the review as a regular issue comment (fallback).

        Args:
            pr: Pull request object
            body: Review body
            comments: Inline comments that could not be posted
        """
        parts = ["⚠️ *Posted as comment because you have a pending review on this PR.*"]
        if body:
            parts.append(body)
        for comment in comments:
            position = github_position(comment.diff_position)
            parts.append(f"**`{comment.file_path}`** (diff position {position})\n\n{comment.body}")

        with _rate_limit_errors():
            pr.create_issue_comment("\n\n---\n\n".join(parts))
        logger.info(f"Posted review as issue comment on PR #{pr.number}")

    def post_summary_comment(self, pr: PullRequest, body: str) -> None:
        """Post the review summary as an issue comment.

        Args:
            pr: Pull request object
            body: Comment body
        """
        with _rate_limit_errors():
            pr.create_issue_comment(body)
        logger.info(f"Posted summary comment on PR #{pr.number}")
