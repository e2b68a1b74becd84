"""Tests for the GitHub client."""

from unittest.mock import MagicMock, patch

import pytest
from github.GithubException import GithubException, RateLimitExceededException, UnknownObjectException


def _client():
    from pr_review_bot.github.client import GitHubClient

    with patch("pr_review_bot.github.client.Github") as mock_github:
        client = GitHubClient("token")
    return client, mock_github.return_value


def _file(filename, status="modified", patch="@@ -1 +1 @@\n-a\n+b"):
    file = MagicMock()
    file.filename = filename
    file.status = status
    file.patch = patch
    return file


class TestGitHubClient:
    """Tests for GitHubClient."""

    def test_enterprise_base_url(self):
        """Test the base URL is forwarded for GitHub Enterprise."""
        from pr_review_bot.github.client import GitHubClient

        with patch("pr_review_bot.github.client.Github") as mock_github:
            GitHubClient("token", base_url="https://ghe.example.com/api/v3")

        mock_github.assert_called_once_with("token", base_url="https://ghe.example.com/api/v3")

    def test_get_changed_files(self):
        """Test patches and head contents are collected per file."""
        client, _ = _client()

        pr = MagicMock()
        pr.number = 3
        pr.head.sha = "abc1234def"
        pr.get_files.return_value = [
            _file("src/app.py"),
            _file("old.py", status="removed", patch="@@ -1 +0,0 @@\n-x"),
            _file("logo.png", patch=None),
        ]

        text = MagicMock()
        text.decoded_content = b"print('hi')\n"
        binary = MagicMock()
        binary.decoded_content = b"\x89PNG\xff\xfe"
        repo = pr.base.repo
        repo.get_contents.side_effect = [text, binary]

        files = client.get_changed_files(pr)

        assert [(f.path, f.status) for f in files] == [
            ("src/app.py", "modified"),
            ("old.py", "removed"),
            ("logo.png", "modified"),
        ]
        assert files[0].content == "print('hi')\n"
        assert files[1].content is None
        assert files[2].content is None
        assert files[2].patch is None
        repo.get_contents.assert_any_call("src/app.py", ref="abc1234def")
        assert repo.get_contents.call_count == 2

    def test_missing_content(self):
        """Test that a missing blob yields no content."""
        client, _ = _client()

        pr = MagicMock()
        pr.head.sha = "abc1234"
        pr.get_files.return_value = [_file("gone.py")]
        pr.base.repo.get_contents.side_effect = UnknownObjectException(404, {"message": "Not Found"}, None)

        assert client.get_changed_files(pr)[0].content is None

    def test_find_pull_request_for_branch(self):
        """Test branch lookup filters by owner:branch."""
        client, gh = _client()

        pr = MagicMock()
        pr.number = 12
        repo = gh.get_repo.return_value
        repo.get_pulls.return_value = iter([pr])

        assert client.find_pull_request_for_branch("acme/widgets", "feature/x") is pr
        repo.get_pulls.assert_called_once_with(state="open", head="acme:feature/x")

    def test_find_pull_request_none(self):
        """Test that no open PR yields None."""
        client, gh = _client()
        gh.get_repo.return_value.get_pulls.return_value = iter([])

        assert client.find_pull_request_for_branch("acme/widgets", "nope") is None

    def test_post_review_payload(self):
        """Test inline comments are sent with GitHub diff positions."""
        from pr_review_bot.models.comments import CommentTarget

        client, _ = _client()
        pr = MagicMock()

        client.post_review(
            pr,
            [CommentTarget("a.py", 5, "body one", "i1"), CommentTarget("b.py", 2, "body two", "i2")],
            body="2 inline comments",
        )

        pr.create_review.assert_called_once_with(
            body="2 inline comments",
            event="COMMENT",
            comments=[
                {"path": "a.py", "position": 4, "body": "body one"},
                {"path": "b.py", "position": 1, "body": "body two"},
            ],
        )

    def test_posted_position_counts_from_line_below_hunk_header(self):
        """Test a resolved position lands on the same line GitHub shows."""
        from pr_review_bot.diff.parser import DiffParser
        from pr_review_bot.diff.resolver import PositionResolver
        from pr_review_bot.models.comments import CommentTarget

        file_diff = DiffParser().parse("@@ -1,1 +1,2 @@\n a\n+b", path="a.py")
        position = PositionResolver().resolve(file_diff, new_line=2)
        assert position == 3

        client, _ = _client()
        pr = MagicMock()
        client.post_review(pr, [CommentTarget("a.py", position, "on b")])

        assert pr.create_review.call_args.kwargs["comments"] == [{"path": "a.py", "position": 2, "body": "on b"}]

    def test_pending_review_falls_back_to_comment(self):
        """Test the issue comment fallback for a 422 pending review."""
        from pr_review_bot.models.comments import CommentTarget

        client, _ = _client()
        pr = MagicMock()
        pr.create_review.side_effect = GithubException(
            422, {"message": "Validation Failed", "errors": ["User can only have one pending review per pull request"]}
        )

        client.post_review(pr, [CommentTarget("a.py", 5, "careful here")], body="summary")

        pr.create_issue_comment.assert_called_once()
        body = pr.create_issue_comment.call_args.args[0]
        assert "pending review" in body
        assert "**`a.py`** (diff position 4)" in body
        assert "careful here" in body

    def test_other_errors_propagate(self):
        """Test that unrelated GitHub errors are raised."""
        client, _ = _client()
        pr = MagicMock()
        pr.create_review.side_effect = GithubException(500, {"message": "boom"})

        with pytest.raises(GithubException):
            client.post_review(pr, [])

    def test_rate_limit_translated(self):
        """Test that GitHub rate limits become RateLimitError."""
        from pr_review_bot.errors import RateLimitError
        from pr_review_bot.retry import is_rate_limited

        client, gh = _client()
        gh.get_repo.side_effect = RateLimitExceededException(403, {"message": "API rate limit exceeded"})

        with pytest.raises(RateLimitError) as exc_info:
            client.get_repo("acme/widgets")

        assert is_rate_limited(exc_info.value)

    def test_secondary_rate_limit_429(self):
        """Test that a 429 GithubException is translated too."""
        from pr_review_bot.errors import RateLimitError

        client, gh = _client()
        gh.get_repo.return_value.get_pull.side_effect = GithubException(429, {"message": "slow down"})

        with pytest.raises(RateLimitError):
            client.get_pull_request("acme/widgets", 1)

    def test_post_summary_comment(self):
        """Test the summary is posted as an issue comment."""
        client, _ = _client()
        pr = MagicMock()

        client.post_summary_comment(pr, "## Summary")

        pr.create_issue_comment.assert_called_once_with("## Summary")
