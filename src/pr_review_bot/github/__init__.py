"""GitHub integration for PR Review Bot."""

from pr_review_bot.github.client import GitHubClient
from pr_review_bot.github.formatter import ReviewFormatter, format_review_as_json

__all__ = [
    "GitHubClient",
    "ReviewFormatter",
    "format_review_as_json",
]
