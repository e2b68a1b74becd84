"""Unified diff parsing and comment position resolution."""

from pr_review_bot.diff.parser import DiffParser, parse_hunk_header, split_patch_set
from pr_review_bot.diff.resolver import PositionResolver

__all__ = [
    "DiffParser",
    "PositionResolver",
    "parse_hunk_header",
    "split_patch_set",
]
