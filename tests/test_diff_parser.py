"""Tests for unified diff parsing."""

import pytest


class TestParseHunkHeader:
    """Tests for hunk header parsing."""

    def test_parses_full_header(self):
        """Test parsing a header with counts and section text."""
        from pr_review_bot.diff.parser import parse_hunk_header

        hunk = parse_hunk_header("@@ -10,6 +10,12 @@ def authenticate():")

        assert (hunk.old_start, hunk.old_lines, hunk.new_start, hunk.new_lines) == (10, 6, 10, 12)
        assert hunk.section == "def authenticate():"

    def test_omitted_counts_default_to_one(self):
        """Test that a missing count means one line."""
        from pr_review_bot.diff.parser import parse_hunk_header

        hunk = parse_hunk_header("@@ -5 +7 @@")

        assert hunk.old_lines == 1
        assert hunk.new_lines == 1

    def test_rejects_garbage(self):
        """Test that non-numeric headers raise."""
        from pr_review_bot.diff.parser import MalformedHunkError, parse_hunk_header

        with pytest.raises(MalformedHunkError):
            parse_hunk_header("@@ -a,b +c,d @@")


class TestDiffParser:
    """Tests for DiffParser."""

    def test_example_positions(self, simple_diff):
        """Test the documented example: header at 1, lines at 2..6."""
        from pr_review_bot.diff.parser import DiffParser
        from pr_review_bot.models.diff import LineRole

        file_diff = DiffParser().parse(simple_diff, path="example.txt")

        assert [line.diff_position for line in file_diff.lines] == [1, 2, 3, 4, 5, 6]
        assert [line.role for line in file_diff.lines] == [
            LineRole.HUNK_HEADER,
            LineRole.CONTEXT,
            LineRole.REMOVED,
            LineRole.ADDED,
            LineRole.ADDED,
            LineRole.CONTEXT,
        ]

        context = file_diff.lines[1]
        assert (context.old_line_number, context.new_line_number) == (1, 1)
        removed = file_diff.lines[2]
        assert (removed.old_line_number, removed.new_line_number) == (2, None)
        assert removed.text == "line2"
        added = file_diff.lines[4]
        assert (added.old_line_number, added.new_line_number) == (None, 3)
        last = file_diff.lines[5]
        assert (last.old_line_number, last.new_line_number) == (3, 4)

    def test_positions_are_contiguous_from_one(self, multi_hunk_diff):
        """Test that positions form 1..N with no gaps."""
        from pr_review_bot.diff.parser import DiffParser

        file_diff = DiffParser().parse(multi_hunk_diff)

        positions = [line.diff_position for line in file_diff.lines]
        assert positions == list(range(1, len(positions) + 1))

    def test_positions_do_not_reset_between_hunks(self, multi_hunk_diff):
        """Test that the second hunk continues counting."""
        from pr_review_bot.diff.parser import DiffParser

        file_diff = DiffParser().parse(multi_hunk_diff)

        assert [h.diff_position for h in file_diff.hunks] == [1, 6]
        assert file_diff.new_line_index[21] == 8
        assert file_diff.new_line_index[22] == 9
        assert file_diff.old_line_index[21] == 9

    def test_malformed_header_yields_unplaceable_diff(self):
        """Test that a bad hunk header flags the diff instead of raising."""
        from pr_review_bot.diff.parser import DiffParser

        file_diff = DiffParser().parse("@@ -x +y @@\n+line", path="bad.py")

        assert file_diff.malformed
        assert not file_diff.is_placeable
        assert file_diff.lines == ()
        assert "Malformed hunk header" in file_diff.error

    def test_malformed_second_hunk_discards_whole_file(self, simple_diff):
        """Test that one bad header makes the whole file unplaceable."""
        from pr_review_bot.diff.parser import DiffParser

        file_diff = DiffParser().parse(simple_diff + "\n@@ broken @@\n+x")

        assert file_diff.malformed
        assert file_diff.lines == ()

    def test_no_newline_marker_consumes_position(self):
        """Test the backslash marker takes a position without a DiffLine."""
        from pr_review_bot.diff.parser import DiffParser

        diff = "@@ -1 +1 @@\n-old\n\\ No newline at end of file\n+new"
        file_diff = DiffParser().parse(diff)

        assert [line.diff_position for line in file_diff.lines] == [1, 2, 4]
        assert file_diff.new_line_index[1] == 4

    def test_preamble_is_skipped(self):
        """Test that git headers before the first hunk take no position."""
        from pr_review_bot.diff.parser import DiffParser

        diff = (
            "diff --git a/x.py b/x.py\n"
            "index 1..2 100644\n"
            "--- a/x.py\n"
            "+++ b/x.py\n"
            "@@ -1 +1,2 @@\n"
            " keep\n"
            "+added"
        )
        file_diff = DiffParser().parse(diff)

        assert file_diff.lines[0].diff_position == 1
        assert file_diff.new_line_index[2] == 3

    def test_empty_line_in_hunk_is_context(self):
        """Test that a blank line inside a hunk counts as context."""
        from pr_review_bot.diff.parser import DiffParser
        from pr_review_bot.models.diff import LineRole

        file_diff = DiffParser().parse("@@ -1,3 +1,3 @@\n a\n\n b")

        assert file_diff.lines[2].role == LineRole.CONTEXT
        assert file_diff.new_line_index[3] == 4

    def test_empty_diff(self):
        """Test that an empty body yields an empty, non-malformed diff."""
        from pr_review_bot.diff.parser import DiffParser

        file_diff = DiffParser().parse("", path="x.py")

        assert file_diff.lines == ()
        assert not file_diff.malformed
        assert not file_diff.is_placeable

    def test_deletion_only_diff(self, deleted_file_diff):
        """Test that a deleted file is recognized."""
        from pr_review_bot.diff.parser import DiffParser

        file_diff = DiffParser().parse(deleted_file_diff)

        assert file_diff.is_deletion
        assert file_diff.new_line_index == {}
        assert file_diff.old_line_index == {1: 2, 2: 3, 3: 4}

    def test_parse_many_handles_missing_patch(self, simple_diff):
        """Test that binary files (no patch) get an empty diff."""
        from pr_review_bot.diff.parser import DiffParser

        diffs = DiffParser().parse_many({"a.txt": simple_diff, "logo.png": None})

        assert list(diffs) == ["a.txt", "logo.png"]
        assert diffs["a.txt"].is_placeable
        assert diffs["logo.png"].lines == ()
        assert not diffs["logo.png"].malformed


class TestSplitPatchSet:
    """Tests for splitting multi-file diffs."""

    def test_splits_files(self, patch_set):
        """Test modified, deleted and added files are separated."""
        from pr_review_bot.diff.parser import split_patch_set

        bodies = split_patch_set(patch_set)

        assert list(bodies) == ["auth/login.py", "old/legacy.py", "docs/new.md"]
        for body in bodies.values():
            assert body.startswith("@@")
        assert "+API_KEY" in bodies["auth/login.py"]
        assert "diff --git" not in bodies["auth/login.py"]
        assert bodies["old/legacy.py"].endswith("-    pass")

    def test_split_bodies_parse(self, patch_set):
        """Test that each split body parses with positions from 1."""
        from pr_review_bot.diff.parser import DiffParser, split_patch_set

        diffs = DiffParser().parse_many(split_patch_set(patch_set))

        assert diffs["auth/login.py"].new_line_index[13] == 5
        assert diffs["old/legacy.py"].is_deletion
        assert diffs["docs/new.md"].new_line_index == {1: 2, 2: 3}
