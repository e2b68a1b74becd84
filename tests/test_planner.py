"""Tests for inline comment planning."""

from pr_review_bot.models.comments import UnplacedReason
from pr_review_bot.models.issues import Severity


def _aggregate(issues):
    from pr_review_bot.orchestrator.aggregator import IssueAggregator

    return IssueAggregator().aggregate(issues)


def _diffs(bodies):
    from pr_review_bot.diff.parser import DiffParser

    return DiffParser().parse_many(bodies)


class TestCommentPlanner:
    """Tests for CommentPlanner."""

    def test_places_issue_on_added_line(self, make_issue, simple_diff):
        """Test that new line 3 lands on position 5."""
        from pr_review_bot.orchestrator.planner import CommentPlanner

        aggregated = _aggregate([make_issue(file_path="a.ts", start_line=3)])
        plan = CommentPlanner().plan(aggregated, _diffs({"a.ts": simple_diff}))

        assert len(plan.placed) == 1
        target = plan.placed[0]
        assert (target.file_path, target.diff_position) == ("a.ts", 5)
        assert target.issue_id == aggregated[0].id
        assert aggregated[0].title in target.body
        assert plan.unplaced == []

    def test_every_issue_is_accounted_for(self, make_issue, simple_diff):
        """Test that placed plus unplaced covers the input exactly."""
        from pr_review_bot.orchestrator.planner import CommentPlanner

        aggregated = _aggregate(
            [
                make_issue(file_path="a.ts", start_line=2),
                make_issue(file_path="a.ts", start_line=50),
                make_issue(file_path="a.ts", start_line=None, title="File level"),
                make_issue(file_path="missing.ts", start_line=1),
            ]
        )
        plan = CommentPlanner().plan(aggregated, _diffs({"a.ts": simple_diff}))

        placed_ids = {t.issue_id for t in plan.placed}
        unplaced_ids = {a.id for a in plan.unplaced}
        assert placed_ids | unplaced_ids == {a.id for a in aggregated}
        assert not placed_ids & unplaced_ids

    def test_unplaced_reasons(self, make_issue, simple_diff):
        """Test the reason recorded for each kind of unplaceable issue."""
        from pr_review_bot.orchestrator.planner import CommentPlanner

        outside = make_issue(file_path="a.ts", start_line=50, title="Outside")
        lineless = make_issue(file_path="a.ts", start_line=None, title="Lineless")
        no_diff = make_issue(file_path="missing.ts", start_line=1, title="No diff")
        broken = make_issue(file_path="b.ts", start_line=1, title="Broken")

        aggregated = _aggregate([outside, lineless, no_diff, broken])
        plan = CommentPlanner().plan(aggregated, _diffs({"a.ts": simple_diff, "b.ts": "@@ bad @@\n+x"}))

        reasons = {a.title: plan.reason_for(a) for a in plan.unplaced}
        assert reasons == {
            "Outside": UnplacedReason.LINE_NOT_IN_DIFF,
            "Lineless": UnplacedReason.NO_LINE,
            "No diff": UnplacedReason.NO_DIFF,
            "Broken": UnplacedReason.MALFORMED_DIFF,
        }
        assert plan.placed == []

    def test_deleted_file_uses_old_lines(self, make_issue, deleted_file_diff):
        """Test the old-line fallback for deletion-only diffs."""
        from pr_review_bot.orchestrator.planner import CommentPlanner

        aggregated = _aggregate([make_issue(file_path="gone.py", start_line=3)])
        plan = CommentPlanner().plan(aggregated, _diffs({"gone.py": deleted_file_diff}))

        assert [t.diff_position for t in plan.placed] == [4]

    def test_no_old_line_fallback_for_regular_diff(self, make_issue):
        """Test that a line only present on the old side is not placed."""
        from pr_review_bot.orchestrator.planner import CommentPlanner

        diff = "@@ -1,6 +1,2 @@\n keep\n-a\n-b\n-c\n-d\n+e"
        aggregated = _aggregate([make_issue(file_path="a.ts", start_line=5)])
        plan = CommentPlanner().plan(aggregated, _diffs({"a.ts": diff}))

        assert plan.placed == []
        assert plan.reason_for(aggregated[0]) == UnplacedReason.LINE_NOT_IN_DIFF

    def test_comment_limit(self, make_issue, multi_hunk_diff):
        """Test that the overflow beyond max_comments is unplaced."""
        from pr_review_bot.orchestrator.planner import CommentPlanner

        aggregated = _aggregate(
            [
                make_issue(file_path="m.py", start_line=2, severity=Severity.CRITICAL),
                make_issue(file_path="m.py", start_line=21),
                make_issue(file_path="m.py", start_line=22, severity=Severity.INFO),
            ]
        )
        plan = CommentPlanner(max_comments=2).plan(aggregated, _diffs({"m.py": multi_hunk_diff}))

        assert [t.diff_position for t in plan.placed] == [4, 8]
        assert len(plan.unplaced) == 1
        assert plan.reason_for(plan.unplaced[0]) == UnplacedReason.COMMENT_LIMIT

    def test_custom_renderer(self, make_issue, simple_diff):
        """Test that the body comes from the injected renderer."""
        from pr_review_bot.orchestrator.planner import CommentPlanner

        aggregated = _aggregate([make_issue(file_path="a.ts", start_line=1)])
        planner = CommentPlanner(render=lambda issue: f"body for {issue.id}")
        plan = planner.plan(aggregated, _diffs({"a.ts": simple_diff}))

        assert plan.placed[0].body == f"body for {aggregated[0].id}"

    def test_default_body_mentions_analyzers(self, make_issue, simple_diff):
        """Test the default body lists the contributing analyzers."""
        from pr_review_bot.orchestrator.planner import CommentPlanner

        aggregated = _aggregate(
            [
                make_issue(file_path="a.ts", start_line=2, agent="bug-detection", suggested_fix="use ==="),
                make_issue(file_path="a.ts", start_line=2, agent="bug-detection-ai"),
            ]
        )
        plan = CommentPlanner().plan(aggregated, _diffs({"a.ts": simple_diff}))

        body = plan.placed[0].body
        assert "`bug-detection`" in body
        assert "`bug-detection-ai`" in body
        assert "use ===" in body
