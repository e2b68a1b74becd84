"""Orchestration, aggregation and comment planning."""

from pr_review_bot.orchestrator.aggregator import IssueAggregator
from pr_review_bot.orchestrator.orchestrator import (
    AnalysisOutcome,
    OrchestratorConfig,
    ReviewOrchestrator,
)
from pr_review_bot.orchestrator.planner import CommentPlanner

__all__ = [
    "AnalysisOutcome",
    "CommentPlanner",
    "IssueAggregator",
    "OrchestratorConfig",
    "ReviewOrchestrator",
]
