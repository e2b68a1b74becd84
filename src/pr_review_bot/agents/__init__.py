"""Analyzers for PR Review Bot."""

import logging

from pr_review_bot.agents.base import AIAnalyzer, Analyzer, PatternAnalyzer, PatternRule
from pr_review_bot.agents.bugs import BugDetectionAIAnalyzer, BugDetectionAnalyzer
from pr_review_bot.agents.optimization import OptimizationAIAnalyzer, OptimizationAnalyzer
from pr_review_bot.agents.security import SecurityAIAnalyzer, SecurityAnalyzer
from pr_review_bot.agents.style import StyleAnalyzer
from pr_review_bot.connectors.base import AIConnector

logger = logging.getLogger(__name__)

# Config name -> (pattern analyzer, AI analyzer or None)
ANALYZERS: dict[str, tuple[type[PatternAnalyzer], type[AIAnalyzer] | None]] = {
    "security": (SecurityAnalyzer, SecurityAIAnalyzer),
    "style": (StyleAnalyzer, None),
    "bug_detection": (BugDetectionAnalyzer, BugDetectionAIAnalyzer),
    "optimization": (OptimizationAnalyzer, OptimizationAIAnalyzer),
}


def build_analyzers(names: list[str], connector: AIConnector | None = None) -> list[Analyzer]:
    """Instantiate the analyzers enabled in configuration.

    Args:
        names: Enabled analyzer names, e.g. ``["security", "style"]``
        connector: AI connector; when None only pattern analyzers are built

    Returns:
        Analyzers in a stable order (pattern analyzer before its AI twin)

    Raises:
        ValueError: If a name is unknown
    """
    analyzers: list[Analyzer] = []
    for name in names:
        if name not in ANALYZERS:
            raise ValueError(f"Unknown analyzer: {name}. Available: {', '.join(ANALYZERS)}")
        pattern_cls, ai_cls = ANALYZERS[name]
        analyzers.append(pattern_cls())
        if connector is not None and ai_cls is not None:
            analyzers.append(ai_cls(connector))

    logger.debug(f"Built analyzers: {', '.join(a.name for a in analyzers)}")
    return analyzers


__all__ = [
    "ANALYZERS",
    "AIAnalyzer",
    "Analyzer",
    "BugDetectionAIAnalyzer",
    "BugDetectionAnalyzer",
    "OptimizationAIAnalyzer",
    "OptimizationAnalyzer",
    "PatternAnalyzer",
    "PatternRule",
    "SecurityAIAnalyzer",
    "SecurityAnalyzer",
    "StyleAnalyzer",
    "build_analyzers",
]
