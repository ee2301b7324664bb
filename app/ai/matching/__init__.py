"""
Matching Module

Heuristic scoring of projects against funding opportunities.

    from app.ai.matching import score_match

    result = score_match(project_analysis, opportunity_analysis)
    result.score, result.factors
"""

from app.ai.matching.scorer import (
    MatchResult,
    score_match,
    rank_opportunities,
)

__all__ = [
    "MatchResult",
    "score_match",
    "rank_opportunities",
]
