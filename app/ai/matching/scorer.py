"""
Project / Opportunity Match Scorer

Heuristic 0-100 compatibility score between the AI analysis of a
project and the AI analysis of a funding opportunity.

Contributions, applied in this order:

    keyword overlap       5 per shared keyword, capped at 30
    focus area overlap    6 per shared focus area, capped at 25
    innovation alignment  flat 10
    scale alignment       flat 8
    confidence blend      mean confidence * 10

The function is pure: same inputs give the same score and the same
factor list. Analyses come from an LLM, so every field is read
defensively; a malformed field counts as empty rather than raising.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

logger = logging.getLogger(__name__)

# ============================================================
# Weights
# ============================================================
KEYWORD_POINTS = 5
KEYWORD_CAP = 30
FOCUS_POINTS = 6
FOCUS_CAP = 25
INNOVATION_BONUS = 10
SCALE_BONUS = 8
CONFIDENCE_WEIGHT = 10
DEFAULT_CONFIDENCE = 0.5
MAX_SCORE = 100


@dataclass
class MatchResult:
    """Outcome of scoring one project against one opportunity."""
    score: int = 0
    factors: List[str] = field(default_factory=list)


# ============================================================
# Field readers
# ============================================================

def _string_list(value: Any) -> List[str]:
    """Strings from a list-like field; anything else reads as empty."""
    if not isinstance(value, (list, tuple)):
        return []
    return [item for item in value if isinstance(item, str)]


def _lowered_set(value: Any) -> Set[str]:
    return {item.lower() for item in _string_list(value)}


def _overlap(left: Any, right: Any) -> int:
    """Size of the case-insensitive set intersection of two list fields."""
    return len(_lowered_set(left) & _lowered_set(right))


def _contained_in_any(needle: Any, haystack: Any) -> bool:
    """True if lower-cased `needle` is a substring of any `haystack` entry."""
    if not isinstance(needle, str) or not needle.strip():
        return False
    needle = needle.lower()
    return any(needle in item.lower() for item in _string_list(haystack))


def _confidence(value: Any) -> float:
    """Parse a confidence score, falling back to 0.5 when unusable."""
    if value is None or isinstance(value, bool):
        return DEFAULT_CONFIDENCE
    try:
        number = float(value)
    except (TypeError, ValueError):
        return DEFAULT_CONFIDENCE
    if not math.isfinite(number):
        return DEFAULT_CONFIDENCE
    return number


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# ============================================================
# Scoring
# ============================================================

def score_match(
    project_analysis: Optional[Mapping[str, Any]],
    opportunity_analysis: Optional[Mapping[str, Any]],
) -> MatchResult:
    """
    Score how well a project fits a funding opportunity.

    Args:
        project_analysis: ProjectAnalysis mapping, or None
        opportunity_analysis: OpportunityAnalysis mapping, or None

    Returns:
        MatchResult with an int score in [0, 100] and the contributing
        factors in application order. Either input missing gives a
        zero score and no factors.
    """
    if project_analysis is None or opportunity_analysis is None:
        return MatchResult()

    pa = project_analysis
    oa = opportunity_analysis
    score = 0.0
    factors: List[str] = []

    keyword_overlap = _overlap(pa.get("alignment_keywords"), oa.get("keyword_indicators"))
    if keyword_overlap:
        contribution = min(KEYWORD_CAP, keyword_overlap * KEYWORD_POINTS)
        score += contribution
        factors.append(f"Keyword overlap {keyword_overlap} (+{contribution})")

    focus_overlap = _overlap(pa.get("focus_areas"), oa.get("funding_priorities"))
    if focus_overlap:
        contribution = min(FOCUS_CAP, focus_overlap * FOCUS_POINTS)
        score += contribution
        factors.append(f"Focus area overlap {focus_overlap} (+{contribution})")

    if _contained_in_any(pa.get("innovation_level"), oa.get("success_factors")):
        score += INNOVATION_BONUS
        factors.append(f"Innovation alignment (+{INNOVATION_BONUS})")

    if _contained_in_any(pa.get("project_scale"), oa.get("project_characteristics")):
        score += SCALE_BONUS
        factors.append(f"Scale alignment (+{SCALE_BONUS})")

    # Each side defaults on its own before averaging
    confidence = (
        _confidence(pa.get("confidence_score")) + _confidence(oa.get("confidence_score"))
    ) / 2
    score += confidence * CONFIDENCE_WEIGHT

    final = max(0, min(MAX_SCORE, _round_half_up(score)))
    return MatchResult(score=final, factors=factors)


# ============================================================
# Ranking
# ============================================================

def rank_opportunities(
    project_analysis: Optional[Mapping[str, Any]],
    opportunities: Iterable[Tuple[str, Optional[Mapping[str, Any]]]],
    min_score: int = 0,
    limit: Optional[int] = None,
) -> List[Tuple[str, MatchResult]]:
    """
    Score a project against many opportunities.

    Args:
        project_analysis: ProjectAnalysis mapping, or None
        opportunities: (opportunity_id, OpportunityAnalysis) pairs
        min_score: Drop results scoring below this
        limit: Keep at most this many results

    Returns:
        (opportunity_id, MatchResult) pairs, best first. Equal scores
        keep their input order.
    """
    scored: Sequence[Tuple[str, MatchResult]] = [
        (opportunity_id, score_match(project_analysis, analysis))
        for opportunity_id, analysis in opportunities
    ]
    ranked = sorted(
        (item for item in scored if item[1].score >= min_score),
        key=lambda item: item[1].score,
        reverse=True,
    )
    logger.debug(f"Ranked {len(ranked)} of {len(scored)} opportunities (min_score={min_score})")

    if limit is not None:
        ranked = ranked[:limit]
    return ranked
