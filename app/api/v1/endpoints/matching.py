from fastapi import APIRouter, Depends

from app.ai.matching import score_match, rank_opportunities
from app.api.deps import get_current_user
from app.core.config import settings
from app.core.exceptions import ValidationError
from app.models.user import User
from app.schemas.matching import (
    ScoreMatchRequest,
    RankOpportunitiesRequest,
    MatchResultResponse,
    RankedOpportunity,
    RankOpportunitiesResponse,
    analysis_payload,
)

# ============================================================
# Router Setup
# ============================================================

router = APIRouter(tags=["Matching"])


# ============================================================
# Score One Pair
# ============================================================

@router.post("/score", response_model=MatchResultResponse)
async def score_single_match(
    request_data: ScoreMatchRequest,
    current_user: User = Depends(get_current_user),
):
    """
    Score a project analysis against one opportunity analysis.

    A missing analysis on either side scores 0 with no factors.
    """
    result = score_match(
        analysis_payload(request_data.project_analysis),
        analysis_payload(request_data.opportunity_analysis),
    )
    return MatchResultResponse(score=result.score, factors=result.factors)


# ============================================================
# Rank Many Opportunities
# ============================================================

@router.post("/rank", response_model=RankOpportunitiesResponse)
async def rank_matches(
    request_data: RankOpportunitiesRequest,
    current_user: User = Depends(get_current_user),
):
    """
    Rank opportunities for a project, best match first.

    - **min_score**: drop anything scoring lower
    - **limit**: return at most this many
    """
    if len(request_data.opportunities) > settings.MATCH_RANK_MAX_OPPORTUNITIES:
        raise ValidationError(
            f"At most {settings.MATCH_RANK_MAX_OPPORTUNITIES} opportunities per request"
        )

    ranked = rank_opportunities(
        analysis_payload(request_data.project_analysis),
        [
            (candidate.id, analysis_payload(candidate.analysis))
            for candidate in request_data.opportunities
        ],
        min_score=request_data.min_score,
        limit=request_data.limit,
    )

    return RankOpportunitiesResponse(
        results=[
            RankedOpportunity(
                opportunity_id=opportunity_id,
                score=result.score,
                factors=result.factors,
            )
            for opportunity_id, result in ranked
        ],
        total_considered=len(request_data.opportunities),
    )
