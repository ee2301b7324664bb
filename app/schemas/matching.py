from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional


# ============================================================
# AI analysis payloads
# ============================================================
# Both are produced by the document-analysis step. Fields are untyped:
# score_match reads a non-list as empty and an unparsable confidence as
# 0.5, so odd values must reach it instead of failing validation.

class ProjectAnalysis(BaseModel):
    """AI analysis of an applicant's project"""
    model_config = ConfigDict(extra="allow")

    alignment_keywords: Any = None
    focus_areas: Any = None
    innovation_level: Any = None
    project_scale: Any = None
    confidence_score: Any = None


class OpportunityAnalysis(BaseModel):
    """AI analysis of a funding opportunity"""
    model_config = ConfigDict(extra="allow")

    keyword_indicators: Any = None
    funding_priorities: Any = None
    success_factors: Any = None
    project_characteristics: Any = None
    confidence_score: Any = None


# ============================================================
# Requests
# ============================================================

class ScoreMatchRequest(BaseModel):
    project_analysis: Optional[ProjectAnalysis] = None
    opportunity_analysis: Optional[OpportunityAnalysis] = None


class OpportunityCandidate(BaseModel):
    id: str = Field(min_length=1, max_length=255)
    analysis: Optional[OpportunityAnalysis] = None


class RankOpportunitiesRequest(BaseModel):
    project_analysis: Optional[ProjectAnalysis] = None
    opportunities: List[OpportunityCandidate] = Field(default_factory=list)
    min_score: int = Field(default=0, ge=0, le=100)
    limit: Optional[int] = Field(default=None, ge=1)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "project_analysis": {
                    "alignment_keywords": ["solar", "microgrid"],
                    "focus_areas": ["Clean Energy"],
                    "innovation_level": "high",
                    "project_scale": "regional",
                    "confidence_score": 0.8
                },
                "opportunities": [
                    {
                        "id": "DE-FOA-0003001",
                        "analysis": {
                            "keyword_indicators": ["Solar", "storage"],
                            "funding_priorities": ["clean energy"],
                            "success_factors": ["High innovation potential"],
                            "project_characteristics": ["regional deployment"],
                            "confidence_score": 0.9
                        }
                    }
                ],
                "min_score": 20,
                "limit": 10
            }
        }
    )


# ============================================================
# Responses
# ============================================================

class MatchResultResponse(BaseModel):
    score: int = Field(ge=0, le=100)
    factors: List[str]


class RankedOpportunity(MatchResultResponse):
    opportunity_id: str


class RankOpportunitiesResponse(BaseModel):
    results: List[RankedOpportunity]
    total_considered: int


def analysis_payload(analysis: Optional[BaseModel]) -> Optional[Dict[str, Any]]:
    """Dump a parsed analysis back to the plain mapping the scorer reads."""
    return analysis.model_dump() if analysis is not None else None
