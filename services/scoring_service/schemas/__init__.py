"""Scoring Service schemas package.

Re-exports all schemas so that routers and engine modules share a single
import namespace.
"""

from services.scoring_service.schemas.main import (  # noqa: F401
    AIDimensionSuggestion,
    AIScoringRequest,
    AISuggestion,
    CoachRankingResponse,
    CoachRankingSuggestion,
    ComplexityScoreCalculateRequest,
    ComplexityScoreCalculation,
    ComplexityScoreRecord,
    ComplexityScoreSubmission,
    DimensionLabelsResponse,
    DimensionScore,
    EligibleCoach,
    ReviewRequest,
    RosterCoach,
    ScoringDraft,
    ScoringStateResponse,
)
