import uuid
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Request, Response, status
from services.scoring_service.ai_assist import AIAssistAdapter
from services.scoring_service.catalog import labels_for, resolve_category
from services.scoring_service.coach_ranking import CoachRankingAdvisor
from services.scoring_service.eligibility import CoachEligibilityResolver
from services.scoring_service.errors import NotFound
from services.scoring_service.models import ProgramCategory
from services.scoring_service.records import ComplexityScoreManager
from services.scoring_service.schemas import (
    AIScoringRequest,
    AISuggestion,
    CoachRankingResponse,
    ComplexityScoreCalculateRequest,
    ComplexityScoreCalculation,
    ComplexityScoreRecord,
    ComplexityScoreSubmission,
    DimensionLabelsResponse,
    EligibleCoach,
    ReviewRequest,
    ScoringStateResponse,
)

router = APIRouter(tags=["scoring"])


def get_records(request: Request) -> ComplexityScoreManager:
    return request.app.state.records


def get_resolver(request: Request) -> CoachEligibilityResolver:
    return request.app.state.eligibility


def get_ai_assist(request: Request) -> AIAssistAdapter:
    return request.app.state.ai_assist


def get_ranking(request: Request) -> CoachRankingAdvisor:
    return request.app.state.ranking


# ============================================================================
# DIMENSIONS & PREVIEW
# ============================================================================


@router.get("/dimensions/{category}", response_model=DimensionLabelsResponse)
async def get_scoring_dimensions(category: str):
    """
    Get the dimension labels for a specific program category.
    Used by the frontend to show the right labels on the scoring form.
    """
    resolved = resolve_category(category)
    return DimensionLabelsResponse(category=resolved, labels=list(labels_for(resolved)))


@router.post("/calculate", response_model=ComplexityScoreCalculation)
async def preview_complexity_score(
    body: ComplexityScoreCalculateRequest,
    records: ComplexityScoreManager = Depends(get_records),
):
    """
    Preview complexity score calculation without saving.
    Useful for testing scores before committing to a cohort.
    """
    return records.preview(body.category, body.dimension_scores)


# ============================================================================
# COHORT COMPLEXITY SCORES
# ============================================================================


@router.post(
    "/cohorts/{cohort_id}/complexity-score",
    response_model=ComplexityScoreRecord,
    status_code=status.HTTP_201_CREATED,
)
async def create_cohort_complexity_score(
    cohort_id: uuid.UUID,
    body: ComplexityScoreSubmission,
    records: ComplexityScoreManager = Depends(get_records),
):
    """Create complexity score for a cohort."""
    return await records.create(
        cohort_id, body.category, body.dimensions, scored_by_id=body.scored_by_id
    )


@router.get(
    "/cohorts/{cohort_id}/complexity-score", response_model=ComplexityScoreRecord
)
async def get_cohort_complexity_score(
    cohort_id: uuid.UUID,
    records: ComplexityScoreManager = Depends(get_records),
):
    return await records.get(cohort_id)


@router.put(
    "/cohorts/{cohort_id}/complexity-score", response_model=ComplexityScoreRecord
)
async def update_cohort_complexity_score(
    cohort_id: uuid.UUID,
    body: ComplexityScoreSubmission,
    records: ComplexityScoreManager = Depends(get_records),
):
    """
    Replace a cohort's complexity score.

    All seven dimensions must be sent; rationales left out are cleared.
    """
    return await records.update(cohort_id, body.category, body.dimensions)


@router.delete(
    "/cohorts/{cohort_id}/complexity-score",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_cohort_complexity_score(
    cohort_id: uuid.UUID,
    records: ComplexityScoreManager = Depends(get_records),
):
    await records.delete(cohort_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/cohorts/{cohort_id}/complexity-score/review",
    response_model=ComplexityScoreRecord,
)
async def mark_complexity_score_reviewed(
    cohort_id: uuid.UUID,
    body: ReviewRequest,
    records: ComplexityScoreManager = Depends(get_records),
):
    """Mark a complexity score as reviewed (for audit purposes)."""
    return await records.mark_reviewed(cohort_id, body.reviewer_id)


@router.get("/cohorts/{cohort_id}/state", response_model=ScoringStateResponse)
async def get_cohort_scoring_state(
    cohort_id: uuid.UUID,
    records: ComplexityScoreManager = Depends(get_records),
):
    return ScoringStateResponse(
        cohort_id=cohort_id, state=await records.state_of(cohort_id)
    )


# ============================================================================
# ELIGIBILITY
# ============================================================================


@router.get(
    "/cohorts/{cohort_id}/eligible-coaches", response_model=List[EligibleCoach]
)
async def get_eligible_coaches_for_cohort(
    cohort_id: uuid.UUID,
    resolver: CoachEligibilityResolver = Depends(get_resolver),
):
    """
    Get coaches eligible to lead this cohort based on its complexity score.

    Returns coaches whose grade in the cohort's program category
    meets or exceeds the required grade.
    """
    return await resolver.eligible_coaches(cohort_id)


# ============================================================================
# AI-ASSISTED SCORING
# ============================================================================


@router.post("/cohorts/{cohort_id}/ai-score", response_model=AISuggestion)
async def ai_score_cohort(
    cohort_id: uuid.UUID,
    body: Optional[AIScoringRequest] = Body(None),
    records: ComplexityScoreManager = Depends(get_records),
    ai_assist: AIAssistAdapter = Depends(get_ai_assist),
):
    """Get AI-suggested dimension scores for a cohort.

    The suggestion is never saved. The admin reviews it, adjusts, and
    submits the scores through the complexity-score endpoints.
    """
    # Determine the category (explicit request > existing score > fallback)
    category = body.category if body else None
    if category is None:
        try:
            category = (await records.get(cohort_id)).category
        except NotFound:
            category = ProgramCategory.LEARN_TO_SWIM

    return await ai_assist.suggest_dimensions(cohort_id, category, body)


@router.post("/cohorts/{cohort_id}/ai-suggest-coach", response_model=CoachRankingResponse)
async def ai_suggest_coach(
    cohort_id: uuid.UUID,
    ranking: CoachRankingAdvisor = Depends(get_ranking),
):
    """Get AI-ranked coach suggestions for a scored cohort.

    Only coaches that are already eligible are ranked.
    """
    suggestions = await ranking.rank_coaches(cohort_id)
    return CoachRankingResponse(cohort_id=cohort_id, suggestions=suggestions)
