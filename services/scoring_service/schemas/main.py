from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from libs.common.datetime_utils import ensure_utc
from pydantic import BaseModel, ConfigDict, Field, field_validator
from services.scoring_service.models import (
    CoachGrade,
    CohortComplexityScore,
    DraftSource,
    ProgramCategory,
    ScoringState,
)

# --- Dimension scores ---


class DimensionScore(BaseModel):
    """One dimension of a cohort assessment.

    Range checks live in the calculator so that a bad submission reports
    every offending index at once.
    """

    model_config = ConfigDict(frozen=True)

    index: int
    score: int
    rationale: Optional[str] = None


class ComplexityScoreCalculation(BaseModel):
    """Values derived from a set of dimension scores."""

    model_config = ConfigDict(frozen=True)

    total_score: int
    required_coach_grade: CoachGrade
    pay_band_min: int  # Percentage as integer (e.g., 45 = 45%)
    pay_band_max: int


# --- Committed records ---


class ComplexityScoreRecord(BaseModel):
    """A committed complexity score, detached from the database session."""

    model_config = ConfigDict(frozen=True)

    cohort_id: UUID
    category: ProgramCategory
    dimensions: List[DimensionScore]

    # Calculated fields
    total_score: int
    required_coach_grade: CoachGrade
    pay_band_min: int
    pay_band_max: int

    # Audit
    scored_by_id: Optional[UUID] = None
    reviewed_by_id: Optional[UUID] = None
    reviewed_at: Optional[datetime] = None
    version: int = 1

    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, row: CohortComplexityScore) -> "ComplexityScoreRecord":
        return cls(
            cohort_id=row.cohort_id,
            category=ProgramCategory(row.category),
            dimensions=[
                DimensionScore(index=i, score=score, rationale=rationale)
                for i, (score, rationale) in enumerate(
                    zip(row.get_scores(), row.get_rationales()), start=1
                )
            ],
            total_score=row.total_score,
            required_coach_grade=CoachGrade(row.required_coach_grade),
            pay_band_min=row.pay_band_min,
            pay_band_max=row.pay_band_max,
            scored_by_id=row.scored_by_id,
            reviewed_by_id=row.reviewed_by_id,
            reviewed_at=ensure_utc(row.reviewed_at),
            version=row.version,
            created_at=ensure_utc(row.created_at),
            updated_at=ensure_utc(row.updated_at),
        )

    @property
    def scores(self) -> list[int]:
        return [d.score for d in self.dimensions]

    def calculation(self) -> ComplexityScoreCalculation:
        return ComplexityScoreCalculation(
            total_score=self.total_score,
            required_coach_grade=self.required_coach_grade,
            pay_band_min=self.pay_band_min,
            pay_band_max=self.pay_band_max,
        )


class ComplexityScoreSubmission(BaseModel):
    """Full set of seven dimensions for create or update (no partial patch)."""

    category: ProgramCategory
    # Raw entries; the calculator parses them so every bad index is reported
    dimensions: List[Any]
    scored_by_id: Optional[UUID] = None


class ComplexityScoreCalculateRequest(BaseModel):
    """Request body for previewing a complexity score calculation."""

    category: ProgramCategory
    # Range and type checks happen in the calculator so every bad index is reported
    dimension_scores: List[Any]


class ReviewRequest(BaseModel):
    reviewer_id: UUID


class DimensionLabelsResponse(BaseModel):
    """Dimension labels for a given program category (UI contract)."""

    category: ProgramCategory
    labels: List[str]


class ScoringStateResponse(BaseModel):
    cohort_id: UUID
    state: ScoringState


# --- Roster ---


class RosterCoach(BaseModel):
    """One row from the members roster. Grade is per program category."""

    member_id: str
    name: Optional[str] = None
    email: Optional[str] = None
    grade: Optional[CoachGrade] = None
    status: str
    total_coaching_hours: Optional[float] = None
    average_feedback_rating: Optional[float] = None

    @field_validator("member_id", mode="before")
    @classmethod
    def stringify_member_id(cls, v):
        return str(v) if v is not None else v


class EligibleCoach(BaseModel):
    """Coach eligible for a cohort based on grade requirements."""

    model_config = ConfigDict(frozen=True)

    member_id: str
    name: str
    email: Optional[str] = None
    grade: CoachGrade
    total_coaching_hours: float = 0
    average_feedback_rating: Optional[float] = None


# ============================================================================
# AI SCORING SCHEMAS
# ============================================================================


class AIScoringRequest(BaseModel):
    """Cohort context for AI-assisted scoring.

    All fields are optional; anything omitted is derived from the cohort
    service or a sensible default.
    """

    category: Optional[ProgramCategory] = None
    age_group: Optional[str] = None
    skill_level: Optional[str] = None
    special_needs: Optional[str] = None
    location_type: Optional[str] = None
    duration_weeks: Optional[int] = None
    class_size: Optional[int] = None


class AIDimensionSuggestion(BaseModel):
    """A single AI-suggested dimension score, already clamped to bounds."""

    model_config = ConfigDict(frozen=True)

    index: int
    label: str
    score: int = Field(ge=1, le=5)
    rationale: str = ""
    confidence: float = Field(ge=0, le=1)


class AISuggestion(BaseModel):
    """AI-suggested complexity scores for a cohort. Never persisted."""

    model_config = ConfigDict(frozen=True)

    cohort_id: UUID
    category: ProgramCategory
    dimensions: List[AIDimensionSuggestion]
    overall_rationale: str = ""
    overall_confidence: float = Field(ge=0, le=1)
    # What the suggested scores would save as; None when not offered
    preview: Optional[ComplexityScoreCalculation] = None
    model_used: str = "unknown"


class CoachRankingSuggestion(BaseModel):
    """A single AI-ranked eligible coach."""

    model_config = ConfigDict(frozen=True)

    member_id: str
    name: str
    email: Optional[str] = None
    grade: CoachGrade
    total_coaching_hours: float = 0
    average_feedback_rating: Optional[float] = None
    match_score: float = Field(ge=0, le=1, description="0-1 suitability score")
    rationale: str = ""


class CoachRankingResponse(BaseModel):
    """AI-suggested coaches ranked by suitability."""

    cohort_id: UUID
    suggestions: List[CoachRankingSuggestion]


# --- Drafts ---


class ScoringDraft(BaseModel):
    """Unsaved working scores for a cohort.

    Drafts are immutable; edits and AI merges return new drafts. Only
    ``ComplexityScoreManager.commit`` turns a draft into a record.
    """

    model_config = ConfigDict(frozen=True)

    cohort_id: UUID
    category: ProgramCategory
    dimensions: tuple[DimensionScore, ...]
    source: DraftSource = DraftSource.MANUAL

    @property
    def scores(self) -> list[int]:
        return [d.score for d in self.dimensions]
