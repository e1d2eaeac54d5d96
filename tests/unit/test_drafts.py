"""Unit tests for scoring drafts and suggestion merges."""

import uuid
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError
from services.scoring_service.catalog import labels_for
from services.scoring_service.drafts import (
    apply_suggestion,
    blank_draft,
    draft_from_record,
    with_dimension,
)
from services.scoring_service.errors import UnknownCategory
from services.scoring_service.models import CoachGrade, DraftSource, ProgramCategory
from services.scoring_service.schemas import (
    AIDimensionSuggestion,
    AISuggestion,
    ComplexityScoreRecord,
    DimensionScore,
)


def _suggestion(cohort_id, scores, category=ProgramCategory.LEARN_TO_SWIM):
    labels = labels_for(category)
    return AISuggestion(
        cohort_id=cohort_id,
        category=category,
        dimensions=[
            AIDimensionSuggestion(
                index=i,
                label=labels[i - 1],
                score=score,
                rationale=f"AI {i}",
                confidence=0.9,
            )
            for i, score in enumerate(scores, start=1)
        ],
        overall_rationale="",
        overall_confidence=0.9,
    )


@pytest.mark.unit
def test_blank_draft_is_neutral():
    draft = blank_draft(uuid.uuid4(), "institutional")

    assert draft.scores == [3] * 7
    assert draft.category == ProgramCategory.INSTITUTIONAL
    assert draft.source == DraftSource.MANUAL


@pytest.mark.unit
def test_blank_draft_rejects_unknown_category():
    with pytest.raises(UnknownCategory):
        blank_draft(uuid.uuid4(), "nope")


@pytest.mark.unit
def test_with_dimension_returns_new_draft():
    draft = blank_draft(uuid.uuid4(), ProgramCategory.LEARN_TO_SWIM)

    edited = with_dimension(draft, 4, 5, "Nervous adults")

    assert edited.scores == [3, 3, 3, 5, 3, 3, 3]
    assert edited.dimensions[3].rationale == "Nervous adults"
    assert draft.scores == [3] * 7


@pytest.mark.unit
def test_with_dimension_rejects_bad_index():
    draft = blank_draft(uuid.uuid4(), ProgramCategory.LEARN_TO_SWIM)

    with pytest.raises(ValueError):
        with_dimension(draft, 8, 3)


@pytest.mark.unit
def test_apply_suggestion_produces_ai_draft_without_touching_input():
    cohort_id = uuid.uuid4()
    draft = with_dimension(blank_draft(cohort_id, "learn_to_swim"), 1, 1, "mine")
    suggestion = _suggestion(cohort_id, [5, 4, 3, 2, 1, 2, 3])

    merged = apply_suggestion(draft, suggestion)

    assert merged.source == DraftSource.AI_SUGGESTED
    assert merged.scores == [5, 4, 3, 2, 1, 2, 3]
    assert merged.dimensions[0].rationale == "AI 1"
    assert draft.scores == [1, 3, 3, 3, 3, 3, 3]
    assert draft.dimensions[0].rationale == "mine"


@pytest.mark.unit
def test_apply_suggestion_for_other_cohort_is_refused():
    draft = blank_draft(uuid.uuid4(), "learn_to_swim")

    with pytest.raises(ValueError):
        apply_suggestion(draft, _suggestion(uuid.uuid4(), [3] * 7))


@pytest.mark.unit
def test_draft_from_record_copies_committed_values():
    now = datetime.now(timezone.utc)
    record = ComplexityScoreRecord(
        cohort_id=uuid.uuid4(),
        category=ProgramCategory.COMPETITIVE_ELITE,
        dimensions=[DimensionScore(index=i, score=4) for i in range(1, 8)],
        total_score=28,
        required_coach_grade=CoachGrade.GRADE_3,
        pay_band_min=55,
        pay_band_max=68,
        created_at=now,
        updated_at=now,
    )

    draft = draft_from_record(record)

    assert draft.cohort_id == record.cohort_id
    assert draft.scores == [4] * 7
    assert draft.source == DraftSource.COMMITTED


@pytest.mark.unit
def test_drafts_are_immutable():
    draft = blank_draft(uuid.uuid4(), "learn_to_swim")

    with pytest.raises(ValidationError):
        draft.source = DraftSource.AI_SUGGESTED
