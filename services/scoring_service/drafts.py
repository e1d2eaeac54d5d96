"""Working scores that have not been committed.

A cohort is unscored, has a draft in front of an admin, or has a committed
ComplexityScoreRecord. Drafts never touch storage; every function here
returns a new draft and leaves its inputs alone.
"""

import uuid
from typing import Optional, Union

from services.scoring_service.catalog import resolve_category
from services.scoring_service.models import DIMENSION_COUNT, DraftSource, ProgramCategory
from services.scoring_service.schemas import (
    AISuggestion,
    ComplexityScoreRecord,
    DimensionScore,
    ScoringDraft,
)

NEUTRAL_SCORE = 3


def blank_draft(
    cohort_id: uuid.UUID, category: Union[ProgramCategory, str]
) -> ScoringDraft:
    """A fresh draft with every dimension at the neutral score."""
    return ScoringDraft(
        cohort_id=cohort_id,
        category=resolve_category(category),
        dimensions=tuple(
            DimensionScore(index=i, score=NEUTRAL_SCORE)
            for i in range(1, DIMENSION_COUNT + 1)
        ),
    )


def draft_from_record(record: ComplexityScoreRecord) -> ScoringDraft:
    return ScoringDraft(
        cohort_id=record.cohort_id,
        category=record.category,
        dimensions=tuple(record.dimensions),
        source=DraftSource.COMMITTED,
    )


def with_dimension(
    draft: ScoringDraft,
    index: int,
    score: int,
    rationale: Optional[str] = None,
) -> ScoringDraft:
    """
    Replace one dimension. The score is range checked when the draft is
    previewed or committed.

    Raises:
        ValueError: index is not 1-7
    """
    if not 1 <= index <= DIMENSION_COUNT:
        raise ValueError(f"Dimension index must be 1-{DIMENSION_COUNT}, got {index}")
    dimensions = tuple(
        DimensionScore(index=index, score=score, rationale=rationale)
        if d.index == index
        else d
        for d in draft.dimensions
    )
    return draft.model_copy(
        update={"dimensions": dimensions, "source": DraftSource.MANUAL}
    )


def apply_suggestion(draft: ScoringDraft, suggestion: AISuggestion) -> ScoringDraft:
    """
    Merge an AI suggestion into a draft.

    Scores and rationales come from the suggestion, the category follows
    the suggestion too. Neither input is modified.

    Raises:
        ValueError: the suggestion is for another cohort
    """
    if suggestion.cohort_id != draft.cohort_id:
        raise ValueError(
            f"Suggestion for cohort {suggestion.cohort_id} cannot be applied "
            f"to a draft for cohort {draft.cohort_id}"
        )
    return ScoringDraft(
        cohort_id=draft.cohort_id,
        category=suggestion.category,
        dimensions=tuple(
            DimensionScore(index=d.index, score=d.score, rationale=d.rationale or None)
            for d in suggestion.dimensions
        ),
        source=DraftSource.AI_SUGGESTED,
    )
