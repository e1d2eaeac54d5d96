"""Scoring Service models package.

Re-exports all models and enums so that
``from services.scoring_service.models import CoachGrade`` works and
SQLAlchemy's mapper registry sees every model class on import.
"""

from services.scoring_service.models.core import (  # noqa: F401
    DIMENSION_COUNT,
    CohortComplexityScore,
)
from services.scoring_service.models.enums import (  # noqa: F401
    ELIGIBLE_COACH_STATUSES,
    CoachGrade,
    CoachStatus,
    DraftSource,
    ProgramCategory,
    ScoringState,
)

__all__ = [
    "DIMENSION_COUNT",
    "ELIGIBLE_COACH_STATUSES",
    "CoachGrade",
    "CoachStatus",
    "CohortComplexityScore",
    "DraftSource",
    "ProgramCategory",
    "ScoringState",
]
