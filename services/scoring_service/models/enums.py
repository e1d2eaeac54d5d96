"""Enum definitions for scoring service models."""

import enum


class ProgramCategory(str, enum.Enum):
    LEARN_TO_SWIM = "learn_to_swim"
    SPECIAL_POPULATIONS = "special_populations"
    INSTITUTIONAL = "institutional"
    COMPETITIVE_ELITE = "competitive_elite"
    CERTIFICATIONS = "certifications"
    SPECIALIZED_DISCIPLINES = "specialized_disciplines"
    ADJACENT_SERVICES = "adjacent_services"


class CoachGrade(str, enum.Enum):
    """Coach qualification tier. GRADE_1 < GRADE_2 < GRADE_3."""

    GRADE_1 = "grade_1"
    GRADE_2 = "grade_2"
    GRADE_3 = "grade_3"

    @property
    def level(self) -> int:
        return _GRADE_LEVELS[self]

    # str's lexical comparisons would otherwise apply
    def __lt__(self, other):
        if not isinstance(other, CoachGrade):
            return NotImplemented
        return self.level < other.level

    def __le__(self, other):
        if not isinstance(other, CoachGrade):
            return NotImplemented
        return self.level <= other.level

    def __gt__(self, other):
        if not isinstance(other, CoachGrade):
            return NotImplemented
        return self.level > other.level

    def __ge__(self, other):
        if not isinstance(other, CoachGrade):
            return NotImplemented
        return self.level >= other.level


_GRADE_LEVELS = {
    CoachGrade.GRADE_1: 1,
    CoachGrade.GRADE_2: 2,
    CoachGrade.GRADE_3: 3,
}


class CoachStatus(str, enum.Enum):
    DRAFT = "draft"
    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    ACTIVE = "active"
    REJECTED = "rejected"
    SUSPENDED = "suspended"
    INACTIVE = "inactive"


# Only these statuses may be put in front of a cohort
ELIGIBLE_COACH_STATUSES = frozenset({CoachStatus.APPROVED, CoachStatus.ACTIVE})


class ScoringState(str, enum.Enum):
    UNSCORED = "unscored"
    DRAFT = "draft"
    COMMITTED = "committed"


class DraftSource(str, enum.Enum):
    MANUAL = "manual"
    AI_SUGGESTED = "ai_suggested"
    COMMITTED = "committed"
