"""Which coaches may run a scored cohort."""

import uuid

from libs.common.logging import get_logger
from pydantic import ValidationError
from services.scoring_service.clients import CoachRoster
from services.scoring_service.errors import NotFound, NotScored
from services.scoring_service.models import ELIGIBLE_COACH_STATUSES, CoachStatus
from services.scoring_service.records import ComplexityScoreManager
from services.scoring_service.schemas import (
    ComplexityScoreRecord,
    EligibleCoach,
    RosterCoach,
)
from services.scoring_service.scoring import is_coach_eligible_for_grade

logger = get_logger(__name__)


def _is_active(status: str) -> bool:
    try:
        return CoachStatus(status) in ELIGIBLE_COACH_STATUSES
    except ValueError:
        return False


class CoachEligibilityResolver:
    """
    Filters the roster by the persisted grade requirement.

    The roster is read on every call and the record is never cached, so a
    roster change or a rescore is reflected immediately.
    """

    def __init__(self, records: ComplexityScoreManager, roster: CoachRoster):
        self._records = records
        self._roster = roster

    async def requirement_for(self, cohort_id: uuid.UUID) -> ComplexityScoreRecord:
        try:
            return await self._records.get(cohort_id)
        except NotFound:
            raise NotScored(cohort_id) from None

    async def eligible_coaches(self, cohort_id: uuid.UUID) -> list[EligibleCoach]:
        """
        Coaches whose status is approved/active and whose grade for the
        cohort's category meets or exceeds the required grade, sorted by
        name then member_id.

        Raises:
            NotScored: the cohort has no complexity score
            CollaboratorUnavailable: the roster could not be read
        """
        record = await self.requirement_for(cohort_id)
        return await self.filter_roster(record)

    async def filter_roster(self, record: ComplexityScoreRecord) -> list[EligibleCoach]:
        rows = await self._roster.list_coaches(record.category.value)

        eligible: list[EligibleCoach] = []
        for row in rows:
            try:
                coach = RosterCoach.model_validate(row)
            except ValidationError as e:
                logger.warning(f"Skipping malformed roster row: {e.errors()}")
                continue

            if not _is_active(coach.status):
                continue
            if not is_coach_eligible_for_grade(coach.grade, record.required_coach_grade):
                continue

            eligible.append(
                EligibleCoach(
                    member_id=coach.member_id,
                    name=coach.name or "Unknown",
                    email=coach.email,
                    grade=coach.grade,
                    total_coaching_hours=coach.total_coaching_hours or 0,
                    average_feedback_rating=coach.average_feedback_rating,
                )
            )

        eligible.sort(key=lambda c: (c.name.casefold(), c.member_id))
        return eligible
