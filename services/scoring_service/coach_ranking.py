"""AI ordering of the eligible coach pool.

The advisor only reorders coaches the resolver already approved. Anything
it returns outside that set is dropped and logged.
"""

import asyncio
import uuid
from typing import Any, Optional

from libs.common.logging import get_logger
from services.scoring_service.ai_assist import clamp, to_number
from services.scoring_service.catalog import labels_for
from services.scoring_service.clients import CohortDirectory, ScoringAdvisor
from services.scoring_service.eligibility import CoachEligibilityResolver
from services.scoring_service.errors import (
    AdviceUnavailable,
    CollaboratorUnavailable,
    ScoringError,
)
from services.scoring_service.schemas import (
    ComplexityScoreRecord,
    CoachRankingSuggestion,
    EligibleCoach,
)

logger = get_logger(__name__)


def dimension_summary(record: ComplexityScoreRecord) -> str:
    labels = labels_for(record.category)
    return "; ".join(
        f"{labels[d.index - 1]}: {d.score}/5" for d in record.dimensions
    )


class CoachRankingAdvisor:
    def __init__(
        self,
        resolver: CoachEligibilityResolver,
        advisor: ScoringAdvisor,
        cohorts: Optional[CohortDirectory] = None,
        timeout: float = 30.0,
    ):
        self._resolver = resolver
        self._advisor = advisor
        self._cohorts = cohorts
        self._timeout = timeout

    async def _cohort_context(self, cohort_id: uuid.UUID) -> dict:
        if self._cohorts is None:
            return {}
        try:
            return await self._cohorts.get_cohort(cohort_id) or {}
        except CollaboratorUnavailable as e:
            logger.warning(f"Ranking coaches for {cohort_id} without cohort context: {e}")
            return {}

    async def build_payload(
        self,
        record: ComplexityScoreRecord,
        eligible: list[EligibleCoach],
    ) -> dict:
        cohort = await self._cohort_context(record.cohort_id)
        return {
            "program_category": record.category.value,
            "cohort_name": cohort.get("name"),
            "program_name": cohort.get("program_name"),
            "location": cohort.get("location_name"),
            "capacity": cohort.get("capacity"),
            "total_score": record.total_score,
            "required_coach_grade": record.required_coach_grade.value,
            "dimension_summary": dimension_summary(record),
            "coaches": [
                {
                    "member_id": c.member_id,
                    "name": c.name,
                    "grade": c.grade.value,
                    "total_coaching_hours": c.total_coaching_hours,
                    "average_feedback_rating": c.average_feedback_rating,
                }
                for c in eligible
            ],
        }

    async def rank_coaches(self, cohort_id: uuid.UUID) -> list[CoachRankingSuggestion]:
        """
        Order the eligible coaches by fit, in the advisor's order.

        Raises:
            NotScored: the cohort has no complexity score
            AdviceUnavailable: timeout, transport failure or malformed answer
        """
        record = await self._resolver.requirement_for(cohort_id)
        eligible = await self._resolver.filter_roster(record)
        if not eligible:
            return []

        payload = await self.build_payload(record, eligible)
        try:
            result = await asyncio.wait_for(
                self._advisor.rank_coaches(payload), timeout=self._timeout
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Coach ranking for cohort {cohort_id} timed out after {self._timeout}s"
            )
            raise AdviceUnavailable("AI coach ranking timed out") from None
        except ScoringError:
            raise
        except Exception as e:
            logger.error(f"Coach ranking for cohort {cohort_id} failed: {e}")
            raise AdviceUnavailable(f"AI coach ranking failed: {e}") from e

        rankings = result.get("rankings") if isinstance(result, dict) else None
        if not isinstance(rankings, list):
            logger.warning(f"Malformed coach ranking response for cohort {cohort_id}")
            raise AdviceUnavailable("AI coach ranking response was malformed")

        return self._merge(cohort_id, rankings, eligible)

    @staticmethod
    def _merge(
        cohort_id: uuid.UUID,
        rankings: list[Any],
        eligible: list[EligibleCoach],
    ) -> list[CoachRankingSuggestion]:
        coach_map = {c.member_id: c for c in eligible}
        seen: set[str] = set()
        suggestions: list[CoachRankingSuggestion] = []

        for ranked in rankings:
            if not isinstance(ranked, dict):
                logger.warning(f"Ranking anomaly for cohort {cohort_id}: {ranked!r}")
                continue
            member_id = str(ranked.get("member_id", ""))
            coach = coach_map.get(member_id)
            if coach is None:
                logger.warning(
                    f"Ranking anomaly for cohort {cohort_id}: "
                    f"unknown coach {member_id!r}"
                )
                continue
            if member_id in seen:
                logger.warning(
                    f"Ranking anomaly for cohort {cohort_id}: "
                    f"coach {member_id} ranked twice"
                )
                continue
            seen.add(member_id)

            try:
                match_score = to_number(ranked.get("match_score"), "match_score")
            except (ValueError, TypeError):
                logger.warning(
                    f"Ranking anomaly for cohort {cohort_id}: "
                    f"coach {member_id} has no usable match_score"
                )
                match_score = 0.0

            suggestions.append(
                CoachRankingSuggestion(
                    member_id=coach.member_id,
                    name=coach.name,
                    email=coach.email,
                    grade=coach.grade,
                    total_coaching_hours=coach.total_coaching_hours,
                    average_feedback_rating=coach.average_feedback_rating,
                    match_score=clamp(match_score, 0.0, 1.0),
                    rationale=str(ranked.get("rationale") or ""),
                )
            )
        return suggestions
