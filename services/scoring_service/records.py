"""Complexity score records: one committed score per cohort.

Writes for a cohort are serialised by a per-cohort asyncio lock. Across
worker processes the unique ``cohort_id`` constraint and the row version
counter turn a race into ``Conflict`` instead of a lost update.
"""

import asyncio
import uuid
import weakref
from typing import Any, Optional, Sequence, Union

from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.scoring_service.clients import CohortDirectory
from services.scoring_service.errors import Conflict, NotFound
from services.scoring_service.models import (
    CohortComplexityScore,
    ProgramCategory,
    ScoringState,
)
from services.scoring_service.schemas import (
    ComplexityScoreCalculation,
    ComplexityScoreRecord,
    DimensionScore,
    ScoringDraft,
)
from services.scoring_service.scoring import ScoreCalculator
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.exc import StaleDataError

logger = get_logger(__name__)

# Bare scores, DimensionScore entries or raw {"index", "score", "rationale"} dicts
Dimensions = Sequence[Any]


class ComplexityScoreManager:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        calculator: ScoreCalculator,
        cohorts: Optional[CohortDirectory] = None,
    ):
        self._session_factory = session_factory
        self._calculator = calculator
        self._cohorts = cohorts
        # Entries vanish once no coroutine holds or awaits the lock
        self._locks: weakref.WeakValueDictionary[uuid.UUID, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    @property
    def calculator(self) -> ScoreCalculator:
        return self._calculator

    def _lock_for(self, cohort_id: uuid.UUID) -> asyncio.Lock:
        lock = self._locks.get(cohort_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[cohort_id] = lock
        return lock

    @staticmethod
    async def _load(
        session: AsyncSession, cohort_id: uuid.UUID
    ) -> Optional[CohortComplexityScore]:
        result = await session.execute(
            select(CohortComplexityScore).where(
                CohortComplexityScore.cohort_id == cohort_id
            )
        )
        return result.scalar_one_or_none()

    def preview(
        self, category: Union[ProgramCategory, str], dimensions: Dimensions
    ) -> ComplexityScoreCalculation:
        """What these scores would save as. Touches no storage."""
        _, calculation = self._calculator.compute_dimensions(category, dimensions)
        return calculation

    async def create(
        self,
        cohort_id: uuid.UUID,
        category: Union[ProgramCategory, str],
        dimensions: Dimensions,
        scored_by_id: Optional[uuid.UUID] = None,
    ) -> ComplexityScoreRecord:
        """
        Create the complexity score for a cohort.

        Raises:
            NotFound: the cohort service does not know this cohort
            Conflict: the cohort already has a score
            InvalidScoreInput, UnknownCategory, GradeNotOffered
        """
        # Validate before any I/O so bad input never reaches storage
        normalized, calculation = self._calculator.compute_dimensions(
            category, dimensions
        )
        category = ProgramCategory(category)

        if self._cohorts is not None:
            cohort = await self._cohorts.get_cohort(cohort_id)
            if cohort is None:
                raise NotFound(f"Cohort {cohort_id} not found")

        async with self._lock_for(cohort_id):
            async with self._session_factory() as session:
                if await self._load(session, cohort_id) is not None:
                    raise Conflict(
                        "Complexity score already exists for this cohort. "
                        "Use update to replace it."
                    )

                row = CohortComplexityScore(
                    cohort_id=cohort_id,
                    category=category.value,
                    scored_by_id=scored_by_id,
                )
                self._apply(row, normalized, calculation)
                session.add(row)
                try:
                    await session.commit()
                except IntegrityError:
                    await session.rollback()
                    raise Conflict(
                        "Complexity score already exists for this cohort."
                    ) from None
                await session.refresh(row)

                logger.info(
                    f"Scored cohort {cohort_id}: total={calculation.total_score} "
                    f"grade={calculation.required_coach_grade.value}"
                )
                return ComplexityScoreRecord.from_model(row)

    async def update(
        self,
        cohort_id: uuid.UUID,
        category: Union[ProgramCategory, str],
        dimensions: Dimensions,
    ) -> ComplexityScoreRecord:
        """
        Replace category and all seven dimensions of an existing score.

        Nothing from the previous score is merged in; rationales omitted
        from the new submission are cleared.
        """
        normalized, calculation = self._calculator.compute_dimensions(
            category, dimensions
        )
        category = ProgramCategory(category)

        async with self._lock_for(cohort_id):
            async with self._session_factory() as session:
                row = await self._load(session, cohort_id)
                if row is None:
                    raise NotFound(f"Complexity score for cohort {cohort_id} not found")

                row.category = category.value
                self._apply(row, normalized, calculation)
                await self._commit_versioned(session, cohort_id)
                await session.refresh(row)

                logger.info(
                    f"Rescored cohort {cohort_id}: total={calculation.total_score} "
                    f"grade={calculation.required_coach_grade.value}"
                )
                return ComplexityScoreRecord.from_model(row)

    async def get(self, cohort_id: uuid.UUID) -> ComplexityScoreRecord:
        async with self._session_factory() as session:
            row = await self._load(session, cohort_id)
            if row is None:
                raise NotFound(f"Complexity score for cohort {cohort_id} not found")
            return ComplexityScoreRecord.from_model(row)

    async def delete(self, cohort_id: uuid.UUID) -> None:
        """Remove the score. Eligibility is unavailable until rescored."""
        async with self._lock_for(cohort_id):
            async with self._session_factory() as session:
                row = await self._load(session, cohort_id)
                if row is None:
                    raise NotFound(f"Complexity score for cohort {cohort_id} not found")
                await session.delete(row)
                await self._commit_versioned(session, cohort_id)
        logger.info(f"Deleted complexity score for cohort {cohort_id}")

    async def mark_reviewed(
        self, cohort_id: uuid.UUID, reviewer_id: uuid.UUID
    ) -> ComplexityScoreRecord:
        """Stamp a score as reviewed (for audit purposes)."""
        async with self._lock_for(cohort_id):
            async with self._session_factory() as session:
                row = await self._load(session, cohort_id)
                if row is None:
                    raise NotFound(f"Complexity score for cohort {cohort_id} not found")
                row.reviewed_by_id = reviewer_id
                row.reviewed_at = utc_now()
                await self._commit_versioned(session, cohort_id)
                await session.refresh(row)
                return ComplexityScoreRecord.from_model(row)

    async def exists(self, cohort_id: uuid.UUID) -> bool:
        async with self._session_factory() as session:
            return await self._load(session, cohort_id) is not None

    async def state_of(self, cohort_id: uuid.UUID) -> ScoringState:
        """Persisted state only; drafts live with the caller."""
        if await self.exists(cohort_id):
            return ScoringState.COMMITTED
        return ScoringState.UNSCORED

    async def commit(
        self, draft: ScoringDraft, scored_by_id: Optional[uuid.UUID] = None
    ) -> ComplexityScoreRecord:
        """Persist a draft, creating or fully replacing the cohort's score."""
        if await self.exists(draft.cohort_id):
            return await self.update(draft.cohort_id, draft.category, draft.dimensions)
        return await self.create(
            draft.cohort_id, draft.category, draft.dimensions, scored_by_id
        )

    @staticmethod
    async def _commit_versioned(session: AsyncSession, cohort_id: uuid.UUID) -> None:
        """Commit a write to an existing row, mapping a version clash to Conflict."""
        try:
            await session.commit()
        except StaleDataError:
            await session.rollback()
            logger.warning(f"Concurrent write to complexity score for cohort {cohort_id}")
            raise Conflict(
                "Complexity score was modified concurrently. Reload and retry."
            ) from None

    @staticmethod
    def _apply(
        row: CohortComplexityScore,
        dimensions: list[DimensionScore],
        calculation: ComplexityScoreCalculation,
    ) -> None:
        row.set_dimensions(
            [d.score for d in dimensions], [d.rationale for d in dimensions]
        )
        row.total_score = calculation.total_score
        row.required_coach_grade = calculation.required_coach_grade.value
        row.pay_band_min = calculation.pay_band_min
        row.pay_band_max = calculation.pay_band_max
