import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from sqlalchemy import DateTime, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

DIMENSION_COUNT = 7


class CohortComplexityScore(Base):
    """
    Stores complexity scoring for a cohort to determine required coach grade
    and compensation band.

    Each program category has 7 dimensions scored 1-5 each (total 7-35).
    Score ranges:
    - 7-14: Grade 1 (Foundational)
    - 15-24: Grade 2 (Technical)
    - 25-35: Grade 3 (Advanced/Specialist)
    """

    __tablename__ = "cohort_complexity_scores"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # One score per cohort; the unique constraint backs the per-cohort lock
    # when several workers write concurrently.
    cohort_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, nullable=False, unique=True, index=True
    )

    # Values: "learn_to_swim", "special_populations", "institutional", etc.
    category: Mapped[str] = mapped_column(String, nullable=False)

    # Dimension scores (1-5 each) - meaning varies by category
    dimension_1_score: Mapped[int] = mapped_column(Integer, nullable=False)
    dimension_1_rationale: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    dimension_2_score: Mapped[int] = mapped_column(Integer, nullable=False)
    dimension_2_rationale: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    dimension_3_score: Mapped[int] = mapped_column(Integer, nullable=False)
    dimension_3_rationale: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    dimension_4_score: Mapped[int] = mapped_column(Integer, nullable=False)
    dimension_4_rationale: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    dimension_5_score: Mapped[int] = mapped_column(Integer, nullable=False)
    dimension_5_rationale: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    dimension_6_score: Mapped[int] = mapped_column(Integer, nullable=False)
    dimension_6_rationale: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    dimension_7_score: Mapped[int] = mapped_column(Integer, nullable=False)
    dimension_7_rationale: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Calculated fields
    total_score: Mapped[int] = mapped_column(Integer, nullable=False)
    # Values: "grade_1", "grade_2", "grade_3"
    required_coach_grade: Mapped[str] = mapped_column(String, nullable=False)
    # Percentage of cohort revenue as integer (e.g., 45 = 45%)
    pay_band_min: Mapped[int] = mapped_column(Integer, nullable=False)
    pay_band_max: Mapped[int] = mapped_column(Integer, nullable=False)

    # Audit trail
    scored_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    reviewed_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Optimistic concurrency counter
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __mapper_args__ = {"version_id_col": version}

    def get_scores(self) -> list[int]:
        return [
            getattr(self, f"dimension_{i}_score") for i in range(1, DIMENSION_COUNT + 1)
        ]

    def get_rationales(self) -> list[Optional[str]]:
        return [
            getattr(self, f"dimension_{i}_rationale")
            for i in range(1, DIMENSION_COUNT + 1)
        ]

    def set_dimensions(self, scores: list[int], rationales: list[Optional[str]]) -> None:
        """Replace all seven dimensions at once."""
        for i, (score, rationale) in enumerate(zip(scores, rationales), start=1):
            setattr(self, f"dimension_{i}_score", score)
            setattr(self, f"dimension_{i}_rationale", rationale)

    def __repr__(self):
        return (
            f"<CohortComplexityScore cohort={self.cohort_id} "
            f"total={self.total_score} grade={self.required_coach_grade}>"
        )
