"""AI-suggested dimension scores for a cohort.

The advisor's answer is untrusted. Scores are coerced and clamped, the
suggestion is previewed through the calculator, and nothing is ever
written to the score store. Every failure surfaces as AdviceUnavailable
so the caller can fall back to manual entry.
"""

import asyncio
import math
import re
import uuid
from typing import Any, Optional, Union

from libs.common.logging import get_logger
from services.scoring_service.catalog import labels_for, resolve_category
from services.scoring_service.clients import CohortDirectory, ScoringAdvisor
from services.scoring_service.errors import (
    AdviceUnavailable,
    CollaboratorUnavailable,
    GradeNotOffered,
    ScoringError,
)
from services.scoring_service.models import DIMENSION_COUNT, ProgramCategory
from services.scoring_service.schemas import (
    AIDimensionSuggestion,
    AIScoringRequest,
    AISuggestion,
)
from services.scoring_service.scoring import (
    MAX_DIMENSION_SCORE,
    MIN_DIMENSION_SCORE,
    ScoreCalculator,
)

logger = get_logger(__name__)

_DIMENSION_KEY = re.compile(r"^dimension_(\d+)$")

DEFAULT_CONTEXT = {
    "age_group": "mixed",
    "skill_level": "beginner_1",
    "special_needs": None,
    "location_type": "indoor_pool",
    "duration_weeks": 12,
    "class_size": 8,
}

# Request field -> cohort service field
_COHORT_FIELDS = {
    "age_group": "age_group",
    "skill_level": "program_level",
    "special_needs": "special_needs",
    "location_type": "location_type",
    "duration_weeks": "duration_weeks",
    "class_size": "capacity",
}


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def to_number(value: Any, field: str) -> float:
    if isinstance(value, bool) or value is None:
        raise ValueError(f"{field} is not numeric: {value!r}")
    number = float(value)
    if math.isnan(number):
        raise ValueError(f"{field} is not numeric: {value!r}")
    return number


def _index_of(entry: dict, position: int) -> int:
    name = entry.get("dimension")
    if isinstance(name, str):
        match = _DIMENSION_KEY.match(name.strip())
        if match:
            return int(match.group(1))
    return position


def parse_dimensions(
    raw: Any, labels: tuple[str, ...]
) -> list[AIDimensionSuggestion]:
    """
    Validate the advisor's ``dimensions`` array.

    Entries may name their dimension (``dimension_3``) or rely on position.
    Each of the seven must be present exactly once.

    Raises:
        ValueError: wrong shape, missing dimensions or non-numeric values
    """
    if not isinstance(raw, list):
        raise ValueError("dimensions must be a list")

    by_index: dict[int, AIDimensionSuggestion] = {}
    for position, entry in enumerate(raw, start=1):
        if not isinstance(entry, dict):
            raise ValueError(f"dimension entry {position} is not an object")
        index = _index_of(entry, position)
        if not 1 <= index <= DIMENSION_COUNT:
            raise ValueError(f"dimension index {index} out of range")
        if index in by_index:
            raise ValueError(f"dimension {index} given twice")

        score = to_number(entry.get("score"), f"dimension {index} score")
        confidence = entry.get("confidence")
        confidence = (
            0.0
            if confidence is None
            else to_number(confidence, f"dimension {index} confidence")
        )

        by_index[index] = AIDimensionSuggestion(
            index=index,
            label=labels[index - 1],
            score=int(clamp(round(score), MIN_DIMENSION_SCORE, MAX_DIMENSION_SCORE)),
            rationale=str(entry.get("rationale") or ""),
            confidence=clamp(confidence, 0.0, 1.0),
        )

    missing = [i for i in range(1, DIMENSION_COUNT + 1) if i not in by_index]
    if missing:
        raise ValueError(f"missing dimensions {missing}")
    return [by_index[i] for i in range(1, DIMENSION_COUNT + 1)]


class AIAssistAdapter:
    def __init__(
        self,
        advisor: ScoringAdvisor,
        calculator: ScoreCalculator,
        cohorts: Optional[CohortDirectory] = None,
        timeout: float = 30.0,
    ):
        self._advisor = advisor
        self._calculator = calculator
        self._cohorts = cohorts
        self._timeout = timeout

    async def build_payload(
        self,
        cohort_id: uuid.UUID,
        category: ProgramCategory,
        context: Optional[AIScoringRequest] = None,
    ) -> dict:
        """Cohort context for the advisor: explicit request > cohort data > default."""
        cohort = None
        if self._cohorts is not None:
            try:
                cohort = await self._cohorts.get_cohort(cohort_id)
            except CollaboratorUnavailable as e:
                logger.warning(f"Scoring cohort {cohort_id} without its context: {e}")
        cohort = cohort or {}
        explicit = context.model_dump(exclude_none=True) if context else {}

        payload: dict[str, Any] = {
            "program_category": category.value,
            "program_name": cohort.get("program_name"),
            "dimension_labels": list(labels_for(category)),
        }
        for field, default in DEFAULT_CONTEXT.items():
            value = explicit.get(field)
            if value is None:
                value = cohort.get(_COHORT_FIELDS[field])
            payload[field] = default if value is None else value
        return payload

    async def suggest_dimensions(
        self,
        cohort_id: uuid.UUID,
        category: Union[ProgramCategory, str],
        context: Optional[AIScoringRequest] = None,
    ) -> AISuggestion:
        """
        Ask the advisor for seven suggested scores. Read-only.

        Raises:
            UnknownCategory: before any collaborator is contacted
            AdviceUnavailable: timeout, transport failure or malformed answer
        """
        category = resolve_category(category)
        payload = await self.build_payload(cohort_id, category, context)

        try:
            result = await asyncio.wait_for(
                self._advisor.suggest_dimensions(payload), timeout=self._timeout
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"AI scoring for cohort {cohort_id} timed out after {self._timeout}s"
            )
            raise AdviceUnavailable("AI scoring timed out") from None
        except ScoringError:
            raise
        except Exception as e:
            logger.error(f"AI scoring for cohort {cohort_id} failed: {e}")
            raise AdviceUnavailable(f"AI scoring failed: {e}") from e

        try:
            if not isinstance(result, dict):
                raise ValueError("response is not an object")
            dimensions = parse_dimensions(
                result.get("dimensions"), labels_for(category)
            )
            overall_confidence = result.get("confidence")
            overall_confidence = (
                0.0
                if overall_confidence is None
                else to_number(overall_confidence, "confidence")
            )
        except (ValueError, TypeError, OverflowError) as e:
            logger.warning(f"Malformed AI scoring response for cohort {cohort_id}: {e}")
            raise AdviceUnavailable(f"AI scoring response was malformed: {e}") from e

        try:
            preview = self._calculator.compute(category, [d.score for d in dimensions])
        except GradeNotOffered:
            preview = None

        return AISuggestion(
            cohort_id=cohort_id,
            category=category,
            dimensions=dimensions,
            overall_rationale=str(result.get("overall_rationale") or ""),
            overall_confidence=clamp(overall_confidence, 0.0, 1.0),
            preview=preview,
            model_used=str(result.get("model_used") or "unknown"),
        )
