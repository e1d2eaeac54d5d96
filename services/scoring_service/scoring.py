"""
Cohort Complexity Scoring Logic

Seven category-specific dimensions, each scored 1-5, sum to a total of
7-35. The total decides the minimum coach grade, and (category, grade)
decides the pay band.
"""

from typing import Any, List, Mapping, Optional, Sequence, Union

from services.scoring_service.catalog import resolve_category
from services.scoring_service.errors import GradeNotOffered, InvalidScoreInput
from services.scoring_service.models import DIMENSION_COUNT, CoachGrade, ProgramCategory
from services.scoring_service.pay_bands import PayBandTable
from services.scoring_service.schemas import ComplexityScoreCalculation, DimensionScore

MIN_DIMENSION_SCORE = 1
MAX_DIMENSION_SCORE = 5
MIN_TOTAL_SCORE = DIMENSION_COUNT * MIN_DIMENSION_SCORE
MAX_TOTAL_SCORE = DIMENSION_COUNT * MAX_DIMENSION_SCORE

# Inclusive upper bound of each grade band, in ascending order.
# 7-14 -> Grade 1, 15-24 -> Grade 2, 25-35 -> Grade 3
GRADE_THRESHOLDS: tuple[tuple[int, CoachGrade], ...] = (
    (14, CoachGrade.GRADE_1),
    (24, CoachGrade.GRADE_2),
    (MAX_TOTAL_SCORE, CoachGrade.GRADE_3),
)


# ============================================================================
# SCORING FUNCTIONS
# ============================================================================


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_scores(dimension_scores: Sequence[Any]) -> List[int]:
    """
    Check that exactly 7 integer scores in [1, 5] were given.

    Raises:
        InvalidScoreInput: listing every offending index, not just the first.
    """
    if isinstance(dimension_scores, (str, bytes)) or not isinstance(
        dimension_scores, Sequence
    ):
        raise InvalidScoreInput(
            [{"index": 0, "value": repr(dimension_scores), "reason": "not a sequence"}],
            detail=f"Exactly {DIMENSION_COUNT} dimension scores required",
        )

    errors = []
    for i, score in enumerate(dimension_scores, start=1):
        if i > DIMENSION_COUNT:
            errors.append({"index": i, "value": score, "reason": "unexpected dimension"})
        elif not _is_int(score):
            errors.append({"index": i, "value": score, "reason": "score must be an integer"})
        else:
            range_error = _score_range_error(i, score)
            if range_error:
                errors.append(range_error)
    for i in range(len(dimension_scores) + 1, DIMENSION_COUNT + 1):
        errors.append({"index": i, "value": None, "reason": "missing dimension"})

    if errors:
        raise InvalidScoreInput(errors)
    return list(dimension_scores)


def _score_range_error(index: int, score: int) -> Optional[dict]:
    if MIN_DIMENSION_SCORE <= score <= MAX_DIMENSION_SCORE:
        return None
    return {
        "index": index,
        "value": score,
        "reason": (
            f"score must be between {MIN_DIMENSION_SCORE} and {MAX_DIMENSION_SCORE}"
        ),
    }


def _unpack_entry(entry: Any) -> Optional[tuple[Any, Any, Any]]:
    """(index, score, rationale) of a submitted entry, or None if unusable."""
    if isinstance(entry, DimensionScore):
        return entry.index, entry.score, entry.rationale
    if isinstance(entry, Mapping):
        return entry.get("index"), entry.get("score"), entry.get("rationale")
    return None


def normalize_dimensions(dimensions: Sequence[Any]) -> List[DimensionScore]:
    """
    Turn a submission into seven DimensionScore entries ordered by index.

    Accepts either seven bare integers (positional) or entries carrying
    their own index, as DimensionScore objects or raw ``{"index", "score",
    "rationale"}`` mappings straight from a request body. Scores are never
    coerced: booleans, floats and numeric strings are rejected. Type,
    duplicate, missing and out-of-range problems are all reported together.
    """
    positional = (
        isinstance(dimensions, (str, bytes))
        or not isinstance(dimensions, Sequence)
        or not any(isinstance(d, (Mapping, DimensionScore)) for d in dimensions)
    )
    if positional:
        return [
            DimensionScore(index=i, score=score)
            for i, score in enumerate(validate_scores(dimensions), start=1)
        ]

    errors = []
    # None marks an index that was present but unusable
    by_index: dict[int, Optional[DimensionScore]] = {}
    for position, entry in enumerate(dimensions, start=1):
        unpacked = _unpack_entry(entry)
        if unpacked is None:
            errors.append(
                {"index": position, "value": entry, "reason": "not a dimension score"}
            )
            continue
        index, score, rationale = unpacked
        if not _is_int(index):
            errors.append(
                {"index": position, "value": index, "reason": "index must be an integer"}
            )
            continue
        if not 1 <= index <= DIMENSION_COUNT:
            errors.append({"index": index, "value": score, "reason": "index out of range"})
            continue
        if index in by_index:
            errors.append({"index": index, "value": score, "reason": "duplicate dimension"})
            continue
        if not _is_int(score):
            by_index[index] = None
            errors.append(
                {"index": index, "value": score, "reason": "score must be an integer"}
            )
            continue
        if rationale is not None and not isinstance(rationale, str):
            by_index[index] = None
            errors.append(
                {"index": index, "value": rationale, "reason": "rationale must be text"}
            )
            continue
        by_index[index] = DimensionScore(index=index, score=score, rationale=rationale)
        range_error = _score_range_error(index, score)
        if range_error:
            errors.append(range_error)

    for i in range(1, DIMENSION_COUNT + 1):
        if i not in by_index:
            errors.append({"index": i, "value": None, "reason": "missing dimension"})

    if errors:
        errors.sort(key=lambda e: e["index"])
        raise InvalidScoreInput(errors)
    return [by_index[i] for i in range(1, DIMENSION_COUNT + 1)]


def calculate_total_score(dimension_scores: Sequence[int]) -> int:
    """
    Calculate total complexity score from dimension scores.

    Returns:
        Total score (7-35)
    """
    return sum(validate_scores(dimension_scores))


def determine_coach_grade(total_score: int) -> CoachGrade:
    """
    Determine required coach grade from total complexity score.

    Args:
        total_score: Sum of all dimension scores (7-35)
    """
    if not MIN_TOTAL_SCORE <= total_score <= MAX_TOTAL_SCORE:
        raise ValueError(
            f"Total score must be between {MIN_TOTAL_SCORE} and "
            f"{MAX_TOTAL_SCORE}, got {total_score}"
        )
    for upper_bound, grade in GRADE_THRESHOLDS:
        if total_score <= upper_bound:
            return grade
    raise AssertionError("grade thresholds do not cover the score range")


class ScoreCalculator:
    """
    Pure, stateless score derivation.

    Holds only the read-only pay band table, so ``compute`` returns equal
    output for equal input. A preview and the record stored for the same
    input are therefore identical.
    """

    def __init__(self, pay_bands: PayBandTable):
        self._pay_bands = pay_bands

    @property
    def pay_bands(self) -> PayBandTable:
        return self._pay_bands

    def compute(
        self,
        category: Union[ProgramCategory, str],
        dimension_scores: Sequence[Any],
    ) -> ComplexityScoreCalculation:
        """
        Calculate complete complexity score result.

        Args:
            category: The program category
            dimension_scores: 7 scores (1-5 each)

        Raises:
            UnknownCategory: category outside the closed set
            InvalidScoreInput: wrong count, non-integers, or out of range
            GradeNotOffered: the resulting grade cannot deliver this category
        """
        category = resolve_category(category)
        total_score = calculate_total_score(dimension_scores)
        required_grade = determine_coach_grade(total_score)

        band = self._pay_bands.get(category, required_grade)
        if not band.offered:
            raise GradeNotOffered(category.value, required_grade.value)

        return ComplexityScoreCalculation(
            total_score=total_score,
            required_coach_grade=required_grade,
            pay_band_min=band.min_percentage,
            pay_band_max=band.max_percentage,
        )

    def compute_dimensions(
        self,
        category: Union[ProgramCategory, str],
        dimensions: Sequence[Any],
    ) -> tuple[List[DimensionScore], ComplexityScoreCalculation]:
        """Normalize a submission and derive its values in one step."""
        category = resolve_category(category)
        normalized = normalize_dimensions(dimensions)
        return normalized, self.compute(category, [d.score for d in normalized])


def is_coach_eligible_for_grade(
    coach_grade: Optional[CoachGrade], required_grade: CoachGrade
) -> bool:
    """
    Check if a coach's grade meets or exceeds the required grade.

    A coach without a grade for the category is never eligible.
    """
    if coach_grade is None:
        return False
    return coach_grade >= required_grade
