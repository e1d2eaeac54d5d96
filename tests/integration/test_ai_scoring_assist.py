"""Integration tests for AI-suggested dimension scores.

The advisor is a stub; these tests pin down how untrusted answers are
validated, clamped and kept out of storage.
"""

import uuid

import httpx
import pytest
from services.scoring_service.errors import AdviceUnavailable, UnknownCategory
from services.scoring_service.models import CoachGrade, ProgramCategory, ScoringState
from services.scoring_service.schemas import AIScoringRequest
from tests.factories import AIDimensionsFactory


@pytest.mark.asyncio
@pytest.mark.integration
async def test_suggestion_carries_labels_and_preview(ai_assist, advisor):
    advisor.dimensions_response = AIDimensionsFactory.create(scores=[3] * 7)

    suggestion = await ai_assist.suggest_dimensions(uuid.uuid4(), "learn_to_swim")

    assert [d.index for d in suggestion.dimensions] == list(range(1, 8))
    assert suggestion.dimensions[0].label == "Age Group Complexity"
    assert suggestion.preview.total_score == 21
    assert suggestion.preview.required_coach_grade == CoachGrade.GRADE_2
    assert suggestion.overall_confidence == 0.75
    assert suggestion.model_used == "gpt-4o-mini"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_out_of_range_values_are_clamped(ai_assist, advisor):
    response = AIDimensionsFactory.create(scores=[0, 9, "4", 2.6, -3, 5, 1])
    response["dimensions"][0]["confidence"] = 1.7
    response["dimensions"][1]["confidence"] = -0.2
    response["confidence"] = 3
    advisor.dimensions_response = response

    suggestion = await ai_assist.suggest_dimensions(uuid.uuid4(), "institutional")

    assert [d.score for d in suggestion.dimensions] == [1, 5, 4, 3, 1, 5, 1]
    assert suggestion.dimensions[0].confidence == 1.0
    assert suggestion.dimensions[1].confidence == 0.0
    assert suggestion.overall_confidence == 1.0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_dimensions_are_matched_by_name_not_position(ai_assist, advisor):
    response = AIDimensionsFactory.create(scores=[1, 2, 3, 4, 5, 4, 3])
    response["dimensions"].reverse()
    advisor.dimensions_response = response

    suggestion = await ai_assist.suggest_dimensions(uuid.uuid4(), "learn_to_swim")

    assert [d.score for d in suggestion.dimensions] == [1, 2, 3, 4, 5, 4, 3]


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize(
    "response",
    [
        None,
        [],
        {"overall_rationale": "no dimensions"},
        {"dimensions": "3,3,3"},
        AIDimensionsFactory.create(scores=[3] * 6),
        AIDimensionsFactory.create(scores=[3, 3, 3, "high", 3, 3, 3]),
        AIDimensionsFactory.create(scores=[3, 3, 3, None, 3, 3, 3]),
        AIDimensionsFactory.create(scores=[3] * 7, confidence="sure"),
        AIDimensionsFactory.create(scores=[3] * 7) | {"confidence": "very"},
    ],
)
async def test_malformed_answers_raise_advice_unavailable(ai_assist, advisor, response):
    advisor.dimensions_response = response

    with pytest.raises(AdviceUnavailable) as exc:
        await ai_assist.suggest_dimensions(uuid.uuid4(), "learn_to_swim")

    assert exc.value.status_code == 502


@pytest.mark.asyncio
@pytest.mark.integration
async def test_duplicate_dimension_is_malformed(ai_assist, advisor):
    response = AIDimensionsFactory.create(scores=[3] * 7)
    response["dimensions"][1]["dimension"] = "dimension_1"
    advisor.dimensions_response = response

    with pytest.raises(AdviceUnavailable):
        await ai_assist.suggest_dimensions(uuid.uuid4(), "learn_to_swim")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_timeout_raises_advice_unavailable(ai_assist, advisor):
    advisor.dimensions_response = AIDimensionsFactory.create()
    advisor.delay = 5

    with pytest.raises(AdviceUnavailable, match="timed out"):
        await ai_assist.suggest_dimensions(uuid.uuid4(), "learn_to_swim")


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize(
    "error",
    [
        httpx.ConnectError("connection refused"),
        RuntimeError("model overloaded"),
    ],
)
async def test_transport_failures_raise_advice_unavailable(ai_assist, advisor, error):
    advisor.error = error

    with pytest.raises(AdviceUnavailable):
        await ai_assist.suggest_dimensions(uuid.uuid4(), "learn_to_swim")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unknown_category_fails_before_advisor_call(ai_assist, advisor, cohorts):
    with pytest.raises(UnknownCategory):
        await ai_assist.suggest_dimensions(uuid.uuid4(), "water_polo")

    assert advisor.dimension_calls == []
    assert cohorts.calls == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_context_precedence_request_over_cohort_over_default(
    ai_assist, advisor, cohorts
):
    cohort_id = uuid.uuid4()
    cohorts.add(
        cohort_id,
        program_name="Adult Beginners",
        capacity=12,
        location_type="open_water",
        duration_weeks=8,
    )
    advisor.dimensions_response = AIDimensionsFactory.create()

    await ai_assist.suggest_dimensions(
        cohort_id,
        ProgramCategory.LEARN_TO_SWIM,
        AIScoringRequest(location_type="indoor_pool", age_group="adults"),
    )

    payload = advisor.dimension_calls[0]
    assert payload["program_category"] == "learn_to_swim"
    assert payload["program_name"] == "Adult Beginners"
    assert payload["location_type"] == "indoor_pool"
    assert payload["age_group"] == "adults"
    assert payload["class_size"] == 12
    assert payload["duration_weeks"] == 8
    assert payload["skill_level"] == "beginner_1"
    assert len(payload["dimension_labels"]) == 7


@pytest.mark.asyncio
@pytest.mark.integration
async def test_cohort_outage_falls_back_to_defaults(ai_assist, advisor, cohorts):
    cohorts.unavailable = True
    advisor.dimensions_response = AIDimensionsFactory.create()

    await ai_assist.suggest_dimensions(uuid.uuid4(), "learn_to_swim")

    assert advisor.dimension_calls[0]["class_size"] == 8


@pytest.mark.asyncio
@pytest.mark.integration
async def test_suggestion_that_maps_to_unoffered_grade_has_no_preview(
    ai_assist, advisor
):
    advisor.dimensions_response = AIDimensionsFactory.create(scores=[1] * 7)

    suggestion = await ai_assist.suggest_dimensions(uuid.uuid4(), "certifications")

    assert suggestion.preview is None
    assert [d.score for d in suggestion.dimensions] == [1] * 7


@pytest.mark.asyncio
@pytest.mark.integration
async def test_suggestion_never_writes(ai_assist, advisor, records):
    cohort_id = uuid.uuid4()
    advisor.dimensions_response = AIDimensionsFactory.create(scores=[5] * 7)

    await ai_assist.suggest_dimensions(cohort_id, "learn_to_swim")

    assert await records.state_of(cohort_id) == ScoringState.UNSCORED
