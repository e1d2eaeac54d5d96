"""Tests for the in-process LLM advisor and its prompts.

litellm.acompletion is patched; nothing reaches a model provider.
"""

import json
import uuid
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from services.ai_service.providers.base import AIProviderResponse, provider_for
from services.ai_service.scoring.coach_suggestion import format_coaches
from services.ai_service.scoring.cohort_complexity import build_user_prompt
from services.scoring_service.ai_assist import AIAssistAdapter
from services.scoring_service.catalog import labels_for
from services.scoring_service.clients import LLMAdvisor
from services.scoring_service.errors import AdviceUnavailable
from tests.factories import AIDimensionsFactory


def _completion(content: str) -> SimpleNamespace:
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(prompt_tokens=120, completion_tokens=80),
    )


@pytest.mark.unit
def test_parse_json_strips_code_fences():
    response = AIProviderResponse(
        content='```json\n{"confidence": 0.5}\n```', model="gpt-4o", provider="openai"
    )

    assert response.parse_json() == {"confidence": 0.5}


@pytest.mark.unit
@pytest.mark.parametrize("content", ["[1, 2]", "not json at all"])
def test_parse_json_rejects_non_objects(content):
    response = AIProviderResponse(content=content, model="m", provider="p")

    with pytest.raises(ValueError):
        response.parse_json()


@pytest.mark.unit
@pytest.mark.parametrize(
    "model,provider",
    [
        ("gpt-4o-mini", "openai"),
        ("claude-3-5-sonnet-20241022", "anthropic"),
        ("gemini/gemini-1.5-pro", "google"),
        ("mistral-large", "unknown"),
    ],
)
def test_provider_for(model, provider):
    assert provider_for(model) == provider


@pytest.mark.unit
def test_user_prompt_lists_category_labels():
    labels = list(labels_for("institutional"))

    prompt = build_user_prompt(
        {"program_category": "institutional", "dimension_labels": labels}
    )

    assert "7. dimension_7: Contract/Commercial Pressure" in prompt
    assert "Class Size: 8 students" in prompt


@pytest.mark.unit
def test_format_coaches_handles_missing_rating():
    text = format_coaches(
        [
            {"member_id": "m1", "name": "Ada", "grade": "grade_2"},
            {
                "member_id": "m2",
                "name": "Bola",
                "grade": "grade_3",
                "average_feedback_rating": 4.25,
            },
        ]
    )

    assert "No ratings yet" in text
    assert "Rating: 4.2/5.0" in text or "Rating: 4.3/5.0" in text


@pytest.mark.asyncio
@pytest.mark.integration
async def test_llm_advisor_returns_parsed_body_with_model():
    body = AIDimensionsFactory.create(scores=[2] * 7)
    body.pop("model_used")

    with patch(
        "litellm.acompletion",
        new_callable=AsyncMock,
        return_value=_completion(json.dumps(body)),
    ) as mock_completion:
        result = await LLMAdvisor(model="gpt-4o").suggest_dimensions(
            {
                "program_category": "learn_to_swim",
                "dimension_labels": list(labels_for("learn_to_swim")),
            }
        )

    assert result["model_used"] == "gpt-4o"
    assert len(result["dimensions"]) == 7
    kwargs = mock_completion.call_args.kwargs
    assert kwargs["model"] == "gpt-4o"
    assert kwargs["messages"][0]["role"] == "system"
    assert "Age Group Complexity" in kwargs["messages"][1]["content"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_llm_advisor_ranks_coaches():
    body = {"rankings": [{"member_id": "m1", "match_score": 0.8, "rationale": "ok"}]}

    with patch(
        "litellm.acompletion",
        new_callable=AsyncMock,
        return_value=_completion(json.dumps(body)),
    ) as mock_completion:
        result = await LLMAdvisor(model="gpt-4o").rank_coaches(
            {
                "program_category": "learn_to_swim",
                "total_score": 21,
                "required_coach_grade": "grade_2",
                "coaches": [{"member_id": "m1", "name": "Ada", "grade": "grade_2"}],
            }
        )

    assert result["rankings"][0]["member_id"] == "m1"
    assert "ID: m1" in mock_completion.call_args.kwargs["messages"][1]["content"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_garbled_model_output_becomes_advice_unavailable(calculator):
    adapter = AIAssistAdapter(LLMAdvisor(model="gpt-4o"), calculator, timeout=1)

    with patch(
        "litellm.acompletion",
        new_callable=AsyncMock,
        return_value=_completion("I think the cohort is moderately complex."),
    ):
        with pytest.raises(AdviceUnavailable):
            await adapter.suggest_dimensions(uuid.uuid4(), "learn_to_swim")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_provider_failure_becomes_advice_unavailable(calculator):
    adapter = AIAssistAdapter(LLMAdvisor(model="gpt-4o"), calculator, timeout=1)

    with patch(
        "litellm.acompletion",
        new_callable=AsyncMock,
        side_effect=RuntimeError("rate limited"),
    ):
        with pytest.raises(AdviceUnavailable, match="rate limited"):
            await adapter.suggest_dimensions(uuid.uuid4(), "learn_to_swim")
