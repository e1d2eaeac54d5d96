"""AI-assisted cohort complexity scoring.

Generates complexity dimension scores for a cohort based on its
characteristics (age group, skill level, special needs, etc.).

The dimension names are category-specific and arrive with the request as
``dimension_labels``, so this module never has to mirror the catalog.
"""

from typing import Optional

from libs.common.logging import get_logger
from services.ai_service.providers.base import AIProviderResponse, call_llm

logger = get_logger(__name__)

SYSTEM_PROMPT = """You assess how demanding a swimming cohort is to coach for SwimBuddz, a swimming academy in Lagos, Nigeria.

Rate the cohort on the 7 dimensions listed in the user message. The dimensions differ per
program category, so read their names carefully. Use this scale for every dimension:
- 1: very low complexity, any coach can manage it
- 2: low complexity
- 3: moderate complexity
- 4: high complexity
- 5: very high complexity, only an expert should take it on

The sum of the 7 scores decides the minimum coach grade:
- grade_1 for totals 7-14
- grade_2 for totals 15-24
- grade_3 for totals 25-35

Give a short rationale and a confidence between 0 and 1 for each dimension.
Answer with JSON only."""

USER_PROMPT_TEMPLATE = """Cohort profile:
- Program Category: {program_category}
- Program: {program_name}
- Age Group: {age_group}
- Skill Level: {skill_level}
- Special Needs: {special_needs}
- Location Type: {location_type}
- Duration: {duration_weeks} weeks
- Class Size: {class_size} students

Dimensions for the "{program_category}" category:
{dimension_list}

Respond with:
{{
    "dimensions": [
        {{"dimension": "dimension_<n>", "score": <1-5>, "rationale": "<why>", "confidence": <0-1>}}
    ],
    "overall_rationale": "<summary>",
    "confidence": <0-1>
}}

Return exactly 7 entries in "dimensions", dimension_1 through dimension_7, in order."""


def build_dimension_list(labels: list[str]) -> str:
    """Build a numbered list of category-specific dimension labels for the prompt."""
    return "\n".join(
        f"{i + 1}. dimension_{i + 1}: {label}" for i, label in enumerate(labels)
    )


def build_user_prompt(request: dict) -> str:
    return USER_PROMPT_TEMPLATE.format(
        program_category=request.get("program_category", ""),
        program_name=request.get("program_name") or "Not specified",
        age_group=request.get("age_group") or "mixed",
        skill_level=request.get("skill_level") or "beginner_1",
        special_needs=request.get("special_needs") or "None",
        location_type=request.get("location_type") or "indoor_pool",
        duration_weeks=request.get("duration_weeks") or 12,
        class_size=request.get("class_size") or 8,
        dimension_list=build_dimension_list(request.get("dimension_labels", [])),
    )


async def score_cohort_complexity(
    request: dict,
    model: Optional[str] = None,
) -> tuple[dict, AIProviderResponse]:
    """Score cohort complexity using an LLM.

    Returns the parsed JSON body and the raw provider response. The body is
    untrusted; callers validate it.
    """
    ai_response = await call_llm(
        system_prompt=SYSTEM_PROMPT,
        user_prompt=build_user_prompt(request),
        model=model,
        temperature=0.1,
        trace_name="cohort_complexity_scoring",
    )

    parsed = ai_response.parse_json()
    logger.info(
        f"Cohort complexity scored by {ai_response.model} "
        f"in {ai_response.latency_ms}ms"
    )
    return parsed, ai_response
