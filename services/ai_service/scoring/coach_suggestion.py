"""AI-assisted coach suggestion for cohorts.

Given a scored cohort and a list of eligible coaches, uses an LLM to
rank the coaches by suitability and provide rationale for each.
"""

from typing import Optional

from libs.common.logging import get_logger
from services.ai_service.providers.base import AIProviderResponse, call_llm

logger = get_logger(__name__)

SYSTEM_PROMPT = """You advise SwimBuddz, a swimming academy in Lagos, Nigeria, on which coach should lead a cohort.

You receive a cohort that has already been scored on 7 complexity dimensions and the list of
coaches who are qualified to run it. Every coach on the list meets the grade requirement;
your job is ordering, not screening.

Weigh, most important first:
- Fit of grade to requirement: prefer a coach at the required grade over one far above it so
  senior coaches stay free for harder cohorts.
- Experience: more coaching hours means more reliability on demanding dimensions.
- Feedback: a higher average rating signals better learner outcomes.
- Development: a newer coach can be a good match for a cohort at the low end of the band.

Give each coach:
- match_score between 0.0 and 1.0 (1.0 = ideal fit)
- rationale of one or two sentences

Never invent coaches or IDs that are not on the list. Answer with JSON only."""

USER_PROMPT_TEMPLATE = """Cohort to staff:
- Program: {program_name}
- Category: {program_category}
- Cohort: {cohort_name}
- Location: {location}
- Capacity: {capacity} students
- Complexity: {total_score}/35, requires {required_coach_grade}
- Dimensions: {dimension_summary}

Qualified coaches:
{coaches_text}

Respond with:
{{
    "rankings": [
        {{"member_id": "<id from the list>", "match_score": <0-1>, "rationale": "<why>"}}
    ]
}}

List every coach exactly once, best fit first."""


def _describe_coach(position: int, coach: dict) -> str:
    rating = coach.get("average_feedback_rating")
    rating_str = "No ratings yet" if rating is None else f"{rating:.1f}/5.0"
    hours = coach.get("total_coaching_hours") or 0
    return (
        f"{position}. {coach.get('name') or 'Unknown'} "
        f"(ID: {coach['member_id']}, Grade: {coach.get('grade') or 'unknown'}, "
        f"Hours: {hours:g}, Rating: {rating_str})"
    )


def format_coaches(coaches: list[dict]) -> str:
    """One numbered line per coach, in the order the engine sent them."""
    return "\n".join(_describe_coach(i, c) for i, c in enumerate(coaches, 1))


async def suggest_coaches(
    request: dict,
    model: Optional[str] = None,
) -> tuple[dict, AIProviderResponse]:
    """Rank coaches for a cohort using an LLM.

    Args:
        request: Dict with program_category, cohort_name, program_name,
                 total_score, required_coach_grade, dimension_summary,
                 location, capacity, coaches (list of dicts).
        model: Optional LLM model override.

    Returns:
        (parsed_result_dict, ai_response)
    """
    user_prompt = USER_PROMPT_TEMPLATE.format(
        program_name=request.get("program_name") or "Not specified",
        program_category=request.get("program_category", ""),
        cohort_name=request.get("cohort_name") or "Not specified",
        location=request.get("location") or "Not specified",
        capacity=request.get("capacity") or "?",
        total_score=request.get("total_score", "?"),
        required_coach_grade=request.get("required_coach_grade", "?"),
        dimension_summary=request.get("dimension_summary", ""),
        coaches_text=format_coaches(request.get("coaches", [])),
    )

    ai_response = await call_llm(
        system_prompt=SYSTEM_PROMPT,
        user_prompt=user_prompt,
        model=model,
        temperature=0.15,
        trace_name="coach_suggestion",
    )

    parsed = ai_response.parse_json()
    logger.info(
        f"Ranked {len(request.get('coaches', []))} coaches with {ai_response.model} "
        f"in {ai_response.latency_ms}ms"
    )
    return parsed, ai_response
