"""Collaborator contracts and their default implementations.

The engine only talks to the outside world through these protocols:
the cohort identity service, the coach roster, and the AI advisor. The
HTTP implementations go through ``libs.common.service_client``; the direct
advisor prompts an LLM in-process.
"""

import uuid
from typing import Optional, Protocol

import httpx
from libs.common.config import get_settings
from libs.common.logging import get_logger
from libs.common.service_client import (
    get_coach_roster,
    get_cohort_by_id,
    request_ai_advice,
)
from services.scoring_service.errors import CollaboratorUnavailable

logger = get_logger(__name__)

CALLING_SERVICE = "scoring"


class CohortDirectory(Protocol):
    """Confirms cohorts exist and supplies their context."""

    async def get_cohort(self, cohort_id: uuid.UUID) -> Optional[dict]: ...


class CoachRoster(Protocol):
    """Point-in-time read of every coach and their grade for a category."""

    async def list_coaches(self, category: str) -> list[dict]: ...


class ScoringAdvisor(Protocol):
    """External advisory service. Responses are untrusted."""

    async def suggest_dimensions(self, payload: dict) -> dict: ...

    async def rank_coaches(self, payload: dict) -> dict: ...


class ServiceCohortDirectory:
    async def get_cohort(self, cohort_id: uuid.UUID) -> Optional[dict]:
        try:
            return await get_cohort_by_id(
                str(cohort_id), calling_service=CALLING_SERVICE
            )
        except httpx.HTTPError as e:
            logger.error(f"Cohort lookup for {cohort_id} failed: {e}")
            raise CollaboratorUnavailable("Cohort service is unavailable") from e


class ServiceCoachRoster:
    async def list_coaches(self, category: str) -> list[dict]:
        try:
            return await get_coach_roster(category, calling_service=CALLING_SERVICE)
        except httpx.HTTPError as e:
            logger.error(f"Coach roster lookup for {category} failed: {e}")
            raise CollaboratorUnavailable("Coach roster is unavailable") from e


class ServiceAdvisor:
    """Delegates to the AI service over HTTP."""

    async def suggest_dimensions(self, payload: dict) -> dict:
        return await request_ai_advice(
            "/ai/score/cohort-complexity", payload, calling_service=CALLING_SERVICE
        )

    async def rank_coaches(self, payload: dict) -> dict:
        return await request_ai_advice(
            "/ai/score/suggest-coach", payload, calling_service=CALLING_SERVICE
        )


class LLMAdvisor:
    """Prompts the configured model directly through LiteLLM."""

    def __init__(self, model: Optional[str] = None):
        self.model = model

    async def suggest_dimensions(self, payload: dict) -> dict:
        from services.ai_service.scoring.cohort_complexity import (
            score_cohort_complexity,
        )

        parsed, ai_response = await score_cohort_complexity(payload, model=self.model)
        return {**parsed, "model_used": ai_response.model}

    async def rank_coaches(self, payload: dict) -> dict:
        from services.ai_service.scoring.coach_suggestion import suggest_coaches

        parsed, ai_response = await suggest_coaches(payload, model=self.model)
        return {**parsed, "model_used": ai_response.model}


def build_advisor() -> ScoringAdvisor:
    """Pick the advisor implementation from settings."""
    settings = get_settings()
    if settings.AI_ADVISOR_MODE == "direct":
        return LLMAdvisor(model=settings.AI_DEFAULT_MODEL)
    return ServiceAdvisor()
