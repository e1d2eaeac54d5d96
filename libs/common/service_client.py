"""Async HTTP calls to the other SwimBuddz services.

The scoring service never reads another service's tables. Cohort context,
the coach roster and AI advice all come through the helpers below, which
share one request path so caller identity and request IDs travel with
every call.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
from libs.common.config import get_settings
from libs.common.logging import get_logger, get_request_id

logger = get_logger(__name__)


async def internal_request(
    *,
    service_url: str,
    method: str,
    path: str,
    calling_service: str,
    json: Any = None,
    params: Optional[dict] = None,
    timeout: Optional[float] = None,
) -> httpx.Response:
    """Send one internal request and return the raw response.

    ``calling_service`` goes out as ``X-Caller-Service``; the current
    request ID, when there is one, as ``X-Request-ID``. The timeout
    defaults to ``SERVICE_TIMEOUT_SECONDS``.

    Raises:
        httpx.RequestError on connection failures and timeouts.
    """
    headers = {"X-Caller-Service": calling_service}
    request_id = get_request_id()
    if request_id:
        headers["X-Request-ID"] = request_id

    timeout = timeout or get_settings().SERVICE_TIMEOUT_SECONDS
    async with httpx.AsyncClient(timeout=timeout) as client:
        return await client.request(
            method,
            f"{service_url}{path}",
            headers=headers,
            json=json,
            params=params,
        )


async def get_cohort_by_id(cohort_id: str, *, calling_service: str) -> Optional[dict]:
    """Look up a cohort by ID.

    Returns dict with {id, name, program_name, capacity, location_name, ...}
    or None when the cohort does not exist.
    """
    resp = await internal_request(
        service_url=get_settings().COHORTS_SERVICE_URL,
        method="GET",
        path=f"/internal/cohorts/{cohort_id}",
        calling_service=calling_service,
    )
    if resp.status_code == 404:
        return None
    resp.raise_for_status()
    return resp.json()


async def get_coach_roster(category: str, *, calling_service: str) -> list[dict]:
    """Get every coach with their grade for one program category.

    Returns list of {member_id, name, email, grade, status,
    total_coaching_hours, average_feedback_rating}.
    """
    resp = await internal_request(
        service_url=get_settings().MEMBERS_SERVICE_URL,
        method="GET",
        path="/internal/coaches/roster",
        calling_service=calling_service,
        params={"category": category},
    )
    resp.raise_for_status()
    return resp.json()


async def request_ai_advice(
    path: str,
    payload: dict,
    *,
    calling_service: str,
    timeout: Optional[float] = None,
) -> dict:
    """POST a request to the AI service and return the decoded JSON body."""
    settings = get_settings()
    resp = await internal_request(
        service_url=settings.AI_SERVICE_URL,
        method="POST",
        path=path,
        calling_service=calling_service,
        json=payload,
        timeout=timeout or settings.AI_ADVICE_TIMEOUT_SECONDS,
    )
    if resp.status_code != 200:
        logger.error(f"AI service call {path} failed: {resp.status_code} {resp.text}")
    resp.raise_for_status()
    return resp.json()
