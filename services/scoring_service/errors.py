"""Domain errors raised by the scoring engine.

Each error carries the HTTP status and machine code the API layer answers
with, so routers never translate errors by hand.
"""

from typing import Any, Optional


class ScoringError(Exception):
    """Base class for every error the scoring engine raises on purpose."""

    status_code: int = 400
    code: str = "scoring_error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.detail, "code": self.code}


class InvalidScoreInput(ScoringError):
    """Malformed or out-of-range dimension scores.

    ``errors`` lists every offending entry as ``{"index", "value", "reason"}``
    where ``index`` is the 1-based dimension index.
    """

    status_code = 422
    code = "invalid_score_input"

    def __init__(self, errors: list[dict[str, Any]], detail: Optional[str] = None):
        self.errors = errors
        if detail is None:
            indexes = ", ".join(str(e["index"]) for e in errors)
            detail = f"Invalid dimension scores at index {indexes}"
        super().__init__(detail)

    @property
    def indexes(self) -> list[int]:
        return [e["index"] for e in self.errors]

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["errors"] = self.errors
        return payload


class UnknownCategory(ScoringError):
    status_code = 422
    code = "unknown_category"

    def __init__(self, category: Any):
        self.category = category
        super().__init__(f"Unknown program category: {category!r}")


class GradeNotOffered(ScoringError):
    """The pay band table marks this (category, grade) pair as not offered."""

    status_code = 422
    code = "grade_not_offered"

    def __init__(self, category: str, grade: str):
        self.category = category
        self.grade = grade
        super().__init__(f"{grade} coaches cannot deliver {category} programs")


class Conflict(ScoringError):
    status_code = 409
    code = "conflict"


class NotFound(ScoringError):
    status_code = 404
    code = "not_found"


class NotScored(ScoringError):
    status_code = 409
    code = "not_scored"

    def __init__(self, cohort_id: Any):
        self.cohort_id = cohort_id
        super().__init__(
            f"Cohort {cohort_id} has no complexity score. Score the cohort first."
        )


class AdviceUnavailable(ScoringError):
    """The AI advisor failed, timed out or answered with garbage.

    Always recoverable: callers fall back to manual entry.
    """

    status_code = 502
    code = "advice_unavailable"


class CollaboratorUnavailable(ScoringError):
    """A cohort or roster service could not be reached."""

    status_code = 503
    code = "collaborator_unavailable"


class IncompleteConfiguration(ScoringError):
    """Startup configuration is missing entries. Never raised per request."""

    status_code = 500
    code = "incomplete_configuration"

    def __init__(self, detail: str, missing: Optional[list[str]] = None):
        self.missing = missing or []
        super().__init__(detail)
