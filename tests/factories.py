"""
Test data builders.

Roster rows and advisor payloads are plain dicts shaped like the wire
formats of the members and AI services. Override any field via kwargs.

Usage:
    coach = RosterCoachFactory.create(grade="grade_3")
    roster.coaches.append(coach)
"""

import uuid
from typing import Optional, Sequence


def _uuid() -> uuid.UUID:
    return uuid.uuid4()


class RosterCoachFactory:
    @staticmethod
    def create(**overrides) -> dict:
        member_id = overrides.pop("member_id", None) or str(_uuid())
        defaults = {
            "member_id": member_id,
            "name": f"Coach {member_id[:6]}",
            "email": f"coach-{member_id[:8]}@test.com",
            "grade": "grade_2",
            "status": "active",
            "total_coaching_hours": 120,
            "average_feedback_rating": 4.5,
        }
        defaults.update(overrides)
        return defaults


class AIDimensionsFactory:
    @staticmethod
    def create(
        scores: Sequence = (3, 3, 3, 3, 3, 3, 3),
        confidence: Optional[float] = 0.8,
        **overrides,
    ) -> dict:
        defaults = {
            "dimensions": [
                {
                    "dimension": f"dimension_{i}",
                    "score": score,
                    "rationale": f"Reason {i}",
                    "confidence": confidence,
                }
                for i, score in enumerate(scores, start=1)
            ],
            "overall_rationale": "Typical beginner cohort",
            "confidence": 0.75,
            "model_used": "gpt-4o-mini",
        }
        defaults.update(overrides)
        return defaults


def submission(scores: Sequence[int], category: str = "learn_to_swim", **extra) -> dict:
    """JSON body for create/update."""
    body = {
        "category": category,
        "dimensions": [
            {"index": i, "score": score} for i, score in enumerate(scores, start=1)
        ],
    }
    body.update(extra)
    return body
