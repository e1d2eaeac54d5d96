"""Scoring service routers."""

from services.scoring_service.routers.scoring import router as scoring_router

__all__ = ["scoring_router"]
