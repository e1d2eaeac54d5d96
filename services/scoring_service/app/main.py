"""FastAPI application for the Scoring Service."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from libs.common.config import get_settings
from libs.common.error_handler import add_exception_handlers
from libs.common.logging import get_logger
from libs.common.middleware import add_observability_middleware
from libs.db.base import Base
from libs.db.config import get_engine
from services.scoring_service.ai_assist import AIAssistAdapter
from services.scoring_service.clients import (
    CoachRoster,
    CohortDirectory,
    ScoringAdvisor,
    ServiceCoachRoster,
    ServiceCohortDirectory,
    build_advisor,
)
from services.scoring_service.coach_ranking import CoachRankingAdvisor
from services.scoring_service.eligibility import CoachEligibilityResolver
from services.scoring_service.errors import ScoringError
from services.scoring_service.pay_bands import PayBandTable, load_pay_band_table
from services.scoring_service.records import ComplexityScoreManager
from services.scoring_service.routers import scoring_router
from services.scoring_service.scoring import ScoreCalculator
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

logger = get_logger(__name__)


def create_app(
    *,
    engine: Optional[AsyncEngine] = None,
    pay_bands: Optional[PayBandTable] = None,
    cohorts: Optional[CohortDirectory] = None,
    roster: Optional[CoachRoster] = None,
    advisor: Optional[ScoringAdvisor] = None,
) -> FastAPI:
    """Create and configure the Scoring Service FastAPI app.

    Collaborators default to the HTTP clients configured in settings. The
    pay band table is loaded here so a bad table stops the process before
    it accepts traffic.

    Raises:
        IncompleteConfiguration: the pay band table is missing entries
    """
    settings = get_settings()
    owns_engine = engine is None
    engine = engine or get_engine()

    if pay_bands is None:
        pay_bands = load_pay_band_table(settings.PAY_BAND_TABLE_PATH)
    cohorts = cohorts or ServiceCohortDirectory()
    roster = roster or ServiceCoachRoster()
    advisor = advisor or build_advisor()

    session_factory = async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
    calculator = ScoreCalculator(pay_bands)
    records = ComplexityScoreManager(session_factory, calculator, cohorts=cohorts)
    eligibility = CoachEligibilityResolver(records, roster)
    timeout = settings.AI_ADVICE_TIMEOUT_SECONDS

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Scoring service ready")
        yield
        if owns_engine:
            await engine.dispose()

    app = FastAPI(
        title="SwimBuddz Scoring Service",
        version="0.1.0",
        description="Cohort complexity scoring and coach qualification.",
        lifespan=lifespan,
    )

    app.state.engine = engine
    app.state.records = records
    app.state.eligibility = eligibility
    app.state.ai_assist = AIAssistAdapter(
        advisor, calculator, cohorts=cohorts, timeout=timeout
    )
    app.state.ranking = CoachRankingAdvisor(
        eligibility, advisor, cohorts=cohorts, timeout=timeout
    )

    # Add observability (structured logging + request tracing)
    add_observability_middleware(app)

    # Domain errors carry their own status code and payload
    add_exception_handlers(app, ScoringError)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "scoring"}

    app.include_router(scoring_router, prefix="/scoring")

    return app


app = create_app()
