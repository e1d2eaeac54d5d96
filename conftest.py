import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Optional overrides for local runs; the in-memory database is the default
env_test_path = os.path.join(os.path.dirname(__file__), ".env.test")
if os.path.exists(env_test_path):
    load_dotenv(env_test_path, override=True)

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("AI_ADVISOR_MODE", "service")

from libs.common.config import get_settings  # noqa: E402
from libs.db.base import Base  # noqa: E402
from services.scoring_service.ai_assist import AIAssistAdapter  # noqa: E402
from services.scoring_service.coach_ranking import CoachRankingAdvisor  # noqa: E402
from services.scoring_service.eligibility import CoachEligibilityResolver  # noqa: E402
from services.scoring_service.pay_bands import load_pay_band_table  # noqa: E402
from services.scoring_service.records import ComplexityScoreManager  # noqa: E402
from services.scoring_service.scoring import ScoreCalculator  # noqa: E402
from tests.stubs import StubAdvisor, StubCoachRoster, StubCohortDirectory  # noqa: E402

# Clear cached settings to reload with the test env vars
get_settings.cache_clear()
settings = get_settings()


@pytest_asyncio.fixture
async def test_engine():
    """
    A fresh in-memory database per test.

    StaticPool keeps the single connection alive so every session sees the
    same database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=test_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest.fixture
def pay_bands():
    return load_pay_band_table()


@pytest.fixture
def calculator(pay_bands) -> ScoreCalculator:
    return ScoreCalculator(pay_bands)


@pytest.fixture
def cohorts() -> StubCohortDirectory:
    return StubCohortDirectory()


@pytest.fixture
def roster() -> StubCoachRoster:
    return StubCoachRoster()


@pytest.fixture
def advisor() -> StubAdvisor:
    return StubAdvisor()


@pytest.fixture
def records(session_factory, calculator, cohorts) -> ComplexityScoreManager:
    return ComplexityScoreManager(session_factory, calculator, cohorts=cohorts)


@pytest.fixture
def resolver(records, roster) -> CoachEligibilityResolver:
    return CoachEligibilityResolver(records, roster)


@pytest.fixture
def ai_assist(advisor, calculator, cohorts) -> AIAssistAdapter:
    return AIAssistAdapter(advisor, calculator, cohorts=cohorts, timeout=0.5)


@pytest.fixture
def ranking(resolver, advisor, cohorts) -> CoachRankingAdvisor:
    return CoachRankingAdvisor(resolver, advisor, cohorts=cohorts, timeout=0.5)


@pytest_asyncio.fixture
async def client(
    test_engine, pay_bands, cohorts, roster, advisor
) -> AsyncGenerator[AsyncClient, None]:
    """
    Yield an AsyncClient bound to an app wired to the stub collaborators.
    """
    from services.scoring_service.app.main import create_app

    app = create_app(
        engine=test_engine,
        pay_bands=pay_bands,
        cohorts=cohorts,
        roster=roster,
        advisor=advisor,
    )
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
