from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from libs.common.config import get_settings


@lru_cache
def get_engine() -> AsyncEngine:
    """Create the async engine on first use."""
    settings = get_settings()

    kwargs = {
        # echo=True for local dev to see SQL queries
        "echo": settings.ENVIRONMENT == "local",
        "pool_pre_ping": True,
    }
    # SQLite (tests, local tooling) does not take queue pool sizing
    if not settings.DATABASE_URL.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
        )

    return create_async_engine(settings.DATABASE_URL, **kwargs)
