from functools import lru_cache
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings."""

    # Application
    ENVIRONMENT: Literal["local", "development", "production"] = "local"
    LOG_LEVEL: str = "INFO"
    SERVICE_NAME: str = "scoring"

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # Collaborating services
    COHORTS_SERVICE_URL: str = "http://academy-service:8006"
    MEMBERS_SERVICE_URL: str = "http://members-service:8001"
    AI_SERVICE_URL: str = "http://ai-service:8010"
    SERVICE_TIMEOUT_SECONDS: float = 10.0

    # AI advisory
    # "service" posts to AI_SERVICE_URL, "direct" prompts the model in-process
    AI_ADVISOR_MODE: Literal["service", "direct"] = "service"
    AI_ADVICE_TIMEOUT_SECONDS: float = 30.0
    AI_DEFAULT_MODEL: str = "gpt-4o-mini"
    LANGFUSE_HOST: str = ""

    # Pay band policy table (JSON). Falls back to the packaged table.
    PAY_BAND_TABLE_PATH: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str]) -> str:
        if isinstance(v, str):
            if v.startswith("postgresql://"):
                return v.replace("postgresql://", "postgresql+psycopg://", 1)
        return v

    @field_validator("SERVICE_TIMEOUT_SECONDS", "AI_ADVICE_TIMEOUT_SECONDS")
    @classmethod
    def require_positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Timeouts must be greater than zero")
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Return the global settings instance, cached.
    """
    return Settings()
