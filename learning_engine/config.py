from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Loads and validates environment variables."""

    DATABASE_URL: str
    REDIS_URL: str = "redis://localhost:6379/0"
    INTERNAL_API_KEY: str

    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    DEFAULT_RECOMMENDATION_LIMIT: int = 5
    MAX_RECOMMENDATION_LIMIT: int = 50
    DEFAULT_ROUTINE_MINUTES: int = 25
    NEW_TOPIC_INTEREST_STRENGTH: float = Field(0.5, ge=0, le=1)

    ENGAGEMENT_QUEUE_KEY: str = "engagement-queue"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
