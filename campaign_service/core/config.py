# campaign_service/core/config.py

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Values come from the environment (or a local .env during development).
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # The environment mode: 'local' or 'prod'
    ENV: str = "local"

    # --- Production URLs (for inside Docker) ---
    DATABASE_URL_PROD: str = "postgresql://postgres:postgres@db:5432/campaign_db"
    REDIS_URL_PROD: str = "redis://redis:6379/0"

    # --- Local Development URLs (for running locally) ---
    DATABASE_URL_LOCAL: str = "sqlite:///./campaign_service.db"
    REDIS_URL_LOCAL: str = "redis://localhost:6379/0"

    # Auth
    JWT_SECRET: str = "dev-secret-change-me"

    # Content generation
    ANTHROPIC_API_KEY: Optional[str] = None
    ANTHROPIC_MODEL: str = "claude-sonnet-4-5-20250929"
    GENERATION_MAX_RETRIES: int = 2

    # Campaign creation quota
    CAMPAIGN_RATE_LIMIT: int = 5
    CAMPAIGN_RATE_WINDOW_SECONDS: int = 3600

    # Scheduling
    DEFAULT_MIN_HOURS_BETWEEN: float = 4
    DEFAULT_MAX_POSTS_PER_DAY: int = 5
    SINGLE_POST_MIN_LEAD_MINUTES: int = 5

    # Optimal time analysis
    ANALYSIS_LOOKBACK_DAYS: int = 90
    ANALYSIS_MIN_EVENTS: int = 30
    ANALYSIS_MAX_RUNTIME_SECONDS: int = 90
    ANALYSIS_STALE_AFTER_SECONDS: int = 600
    ANALYSIS_POLL_INTERVAL_SECONDS: float = 5
    ANALYSIS_POLL_MAX_ATTEMPTS: int = 24

    # Toggles
    RATE_LIMIT_ENABLED: bool = True
    SCHEDULER_ENABLED: bool = True
    LOG_LEVEL: str = "INFO"

    # --- Dynamic Properties ---
    @property
    def DATABASE_URL(self) -> str:
        return (
            self.DATABASE_URL_LOCAL if self.ENV == "local" else self.DATABASE_URL_PROD
        )

    @property
    def REDIS_URL(self) -> str:
        return self.REDIS_URL_LOCAL if self.ENV == "local" else self.REDIS_URL_PROD


settings = Settings()
