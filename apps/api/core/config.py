"""
Centralized configuration management with validation.

All environment variables are loaded and validated here.
This ensures consistent configuration across the application.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    """Application settings with validation."""

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    # Redis Configuration (advisory insight cache)
    REDIS_URL: str = Field(default="redis://redis:6379/0")
    INSIGHT_CACHE_ENABLED: bool = Field(default=True)

    # Local calendar day. IANA name (e.g. "America/Denver"); unset = host local zone.
    LOCAL_TIMEZONE: Optional[str] = Field(default=None)

    # Window used for the cached home insight
    HOME_INSIGHT_DAYS: int = Field(default=14, ge=1, le=90)

    # Longest range accepted by the rollup range endpoint
    MAX_RANGE_DAYS: int = Field(default=366, ge=1)

    # Text estimation ("keyword" = local fallback only, "openai" = external service first)
    TEXT_ESTIMATOR: str = Field(default="keyword")
    OPENAI_API_KEY: Optional[str] = Field(default=None)
    OPENAI_MODEL: str = Field(default="gpt-4o-mini")

    # External API Configuration
    EXTERNAL_API_TIMEOUT: int = Field(default=30)

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="json")  # json or text

    # Environment
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)

    # CORS - comma-separated list of allowed origins for production
    # e.g., "https://attune.app,https://www.attune.app"
    CORS_ORIGINS: Optional[str] = Field(default=None)


# Global settings instance
settings = Settings()
