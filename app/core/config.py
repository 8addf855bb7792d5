"""Configuration management for the Hypothesis Tracker."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # In sandboxed environments, .env might not be accessible
    # Environment variables should be set directly
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Supabase configuration (required)
    SUPABASE_URL: str = Field(..., description="Supabase project URL")
    SUPABASE_SERVICE_ROLE_KEY: str = Field(..., description="Supabase service role key")

    # Environment
    HYPOTHESIS_TRACKER_ENV: str = Field(
        default="dev", description="Environment: dev, staging, prod"
    )

    # AI draft generation (OpenAI-compatible endpoint)
    LLM_API_KEY: str | None = Field(
        default=None, description="API key for the draft generation endpoint"
    )
    LLM_BASE_URL: str = Field(
        default="https://api.deepseek.com/v1",
        description="Base URL of the OpenAI-compatible chat completions API",
    )
    DRAFT_MODEL: str = Field(default="deepseek-chat", description="Model for hypothesis drafts")
    DRAFT_TEMPERATURE: float = Field(default=0.7, description="Sampling temperature for drafts")
    PROJECT_SEED_HYPOTHESES: int = Field(
        default=5, description="Drafts generated when a project is created with auto-generation"
    )

    # Version history
    VERSION_RECORD_MAX_ATTEMPTS: int = Field(
        default=3,
        ge=1,
        description="Total attempts for recording a version when the number is taken concurrently",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance

    Raises:
        ValidationError: If required environment variables are missing
    """
    return Settings()
