"""
Application Configuration

Uses Pydantic Settings for type-safe environment variable management.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Variables the deployment is expected to provide explicitly.
REQUIRED_ENV_VARS: tuple[str, ...] = (
    "APPWRITE_ENDPOINT",
    "APPWRITE_PROJECT_ID",
    "APPWRITE_DATABASE_ID",
    "USERS_COLLECTION_ID",
    "GROUPS_COLLECTION_ID",
    "LESSONS_COLLECTION_ID",
    "ATTENDANCE_COLLECTION_ID",
    "SURVEYS_COLLECTION_ID",
    "SURVEY_QUESTIONS_COLLECTION_ID",
    "SURVEY_RESPONSES_COLLECTION_ID",
    "SURVEY_ANSWERS_COLLECTION_ID",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    # ========================================================================
    # APPLICATION
    # ========================================================================

    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    DEBUG: bool = False

    # ========================================================================
    # BACKEND SERVICE (Appwrite-compatible)
    # ========================================================================

    APPWRITE_ENDPOINT: str = Field(
        default="https://cloud.appwrite.io/v1",
        description="Base URL of the hosted backend REST API",
    )
    APPWRITE_PROJECT_ID: str = Field(default="", description="Backend project ID")
    APPWRITE_DATABASE_ID: str = Field(default="", description="Document database ID")
    APPWRITE_API_KEY: str = Field(default="", description="Server API key (optional)")

    BACKEND_TIMEOUT: float = 30.0
    BACKEND_MAX_RETRIES: int = 3
    BACKEND_RETRY_BASE_DELAY: float = 0.5
    BACKEND_RETRY_MAX_DELAY: float = 8.0
    BACKEND_PAGE_SIZE: int = Field(
        default=100, description="Documents requested per list call when paging"
    )

    # ========================================================================
    # COLLECTIONS
    # ========================================================================

    USERS_COLLECTION_ID: str = "users"
    GROUPS_COLLECTION_ID: str = "groups"
    LESSONS_COLLECTION_ID: str = "lessons"
    ATTENDANCE_COLLECTION_ID: str = "attendance"
    SURVEYS_COLLECTION_ID: str = "surveys"
    SURVEY_QUESTIONS_COLLECTION_ID: str = "survey_questions"
    SURVEY_RESPONSES_COLLECTION_ID: str = "survey_responses"
    SURVEY_ANSWERS_COLLECTION_ID: str = "survey_answers"

    # ========================================================================
    # SESSION COOKIES
    # ========================================================================

    AUTH_COOKIE_NAME: str = Field(
        default="auth-storage", description="Cookie carrying the session snapshot"
    )
    BACKEND_SESSION_COOKIE_NAME: str = Field(
        default="backend-session", description="HTTP-only cookie with the backend session secret"
    )
    AUTH_COOKIE_MAX_AGE: int = 60 * 60 * 24 * 7

    # ========================================================================
    # COMPUTED PROPERTIES
    # ========================================================================

    @property
    def collections(self) -> dict[str, str]:
        """Collection IDs keyed by entity name."""
        return {
            "users": self.USERS_COLLECTION_ID,
            "groups": self.GROUPS_COLLECTION_ID,
            "lessons": self.LESSONS_COLLECTION_ID,
            "attendance": self.ATTENDANCE_COLLECTION_ID,
            "surveys": self.SURVEYS_COLLECTION_ID,
            "survey_questions": self.SURVEY_QUESTIONS_COLLECTION_ID,
            "survey_responses": self.SURVEY_RESPONSES_COLLECTION_ID,
            "survey_answers": self.SURVEY_ANSWERS_COLLECTION_ID,
        }

    @property
    def missing_env_vars(self) -> list[str]:
        """Required variables that fell back to their hardcoded defaults."""
        return [name for name in REQUIRED_ENV_VARS if name not in self.model_fields_set]

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.ENVIRONMENT == "production"

    @property
    def is_local(self) -> bool:
        """Check if running locally."""
        return self.ENVIRONMENT == "local"


# Global settings instance
settings = Settings()
