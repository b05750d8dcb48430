# backend/trialdesk/core/config.py
import logging
import os
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    environment: Literal["development", "test", "staging", "production"] = Field(
        default="development",
        alias="ENVIRONMENT",
        description="Deployment environment name",
    )
    database_url: str = Field(
        default="sqlite:///./trialdesk.db",
        alias="DATABASE_URL",
        description="SQLAlchemy URL of the shared scheduling store",
    )
    test_database_url: Optional[str] = Field(
        default=None,
        alias="TEST_DATABASE_URL",
        description="Database used by the test suite (defaults to in-memory SQLite)",
    )
    sql_echo: bool = Field(default=False, alias="SQL_ECHO")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Scheduling
    assignment_max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        alias="ASSIGNMENT_MAX_ATTEMPTS",
        description="Candidate selections tried before reporting that no teacher is free",
    )
    business_timezone: str = Field(
        default="Africa/Cairo",
        alias="BUSINESS_TIMEZONE",
        description="Timezone that defines 'today' for availability locks",
    )
    slot_interval_minutes: int = Field(
        default=30,
        alias="SLOT_INTERVAL_MINUTES",
        description="Granularity of the teacher slot grid",
    )
    default_package_sessions: int = Field(
        default=8,
        ge=1,
        alias="DEFAULT_PACKAGE_SESSIONS",
        description="Paid sessions in a package when the caller does not say",
    )

    is_testing: bool = Field(default=False, alias="is_testing")

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        level = (v or "INFO").strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {v}")
        return level

    @field_validator("slot_interval_minutes")
    @classmethod
    def _validate_interval(cls, v: int) -> int:
        if v <= 0 or 60 % v != 0:
            raise ValueError("slot_interval_minutes must evenly divide an hour")
        return v

    def get_database_url(self) -> str:
        """Get the appropriate database URL based on context."""
        if self.is_testing or is_running_tests():
            return self.test_database_url or "sqlite+pysqlite:///:memory:"
        return self.database_url


settings = Settings()
