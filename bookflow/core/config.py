"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Workflow engine limits (attempts, retry delay,
timeouts) are validated at load time.
"""

from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings are optional with defaults. The database is only required
    by the SQL repositories; the engine itself runs against any store that
    implements the repository protocols.
    """

    # App
    app_name: str = "bookflow"
    app_version: str = "1.0.0"
    debug: bool = False

    # Database (PostgreSQL via asyncpg, e.g. postgresql+asyncpg://user:pw@host/db)
    database_url: str = ""
    database_echo: bool = False
    db_pool_size: int | None = None
    db_max_overflow: int | None = None

    # Workflow engine
    workflow_step_max_attempts: int = 3
    workflow_step_retry_delay_seconds: float = 1.0
    # None = no overall limit per workflow run
    workflow_execution_timeout_seconds: float | None = None
    # Run workflows matched by one trigger concurrently (results keep lookup order)
    workflow_run_concurrently: bool = False

    # Actions
    webhook_default_timeout_seconds: int = 30
    webhook_max_timeout_seconds: int = 300

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_workflow_limits(self) -> "Settings":
        """Validate workflow engine limits.

        - At least one attempt per step.
        - Retry delay and execution timeout must not be negative.
        """
        if self.workflow_step_max_attempts < 1:
            raise ValueError(
                "WORKFLOW_STEP_MAX_ATTEMPTS must be at least 1, "
                f"got: {self.workflow_step_max_attempts}"
            )
        if self.workflow_step_retry_delay_seconds < 0:
            raise ValueError(
                "WORKFLOW_STEP_RETRY_DELAY_SECONDS must not be negative, "
                f"got: {self.workflow_step_retry_delay_seconds}"
            )
        timeout = self.workflow_execution_timeout_seconds
        if timeout is not None and timeout <= 0:
            raise ValueError(
                f"WORKFLOW_EXECUTION_TIMEOUT_SECONDS must be positive, got: {timeout}"
            )
        if not 1 <= self.webhook_default_timeout_seconds <= self.webhook_max_timeout_seconds:
            raise ValueError(
                "WEBHOOK_DEFAULT_TIMEOUT_SECONDS must be between 1 and "
                f"{self.webhook_max_timeout_seconds}"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
