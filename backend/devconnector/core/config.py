"""Application configuration loaded from environment variables.

Settings for the database, logging, and the sub-collection write policy.
Uses pydantic-settings for validation and .env file support.
"""

from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Known insecure default password that must not be used in production
# Security: Runtime check in check_production_security() prevents use in production
_INSECURE_DEFAULT_PASSWORD = "devconnector_dev_password"  # nosec B105

WritePolicy = Literal["last_write_wins", "optimistic"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    database_host: str = "localhost"
    database_port: int = 5432
    database_name: str = "devconnector"
    database_user: str = "devconnector_user"
    database_password: str = _INSECURE_DEFAULT_PASSWORD

    # Application
    environment: str = "development"
    log_level: str = "INFO"

    # Sub-collection writes
    # last_write_wins: whole-document replace, concurrent writers may lose updates
    # optimistic: persist checks the fetched version and the cycle is re-run
    write_policy: WritePolicy = "last_write_wins"
    optimistic_max_attempts: int = 3

    # Caller-level retry of StorageError (never applied inside the orchestrator)
    storage_retry_max: int = 2
    storage_retry_base_delay_ms: int = 100
    storage_retry_max_delay_ms: int = 2000

    # Like, unlike and post deletion require the actor to have a profile
    require_profile_for_post_actions: bool = True

    @property
    def database_url(self) -> str:
        """Async database URL for SQLAlchemy."""
        return (
            f"postgresql+asyncpg://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )

    @property
    def database_url_sync(self) -> str:
        """Sync database URL for Alembic."""
        return (
            f"postgresql://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )

    @model_validator(mode="after")
    def check_production_security(self) -> "Settings":
        """Validate retry knobs and production security requirements.

        Checks:
        - optimistic_max_attempts must be at least 1 (all environments)
        - storage_retry_max cannot be negative (all environments)
        - retry delays must be positive (all environments)
        - Database password must not be the default in production
        """
        if self.optimistic_max_attempts < 1:
            msg = (
                "OPTIMISTIC_MAX_ATTEMPTS must be at least 1. "
                f"Got: {self.optimistic_max_attempts}"
            )
            raise ValueError(msg)
        if self.storage_retry_max < 0:
            msg = f"STORAGE_RETRY_MAX cannot be negative. Got: {self.storage_retry_max}"
            raise ValueError(msg)
        if self.storage_retry_base_delay_ms <= 0 or self.storage_retry_max_delay_ms <= 0:
            msg = (
                "STORAGE_RETRY_BASE_DELAY_MS and STORAGE_RETRY_MAX_DELAY_MS "
                "must be positive."
            )
            raise ValueError(msg)

        if (
            self.environment == "production"
            and self.database_password == _INSECURE_DEFAULT_PASSWORD
        ):
            msg = (
                "Cannot use default database password in production. "
                "Set DATABASE_PASSWORD environment variable to a secure value."
            )
            raise ValueError(msg)

        return self


settings = Settings()
