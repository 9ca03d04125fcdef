"""Tests for application configuration.

Tests cover defaults, env var loading, and validation of retry knobs and
production security.
"""

import pytest
from pydantic import ValidationError

from devconnector.core.config import _INSECURE_DEFAULT_PASSWORD, Settings

_SECURE_DB_PASSWORD = "my-secure-production-password-123!"
_PRODUCTION = "production"


class TestDefaults:
    """Default values."""

    def test_write_policy_defaults_to_last_write_wins(self):
        assert Settings().write_policy == "last_write_wins"

    def test_profile_required_for_post_actions_by_default(self):
        assert Settings().require_profile_for_post_actions is True

    def test_database_url_uses_asyncpg(self):
        s = Settings(database_host="db", database_port=5433, database_name="x")
        assert s.database_url.startswith("postgresql+asyncpg://")
        assert s.database_url.endswith("@db:5433/x")
        assert s.database_url_sync.startswith("postgresql://")


class TestEnvironmentLoading:
    """Values read from the environment."""

    def test_write_policy_from_env(self, monkeypatch):
        monkeypatch.setenv("WRITE_POLICY", "optimistic")
        assert Settings().write_policy == "optimistic"

    def test_rejects_unknown_write_policy(self, monkeypatch):
        monkeypatch.setenv("WRITE_POLICY", "serializable")
        with pytest.raises(ValidationError):
            Settings()


class TestRetryValidation:
    """Retry knob invariants (all environments)."""

    def test_rejects_zero_optimistic_attempts(self):
        with pytest.raises(ValidationError, match="OPTIMISTIC_MAX_ATTEMPTS"):
            Settings(optimistic_max_attempts=0)

    def test_rejects_negative_storage_retries(self):
        with pytest.raises(ValidationError, match="STORAGE_RETRY_MAX"):
            Settings(storage_retry_max=-1)

    def test_rejects_non_positive_delay(self):
        with pytest.raises(ValidationError, match="must be positive"):
            Settings(storage_retry_base_delay_ms=0)

    def test_allows_zero_storage_retries(self):
        assert Settings(storage_retry_max=0).storage_retry_max == 0


class TestProductionSecurityValidation:
    """Tests for production security requirements."""

    def test_allows_default_password_in_development(self):
        s = Settings(
            environment="development",
            database_password=_INSECURE_DEFAULT_PASSWORD,
        )
        assert s.database_password == _INSECURE_DEFAULT_PASSWORD

    def test_rejects_default_password_in_production(self):
        with pytest.raises(ValidationError) as exc_info:
            Settings(
                environment=_PRODUCTION,
                database_password=_INSECURE_DEFAULT_PASSWORD,
            )

        errors = exc_info.value.errors()
        assert len(errors) == 1
        assert "Cannot use default database password in production" in str(
            errors[0]["msg"]
        )

    def test_allows_custom_password_in_production(self):
        s = Settings(
            environment=_PRODUCTION,
            database_password=_SECURE_DB_PASSWORD,
        )
        assert s.database_password == _SECURE_DB_PASSWORD
