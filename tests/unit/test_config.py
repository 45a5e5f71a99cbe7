"""
Unit tests for Configuration module.

This module contains unit tests for the configuration settings,
validators, and computed properties.
"""

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from app.core.config import (
    ConfigValidator,
    EnvironmentEnum,
    LogFormatEnum,
    LogLevelEnum,
    Settings,
    get_config_summary,
)


class TestSettings:
    """Test cases for Settings configuration."""

    def test_default_settings(self, monkeypatch):
        """Test default configuration values."""
        for name in ["ENVIRONMENT", "S3_BUCKET_NAME", "MAX_FILE_SIZE", "AUTH_SECRET"]:
            monkeypatch.delenv(name, raising=False)

        test_settings = Settings(_env_file=None)

        assert test_settings.app_name == "Starter Kit API"
        assert test_settings.environment == EnvironmentEnum.development
        assert test_settings.version == "1.0.0"
        assert test_settings.db_pool_size == 10
        assert test_settings.db_max_overflow == 20
        assert test_settings.db_pool_recycle == 1800
        assert test_settings.session_expires_in == 7 * 24 * 60 * 60
        assert test_settings.session_update_age == 24 * 60 * 60
        assert test_settings.session_cookie_name == "session_token"
        assert test_settings.max_file_size == 50 * 1024 * 1024
        assert test_settings.allow_anonymous_file_delete is True
        assert test_settings.storage_path == "./storage"
        assert test_settings.log_level == LogLevelEnum.INFO
        assert test_settings.log_format == LogFormatEnum.simple

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("dev", EnvironmentEnum.development),
            ("prod", EnvironmentEnum.production),
            ("test", EnvironmentEnum.testing),
            ("staging", EnvironmentEnum.staging),
        ],
    )
    def test_environment_aliases(self, value, expected):
        """Test environment validation with short aliases."""
        assert Settings(environment=value).environment == expected

    def test_invalid_environment(self):
        with pytest.raises(ValidationError):
            Settings(environment="moon")

    def test_max_file_size_cap(self):
        """Test that uploads cannot be configured above 100MB."""
        assert Settings(max_file_size=100 * 1024 * 1024).max_file_size == 100 * 1024 * 1024
        with pytest.raises(ValidationError):
            Settings(max_file_size=100 * 1024 * 1024 + 1)

    def test_session_durations_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(session_expires_in=0)
        with pytest.raises(ValidationError):
            Settings(session_update_age=-1)

    def test_allowed_origins_list(self):
        test_settings = Settings(allowed_origins="http://a.com, http://b.com,,")

        assert test_settings.allowed_origins_list == ["http://a.com", "http://b.com"]

    def test_environment_properties(self):
        assert Settings(environment="production").is_production
        assert Settings(environment="development").is_development
        assert Settings(environment="testing").is_testing

    def test_database_url_sync(self):
        test_settings = Settings(database_url="postgresql+asyncpg://u:p@h/db")

        assert test_settings.database_url_sync == "postgresql://u:p@h/db"

    def test_storage_type(self):
        assert Settings(s3_bucket_name=None).storage_type == "local"
        assert Settings(s3_bucket_name="bucket").storage_type == "s3"
        assert Settings(s3_bucket_name="bucket").has_object_storage is True

    def test_auth_fallbacks(self):
        """Test the derived auth base URL and the per-process secret."""
        test_settings = Settings(auth_secret=None, auth_base_url=None, port=9000)

        assert test_settings.resolved_auth_base_url == "http://localhost:9000"
        assert test_settings.resolved_auth_secret
        assert test_settings.resolved_auth_secret == Settings(auth_secret=None).resolved_auth_secret
        assert Settings(auth_secret="fixed").resolved_auth_secret == "fixed"


class TestConfigValidator:
    """Test cases for ConfigValidator."""

    def test_validate_required_settings_ok(self):
        mock_settings = Settings(database_url="sqlite+aiosqlite:///x.db", environment="testing")
        with patch("app.core.config.settings", mock_settings):
            ConfigValidator.validate_required_settings()

    def test_validate_required_settings_missing(self):
        mock_settings = Settings(database_url="", environment="production", auth_secret=None)
        with patch("app.core.config.settings", mock_settings):
            with pytest.raises(ValueError) as exc_info:
                ConfigValidator.validate_required_settings()

        assert "DATABASE_URL is required" in str(exc_info.value)
        assert "AUTH_SECRET is required in production" in str(exc_info.value)

    def test_feature_status_and_summary(self):
        mock_settings = Settings(s3_bucket_name="bucket", auth_secret="s")
        with patch("app.core.config.settings", mock_settings):
            features = ConfigValidator.get_feature_status()
            summary = get_config_summary()

        assert features["object_storage"] is True
        assert features["storage_type"] == "s3"
        assert summary["storage_type"] == "s3"
        assert summary["auth_configured"] is True
        assert summary["features"] == features
