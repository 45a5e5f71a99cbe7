# python
# app/core/config.py
"""Configuration settings for the Starter Kit API.

Uses Pydantic BaseSettings for environment variable management.
"""
import secrets
from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentEnum(str, Enum):
    development = "development"
    testing = "testing"
    staging = "staging"
    production = "production"


class LogLevelEnum(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormatEnum(str, Enum):
    simple = "simple"
    json = "json"


class Settings(BaseSettings):
    # Pydantic v2 settings configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ===== Application Settings =====
    app_name: str = Field(default="Starter Kit API", description="Application name")
    environment: EnvironmentEnum = Field(
        default=EnvironmentEnum.development, description="Environment type"
    )
    debug: bool = Field(default=False, description="Debug mode")
    version: str = Field(default="1.0.0", description="Application version")

    # ===== Database Settings =====
    database_url: str | None = Field(default=None, description="Database connection URL")
    db_pool_size: int = Field(default=10, description="Database connection pool size")
    db_max_overflow: int = Field(default=20, description="Database max overflow connections")
    db_pool_recycle: int = Field(
        default=1800, description="Seconds after which idle pooled connections are recycled"
    )
    db_pool_timeout: int = Field(default=30, description="Seconds to wait for a pooled connection")

    # Test database URL
    test_database_url: str | None = Field(default=None, description="Test database URL")

    # ===== Authentication =====
    auth_secret: str | None = Field(
        default=None, description="Secret used to sign session tokens"
    )
    auth_base_url: str | None = Field(default=None, description="Public base URL of the auth API")
    session_expires_in: int = Field(
        default=60 * 60 * 24 * 7, description="Session lifetime in seconds (7 days)"
    )
    session_update_age: int = Field(
        default=60 * 60 * 24, description="Refresh session expiry once it is this old (1 day)"
    )
    session_cookie_name: str = Field(default="session_token", description="Session cookie name")
    password_min_length: int = Field(default=8, description="Minimum password length")
    password_max_length: int = Field(default=128, description="Maximum password length")
    verification_expires_in: int = Field(
        default=60 * 60 * 24, description="Email verification token lifetime in seconds"
    )

    # ===== File Storage Settings =====
    storage_path: str = Field(default="./storage", description="Local storage root directory")
    storage_public_url: str | None = Field(
        default=None, description="Public URL prefix for stored objects"
    )
    s3_bucket_name: str | None = Field(default=None, description="Object bucket name")
    s3_region: str = Field(default="us-east-1", description="Object bucket region")
    s3_endpoint_url: str | None = Field(
        default=None, description="S3-compatible endpoint URL (R2, MinIO)"
    )
    aws_access_key_id: str | None = Field(default=None, description="Bucket access key ID")
    aws_secret_access_key: str | None = Field(default=None, description="Bucket secret key")
    max_file_size: int = Field(default=52428800, description="Maximum file size in bytes (50MB)")
    allow_anonymous_file_delete: bool = Field(
        default=True, description="Allow unauthenticated callers to delete owned files"
    )

    # ===== CORS Settings =====
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Allowed CORS origins (comma-separated)",
    )

    @property
    def allowed_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    # ===== Monitoring & Logging =====
    log_level: LogLevelEnum = Field(default=LogLevelEnum.INFO, description="Logging level")
    log_format: LogFormatEnum = Field(default=LogFormatEnum.simple, description="Log format")

    # ===== Server Settings =====
    host: str = Field(default="127.0.0.1", description="Host to bind the server")
    port: int = Field(default=8000, description="Port to bind the server")

    # ===== Computed Properties =====
    @property
    def is_development(self) -> bool:
        return self.environment == EnvironmentEnum.development

    @property
    def is_production(self) -> bool:
        return self.environment == EnvironmentEnum.production

    @property
    def is_testing(self) -> bool:
        return self.environment == EnvironmentEnum.testing

    @property
    def database_url_sync(self) -> str:
        if not self.database_url:
            return ""
        return self.database_url.replace("postgresql+asyncpg://", "postgresql://")

    @property
    def has_object_storage(self) -> bool:
        return bool(self.s3_bucket_name)

    @property
    def storage_type(self) -> str:
        return "s3" if self.has_object_storage else "local"

    @property
    def resolved_auth_base_url(self) -> str:
        return self.auth_base_url or f"http://localhost:{self.port}"

    @property
    def resolved_auth_secret(self) -> str:
        return self.auth_secret or _PROCESS_SECRET

    # ===== Validation Methods =====
    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        if v and isinstance(v, str):
            lv = v.lower()
            if lv in ["dev", "develop"]:
                return "development"
            if lv in ["prod"]:
                return "production"
            if lv in ["test"]:
                return "testing"
        return v

    @field_validator("max_file_size")
    @classmethod
    def validate_file_size(cls, v):
        if v > 100 * 1024 * 1024:
            raise ValueError("Maximum file size cannot exceed 100MB")
        return v

    @field_validator("session_expires_in", "session_update_age")
    @classmethod
    def validate_session_durations(cls, v):
        if v <= 0:
            raise ValueError("Session durations must be positive")
        return v


# Sessions signed with this do not survive a restart; set AUTH_SECRET to persist them.
_PROCESS_SECRET = secrets.token_urlsafe(32)

settings = Settings()


class ConfigValidator:
    @staticmethod
    def validate_required_settings():
        errors = []
        if not settings.database_url:
            errors.append("DATABASE_URL is required")
        if settings.is_production and not settings.auth_secret:
            errors.append("AUTH_SECRET is required in production")
        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")

    @staticmethod
    def get_feature_status() -> dict:
        return {
            "object_storage": settings.has_object_storage,
            "storage_type": settings.storage_type,
            "public_storage_url": bool(settings.storage_public_url),
            "anonymous_file_delete": settings.allow_anonymous_file_delete,
            "environment": settings.environment,
        }


def get_config_summary() -> dict:
    return {
        "app_name": settings.app_name,
        "version": settings.version,
        "environment": settings.environment,
        "debug": settings.debug,
        "features": ConfigValidator.get_feature_status(),
        "database_configured": bool(settings.database_url),
        "auth_configured": bool(settings.auth_secret),
        "storage_type": settings.storage_type,
    }


__all__ = [
    "settings",
    "Settings",
    "ConfigValidator",
    "get_config_summary",
    "EnvironmentEnum",
    "LogLevelEnum",
    "LogFormatEnum",
]
