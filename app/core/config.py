# python
# app/core/config.py
"""Configuration settings for the Planora API.

Uses Pydantic BaseSettings for environment variable management.
"""
from enum import Enum

from pydantic import Field, field_validator, model_validator
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
    app_name: str = Field(default="Planora API", description="Application name")
    environment: EnvironmentEnum = Field(
        default=EnvironmentEnum.development, description="Environment type"
    )
    debug: bool = Field(default=False, description="Debug mode")
    version: str = Field(default="1.0.0", description="Application version")
    api_prefix: str = Field(default="/api", description="Prefix for all REST routes")

    # ===== Authentication (JWT issued by the identity provider) =====
    auth_jwt_secret: str | None = Field(
        default=None, description="Signing secret for access tokens"
    )
    auth_jwt_algorithm: str = Field(default="HS256", description="JWT algorithm")
    auth_jwt_audience: str = Field(default="authenticated", description="Expected JWT audience")

    # ===== Database Settings =====
    database_url: str | None = Field(default=None, description="Database connection URL")
    db_pool_size: int = Field(default=20, description="Database connection pool size")
    db_max_overflow: int = Field(default=0, description="Database max overflow connections")

    # Test database URL
    test_database_url: str | None = Field(default=None, description="Test database URL")

    # ===== Application Limits =====
    max_story_points: int = Field(default=100, description="Upper bound for story points")
    max_attachment_size: int = Field(
        default=10 * 1024 * 1024, description="Largest attachment accepted, in bytes"
    )
    default_page_size: int = Field(default=20, description="Default page size for lists")
    max_page_size: int = Field(default=100, description="Maximum page size for lists")

    # ===== CORS Settings =====
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Allowed CORS origins (comma-separated)",
    )

    @property
    def allowed_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        if isinstance(self.allowed_origins, str):
            return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]
        return self.allowed_origins if isinstance(self.allowed_origins, list) else []

    # ===== Monitoring & Logging =====
    log_level: LogLevelEnum = Field(default=LogLevelEnum.INFO, description="Logging level")
    log_format: LogFormatEnum = Field(default=LogFormatEnum.json, description="Log format")

    # ===== WebSocket Configuration =====
    websocket_heartbeat_interval: int = Field(
        default=30, description="WebSocket heartbeat interval"
    )
    websocket_max_connections: int = Field(
        default=1000, description="Maximum WebSocket connections"
    )

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
    def has_token_verification(self) -> bool:
        return bool(self.auth_jwt_secret)

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
            return lv
        return v

    @field_validator("max_page_size")
    @classmethod
    def validate_max_page_size(cls, v):
        if v > 500:
            raise ValueError("Maximum page size cannot exceed 500")
        return v

    @model_validator(mode="after")
    def set_computed_fields(self):
        if self.default_page_size > self.max_page_size:
            self.default_page_size = self.max_page_size
        return self


settings = Settings()


class ConfigValidator:
    @staticmethod
    def validate_required_settings():
        errors = []
        if not settings.database_url:
            errors.append("DATABASE_URL is required")
        if settings.is_production and not settings.auth_jwt_secret:
            errors.append("AUTH_JWT_SECRET is required in production")
        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")

    @staticmethod
    def get_feature_status() -> dict:
        return {
            "token_verification": settings.has_token_verification,
            "realtime": settings.websocket_max_connections > 0,
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
        "auth_configured": settings.has_token_verification,
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
