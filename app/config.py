"""
Application configuration with Pydantic Settings for validation and type safety.
Supports environment-specific configurations and .env file loading.
"""

from enum import Enum
from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator, model_validator


class Environment(str, Enum):
    """Application environment types"""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """
    Application settings with validation.
    Settings are loaded from environment variables or .env file.
    """

    # Application settings
    app_name: str = Field(default="Kitchen Hand Guide", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: Environment = Field(
        default=Environment.DEVELOPMENT, description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode")

    # Server settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8080, ge=1, le=65535, description="Server port")

    # Database settings
    database_url: str = Field(
        default="postgresql+psycopg2://postgres@localhost:5432/kitchen_hand_guide",
        description="SQLAlchemy database URL",
    )
    db_echo: bool = Field(default=False, description="SQLAlchemy echo SQL statements")
    db_pool_size: int = Field(default=5, ge=1, description="Connection pool size")
    db_max_overflow: int = Field(
        default=0, ge=0, description="Connections allowed beyond the pool size"
    )
    db_pool_timeout: float = Field(
        default=3.0, gt=0, description="Seconds to wait for a pooled connection"
    )
    db_init_attempts: int = Field(
        default=8, ge=1, description="Database initialization retry attempts"
    )
    db_init_delay_sec: float = Field(
        default=2.0, ge=0, description="Delay between DB init attempts"
    )

    # Auth settings
    jwt_secret: str = Field(
        default="change-me-in-production", description="Token signing secret"
    )
    jwt_algorithm: str = Field(default="HS256", description="Token signing algorithm")
    jwt_expiration_hours: int = Field(
        default=24, ge=1, description="Token lifetime in hours"
    )
    bcrypt_rounds: int = Field(default=12, ge=4, le=31, description="bcrypt cost")
    auth_cookie_name: str = Field(default="auth_token", description="Auth cookie name")
    registration_enabled: bool = Field(
        default=False, description="Allow self-service account registration"
    )
    default_admin_username: str = Field(default="admin")
    default_admin_email: str = Field(default="admin@kitchen-hand.local")
    default_admin_password: str = Field(
        default="admin123", description="Seed password, rotate before production use"
    )

    # Upload / storage settings
    static_dir: str = Field(default="./static", description="Static files directory")
    upload_dir: str = Field(
        default="./static/uploads", description="Local image upload directory"
    )
    upload_url_prefix: str = Field(
        default="/static/uploads", description="URL path serving the upload directory"
    )
    placeholder_picture_url: str = Field(
        default="/static/placeholder.svg",
        description="Picture used when a product has no image",
    )
    max_upload_bytes: int = Field(
        default=20 * 1024 * 1024, ge=1, description="Maximum upload size in bytes"
    )
    s3_enabled: bool = Field(default=False, description="Store images in S3")
    s3_bucket_name: Optional[str] = Field(
        default="kitchen-hand-guide", description="S3 bucket name"
    )
    aws_region: Optional[str] = Field(default="ap-southeast-2", description="AWS region")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="%(asctime)s %(levelname)s %(name)s: %(message)s",
        description="Log format string",
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        """Validate and normalize environment value"""
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    @model_validator(mode="after")
    def validate_s3(self):
        if self.s3_enabled and not (self.s3_bucket_name and self.aws_region):
            raise ValueError("S3_BUCKET_NAME and AWS_REGION are required when S3_ENABLED")
        return self

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.environment == Environment.PRODUCTION

    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.environment == Environment.DEVELOPMENT

    def is_testing(self) -> bool:
        """Check if running in testing environment"""
        return self.environment == Environment.TESTING


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the settings loaded from the environment."""
    return Settings()
