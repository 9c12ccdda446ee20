#!/usr/bin/env python3
"""
Centralized Configuration Module using Pydantic Settings

Type-safe, environment-based configuration for the watermark service.
Every option is a flat, upper-case environment variable; grouped views
(``settings.redis``, ``settings.cache`` ...) are exposed as properties so
call sites can depend on the section they need.

Architectural Decision: Pydantic Settings for type safety and validation
- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- Easy testing with override mechanisms
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RedisSettings(BaseModel):
    """Redis connection for the remote cache backend."""

    REDIS_URL: str | None = None
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str | None = None
    REDIS_KEY_PREFIX: str = ""
    REDIS_MAX_CONNECTIONS: int = 50
    REDIS_SOCKET_TIMEOUT: float = 5.0
    REDIS_SOCKET_CONNECT_TIMEOUT: float = 5.0
    REDIS_SCAN_COUNT: int = 500


class CacheSettings(BaseModel):
    """Cache backend selection and expiry."""

    CACHE_PROVIDER: str = "redis"
    CACHE_TTL: int = 604800
    CACHE_OPERATION_TIMEOUT: float = 2.0
    LOCAL_CACHE_PATH: str = "./cache"
    DEDUPLICATE_INFLIGHT: bool = False
    WARMUP_MAX_CONCURRENCY: int = 0


class StorageSettings(BaseModel):
    """Origin image storage (S3 compatible or local directory)."""

    STORAGE_PROVIDER: str = "s3"
    S3_BUCKET: str | None = None
    S3_PREFIX: str = "qc-images/"
    S3_ENDPOINT: str | None = None
    AWS_REGION: str = "auto"
    S3_ACCESS_KEY_ID: str | None = None
    S3_SECRET_ACCESS_KEY: str | None = None
    S3_MAX_ATTEMPTS: int = 3
    LOCAL_STORAGE_PATH: str = "./images"


class WatermarkSettings(BaseModel):
    """Rendering options for the watermark text."""

    FONT_PATH: str | None = None
    FONT_SIZE: float = 24.0
    WATERMARK_COLOR: str = "#FFFFFF"
    IMAGE_QUALITY: int = 90


class LoggingSettings(BaseModel):
    """Structured logging options."""

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "json"


class ApplicationSettings(BaseModel):
    """General application settings."""

    ENVIRONMENT: Literal["development", "staging", "production"] = "development"
    APP_NAME: str = "Watermark Service"
    APP_VERSION: str = "1.0.0"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8080
    API_BASE_PATH: str = "/api/v1"


class Settings(BaseSettings):
    """
    Main settings class that aggregates all configuration sections.

    Usage:
        from watermark_service.config.settings import get_settings

        settings = get_settings()
        ttl = settings.cache.CACHE_TTL
        bucket = settings.storage.S3_BUCKET

    Provider names are normalized to lower case here but validated by the
    cache and storage factories, which raise ConfigurationError for values
    they do not know.
    """

    # Application settings
    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    APP_NAME: str = Field(default="Watermark Service", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8080, description="API port")
    API_BASE_PATH: str = Field(default="/api/v1", description="Prefix for all API routers")

    # Cache settings
    CACHE_PROVIDER: str = Field(default="redis", description="Cache backend: redis or local")
    CACHE_TTL: int = Field(default=604800, gt=0, description="Cache entry TTL in seconds (7 days)")
    CACHE_OPERATION_TIMEOUT: float = Field(
        default=2.0, gt=0, description="Upper bound for a cache lookup in seconds"
    )
    LOCAL_CACHE_PATH: str = Field(default="./cache", description="Directory of the filesystem cache")
    DEDUPLICATE_INFLIGHT: bool = Field(
        default=False, description="Coalesce concurrent identical cache misses in-process"
    )
    WARMUP_MAX_CONCURRENCY: int = Field(
        default=0, ge=0, description="Max concurrent warmup items (0 = unbounded)"
    )

    # Redis settings
    REDIS_URL: str | None = Field(default=None, description="redis:// URL, overrides host/port/db")
    REDIS_HOST: str = Field(default="localhost", description="Redis server host")
    REDIS_PORT: int = Field(default=6379, description="Redis server port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password (if required)")
    REDIS_KEY_PREFIX: str = Field(default="", description="Namespace prepended to every cache key")
    REDIS_MAX_CONNECTIONS: int = Field(default=50, description="Maximum pooled connections")
    REDIS_SOCKET_TIMEOUT: float = Field(default=5.0, description="Socket timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: float = Field(default=5.0, description="Connection timeout in seconds")
    REDIS_SCAN_COUNT: int = Field(default=500, gt=0, description="SCAN batch size hint")

    # Storage settings
    STORAGE_PROVIDER: str = Field(default="s3", description="Origin storage: s3 or local")
    S3_BUCKET: str | None = Field(default=None, description="Bucket holding original images")
    S3_PREFIX: str = Field(default="qc-images/", description="Object key prefix")
    S3_ENDPOINT: str | None = Field(default=None, description="Endpoint for S3-compatible services (R2, MinIO)")
    AWS_REGION: str = Field(default="auto", description="Bucket region")
    S3_ACCESS_KEY_ID: str | None = Field(default=None, description="Static access key id")
    S3_SECRET_ACCESS_KEY: str | None = Field(default=None, description="Static secret access key")
    S3_MAX_ATTEMPTS: int = Field(default=3, ge=1, description="Attempts for transient S3 failures")
    LOCAL_STORAGE_PATH: str = Field(default="./images", description="Root directory for local originals")

    # Watermark settings
    FONT_PATH: str | None = Field(default=None, description="TrueType font file for the watermark")
    FONT_SIZE: float = Field(default=24.0, gt=0, description="Watermark font size")
    WATERMARK_COLOR: str = Field(default="#FFFFFF", description="Watermark text color")
    IMAGE_QUALITY: int = Field(default=90, ge=1, le=95, description="JPEG output quality")

    # Logging settings
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @field_validator("CACHE_PROVIDER", "STORAGE_PROVIDER")
    @classmethod
    def normalize_provider(cls, v):
        """Provider names are case-insensitive."""
        return v.strip().lower()

    @property
    def redis(self) -> RedisSettings:
        """Get Redis settings."""
        return RedisSettings(
            REDIS_URL=self.REDIS_URL,
            REDIS_HOST=self.REDIS_HOST,
            REDIS_PORT=self.REDIS_PORT,
            REDIS_DB=self.REDIS_DB,
            REDIS_PASSWORD=self.REDIS_PASSWORD,
            REDIS_KEY_PREFIX=self.REDIS_KEY_PREFIX,
            REDIS_MAX_CONNECTIONS=self.REDIS_MAX_CONNECTIONS,
            REDIS_SOCKET_TIMEOUT=self.REDIS_SOCKET_TIMEOUT,
            REDIS_SOCKET_CONNECT_TIMEOUT=self.REDIS_SOCKET_CONNECT_TIMEOUT,
            REDIS_SCAN_COUNT=self.REDIS_SCAN_COUNT,
        )

    @property
    def cache(self) -> CacheSettings:
        """Get cache settings."""
        return CacheSettings(
            CACHE_PROVIDER=self.CACHE_PROVIDER,
            CACHE_TTL=self.CACHE_TTL,
            CACHE_OPERATION_TIMEOUT=self.CACHE_OPERATION_TIMEOUT,
            LOCAL_CACHE_PATH=self.LOCAL_CACHE_PATH,
            DEDUPLICATE_INFLIGHT=self.DEDUPLICATE_INFLIGHT,
            WARMUP_MAX_CONCURRENCY=self.WARMUP_MAX_CONCURRENCY,
        )

    @property
    def storage(self) -> StorageSettings:
        """Get origin storage settings."""
        return StorageSettings(
            STORAGE_PROVIDER=self.STORAGE_PROVIDER,
            S3_BUCKET=self.S3_BUCKET,
            S3_PREFIX=self.S3_PREFIX,
            S3_ENDPOINT=self.S3_ENDPOINT,
            AWS_REGION=self.AWS_REGION,
            S3_ACCESS_KEY_ID=self.S3_ACCESS_KEY_ID,
            S3_SECRET_ACCESS_KEY=self.S3_SECRET_ACCESS_KEY,
            S3_MAX_ATTEMPTS=self.S3_MAX_ATTEMPTS,
            LOCAL_STORAGE_PATH=self.LOCAL_STORAGE_PATH,
        )

    @property
    def watermark(self) -> WatermarkSettings:
        """Get watermark rendering settings."""
        return WatermarkSettings(
            FONT_PATH=self.FONT_PATH,
            FONT_SIZE=self.FONT_SIZE,
            WATERMARK_COLOR=self.WATERMARK_COLOR,
            IMAGE_QUALITY=self.IMAGE_QUALITY,
        )

    @property
    def logging(self) -> LoggingSettings:
        """Get logging settings."""
        return LoggingSettings(LOG_LEVEL=self.LOG_LEVEL, LOG_FORMAT=self.LOG_FORMAT)

    @property
    def app(self) -> ApplicationSettings:
        """Get application settings."""
        return ApplicationSettings(
            ENVIRONMENT=self.ENVIRONMENT,
            APP_NAME=self.APP_NAME,
            APP_VERSION=self.APP_VERSION,
            API_HOST=self.API_HOST,
            API_PORT=self.API_PORT,
            API_BASE_PATH=self.API_BASE_PATH,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"  # Ignore extra environment variables
    )


# Global settings instance (singleton pattern)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    Lazily built on first access so importing this module never reads the
    environment.
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings() -> Settings:
    """
    Reload settings (useful for testing).

    Returns:
        Settings: New settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
