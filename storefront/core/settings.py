# ==============================================================================
# SETTINGS CONFIGURATION - Environment Management
# ==============================================================================
# Pydantic Settings for type-safe environment variable management
# Supports: Development, Staging, Production environments
# ==============================================================================

from __future__ import annotations

import json
import warnings
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from typing import Annotated, List, Optional

from pydantic import Field, field_validator, computed_field
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


DEFAULT_SECRET_KEY = "change-me-storefront-secret-key-0000"


class DatabaseType(str, Enum):
    """
    Supported storage backends.

    Attributes:
        SQLITE: Relational backend through SQLAlchemy async + aiosqlite
        MONGODB: Document backend through Motor
    """
    SQLITE = "sqlite"
    MONGODB = "mongodb"


class Environment(str, Enum):
    """Application environment types."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """
    Application Settings Configuration.

    Manages all environment variables with type validation and defaults.
    Values are read from the process environment and an optional
    ``.env`` file in the working directory.

    Example:
        >>> from storefront.core.settings import settings
        >>> settings.API_PREFIX
        '/api'
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # --------------------------------------------------------------------------
    # APPLICATION SETTINGS
    # --------------------------------------------------------------------------
    APP_NAME: str = Field(
        default="Storefront API",
        description="Application display name"
    )
    APP_VERSION: str = Field(
        default="1.0.0",
        description="Application semantic version"
    )
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (docs, error details)"
    )
    ENVIRONMENT: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Current deployment environment"
    )

    # --------------------------------------------------------------------------
    # API CONFIGURATION
    # --------------------------------------------------------------------------
    API_PREFIX: str = Field(
        default="/api",
        description="Route prefix for all API routers"
    )
    API_TITLE: str = Field(
        default="Storefront API",
        description="OpenAPI documentation title"
    )
    API_DESCRIPTION: str = Field(
        default="E-commerce backend: catalog, cart, orders, reviews and admin tools",
        description="OpenAPI documentation description"
    )

    # --------------------------------------------------------------------------
    # DATABASE TYPE SELECTION
    # --------------------------------------------------------------------------
    DATABASE_TYPE: DatabaseType = Field(
        default=DatabaseType.SQLITE,
        description="Storage backend bound at startup (sqlite, mongodb)"
    )

    # --------------------------------------------------------------------------
    # SQLITE CONFIGURATION
    # --------------------------------------------------------------------------
    SQLITE_URL: str = Field(
        default="sqlite:///./storefront.db",
        description="SQLite database file path"
    )

    # --------------------------------------------------------------------------
    # MONGODB CONFIGURATION
    # --------------------------------------------------------------------------
    MONGODB_URL: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI"
    )
    MONGODB_DB: str = Field(
        default="storefront",
        description="MongoDB database name"
    )

    # --------------------------------------------------------------------------
    # CONNECTION POOL SETTINGS
    # --------------------------------------------------------------------------
    DB_POOL_SIZE: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Database connection pool size"
    )
    DB_POOL_TIMEOUT: int = Field(
        default=30,
        ge=1,
        le=300,
        description="Connection pool timeout in seconds"
    )

    # --------------------------------------------------------------------------
    # SECURITY SETTINGS
    # --------------------------------------------------------------------------
    SECRET_KEY: str = Field(
        default=DEFAULT_SECRET_KEY,
        min_length=32,
        description="JWT signing secret key (min 32 chars)"
    )
    ALGORITHM: str = Field(
        default="HS256",
        description="JWT signing algorithm"
    )
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(
        default=60,
        ge=1,
        le=10080,
        description="Access token expiration in minutes"
    )
    REFRESH_TOKEN_EXPIRE_DAYS: int = Field(
        default=7,
        ge=1,
        le=30,
        description="Refresh token expiration in days"
    )
    AUTH_COOKIE_NAME: str = Field(
        default="jwt",
        description="Name of the httpOnly cookie carrying the access token"
    )
    AUTH_COOKIE_SECURE: bool = Field(
        default=False,
        description="Send the auth cookie over HTTPS only"
    )
    PASSWORD_RESET_EXPIRE_MINUTES: int = Field(
        default=10,
        ge=1,
        le=1440,
        description="Lifetime of a password reset token"
    )
    ADMIN_EMAIL: Optional[str] = Field(
        default=None,
        description="Bootstrap administrator email (created at startup)"
    )
    ADMIN_PASSWORD: Optional[str] = Field(
        default=None,
        description="Bootstrap administrator password"
    )

    # --------------------------------------------------------------------------
    # RATE LIMITING
    # --------------------------------------------------------------------------
    RATE_LIMIT_ENABLED: bool = Field(
        default=True,
        description="Enable rate limiting"
    )
    RATE_LIMIT_REQUESTS: int = Field(
        default=100,
        ge=1,
        description="Maximum requests per window"
    )
    RATE_LIMIT_WINDOW: int = Field(
        default=60,
        ge=1,
        description="Rate limit window in seconds"
    )

    # --------------------------------------------------------------------------
    # CORS SETTINGS
    # --------------------------------------------------------------------------
    CORS_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default=["*"],
        description="Allowed CORS origins"
    )
    CORS_ALLOW_CREDENTIALS: bool = Field(
        default=True,
        description="Allow credentials in CORS requests"
    )

    # --------------------------------------------------------------------------
    # LOGGING CONFIGURATION
    # --------------------------------------------------------------------------
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    LOG_FORMAT: str = Field(
        default="text",
        pattern="^(text|json)$",
        description="Log format (json, text)"
    )

    # --------------------------------------------------------------------------
    # UPLOADS
    # --------------------------------------------------------------------------
    UPLOAD_DIR: str = Field(
        default="./uploads",
        description="Directory where uploaded images are stored"
    )
    UPLOAD_URL_PREFIX: str = Field(
        default="/uploads",
        description="Public URL path serving uploaded images"
    )
    UPLOAD_MAX_SIZE: int = Field(
        default=5 * 1024 * 1024,
        ge=1,
        description="Maximum upload size in bytes"
    )
    UPLOAD_MAX_FILES: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum files per multi-image upload"
    )
    UPLOAD_ALLOWED_TYPES: Annotated[List[str], NoDecode] = Field(
        default=["image/jpeg", "image/png", "image/gif", "image/webp"],
        description="Accepted image content types"
    )

    # --------------------------------------------------------------------------
    # COMMERCE
    # --------------------------------------------------------------------------
    SHIPPING_STANDARD_COST: Decimal = Field(
        default=Decimal("0.00"),
        ge=0,
        description="Flat cost of standard shipping"
    )
    SHIPPING_EXPRESS_COST: Decimal = Field(
        default=Decimal("20.00"),
        ge=0,
        description="Flat cost of express shipping"
    )
    SHIPPING_PICKUP_COST: Decimal = Field(
        default=Decimal("0.00"),
        ge=0,
        description="Flat cost of in-store pickup"
    )
    LOW_STOCK_THRESHOLD: int = Field(
        default=10,
        ge=0,
        description="Stock level under which a product counts as low stock"
    )

    # --------------------------------------------------------------------------
    # COMPUTED PROPERTIES
    # --------------------------------------------------------------------------
    @computed_field
    @property
    def sqlite_async_url(self) -> str:
        """
        Construct SQLite async connection URL.

        Returns:
            Async SQLite connection string with aiosqlite driver
        """
        if "aiosqlite" in self.SQLITE_URL:
            return self.SQLITE_URL
        return self.SQLITE_URL.replace("sqlite://", "sqlite+aiosqlite://")

    @computed_field
    @property
    def database_url(self) -> str:
        """Connection URL of the selected backend."""
        if self.DATABASE_TYPE == DatabaseType.SQLITE:
            return self.sqlite_async_url
        return self.MONGODB_URL

    @computed_field
    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.ENVIRONMENT == Environment.DEVELOPMENT

    @computed_field
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT == Environment.PRODUCTION

    # --------------------------------------------------------------------------
    # VALIDATORS
    # --------------------------------------------------------------------------
    @field_validator("SECRET_KEY")
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        """Warn when the default signing key is still in use."""
        if v == DEFAULT_SECRET_KEY:
            warnings.warn(
                "Using default SECRET_KEY. Generate a secure key for production!",
                UserWarning
            )
        return v

    @field_validator("CORS_ORIGINS", "UPLOAD_ALLOWED_TYPES", mode="before")
    @classmethod
    def parse_comma_list(cls, v):
        """Parse comma separated strings into lists."""
        if isinstance(v, str):
            if v.strip().startswith("["):
                return json.loads(v)
            if v == "*":
                return ["*"]
            return [item.strip() for item in v.split(",") if item.strip()]
        return v


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Returns:
        Settings: Cached settings instance
    """
    return Settings()


# Module-level settings instance for convenient imports
settings = get_settings()
