from datetime import timedelta
from typing import Any
from urllib.parse import quote_plus

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Service configuration read from the environment, then ``.env``.

    Tests build instances with ``Settings(_env_file=None, ...)`` to stay
    independent of the developer's local file.
    """

    # API Configuration
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Marketplace Orders API"
    PROJECT_DESCRIPTION: str = "Cart checkout, order lifecycle and payment gateway integration"
    VERSION: str = "0.1.0"
    ENVIRONMENT: str = Field("development", description="Deployment environment name")
    DEBUG: bool = Field(False, description="Debug mode")
    CORS_ORIGINS: list[str] = Field(default=["*"], description="Allowed CORS origins")

    # PostgreSQL Database Settings
    DATABASE_URL: str | None = Field(None, description="Full async database URL; overrides DB_* when set")
    DB_HOST: str = Field("localhost", description="PostgreSQL host")
    DB_PORT: int = Field(5432, description="PostgreSQL port")
    DB_NAME: str = Field("marketplace", description="Database name")
    DB_USER: str = Field("postgres", description="Database user")
    DB_PASSWORD: str | None = Field(None, description="Database password")
    DB_ECHO: bool = Field(False, description="Log SQL queries (debug only)")

    # Database connection pool settings
    DB_POOL_SIZE: int = Field(10, description="Connection pool size")
    DB_MAX_OVERFLOW: int = Field(20, description="Maximum pool overflow")
    DB_POOL_RECYCLE: int = Field(3600, description="Recycle connections after N seconds")
    DB_POOL_TIMEOUT: int = Field(30, description="Timeout waiting for a pooled connection")

    # Authentication (identity provider tokens)
    JWT_SECRET_KEY: str = Field("change-me", description="Key used to verify bearer tokens")
    JWT_ALGORITHM: str = Field("HS256", description="Bearer token signing algorithm")
    JWT_AUDIENCE: str | None = Field(None, description="Expected token audience, if any")

    # Payment gateway (Midtrans)
    MIDTRANS_SERVER_KEY: str = Field("", description="Server key for the payment gateway")
    MIDTRANS_CLIENT_KEY: str = Field("", description="Client key exposed to the frontend widget")
    MIDTRANS_IS_PRODUCTION: bool = Field(False, description="Use production gateway endpoints")
    MIDTRANS_TIMEOUT_SECONDS: float = Field(30.0, description="Gateway HTTP timeout")
    SNAP_TOKEN_TTL_MINUTES: int = Field(1440, description="How long a payment token stays reusable")
    FRONTEND_BASE_URL: str = Field("http://localhost:3000", description="Base URL for payment callbacks")

    # Payment proof storage
    PROOF_STORAGE_PATH: str = Field("static/payment-proofs", description="Directory for proof images")
    PUBLIC_URL_BASE: str = Field("http://localhost:8000", description="Public base URL for stored files")
    MAX_PROOF_FILES: int = Field(5, description="Maximum proof images per confirmation")
    MAX_PROOF_FILE_SIZE: int = Field(5 * 1024 * 1024, description="Maximum proof image size in bytes (5MB)")
    ALLOWED_PROOF_EXTENSIONS: list[str] = Field(
        default=["jpg", "jpeg", "png", "webp"], description="Allowed proof image extensions"
    )

    # Notifications
    NOTIFICATION_PUSH_URL: str | None = Field(None, description="Push relay endpoint; push is skipped when unset")
    NOTIFICATION_PUSH_TIMEOUT_SECONDS: float = Field(5.0, description="Push relay HTTP timeout")

    # Logging & monitoring
    LOG_LEVEL: str = Field("INFO", description="Root log level")
    LOG_FORMAT: str = Field("colored", description="Log format: json, colored or simple")
    LOG_FILE: str | None = Field(None, description="Optional log file path")
    SENTRY_DSN: str | None = Field(None, description="Sentry DSN; error reporting disabled when unset")

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def __init__(self, **data: Any):
        super().__init__(**data)

    @field_validator("ALLOWED_PROOF_EXTENSIONS", "CORS_ORIGINS", mode="before")
    @classmethod
    def parse_comma_separated(cls, value):
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v):
        if v not in ("json", "colored", "simple"):
            raise ValueError("LOG_FORMAT must be one of: json, colored, simple")
        return v

    @field_validator("DB_POOL_SIZE")
    @classmethod
    def validate_pool_size(cls, v):
        if v < 1:
            raise ValueError("DB_POOL_SIZE must be at least 1")
        if v > 100:
            raise ValueError("DB_POOL_SIZE should not exceed 100")
        return v

    @field_validator("DB_MAX_OVERFLOW")
    @classmethod
    def validate_max_overflow(cls, v):
        if v < 0:
            raise ValueError("DB_MAX_OVERFLOW must be 0 or greater")
        if v > 200:
            raise ValueError("DB_MAX_OVERFLOW should not exceed 200")
        return v

    @computed_field
    @property
    def database_url(self) -> str:
        """Async (asyncpg) connection URL"""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        user = quote_plus(self.DB_USER)
        if self.DB_PASSWORD:
            return (
                f"postgresql+asyncpg://{user}:{quote_plus(self.DB_PASSWORD)}"
                f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
            )
        return f"postgresql+asyncpg://{user}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @computed_field
    @property
    def sync_database_url(self) -> str:
        """Synchronous URL used by alembic"""
        return self.database_url.replace("+asyncpg", "").replace("+aiosqlite", "")

    @computed_field
    @property
    def is_development(self) -> bool:
        return self.DEBUG or self.ENVIRONMENT.lower() in ["development", "dev", "local"]

    @computed_field
    @property
    def midtrans_snap_base_url(self) -> str:
        if self.MIDTRANS_IS_PRODUCTION:
            return "https://app.midtrans.com/snap/v1"
        return "https://app.sandbox.midtrans.com/snap/v1"

    @computed_field
    @property
    def midtrans_api_base_url(self) -> str:
        if self.MIDTRANS_IS_PRODUCTION:
            return "https://api.midtrans.com/v2"
        return "https://api.sandbox.midtrans.com/v2"

    @property
    def snap_token_ttl(self) -> timedelta:
        return timedelta(minutes=self.SNAP_TOKEN_TTL_MINUTES)


# Settings singleton
_settings_instance = None


def get_settings() -> Settings:
    """
    Return a cached Settings instance so the environment is read only once.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
