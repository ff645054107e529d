"""
Core Configuration Module
Uses pydantic-settings for environment variable management.
All secrets loaded from .env file - NEVER hardcode secrets.
"""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    project_name: str = "EDAS Backoffice"
    environment: str = Field(default="development", description="development | staging | production | testing")
    debug: bool = Field(default=True)
    api_v1_str: str = "/api/v1"
    app_version: str = Field(default="1.0.0", description="Application version")

    # Database
    database_url: str = Field(
        default="postgresql+asyncpg://edas_user:edas_secret_password@db:5432/edas_backoffice",
        description="Full database URL",
    )
    db_pool_size: int = Field(default=20, description="SQLAlchemy connection pool size")
    db_max_overflow: int = Field(default=10, description="Max overflow connections")
    db_echo: bool = Field(default=False, description="Echo SQL queries")

    # Security
    secret_key: str = Field(default="CHANGE_ME_IN_PRODUCTION", alias="JWT_SECRET", description="JWT signing secret")
    algorithm: str = Field(default="HS256", description="JWT Algorithm")
    access_token_expire_minutes: int = Field(default=60 * 24, description="Token expiry in minutes")

    # File uploads
    upload_dir: str = Field(default="uploads", description="Root directory for uploaded files")
    max_upload_size_mb: int = Field(default=10, description="Maximum upload size in MB")

    # Proxy layer - base URL of this API as seen by the frontend server
    backend_url: str = Field(default="http://localhost:8000", description="Backend base URL for API clients")
    client_max_retries: int = Field(default=2, description="GET retry count for API clients")
    client_backoff_base: float = Field(default=1.0, description="Exponential backoff base (seconds)")

    # CORS
    cors_origins: str = Field(default="http://localhost:3000", description="Allowed CORS origins (comma separated)")

    # Superuser
    first_superuser_email: str | None = None
    first_superuser_password: str | None = None
    run_db_init: bool = False

    # Sentry (Error Tracking)
    sentry_dsn: str = Field(default="", description="Sentry DSN for error tracking")
    sentry_traces_sample_rate: float = Field(default=0.1, description="Sentry traces sample rate")

    # Prometheus
    prometheus_enabled: bool = Field(default=True, description="Enable Prometheus metrics")

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from the comma-separated setting."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def async_database_url(self) -> str:
        """Database URL with an async driver."""
        url = self.database_url
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
