"""Application settings via pydantic-settings."""

from functools import lru_cache

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables with GAMERATEZ_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="GAMERATEZ_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Core ---
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    cors_origins: list[str] = ["http://localhost:5173"]
    log_level: str = "INFO"
    log_format: str = "json"

    # --- Storage ---
    # Empty database_url selects the JSON file store under data_dir.
    database_url: str = Field(
        "",
        validation_alias=AliasChoices("GAMERATEZ_DATABASE_URL", "DATABASE_URL", "database_url"),
    )
    db_create_all: bool = True
    data_dir: str = "data"

    # --- Uploads ---
    uploads_dir: str = "uploads"
    upload_max_bytes: int = 5 * 1024 * 1024

    # --- Rate limits ---
    rate_limit_requests: int = 240
    rate_limit_window_seconds: int = 60
    rate_limit_auth_requests: int = 60
    rate_limit_auth_window_seconds: int = 15 * 60
    redis_url: str = ""

    # --- Auth ---
    admin_token: str = ""
    complete_token_ttl_seconds: int = 600
    check_email_mx: bool = True
    mx_lookup_timeout_seconds: float = 5.0

    # --- Feed ---
    games_file: str = ""
    feed_limit: int = 200

    @field_validator("database_url")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Point plain Postgres URLs at the asyncpg driver."""
        v = v.strip()
        if not v or v.startswith("sqlite"):
            return v
        if v.startswith("postgres://"):
            v = v.replace("postgres://", "postgresql+asyncpg://", 1)
        elif v.startswith("postgresql://"):
            v = v.replace("postgresql://", "postgresql+asyncpg://", 1)
        if not v.startswith("postgresql+asyncpg://"):
            msg = "DATABASE_URL must start with postgres://, postgresql://, postgresql+asyncpg:// or sqlite"
            raise ValueError(msg)
        return v

    @property
    def storage_backend(self) -> str:
        """'sql' when a database URL is configured, otherwise 'file'."""
        return "sql" if self.database_url else "file"


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
