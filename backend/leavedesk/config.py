from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "HR Leave Desk"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:8000"]

    # Document store
    store_backend: Literal["memory", "sql", "firestore"] = "sql"
    store_timeout_seconds: float = Field(default=10.0, gt=0)
    store_create_schema: bool = True
    database_url: str = "sqlite:///./leavedesk.db"
    firestore_project_id: str | None = None
    firestore_database: str = "(default)"
    firestore_api_key: str | None = None
    firestore_access_token: str | None = None
    firestore_base_url: str = "https://firestore.googleapis.com/v1"

    # Leave policy
    leave_allocation_days: int = Field(default=10, ge=0)
    balance_id_digest_length: int = Field(default=16, ge=8, le=64)
    audit_enabled: bool = True
    serialize_decisions: bool = False
    reconcile_interval_seconds: int = Field(default=3600, gt=0)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
