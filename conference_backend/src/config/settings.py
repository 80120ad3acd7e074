"""
Application settings configuration for the conference backend.

Centralized settings loaded from environment variables.
"""

from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


# Largest chunk committed in a single atomic batch. Firestore caps a batch
# at 500 operations; the margin leaves room for companion writes.
FIRESTORE_BATCH_SAFE_LIMIT = 450

SUPPORTED_STORE_BACKENDS = ("memory", "sql", "firestore")


class AppSettings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment Variables:
        JWT_SECRET_KEY: Secret key used to verify bearer credentials (HS256)
        JWT_TOKEN_EXPIRY_MINUTES: Lifetime of credentials issued by the backend (default: 60)
        CONFERENCE_STORE_BACKEND: Document store backend, one of memory, sql, firestore
            (default: memory)
        CONFERENCE_DB_URL: SQLAlchemy URL used by the sql backend
        FIRESTORE_PROJECT_ID: Google Cloud project for the firestore backend
        FIRESTORE_DATABASE: Firestore database name (default: "(default)")
        BATCH_SAFE_LIMIT: Maximum documents per atomic batch commit (default: 450)
        DASHBOARD_SCHEDULER_ENABLED: Start the daily dashboard sweep with the app
        DASHBOARD_SCHEDULE_HOUR / DASHBOARD_SCHEDULE_MINUTE: Local time of the sweep
            (default: 03:00)
        DASHBOARD_SCHEDULE_TIMEZONE: IANA zone of the sweep (default: Europe/Paris)
        DASHBOARD_SWEEP_BUDGET_SECONDS: Wall-clock budget of one sweep (default: 540)
        PLATFORM_CONFIG_DOC_ID: Document id of the platform singleton (default: PlatformConfig)
        CORS_ALLOWED_ORIGINS: Comma-separated list of allowed browser origins
    """

    # Bearer credential verification
    jwt_secret_key: str = Field(
        default="",
        validation_alias="JWT_SECRET_KEY",
        description="Secret key for verifying bearer credentials. Must be at least 32 bytes."
    )

    jwt_token_expiry_minutes: int = Field(
        default=60,
        validation_alias="JWT_TOKEN_EXPIRY_MINUTES",
        ge=1,
        le=60 * 24 * 30,
    )

    # Document store selection
    store_backend: str = Field(
        default="memory",
        validation_alias="CONFERENCE_STORE_BACKEND",
        description="Document store backend: memory, sql or firestore"
    )

    database_url: str = Field(
        default="sqlite:///./conferences.db",
        validation_alias="CONFERENCE_DB_URL",
    )

    firestore_project_id: str = Field(
        default="",
        validation_alias="FIRESTORE_PROJECT_ID",
    )

    firestore_database: str = Field(
        default="(default)",
        validation_alias="FIRESTORE_DATABASE",
    )

    batch_safe_limit: int = Field(
        default=FIRESTORE_BATCH_SAFE_LIMIT,
        validation_alias="BATCH_SAFE_LIMIT",
        ge=1,
        le=500,
        description="Maximum number of documents committed per atomic batch"
    )

    # Daily dashboard sweep
    dashboard_scheduler_enabled: bool = Field(
        default=False,
        validation_alias="DASHBOARD_SCHEDULER_ENABLED",
    )

    dashboard_schedule_hour: int = Field(
        default=3,
        validation_alias="DASHBOARD_SCHEDULE_HOUR",
        ge=0,
        le=23,
    )

    dashboard_schedule_minute: int = Field(
        default=0,
        validation_alias="DASHBOARD_SCHEDULE_MINUTE",
        ge=0,
        le=59,
    )

    dashboard_schedule_timezone: str = Field(
        default="Europe/Paris",
        validation_alias="DASHBOARD_SCHEDULE_TIMEZONE",
    )

    dashboard_sweep_budget_seconds: int = Field(
        default=540,
        validation_alias="DASHBOARD_SWEEP_BUDGET_SECONDS",
        ge=1,
    )

    platform_config_doc_id: str = Field(
        default="PlatformConfig",
        validation_alias="PLATFORM_CONFIG_DOC_ID",
    )

    cors_allowed_origins: str = Field(
        default="http://localhost:4200,http://127.0.0.1:4200",
        validation_alias="CORS_ALLOWED_ORIGINS",
    )

    class Config:
        env_file = ".env"
        extra = "ignore"

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret_key(cls, v: str) -> str:
        """Validate that JWT secret key is sufficiently long."""
        if v and len(v) < 32:
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters")
        return v

    @field_validator("store_backend")
    @classmethod
    def validate_store_backend(cls, v: str) -> str:
        """Normalize and validate the document store backend name."""
        value = v.strip().lower()
        if value not in SUPPORTED_STORE_BACKENDS:
            raise ValueError(
                f"CONFERENCE_STORE_BACKEND must be one of {', '.join(SUPPORTED_STORE_BACKENDS)}"
            )
        return value

    @property
    def jwt_configured(self) -> bool:
        """Check if JWT is properly configured."""
        return bool(self.jwt_secret_key)

    @property
    def cors_allowed_origins_list(self) -> List[str]:
        """Allowed CORS origins as a list."""
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]


@lru_cache()
def get_settings() -> AppSettings:
    """
    Get cached application settings.

    Returns:
        AppSettings instance (cached after first call)
    """
    return AppSettings()
