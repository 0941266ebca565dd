"""
TripDesk Backend — Application Configuration
==============================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Passed into create_app(); the singleton is the default for the
       running server and the Alembic CLI.

Environment inputs:
    PORT / HOST           listening address
    DATABASE_URL          storage location (SQLite file by default)
    SESSION_SECRET        signs the session cookie
    ADMIN_USERNAME        default administrator created at startup
    ADMIN_PASSWORD        its password (hashed before storage)
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_SESSION_SECRET = "dev-secret-change-me"
DEFAULT_ADMIN_PASSWORD = "admin123"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have working defaults for local development. The session
    secret and the admin password defaults are public placeholders; see
    validate_required_for_production().
    """

    # ── Database ──────────────────────────────────────────────────────────
    # Format: sqlite+aiosqlite:///./data.db  or  postgresql+asyncpg://user:pw@host/db
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data.db",
        description="Async SQLAlchemy connection URL",
    )

    # Pool sizing only applies to server databases; SQLite uses its own pool.
    db_pool_size: int = Field(default=10, ge=1, le=100)
    db_max_overflow: int = Field(default=10, ge=0, le=50)
    db_pool_pre_ping: bool = Field(default=True)

    # Attempts for startup schema initialization while the database comes up.
    schema_init_attempts: int = Field(default=5, ge=1, le=20)
    schema_init_max_wait: int = Field(default=10, ge=1, le=120)

    # ── Sessions ──────────────────────────────────────────────────────────
    session_secret: str = Field(default=DEFAULT_SESSION_SECRET)
    session_cookie_name: str = Field(default="tripdesk_session")
    # Fixed lifetime from login; activity does not extend it.
    session_ttl_seconds: int = Field(default=7200, ge=60, le=86400)
    session_cookie_secure: bool = Field(default=False)

    # ── Default administrator ─────────────────────────────────────────────
    admin_username: str = Field(default="admin", min_length=1)
    admin_password: str = Field(default=DEFAULT_ADMIN_PASSWORD, min_length=1)

    # ── Password hashing ──────────────────────────────────────────────────
    # bcrypt cost factor: 2**rounds iterations. 10 matches existing hashes.
    bcrypt_rounds: int = Field(default=10, ge=4, le=16)

    # Run a throwaway hash comparison when the username is unknown so both
    # failure paths of /api/admin/login cost the same.
    auth_equalize_timing: bool = Field(default=True)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Comma-separated origins allowed to call the API with credentials.
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=1, le=65535)

    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def validate_required_for_production(self) -> None:
        """
        What:  Reports settings that are still at their public defaults.
        When:  Called during app startup (lifespan); the caller logs the
               result and keeps serving.
        """
        errors = []
        if self.session_secret == DEFAULT_SESSION_SECRET:
            errors.append("SESSION_SECRET is the development default; session cookies can be forged.")
        if self.admin_password == DEFAULT_ADMIN_PASSWORD:
            errors.append(
                "ADMIN_PASSWORD is the documented default. It is only used when the "
                "admin account is first created; change it before exposing the service."
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance used by the ASGI entry point and the Alembic CLI.
settings = Settings()
