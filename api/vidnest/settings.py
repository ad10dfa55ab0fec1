"""Centralized environment-driven settings.

Keep this module lightweight: stdlib only, no app imports, to avoid circular deps.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _list_env(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


# Minimum JWT secret length (256 bits).
# Note: This checks length, not entropy.
MIN_SECRET_LENGTH = 32


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, built once by the entry point."""

    jwt_secret_key: str
    database_url: str = "sqlite:///./vidnest.db"
    jwt_algorithm: str = "HS256"
    session_ttl_hours: int = 8
    session_cookie_name: str = "vidnest_token"
    environment: str = "development"
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:5173"])
    vault_location: str = "./vault"
    # Maximum size for a single uploaded media file (bytes), 100 MiB by default.
    media_size_limit: int = 100 * 1024 * 1024
    api_prefix: str = "/api/v1"
    run_migrations: bool = False
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not self.jwt_secret_key:
            raise RuntimeError(
                "JWT_SECRET_KEY environment variable is required but not set. "
                "Generate a secure key with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
            )
        if len(self.jwt_secret_key) < MIN_SECRET_LENGTH:
            raise RuntimeError(
                f"JWT_SECRET_KEY is too short. Must be at least {MIN_SECRET_LENGTH} characters long."
            )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def session_ttl_seconds(self) -> int:
        return self.session_ttl_hours * 3600


def load_settings() -> Settings:
    """Build settings from the environment (call after load_dotenv)."""
    return Settings(
        jwt_secret_key=os.getenv("JWT_SECRET_KEY", ""),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./vidnest.db"),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        session_ttl_hours=_int_env("SESSION_TTL_HOURS", 8),
        session_cookie_name=os.getenv("SESSION_COOKIE_NAME", "vidnest_token"),
        environment=os.getenv("ENVIRONMENT", "development"),
        cors_origins=_list_env("CORS_ORIGINS", "http://localhost:5173"),
        vault_location=os.getenv("VAULT_LOCATION", "./vault"),
        media_size_limit=_int_env("MEDIA_SIZE_LIMIT", 100 * 1024 * 1024),
        api_prefix=os.getenv("API_PREFIX", "/api/v1"),
        run_migrations=_bool_env("RUN_MIGRATIONS", False),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
