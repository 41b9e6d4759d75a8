"""Application configuration loaded from environment variables."""

import logging
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Only ever used outside production
DEV_JWT_SECRET_KEY = "dev-secret-change-in-production"


class ConfigurationError(RuntimeError):
    """Raised at startup when the configuration cannot run safely."""


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "test", "staging", "production"] = "development"
    log_level: str = "INFO"

    # JWT
    jwt_secret_key: str | None = None
    jwt_algorithm: str = "HS256"
    session_token_ttl_days: int = 7
    reset_token_ttl_minutes: int = 60

    # Persistence (PostgreSQL for production, SQLite for dev)
    database_url: str = "sqlite+aiosqlite:///./data/campus_auth.db"
    use_database: bool = True

    # Frontend / email
    frontend_url: str = "http://localhost:5173"
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    email_from: str = "noreply@campus-auth.local"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def signing_key(self) -> str:
        """Return the JWT signing secret.

        Raises:
            ConfigurationError: if running in production without a secret.
        """
        if self.jwt_secret_key:
            return self.jwt_secret_key
        if self.is_production:
            raise ConfigurationError("JWT_SECRET_KEY must be set in production")
        logger.warning("JWT_SECRET_KEY not set, using development secret")
        return DEV_JWT_SECRET_KEY


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the service process."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
