# guidebook/core/config.py
import logging
import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from fastapi import Request
from pydantic import Field, SecretStr, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parents[2]

_DEFAULT_SECRET_KEY = SecretStr("dev-only-secret-key-change-me-please-32b")

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = _PROJECT_ROOT / ".env"
    logger.debug("[CONFIG] Looking for .env at: %s (exists=%s)", env_path, env_path.exists())
    load_dotenv(env_path)


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


class Settings(BaseSettings):
    environment: Literal["development", "test", "staging", "production"] = "development"
    log_level: str = Field(default="INFO", description="Root logging level")

    # Auth
    secret_key: SecretStr = Field(
        default=_DEFAULT_SECRET_KEY,
        description="Secret key for JWT tokens",
    )
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 1440  # 24 hours

    # Database
    database_url: str = Field(
        default="sqlite+pysqlite:///./guidebook.db",
        description="SQLAlchemy database URL (postgresql+psycopg2://... in production)",
    )
    auto_create_schema: bool = Field(
        default=True,
        description="Create missing tables on startup",
    )
    db_pool_size: int = 5
    db_max_overflow: int = 5
    # Fail fast when the pool is exhausted instead of hanging the request
    db_pool_timeout: int = 5
    db_connect_timeout: int = 5
    db_statement_timeout_ms: int = 15000
    db_lock_timeout_ms: int = 5000
    sqlite_busy_timeout_s: float = 5.0

    # Server
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Listing
    default_page_size: int = 10
    max_page_size: int = 100

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = (value or "INFO").strip().upper()
        if normalized not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return normalized

    @field_validator("secret_key")
    @classmethod
    def _require_real_secret_in_prod(cls, value: SecretStr, info: ValidationInfo) -> SecretStr:
        environment = info.data.get("environment", "development")
        if environment == "production" and value == _DEFAULT_SECRET_KEY:
            raise ValueError("SECRET_KEY must be set in production environments.")
        return value


settings = Settings()


def get_app_settings(request: Request) -> Settings:
    """Settings the running application was built with (see ``create_app``)."""
    return request.app.state.settings
