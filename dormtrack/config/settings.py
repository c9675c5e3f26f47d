"""
Runtime configuration for dormtrack.

Values come from the process environment, then from a local ``.env``
file. Field names are the environment variable names.
"""

import json
import secrets
import string
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Union

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

env_path = Path('.') / '.env'
load_dotenv(dotenv_path=env_path)


def _generate_secret_key() -> str:
    """Random signing key for development runs without JWT_SECRET_KEY."""
    alphabet = string.ascii_letters + string.digits
    return ''.join(secrets.choice(alphabet) for _ in range(32))


class Settings(BaseSettings):
    """Every tunable of the service, grouped by concern."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        populate_by_name=True,
    )

    # Application configuration
    APP_NAME: str = Field(default="Dormitory Complaint Tracker", alias="PROJECT_NAME")
    API_VERSION: str = Field(default="v1", alias="PROJECT_VERSION")
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    CORS_ORIGINS: List[str] = Field(default=["*"], alias="BACKEND_CORS_ORIGINS")

    # Primary store - support both individual fields and DATABASE_URL
    DATABASE_URL: Optional[str] = None
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "postgres"
    DB_NAME: str = "dormtrack"
    DB_POOL_SIZE: int = 10
    DB_POOL_OVERFLOW: int = 10
    DB_ECHO: bool = False
    SLOW_QUERY_THRESHOLD_SECONDS: float = 0.5

    # Secondary store, filled by an out-of-band replication job
    REPLICA_DATABASE_URL: Optional[str] = None

    # Identity
    JWT_SECRET_KEY: str = Field(default_factory=_generate_secret_key)
    JWT_ALGORITHM: str = "HS256"
    AUTH_COOKIE_NAME: str = "token"

    # Workflow policy
    ADMIN_DELETE_ANY_STATUS: bool = True
    DEFAULT_LIST_READ_MODE: str = "strong"
    DEFAULT_STATS_READ_MODE: str = "weak"
    STATS_DEFAULT_RANGE_DAYS: int = 7

    # Monitoring and logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_TO_FILE: bool = False
    SENTRY_DSN: Optional[str] = None

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        """Accept a JSON list or a comma-separated string."""
        if isinstance(v, str):
            if v.startswith('[') and v.endswith(']'):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator('DEFAULT_LIST_READ_MODE', 'DEFAULT_STATS_READ_MODE')
    @classmethod
    def validate_read_mode(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in {"strong", "eventual", "weak"}:
            raise ValueError("read mode must be one of: strong, eventual, weak")
        return v

    def get_database_url(self) -> str:
        """Primary store URL; DATABASE_URL wins over the DB_* parts."""
        if self.DATABASE_URL:
            return self.DATABASE_URL

        return (
            f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    def get_replica_url(self) -> Optional[str]:
        """Secondary store URL, or None when reads always go to the primary"""
        return self.REPLICA_DATABASE_URL or None

    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"


@lru_cache()
def get_settings() -> Settings:
    """Process-wide settings, read once."""
    return Settings()


settings = get_settings()
