"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from typing import List, Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

from jobboard.schemas.schemas import DateRange


class Settings(BaseSettings):
    # PostgreSQL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "jobboard_user"
    postgres_password: str = "password"
    postgres_db: str = "jobboard_db"

    # Full SQLAlchemy URL, overrides the postgres_* fields when set
    database_url: Optional[str] = None

    # JWT (tokens are issued by the main job board app)
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440

    # Reports
    default_range: DateRange = DateRange.last_30_days
    invalid_range_policy: Literal["fallback", "reject"] = "fallback"

    # App
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    @property
    def postgres_url(self) -> str:
        """Construct PostgreSQL connection URL"""
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def sqlalchemy_url(self) -> str:
        return self.database_url or self.postgres_url

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
