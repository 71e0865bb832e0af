"""
Runtime configuration helpers for the consistency layer.

Loads DATABASE_URL and the tuning knobs from the environment, falling back to
the .env file located in the project root.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the project root
BASE_DIR = Path(__file__).resolve().parents[1]

# Absolute path to .env
ENV_PATH = BASE_DIR / ".env"

# Load .env defaults without overriding environment variables provided by the platform
load_dotenv(dotenv_path=ENV_PATH, override=False)


class Settings(BaseSettings):
    # Required: must come from the environment or .env
    database_url: str = Field(..., alias="DATABASE_URL")

    app_name: str = Field(default="feedcore", alias="APP_NAME")
    sql_echo: bool = Field(default=False, alias="SQL_ECHO")
    db_pool_pre_ping: bool = Field(default=True, alias="DB_POOL_PRE_PING")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Keyset pagination
    default_page_size: int = Field(default=10, ge=1, alias="DEFAULT_PAGE_SIZE")
    max_page_size: int = Field(default=50, ge=1, alias="MAX_PAGE_SIZE")

    max_comment_length: int = Field(default=2000, ge=1, alias="MAX_COMMENT_LENGTH")

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]
