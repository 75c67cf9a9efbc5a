from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

_PROJECT_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _PROJECT_DIR / ".env",
    ".env",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "Cloner API"
    app_version: str = "0.1.0"
    app_env: str = "development"
    database_url: str = "sqlite:///./cloner.db"
    cors_origins: list[str] = ["http://localhost:3020"]

    # Alternate stores a clone can be written to — name → database URL.
    # Set as JSON, e.g. DESTINATION_DATABASE_URLS='{"archive": "sqlite:///./archive.db"}'
    destination_database_urls: dict[str, str] = {}

    # File storage (cloneable file attributes are relative to this directory)
    upload_dir: str = "uploads"

    # Logging — per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_sql: str = "WARNING"           # sqlalchemy.engine — SQL queries
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_cloner: str = "INFO"           # Duplication engine and adapters

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance — reads .env once."""
    return Settings()
