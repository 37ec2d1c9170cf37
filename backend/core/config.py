from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./languagestory.db"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # True for production (structured JSON), False for dev (colored)
    LOG_SQL: bool = False   # Enable SQLAlchemy query logging

    # Migration
    WXR_EXPORT_PATH: str = "alanguagestory.WordPress.2025-07-29.xml"
    MIGRATION_DEFAULT_USER_ID: int = 1  # created_by for courses whose author has no account
    MIGRATION_CREATE_TABLES: bool = False

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
