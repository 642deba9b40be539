from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )
    # Application
    APP_NAME: str = "TokenUp API"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Storage: "sql" uses DATABASE_URL, "memory" keeps everything in process
    STORAGE_BACKEND: str = "sql"
    DATABASE_URL: str = "sqlite:///./tokenup.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    AUTO_CREATE_TABLES: bool = True

    # Security
    SECRET_KEY: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    ADMIN_USERNAMES: List[str] = Field(default_factory=list)
    ALLOWED_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])

    # Business Rules
    ALLOWED_FILE_TYPES: List[str] = Field(
        default_factory=lambda: [
            "image/jpeg",
            "image/png",
            "image/webp",
            "application/pdf",
        ]
    )
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024  # 5MB for inline data URIs
    MAX_COMMENT_LENGTH: int = 1000
    LEADERBOARD_DEFAULT_LIMIT: int = 10
    LEADERBOARD_MAX_LIMIT: int = 100

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    @property
    def uses_memory_store(self) -> bool:
        return self.STORAGE_BACKEND.lower() == "memory"


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""

    return Settings()
