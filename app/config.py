from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    APP_NAME: str = "String Analyzer Service"
    APP_VERSION: str = "1.0.0"

    # Logging configuration used by app.logging
    LOG_LEVEL: str = "INFO"
    CONSOLE_LOG_LEVEL: str = "INFO"

    CORS_ALLOW_ORIGINS: List[str] = ["*"]

    # Rate limiting (slowapi). memory:// keeps counters in-process.
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT: int = 60
    RATE_LIMIT_WINDOW: int = 60
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def default_rate_limit(self) -> str:
        return f"{self.RATE_LIMIT} per {self.RATE_LIMIT_WINDOW} seconds"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
