"""
Centralized configuration using Pydantic BaseSettings.
Every tunable of the search pipeline is read from the environment (or .env).
"""
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Movie Discovery API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Catalog (TMDB v3)
    TMDB_ACCESS_TOKEN: Optional[str] = None
    TMDB_BASE_URL: str = "https://api.themoviedb.org/3"
    CATALOG_LOCALE: str = "en-US"
    CATALOG_TIMEOUT_SEC: float = 10.0
    DISCOVER_PAGES: int = 10

    # Catalog caches
    DETAIL_CACHE_TTL_SEC: int = 3600
    GENRE_CACHE_TTL_SEC: int = 86400

    # Ranking service (Gemini generateContent)
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-2.0-flash"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    RANKING_TIMEOUT_SEC: float = 30.0
    RANKING_TEMPERATURE: float = 0.2

    # Ranking limits
    AI_POOL_LIMIT: int = 60  # candidates per prompt
    MIN_MATCH_SCORE: float = 0.4
    MAX_RESULTS: int = 30

    # Ranking circuit breaker
    CIRCUIT_BREAKER_FAILURE_THRESHOLD: int = 5
    CIRCUIT_BREAKER_RECOVERY_TIMEOUT_SEC: int = 30

    # Retry-After sent with 503 responses
    RETRY_AFTER_SEC: int = 30

    # Telemetry
    ENABLE_OTEL: bool = False  # off by default, no collector in dev
    OTEL_EXPORTER_ENDPOINT: Optional[str] = None
    ENABLE_PROMETHEUS: bool = True

    @property
    def catalog_configured(self) -> bool:
        return bool(self.TMDB_ACCESS_TOKEN)

    @property
    def ranking_configured(self) -> bool:
        return bool(self.GEMINI_API_KEY)

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance - singleton pattern."""
    return Settings()
