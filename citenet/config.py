from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Upstream services
    RELATIONSHIP_BASE_URL: str = "https://api-beta.scholexplorer.openaire.eu/v3"
    METADATA_BASE_URL: str = "https://api.openaire.eu"

    # Resilient client
    HTTP_TIMEOUT_MS: int = 30_000
    HTTP_MAX_RETRIES: int = 3
    HTTP_RETRY_BASE_DELAY_MS: int = 1_000

    # Cache TTLs (milliseconds)
    CACHE_TTL_SEARCH: int = 3_600_000
    CACHE_TTL_PRODUCT: int = 86_400_000
    CACHE_TTL_CITATIONS: int = 21_600_000
    CACHE_SWEEP_INTERVAL_MS: int = 300_000
    CACHE_MAX_ENTRIES: int = 50_000

    # Traversal
    LINKS_PAGE_SIZE: int = 100
    LINKS_PER_NODE: int = 20
    SUBGRAPH_CONCURRENCY: int = 5
    DEFAULT_MAX_NODES: int = 200

    # API
    CORS_ORIGINS: list[str] = ["*"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = Field(default="json", description="'json' for production, 'console' for dev")


def get_settings() -> Settings:
    return Settings()
