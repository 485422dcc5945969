"""Unit tests for environment-driven settings."""

from __future__ import annotations

from citenet.config import Settings, get_settings


def test_defaults(monkeypatch):
    for name in ("RELATIONSHIP_BASE_URL", "METADATA_BASE_URL", "HTTP_RETRY_BASE_DELAY_MS", "LOG_LEVEL", "LOG_FORMAT"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.RELATIONSHIP_BASE_URL.endswith("/v3")
    assert settings.HTTP_TIMEOUT_MS == 30_000
    assert settings.HTTP_MAX_RETRIES == 3
    assert settings.HTTP_RETRY_BASE_DELAY_MS == 1_000
    assert settings.CACHE_TTL_SEARCH == 3_600_000
    assert settings.CACHE_TTL_PRODUCT == 86_400_000
    assert settings.CACHE_TTL_CITATIONS == 21_600_000
    assert settings.LINKS_PER_NODE == 20
    assert settings.LOG_FORMAT == "json"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("HTTP_MAX_RETRIES", "5")
    monkeypatch.setenv("LINKS_PAGE_SIZE", "50")

    settings = get_settings()

    assert settings.HTTP_MAX_RETRIES == 5
    assert settings.LINKS_PAGE_SIZE == 50
    assert settings.METADATA_BASE_URL == "https://meta.test"


def test_cors_origins_parse_from_json(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", '["https://app.test"]')

    assert get_settings().CORS_ORIGINS == ["https://app.test"]
