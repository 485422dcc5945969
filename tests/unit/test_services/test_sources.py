"""Unit tests for building the shared source bundle from settings."""

from __future__ import annotations

import pytest

from citenet.config import Settings
from citenet.services.sources import ResearchSources


def test_from_settings_converts_milliseconds():
    settings = Settings(
        CACHE_TTL_SEARCH=120_000,
        CACHE_TTL_PRODUCT=90_000,
        CACHE_TTL_CITATIONS=30_000,
        LINKS_PAGE_SIZE=25,
        LINKS_PER_NODE=7,
        SUBGRAPH_CONCURRENCY=2,
    )
    sources = ResearchSources.from_settings(settings)

    assert sources.cache is not None
    assert sources.cache._default_ttl == 120.0
    assert sources.metadata._ttl == 90.0
    assert sources.relationships._ttl == 30.0
    assert sources.relationships._page_size == 25
    assert sources.links_per_node == 7
    assert sources.subgraph_concurrency == 2


def test_adapters_share_one_cache():
    sources = ResearchSources.from_settings(Settings())

    assert sources.relationships._cache is sources.cache
    assert sources.metadata._cache is sources.cache


def test_cache_can_be_disabled():
    sources = ResearchSources.from_settings(Settings(), enable_cache=False)

    assert sources.cache is None
    assert sources.relationships._cache is None


@pytest.mark.asyncio
async def test_start_and_close():
    sources = ResearchSources.from_settings(Settings())
    sources.start()
    await sources.close()
