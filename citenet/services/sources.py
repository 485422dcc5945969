"""Explicitly constructed bundle of upstream clients, adapters and cache."""

from __future__ import annotations

from citenet.config import Settings
from citenet.services.cache_service import TTLCache
from citenet.services.http_client import ResilientClient
from citenet.services.metadata_service import MetadataSource
from citenet.services.relationship_service import RelationshipSource
from citenet.utils.logging import get_logger

logger = get_logger(__name__)


def _seconds(ms: int) -> float:
    return ms / 1000.0


class ResearchSources:
    """Owns one client per upstream service and the cache they share.

    Built once (application lifespan or a script) and handed to the graph
    builder, subgraph extractor and explorer.
    """

    def __init__(
        self,
        relationships: RelationshipSource,
        metadata: MetadataSource,
        *,
        cache: TTLCache | None = None,
        clients: tuple[ResilientClient, ...] = (),
        links_per_node: int = 20,
        subgraph_concurrency: int = 5,
    ) -> None:
        self.relationships = relationships
        self.metadata = metadata
        self.cache = cache
        self.links_per_node = links_per_node
        self.subgraph_concurrency = subgraph_concurrency
        self._clients = clients

    @classmethod
    def from_settings(cls, settings: Settings, *, enable_cache: bool = True) -> ResearchSources:
        client_options = {
            "timeout": _seconds(settings.HTTP_TIMEOUT_MS),
            "max_retries": settings.HTTP_MAX_RETRIES,
            "retry_base_delay": _seconds(settings.HTTP_RETRY_BASE_DELAY_MS),
        }
        relationship_client = ResilientClient(settings.RELATIONSHIP_BASE_URL, **client_options)
        metadata_client = ResilientClient(settings.METADATA_BASE_URL, **client_options)

        cache = (
            TTLCache(
                default_ttl=_seconds(settings.CACHE_TTL_SEARCH),
                sweep_interval=_seconds(settings.CACHE_SWEEP_INTERVAL_MS),
                max_entries=settings.CACHE_MAX_ENTRIES,
            )
            if enable_cache
            else None
        )

        return cls(
            RelationshipSource(
                relationship_client,
                cache,
                ttl=_seconds(settings.CACHE_TTL_CITATIONS),
                page_size=settings.LINKS_PAGE_SIZE,
            ),
            MetadataSource(metadata_client, cache, ttl=_seconds(settings.CACHE_TTL_PRODUCT)),
            cache=cache,
            clients=(relationship_client, metadata_client),
            links_per_node=settings.LINKS_PER_NODE,
            subgraph_concurrency=settings.SUBGRAPH_CONCURRENCY,
        )

    def start(self) -> None:
        if self.cache is not None:
            self.cache.start()
        logger.info("sources_started", cache_enabled=self.cache is not None)

    async def close(self) -> None:
        if self.cache is not None:
            await self.cache.close()
        for client in self._clients:
            await client.close()
        logger.info("sources_closed")
