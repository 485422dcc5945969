"""Relationship-service adapter (ScholeXplorer v3 ``/Links``)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from citenet.network.models import Link, LinkDirection, LinkEndpoint, normalize_kind, normalize_relation
from citenet.services.cache_service import TTLCache
from citenet.services.http_client import ResilientClient
from citenet.utils.exceptions import UpstreamError
from citenet.utils.logging import get_logger
from citenet.utils.text_processing import normalize_identifier, parse_year

logger = get_logger(__name__)


# ── Wire payload ─────────────────────────────────────────────────────


class _ScholixModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ScholixIdentifier(_ScholixModel):
    id: str = Field(alias="ID")
    scheme: str = Field(default="", alias="IDScheme")


class ScholixEntity(_ScholixModel):
    identifiers: list[ScholixIdentifier] = Field(default_factory=list, alias="Identifier")
    type: str | None = Field(default=None, alias="Type")
    title: str | None = Field(default=None, alias="Title")
    publication_date: str | None = Field(default=None, alias="PublicationDate")

    def primary_identifier(self) -> str:
        """DOI if the entity has one, otherwise its first identifier."""
        for identifier in self.identifiers:
            if identifier.scheme.lower() == "doi":
                return identifier.id
        return self.identifiers[0].id if self.identifiers else ""


class ScholixRelationshipType(_ScholixModel):
    name: str | None = Field(default=None, alias="Name")
    sub_type: str | None = Field(default=None, alias="SubType")


class ScholixProvider(_ScholixModel):
    name: str = "unknown"


class ScholixLink(_ScholixModel):
    source: ScholixEntity
    target: ScholixEntity
    relationship_type: ScholixRelationshipType = Field(
        default_factory=ScholixRelationshipType, alias="RelationshipType"
    )
    link_provider: list[ScholixProvider] = Field(default_factory=list, alias="LinkProvider")


class ScholixPage(_ScholixModel):
    total_links: int = Field(default=0, alias="totalLinks")
    result: list[dict[str, Any]] = Field(default_factory=list)


def _endpoint(entity: ScholixEntity) -> LinkEndpoint:
    return LinkEndpoint(
        id=normalize_identifier(entity.primary_identifier()),
        kind=normalize_kind(entity.type),
        title=entity.title or None,
        year=parse_year(entity.publication_date),
    )


def parse_links(payload: Any) -> list[Link] | None:
    """Normalize a ``/Links`` response into Links.

    Returns None when the page itself is unusable (an HTML error page, a
    missing ``result`` list). Individual malformed entries and entries without
    a usable identifier on either side are skipped.
    """
    try:
        page = ScholixPage.model_validate(payload)
    except ValidationError as exc:
        logger.warning("links_payload_invalid", error=str(exc)[:200])
        return None

    links: list[Link] = []
    for raw in page.result:
        try:
            item = ScholixLink.model_validate(raw)
        except ValidationError:
            logger.debug("link_entry_skipped", raw=str(raw)[:200])
            continue
        source, target = _endpoint(item.source), _endpoint(item.target)
        if not source.id or not target.id:
            continue
        relation = item.relationship_type.sub_type or item.relationship_type.name or "unknown"
        links.append(
            Link(
                source=source,
                target=target,
                relation=normalize_relation(relation),
                provider=item.link_provider[0].name if item.link_provider else "unknown",
            )
        )
    logger.debug("links_parsed", total_links=page.total_links, returned=len(links))
    return links


# ── Adapter ──────────────────────────────────────────────────────────


class RelationshipSource:
    """Outgoing/incoming links for a node, cached and failure tolerant."""

    def __init__(
        self,
        client: ResilientClient,
        cache: TTLCache | None = None,
        *,
        ttl: float = 21_600.0,
        page_size: int = 100,
    ) -> None:
        self._client = client
        self._cache = cache
        self._ttl = ttl
        self._page_size = page_size

    async def get_links(
        self,
        node_id: str,
        direction: LinkDirection,
        *,
        relation: str | None = None,
        limit: int | None = None,
    ) -> list[Link]:
        """Links where ``node_id`` is the source (outgoing) or target (incoming).

        ``relation`` is a provider relation filter such as ``cites`` or
        ``IsSupplementTo``. Upstream failures are logged and give ``[]``.
        """
        pid = normalize_identifier(node_id)
        cache_key = f"links:{direction}:{pid.lower()}:{(relation or '*').lower()}"
        if self._cache is not None:
            cached = self._cache.get(cache_key)
            if cached is not None:
                return cached[:limit] if limit is not None else list(cached)

        path = self._links_path(pid, direction, relation)
        try:
            payload = await self._client.get(path)
        except (UpstreamError, ValueError) as exc:
            logger.warning(
                "links_fetch_failed",
                node_id=pid,
                direction=direction,
                error=str(exc),
            )
            return []

        links = parse_links(payload)
        if links is None:
            logger.warning("links_page_unusable", node_id=pid, direction=direction)
            return []
        logger.info("links_fetched", node_id=pid, direction=direction, relation=relation, count=len(links))
        if self._cache is not None:
            self._cache.set(cache_key, links, self._ttl)
        return links[:limit] if limit is not None else links

    async def get_citation_count(self, node_id: str) -> int:
        """Number of links whose target is ``node_id`` with relation Cites."""
        links = await self.get_links(node_id, "incoming", relation="cites")
        return len(links)

    def _links_path(self, pid: str, direction: LinkDirection, relation: str | None) -> str:
        # The service mishandles percent-encoded DOIs, so pids go in verbatim.
        parts = [f"sourcePid={pid}" if direction == "outgoing" else f"targetPid={pid}"]
        if relation:
            parts.append(f"relation={relation[:1].upper()}{relation[1:]}")
        parts.append(f"limit={self._page_size}")
        return "/Links?" + "&".join(parts)
