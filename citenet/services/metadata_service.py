"""Metadata-service adapter (OpenAIRE Graph API v2 research products)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from citenet.network.models import NodeMetadata, normalize_kind
from citenet.services.cache_service import TTLCache
from citenet.services.http_client import ResilientClient
from citenet.utils.exceptions import NotFoundError, UpstreamError
from citenet.utils.logging import get_logger
from citenet.utils.text_processing import looks_like_doi, normalize_identifier, parse_year

logger = get_logger(__name__)

_OPEN_ACCESS_LABELS = ("gold", "green", "bronze", "hybrid", "open")


# ── Wire payload ─────────────────────────────────────────────────────


class _GraphModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class GraphPid(_GraphModel):
    scheme: str = ""
    value: str = ""


class GraphAuthor(_GraphModel):
    full_name: str | None = Field(default=None, alias="fullName")
    name: str | None = None


class GraphCitationImpact(_GraphModel):
    citation_count: int = Field(default=0, alias="citationCount")


class GraphIndicators(_GraphModel):
    citation_impact: GraphCitationImpact | None = Field(default=None, alias="citationImpact")


class GraphAccessRight(_GraphModel):
    label: str | None = None


class GraphProduct(_GraphModel):
    id: str
    type: str | None = None
    main_title: str | None = Field(default=None, alias="mainTitle")
    title: str | None = None
    publication_date: str | None = Field(default=None, alias="publicationDate")
    publisher: str | None = None
    pids: list[GraphPid] = Field(default_factory=list)
    authors: list[GraphAuthor] = Field(default_factory=list)
    indicators: GraphIndicators | None = None
    best_open_access_right: GraphAccessRight | None = Field(default=None, alias="bestOpenAccessRight")

    def to_metadata(self) -> NodeMetadata:
        impact = self.indicators.citation_impact if self.indicators else None
        access = (self.best_open_access_right.label or "") if self.best_open_access_right else ""
        doi = next((pid.value for pid in self.pids if pid.scheme.lower() == "doi" and pid.value), None)
        return NodeMetadata(
            id=self.id,
            kind=normalize_kind(self.type or "publication"),
            title=self.main_title or self.title or "Untitled",
            year=parse_year(self.publication_date),
            publication_date=self.publication_date,
            citation_count=impact.citation_count if impact else 0,
            open_access=any(label in access.lower() for label in _OPEN_ACCESS_LABELS),
            doi=doi,
            publisher=self.publisher,
            authors=[a.full_name or a.name or "Unknown" for a in self.authors[:10]],
        )


def parse_product(payload: Any) -> NodeMetadata | None:
    """Normalize one research product; None when the payload is unusable."""
    try:
        return GraphProduct.model_validate(payload).to_metadata()
    except ValidationError as exc:
        logger.warning("product_payload_invalid", error=str(exc)[:200])
        return None


# ── Adapter ──────────────────────────────────────────────────────────


class MetadataSource:
    """Descriptive metadata for a node, cached for a long TTL."""

    def __init__(
        self,
        client: ResilientClient,
        cache: TTLCache | None = None,
        *,
        ttl: float = 86_400.0,
    ) -> None:
        self._client = client
        self._cache = cache
        self._ttl = ttl

    async def get_metadata(self, node_id: str) -> NodeMetadata:
        """Look up ``node_id``; raises NotFoundError for any kind of miss.

        DOI-shaped identifiers go through the pid search, anything else is
        treated as an internal product id.
        """
        identifier = normalize_identifier(node_id)
        cache_key = f"product:{identifier.lower()}"
        if self._cache is not None:
            cached = self._cache.get(cache_key)
            if cached is not None:
                return cached

        try:
            if looks_like_doi(identifier):
                payload = await self._client.get(
                    f"/graph/v2/researchProducts?pid={identifier}&page=1&pageSize=1"
                )
                results = payload.get("results") if isinstance(payload, dict) else None
                if not results:
                    raise NotFoundError(identifier, "no product with this DOI")
                raw = results[0]
            else:
                raw = await self._client.get(f"/graph/v2/researchProducts/{identifier}")
        except (UpstreamError, ValueError) as exc:
            logger.info("product_lookup_failed", node_id=identifier, error=str(exc))
            raise NotFoundError(identifier, str(exc)) from exc

        metadata = parse_product(raw)
        if metadata is None:
            raise NotFoundError(identifier, "unparseable product payload")

        logger.debug("product_fetched", node_id=identifier, kind=metadata.kind)
        if self._cache is not None:
            self._cache.set(cache_key, metadata, self._ttl)
        return metadata
