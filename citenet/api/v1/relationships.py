"""Relationship exploration and citation count endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from citenet.api.dependencies import get_explorer, get_sources
from citenet.api.v1.schemas.network import CitationCountResponse
from citenet.network.explorer import RelationshipExplorer
from citenet.network.models import RelationshipExploration
from citenet.services.sources import ResearchSources

router = APIRouter(tags=["relationships"])


@router.get("/relationships/{identifier:path}", response_model=RelationshipExploration)
async def explore_relationships(
    identifier: str,
    relation: str | None = None,
    target_kind: str = Query(default="all", alias="targetKind"),
    limit: int = 50,
    explorer: RelationshipExplorer = Depends(get_explorer),
) -> RelationshipExploration:
    """Outgoing relationships of a product, grouped by relation and target kind."""
    return await explorer.explore(identifier, relation=relation, target_kind=target_kind, limit=limit)


@router.get("/citations/{identifier:path}/count", response_model=CitationCountResponse)
async def citation_count(
    identifier: str,
    sources: ResearchSources = Depends(get_sources),
) -> CitationCountResponse:
    count = await sources.relationships.get_citation_count(identifier)
    return CitationCountResponse(identifier=identifier, citation_count=count)
