"""Shared FastAPI dependency injection."""

from __future__ import annotations

from citenet.network.builder import CitationGraphBuilder
from citenet.network.explorer import RelationshipExplorer
from citenet.network.subgraph import SubgraphExtractor
from citenet.services.sources import ResearchSources

_sources: ResearchSources | None = None


def set_sources(sources: ResearchSources | None) -> None:
    global _sources
    _sources = sources


def get_sources() -> ResearchSources:
    if _sources is None:
        raise RuntimeError("Research sources not initialized")
    return _sources


def get_graph_builder() -> CitationGraphBuilder:
    sources = get_sources()
    return CitationGraphBuilder(
        sources.relationships,
        sources.metadata,
        links_per_node=sources.links_per_node,
    )


def get_subgraph_extractor() -> SubgraphExtractor:
    sources = get_sources()
    return SubgraphExtractor(
        sources.relationships,
        sources.metadata,
        concurrency=sources.subgraph_concurrency,
    )


def get_explorer() -> RelationshipExplorer:
    return RelationshipExplorer(get_sources().relationships)
