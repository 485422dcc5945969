"""Citation network endpoints: build, subgraph and merge."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from citenet.api.dependencies import get_graph_builder, get_subgraph_extractor
from citenet.api.v1.schemas.network import (
    NetworkResponse,
    NetworkSummary,
    RelationCount,
    SubgraphResponse,
    SubgraphSummary,
)
from citenet.network.builder import CitationGraphBuilder
from citenet.network.merger import merge_networks
from citenet.network.models import CitationNetwork, MergeRequest, NetworkBuildRequest, SubgraphRequest
from citenet.network.subgraph import SubgraphExtractor
from citenet.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/network", tags=["network"])


@router.post("", response_model=NetworkResponse)
async def build_network(
    request: NetworkBuildRequest,
    builder: CitationGraphBuilder = Depends(get_graph_builder),
) -> NetworkResponse:
    """Build a citation network around one research product."""
    network = await builder.build(
        request.identifier,
        depth=request.depth,
        direction=request.direction,
        max_nodes=request.max_nodes,
    )
    return NetworkResponse(
        network=network,
        summary=NetworkSummary(
            center=network.center,
            total_nodes=network.metadata.total_nodes,
            total_edges=network.metadata.total_edges,
            depth=network.metadata.depth,
        ),
    )


@router.post("/subgraph", response_model=SubgraphResponse)
async def build_subgraph(
    request: SubgraphRequest,
    extractor: SubgraphExtractor = Depends(get_subgraph_extractor),
) -> SubgraphResponse:
    """Relationships that exist between the supplied identifiers only."""
    result = await extractor.build_subgraph(
        request.ids,
        include_relations=request.include_relations,
        fetch_metadata=request.fetch_metadata,
    )
    stats = result.statistics
    return SubgraphResponse(
        subgraph=result,
        summary=SubgraphSummary(
            ids_provided=len(request.ids),
            relationships_found=stats.total_edges,
            connected_nodes=stats.connected_nodes,
            isolated_nodes=stats.isolated_nodes,
            top_relation_types=[RelationCount(type=t, count=c) for t, c in stats.top_relations(5)],
        ),
    )


@router.post("/merge", response_model=CitationNetwork)
async def merge(request: MergeRequest) -> CitationNetwork:
    """Merge previously built networks into one."""
    return merge_networks(request.networks)
