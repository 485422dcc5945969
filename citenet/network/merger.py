"""Merge previously built citation networks."""

from __future__ import annotations

from typing import Sequence

from citenet.network.citations import apply_citation_counts
from citenet.network.models import CitationNetwork, Edge, MergeRequest, Node, assemble_network, validate_request
from citenet.utils.logging import get_logger

logger = get_logger(__name__)


def merge_networks(networks: Sequence[CitationNetwork]) -> CitationNetwork:
    """Combine ``networks`` into one.

    The first occurrence of a node id wins; later copies are dropped without
    complaint. Edges are deduplicated on (source, target, relation) keeping
    input order. Citation counts are recomputed from the merged edge list.
    """
    request = validate_request(MergeRequest, networks=list(networks))

    nodes: dict[str, Node] = {}
    edges: list[Edge] = []
    seen: set[tuple[str, str, str]] = set()

    for network in request.networks:
        for node_id, node in network.nodes.items():
            nodes.setdefault(node_id, node)
        for edge in network.edges:
            if edge.key not in seen:
                seen.add(edge.key)
                edges.append(edge)

    first = request.networks[0]
    center = first.center or next(iter(nodes), "")
    depth = max(network.metadata.depth for network in request.networks)

    merged = assemble_network(apply_citation_counts(nodes, edges), edges, center=center, depth=depth)
    logger.info(
        "networks_merged",
        inputs=len(request.networks),
        nodes=merged.metadata.total_nodes,
        edges=merged.metadata.total_edges,
    )
    return merged
