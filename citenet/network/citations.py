"""Citation counts derived from the edges of a network."""

from __future__ import annotations

from collections import Counter
from typing import Iterable

from citenet.network.models import RELATION_CITED_BY, RELATION_CITES, Edge, Node


def cited_endpoint(edge: Edge) -> str | None:
    """The node an edge credits with a citation, if any.

    ``A cites B`` credits B; ``A cited-by B`` credits A. Other relations
    (including ``references``) credit nobody.
    """
    if edge.relation == RELATION_CITES:
        return edge.target
    if edge.relation == RELATION_CITED_BY:
        return edge.source
    return None


def count_citations(edges: Iterable[Edge]) -> Counter[str]:
    counts: Counter[str] = Counter()
    for edge in edges:
        cited = cited_endpoint(edge)
        if cited is not None:
            counts[cited] += 1
    return counts


def apply_citation_counts(nodes: dict[str, Node], edges: Iterable[Edge]) -> dict[str, Node]:
    """Return copies of ``nodes`` whose citation_count matches ``edges``.

    Any count supplied by an upstream service is overwritten.
    """
    counts = count_citations(edges)
    return {
        node_id: node.model_copy(update={"citation_count": counts.get(node_id, 0)})
        for node_id, node in nodes.items()
    }
