"""Subgraph restricted to a caller-supplied set of identifiers."""

from __future__ import annotations

import asyncio
from collections import Counter

from citenet.network.models import (
    METADATA_UNAVAILABLE_TITLE,
    Edge,
    Node,
    SubgraphRequest,
    SubgraphResult,
    SubgraphStatistics,
    assemble_network,
    normalize_relation,
    validate_request,
)
from citenet.services.metadata_service import MetadataSource
from citenet.services.relationship_service import RelationshipSource
from citenet.utils.exceptions import NotFoundError
from citenet.utils.logging import get_logger
from citenet.utils.text_processing import current_year, identifier_key, normalize_identifier

logger = get_logger(__name__)


class SubgraphExtractor:
    """Finds the relationships that exist *between* members of an id set.

    Unlike the graph builder nothing outside the set is admitted: a link is
    kept only when both of its endpoints are members (compared
    case-insensitively). Edges are reported with the caller's spelling of
    each identifier and deduplicated on (source, target, relation).
    """

    def __init__(
        self,
        relationships: RelationshipSource,
        metadata: MetadataSource,
        *,
        concurrency: int = 5,
    ) -> None:
        self._relationships = relationships
        self._metadata = metadata
        self._concurrency = max(1, concurrency)

    async def build_subgraph(
        self,
        ids: list[str],
        include_relations: list[str] | None = None,
        fetch_metadata: bool = True,
    ) -> SubgraphResult:
        request = validate_request(
            SubgraphRequest,
            ids=ids,
            include_relations=include_relations,
            fetch_metadata=fetch_metadata,
        )

        members: dict[str, str] = {}
        for raw in request.ids:
            members.setdefault(identifier_key(raw), normalize_identifier(raw))
        allowed = (
            {normalize_relation(r) for r in request.include_relations}
            if request.include_relations is not None
            else None
        )
        logger.info(
            "subgraph_started",
            ids=len(members),
            fetch_metadata=request.fetch_metadata,
            relation_filter=sorted(allowed) if allowed is not None else None,
        )

        edges: list[Edge] = []
        seen: set[tuple[str, str, str]] = set()

        def keep(source: str, target: str, relation: str) -> None:
            if allowed is not None and relation not in allowed:
                return
            edge = Edge(source=source, target=target, relation=relation)
            if edge.key not in seen:
                seen.add(edge.key)
                edges.append(edge)

        for node_id in members.values():
            outgoing, incoming = await asyncio.gather(
                self._relationships.get_links(node_id, "outgoing"),
                self._relationships.get_links(node_id, "incoming"),
            )
            for link in outgoing:
                target = members.get(identifier_key(link.target.id))
                if target is not None:
                    keep(node_id, target, link.relation)
            for link in incoming:
                source = members.get(identifier_key(link.source.id))
                if source is not None:
                    keep(source, node_id, link.relation)
            logger.debug("subgraph_node_processed", node_id=node_id, links=len(outgoing) + len(incoming))

        if request.fetch_metadata:
            nodes = await self._fetch_nodes(list(members.values()))
        else:
            nodes = [Node(id=node_id) for node_id in members.values()]

        statistics = self._statistics(nodes, edges)
        network = assemble_network(
            {node.id: node for node in nodes},
            edges,
            center=nodes[0].id,
            depth=0,
        )
        logger.info(
            "subgraph_completed",
            nodes=statistics.total_nodes,
            edges=statistics.total_edges,
            isolated=statistics.isolated_nodes,
        )
        return SubgraphResult(network=network, statistics=statistics)

    async def _fetch_nodes(self, node_ids: list[str]) -> list[Node]:
        semaphore = asyncio.Semaphore(self._concurrency)

        async def fetch(node_id: str) -> Node:
            async with semaphore:
                try:
                    metadata = await self._metadata.get_metadata(node_id)
                except NotFoundError as exc:
                    logger.warning("subgraph_metadata_unavailable", node_id=node_id, error=str(exc))
                    return Node(id=node_id, title=METADATA_UNAVAILABLE_TITLE)
            # No traversal here, so the upstream count is the only one available.
            return Node(
                id=node_id,
                kind=metadata.kind,
                title=metadata.title,
                year=metadata.year or current_year(),
                citation_count=metadata.citation_count,
                open_access=metadata.open_access,
            )

        return list(await asyncio.gather(*(fetch(node_id) for node_id in node_ids)))

    @staticmethod
    def _statistics(nodes: list[Node], edges: list[Edge]) -> SubgraphStatistics:
        connected = {identifier_key(e.source) for e in edges} | {identifier_key(e.target) for e in edges}
        return SubgraphStatistics(
            total_nodes=len(nodes),
            total_edges=len(edges),
            isolated_nodes=sum(1 for n in nodes if identifier_key(n.id) not in connected),
            relation_counts=dict(Counter(e.relation for e in edges)),
        )
