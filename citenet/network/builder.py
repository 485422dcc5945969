"""Bounded breadth-first citation network construction."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field

from citenet.network.citations import apply_citation_counts
from citenet.network.models import (
    PLACEHOLDER_TITLE,
    CitationNetwork,
    Edge,
    Link,
    LinkDirection,
    LinkEndpoint,
    NetworkBuildRequest,
    Node,
    TraversalDirection,
    assemble_network,
    validate_request,
)
from citenet.network.queue import WorkQueue
from citenet.services.metadata_service import MetadataSource
from citenet.services.relationship_service import RelationshipSource
from citenet.utils.exceptions import NotFoundError
from citenet.utils.logging import get_logger
from citenet.utils.text_processing import current_year, identifier_key, normalize_identifier, truncate_title

logger = get_logger(__name__)

# Relation asked of the relationship service while traversing.
TRAVERSAL_RELATION = "cites"


def placeholder_node(node_id: str, depth: int) -> Node:
    return Node(
        id=node_id,
        kind="publication",
        title=PLACEHOLDER_TITLE.format(id=node_id),
        year=current_year(),
        citation_count=0,
        depth=depth,
        open_access=False,
    )


def stub_from_endpoint(endpoint: LinkEndpoint, node_id: str, depth: int) -> Node:
    """Node built from the inline description a link carries."""
    return Node(
        id=node_id,
        kind=endpoint.kind,
        title=endpoint.title or PLACEHOLDER_TITLE.format(id=node_id),
        year=endpoint.year or current_year(),
        depth=depth,
    )


@dataclass
class _BuildState:
    """Working node/edge set for one build. Never shared between builds."""

    max_nodes: int
    dedupe_edges: bool
    nodes: dict[str, Node] = field(default_factory=dict)
    edges: list[Edge] = field(default_factory=list)
    visited: set[str] = field(default_factory=set)
    _aliases: dict[str, str] = field(default_factory=dict)
    _edge_keys: set[tuple[str, str, str]] = field(default_factory=set)

    def canonical_id(self, raw_id: str) -> str:
        """The spelling already used for this identifier, or a normalized new one."""
        return self._aliases.get(identifier_key(raw_id), normalize_identifier(raw_id))

    def has_node(self, node_id: str) -> bool:
        return identifier_key(node_id) in self._aliases

    def has_budget(self) -> bool:
        return len(self.nodes) < self.max_nodes

    def put_node(self, node: Node) -> None:
        self.nodes[node.id] = node
        self._aliases[identifier_key(node.id)] = node.id

    def add_edge(self, edge: Edge) -> None:
        if self.dedupe_edges:
            if edge.key in self._edge_keys:
                return
            self._edge_keys.add(edge.key)
        self.edges.append(edge)


class CitationGraphBuilder:
    """Builds a CitationNetwork around a center node.

    Traversal is breadth first. ``citations`` expands outgoing links (works
    the node cites), ``references`` expands incoming links (works that
    reference the node) and ``both`` fetches the two concurrently. At most
    ``max_nodes`` nodes are admitted; once the budget is spent, already
    admitted nodes are still resolved and edges among them still recorded,
    but no new node enters the network.

    Citation counts on the returned nodes are recomputed from the network's
    own edges. Edges are kept in discovery order and, unless
    ``dedupe_edges`` is set, the same relationship seen from both of its
    endpoints is stored twice.
    """

    def __init__(
        self,
        relationships: RelationshipSource,
        metadata: MetadataSource,
        *,
        links_per_node: int = 20,
        dedupe_edges: bool = False,
    ) -> None:
        self._relationships = relationships
        self._metadata = metadata
        self._links_per_node = links_per_node
        self._dedupe_edges = dedupe_edges

    async def build(
        self,
        center_id: str,
        depth: int = 1,
        direction: TraversalDirection = "both",
        max_nodes: int = 200,
    ) -> CitationNetwork:
        request = validate_request(
            NetworkBuildRequest,
            identifier=center_id,
            depth=depth,
            direction=direction,
            max_nodes=max_nodes,
        )
        center = normalize_identifier(request.identifier)
        logger.info(
            "network_build_started",
            center=center,
            depth=request.depth,
            direction=request.direction,
            max_nodes=request.max_nodes,
        )
        start = time.monotonic()

        state = _BuildState(max_nodes=request.max_nodes, dedupe_edges=self._dedupe_edges)
        queue = WorkQueue()
        queue.enqueue(center, 0)

        while queue:
            item = queue.dequeue()
            key = identifier_key(item.id)
            if key in state.visited or item.level > request.depth:
                continue
            if not state.has_node(item.id) and not state.has_budget():
                continue
            state.visited.add(key)

            node_id = state.canonical_id(item.id)
            node = await self._resolve_node(node_id, item.level, state.nodes.get(node_id))
            state.put_node(node)
            logger.debug("node_added", node_id=node_id, title=truncate_title(node.title), level=item.level)

            if item.level < request.depth:
                for link_direction, links in await self._fetch_links(node_id, request.direction):
                    self._admit_links(state, queue, node_id, item.level, link_direction, links)

        nodes = apply_citation_counts(state.nodes, state.edges)
        network = assemble_network(nodes, state.edges, center=center, depth=request.depth)

        logger.info(
            "network_build_completed",
            center=center,
            nodes=network.metadata.total_nodes,
            edges=network.metadata.total_edges,
            cited_nodes=sum(1 for n in nodes.values() if n.citation_count),
            duration_ms=round((time.monotonic() - start) * 1000),
        )
        return network

    async def _resolve_node(self, node_id: str, level: int, stub: Node | None) -> Node:
        try:
            metadata = await self._metadata.get_metadata(node_id)
        except NotFoundError:
            if stub is not None:
                logger.debug("node_kept_stub", node_id=node_id)
                return stub.model_copy(update={"depth": level})
            logger.debug("node_placeholder", node_id=node_id)
            return placeholder_node(node_id, level)

        return Node(
            id=node_id,
            kind=metadata.kind,
            title=metadata.title,
            year=metadata.year or current_year(),
            citation_count=metadata.citation_count,
            depth=level,
            open_access=metadata.open_access,
        )

    async def _fetch_links(
        self, node_id: str, direction: TraversalDirection
    ) -> list[tuple[LinkDirection, list[Link]]]:
        wanted: list[LinkDirection] = []
        if direction in ("citations", "both"):
            wanted.append("outgoing")
        if direction in ("references", "both"):
            wanted.append("incoming")

        results = await asyncio.gather(
            *(
                self._relationships.get_links(
                    node_id,
                    link_direction,
                    relation=TRAVERSAL_RELATION,
                    limit=self._links_per_node,
                )
                for link_direction in wanted
            )
        )
        return list(zip(wanted, results))

    def _admit_links(
        self,
        state: _BuildState,
        queue: WorkQueue,
        node_id: str,
        level: int,
        link_direction: LinkDirection,
        links: list[Link],
    ) -> None:
        dropped = 0
        for link in links:
            other_end = link.target if link_direction == "outgoing" else link.source
            other_id = state.canonical_id(other_end.id)
            if not other_id:
                continue

            if not state.has_node(other_id):
                if not state.has_budget():
                    dropped += 1
                    continue
                state.put_node(stub_from_endpoint(other_end, other_id, level + 1))
                queue.enqueue(other_id, level + 1)

            if link_direction == "outgoing":
                state.add_edge(Edge(source=node_id, target=other_id, relation=link.relation))
            else:
                state.add_edge(Edge(source=other_id, target=node_id, relation=link.relation))

        if dropped:
            logger.info("node_budget_exhausted", node_id=node_id, links_dropped=dropped)
