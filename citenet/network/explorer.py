"""Relationship exploration around a single research product."""

from __future__ import annotations

from collections import Counter

from citenet.network.models import (
    ExploredRelationship,
    ExploreRequest,
    NodeKind,
    RelationshipExploration,
    validate_request,
)
from citenet.services.relationship_service import RelationshipSource
from citenet.utils.logging import get_logger
from citenet.utils.text_processing import normalize_identifier

logger = get_logger(__name__)


class RelationshipExplorer:
    """Lists what a product links to: citations, supplements, versions, parts."""

    def __init__(self, relationships: RelationshipSource) -> None:
        self._relationships = relationships

    async def explore(
        self,
        identifier: str,
        relation: str | None = None,
        target_kind: NodeKind | str = "all",
        limit: int = 50,
    ) -> RelationshipExploration:
        request = validate_request(
            ExploreRequest,
            identifier=identifier,
            relation=relation,
            target_kind=target_kind,
            limit=limit,
        )
        source_id = normalize_identifier(request.identifier)
        links = await self._relationships.get_links(source_id, "outgoing", relation=request.relation)

        if request.target_kind != "all":
            links = [link for link in links if link.target.kind == request.target_kind]
        links = links[: request.limit]

        exploration = RelationshipExploration(
            source_id=source_id,
            relationships=[
                ExploredRelationship(relation=link.relation, target=link.target, provider=link.provider)
                for link in links
            ],
            by_relation=dict(Counter(link.relation for link in links)),
            by_target_kind=dict(Counter(link.target.kind for link in links)),
        )
        logger.info("relationships_explored", source_id=source_id, count=len(links))
        return exploration
