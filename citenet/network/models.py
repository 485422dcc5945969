"""Pydantic models for citation networks and the requests that build them."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from citenet.utils.exceptions import InputValidationError
from citenet.utils.text_processing import current_year

NodeKind = Literal["publication", "dataset", "software", "other"]
TraversalDirection = Literal["citations", "references", "both"]
LinkDirection = Literal["outgoing", "incoming"]

RELATION_CITES = "cites"
RELATION_CITED_BY = "cited-by"
RELATION_REFERENCES = "references"

PLACEHOLDER_TITLE = "Paper {id}"
METADATA_UNAVAILABLE_TITLE = "Metadata unavailable"

_RELATION_ALIASES = {
    "cites": RELATION_CITES,
    "iscitedby": RELATION_CITED_BY,
    "citedby": RELATION_CITED_BY,
    "isreferencedby": RELATION_CITED_BY,
    "references": RELATION_REFERENCES,
}


def normalize_relation(raw: str) -> str:
    """Map provider relation vocabulary onto cites / cited-by / references.

    Unrecognized relations (``IsSupplementTo``, ``HasPart`` ...) are returned
    unchanged.
    """
    compact = re.sub(r"[^a-z]", "", raw.lower())
    return _RELATION_ALIASES.get(compact, raw)


def normalize_kind(raw: str | None) -> NodeKind:
    value = (raw or "").lower()
    if "publication" in value or "article" in value or "literature" in value:
        return "publication"
    if "dataset" in value or "data" in value:
        return "dataset"
    if "software" in value or "code" in value:
        return "software"
    return "other"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# ── Graph ────────────────────────────────────────────────────────────


class Node(_CamelModel):
    id: str
    kind: NodeKind = "publication"
    title: str = ""
    year: int = Field(default_factory=current_year)
    citation_count: int = 0
    depth: int = Field(default=0, ge=0)
    open_access: bool = False


class Edge(_CamelModel):
    source: str
    target: str
    relation: str

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.source, self.target, self.relation)


class NetworkMetadata(_CamelModel):
    total_nodes: int
    total_edges: int
    depth: int
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class FrozenNodeMap(dict):
    """Node mapping that rejects mutation once a network has been built."""

    def _read_only(self, *args, **kwargs):
        raise TypeError("network nodes are read-only")

    __setitem__ = __delitem__ = _read_only
    clear = pop = popitem = setdefault = update = _read_only
    __ior__ = _read_only

    def __reduce__(self):
        return (type(self), (dict(self),))


class CitationNetwork(_CamelModel):
    nodes: dict[str, Node] = Field(default_factory=FrozenNodeMap)
    edges: tuple[Edge, ...] = ()
    center: str = ""
    metadata: NetworkMetadata

    @field_validator("nodes", mode="after")
    @classmethod
    def _freeze_nodes(cls, value: dict[str, Node]) -> FrozenNodeMap:
        return FrozenNodeMap(value)


def assemble_network(
    nodes: dict[str, Node],
    edges: list[Edge] | tuple[Edge, ...],
    *,
    center: str,
    depth: int,
) -> CitationNetwork:
    """Freeze a working node/edge set into a network with a fresh metadata snapshot."""
    return CitationNetwork(
        nodes=dict(nodes),
        edges=tuple(edges),
        center=center,
        metadata=NetworkMetadata(
            total_nodes=len(nodes),
            total_edges=len(edges),
            depth=depth,
        ),
    )


# ── Upstream data (adapter output) ───────────────────────────────────


class LinkEndpoint(_CamelModel):
    id: str
    kind: NodeKind = "other"
    title: str | None = None
    year: int | None = None


class Link(_CamelModel):
    """One relationship-service result. Drives traversal; never returned to callers."""

    source: LinkEndpoint
    target: LinkEndpoint
    relation: str
    provider: str = "unknown"


class NodeMetadata(_CamelModel):
    id: str
    kind: NodeKind = "publication"
    title: str
    year: int | None = None
    publication_date: str | None = None
    citation_count: int = 0
    open_access: bool = False
    doi: str | None = None
    publisher: str | None = None
    authors: list[str] = Field(default_factory=list)


# ── Requests ─────────────────────────────────────────────────────────


class NetworkBuildRequest(_CamelModel):
    identifier: str = Field(min_length=1, description="DOI or internal id of the center node")
    depth: int = Field(default=1, ge=1, le=3)
    direction: TraversalDirection = "both"
    max_nodes: int = Field(default=200, ge=1, le=1000)


class SubgraphRequest(_CamelModel):
    ids: list[str] = Field(min_length=2, max_length=100)
    include_relations: list[str] | None = None
    fetch_metadata: bool = True


class MergeRequest(_CamelModel):
    networks: list[CitationNetwork] = Field(min_length=1)


class ExploreRequest(_CamelModel):
    identifier: str = Field(min_length=1)
    relation: str | None = None
    target_kind: NodeKind | Literal["all"] = "all"
    limit: int = Field(default=50, ge=1, le=100)


# ── Results ──────────────────────────────────────────────────────────


class SubgraphStatistics(_CamelModel):
    total_nodes: int
    total_edges: int
    isolated_nodes: int
    relation_counts: dict[str, int] = Field(default_factory=dict)

    @property
    def connected_nodes(self) -> int:
        return self.total_nodes - self.isolated_nodes

    def top_relations(self, n: int = 5) -> list[tuple[str, int]]:
        return sorted(self.relation_counts.items(), key=lambda item: item[1], reverse=True)[:n]


class SubgraphResult(_CamelModel):
    network: CitationNetwork
    statistics: SubgraphStatistics


class ExploredRelationship(_CamelModel):
    relation: str
    target: LinkEndpoint
    provider: str = "unknown"


class RelationshipExploration(_CamelModel):
    source_id: str
    relationships: list[ExploredRelationship] = Field(default_factory=list)
    by_relation: dict[str, int] = Field(default_factory=dict)
    by_target_kind: dict[str, int] = Field(default_factory=dict)


M = TypeVar("M", bound=BaseModel)


def validate_request(model: type[M], **values: object) -> M:
    """Validate caller arguments, raising InputValidationError on any violation."""
    try:
        return model.model_validate(values)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'request'}: {err['msg']}"
            for err in exc.errors()
        )
        raise InputValidationError(problems) from exc
