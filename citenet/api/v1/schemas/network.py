"""Response models for the network API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from citenet.network.models import CitationNetwork, SubgraphResult


class _Schema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NetworkSummary(_Schema):
    center: str
    total_nodes: int
    total_edges: int
    depth: int


class NetworkResponse(_Schema):
    network: CitationNetwork
    summary: NetworkSummary


class RelationCount(_Schema):
    type: str
    count: int


class SubgraphSummary(_Schema):
    ids_provided: int
    relationships_found: int
    connected_nodes: int
    isolated_nodes: int
    top_relation_types: list[RelationCount] = Field(default_factory=list)


class SubgraphResponse(_Schema):
    subgraph: SubgraphResult
    summary: SubgraphSummary


class CitationCountResponse(_Schema):
    identifier: str
    citation_count: int
