"""Unit tests for the id-restricted subgraph extractor."""

from __future__ import annotations

import pytest

from citenet.network.subgraph import SubgraphExtractor
from citenet.utils.exceptions import InputValidationError


@pytest.fixture
def extractor(relationships, metadata):
    return SubgraphExtractor(relationships, metadata)


@pytest.fixture
def corpus(relationships, make_link):
    relationships.add(make_link("10.1/a", "10.1/b"))
    relationships.add(make_link("10.1/b", "10.1/c", relation="IsSupplementTo"))
    relationships.add(make_link("10.1/a", "10.1/outside"))
    relationships.add(make_link("10.1/outside", "10.1/c"))
    return relationships


@pytest.mark.asyncio
async def test_keeps_only_edges_between_members(extractor, corpus):
    ids = ["10.1/a", "10.1/b", "10.1/c"]
    result = await extractor.build_subgraph(ids, fetch_metadata=False)

    keys = {(e.source, e.target, e.relation) for e in result.network.edges}
    assert keys == {("10.1/a", "10.1/b", "cites"), ("10.1/b", "10.1/c", "IsSupplementTo")}
    lowered = {i.lower() for i in ids}
    for edge in result.network.edges:
        assert edge.source.lower() in lowered
        assert edge.target.lower() in lowered


@pytest.mark.asyncio
async def test_edges_seen_from_both_ends_are_deduplicated(extractor, corpus):
    result = await extractor.build_subgraph(["10.1/a", "10.1/b"], fetch_metadata=False)

    assert len(result.network.edges) == 1


@pytest.mark.asyncio
async def test_membership_is_case_insensitive(extractor, corpus):
    result = await extractor.build_subgraph(["10.1/A", "10.1/B"], fetch_metadata=False)

    assert [(e.source, e.target) for e in result.network.edges] == [("10.1/A", "10.1/B")]
    assert set(result.network.nodes) == {"10.1/A", "10.1/B"}


@pytest.mark.asyncio
async def test_relation_allow_list(extractor, corpus):
    result = await extractor.build_subgraph(
        ["10.1/a", "10.1/b", "10.1/c"],
        include_relations=["Cites"],
        fetch_metadata=False,
    )

    assert [e.relation for e in result.network.edges] == ["cites"]


@pytest.mark.asyncio
async def test_statistics(extractor, corpus):
    result = await extractor.build_subgraph(
        ["10.1/a", "10.1/b", "10.1/c", "10.1/isolated"], fetch_metadata=False
    )

    stats = result.statistics
    assert stats.total_nodes == 4
    assert stats.total_edges == 2
    assert stats.isolated_nodes == 1
    assert stats.connected_nodes == 3
    assert stats.relation_counts == {"cites": 1, "IsSupplementTo": 1}


@pytest.mark.asyncio
async def test_metadata_fetch_and_fallback(extractor, corpus, metadata, sample_metadata):
    metadata.records["10.1/a"] = sample_metadata("a", title="Paper A", citation_count=17)

    result = await extractor.build_subgraph(["10.1/a", "10.1/b"])

    nodes = result.network.nodes
    assert nodes["10.1/a"].title == "Paper A"
    # No traversal here, so the upstream count is reported as-is.
    assert nodes["10.1/a"].citation_count == 17
    assert nodes["10.1/b"].title == "Metadata unavailable"
    assert sorted(metadata.calls) == ["10.1/a", "10.1/b"]


@pytest.mark.asyncio
async def test_metadata_not_fetched_when_disabled(extractor, corpus, metadata):
    result = await extractor.build_subgraph(["10.1/a", "10.1/b"], fetch_metadata=False)

    assert metadata.calls == []
    assert result.network.nodes["10.1/a"].title == ""


@pytest.mark.asyncio
async def test_queries_both_directions_for_every_id(extractor, corpus):
    await extractor.build_subgraph(["10.1/a", "10.1/b"], fetch_metadata=False)

    assert sorted((c[0], c[1]) for c in corpus.calls) == [
        ("10.1/a", "incoming"),
        ("10.1/a", "outgoing"),
        ("10.1/b", "incoming"),
        ("10.1/b", "outgoing"),
    ]


@pytest.mark.asyncio
async def test_center_is_first_id(extractor, corpus):
    result = await extractor.build_subgraph(["10.1/c", "10.1/a"], fetch_metadata=False)

    assert result.network.center == "10.1/c"


@pytest.mark.parametrize("ids", [[], ["10.1/a"], [f"10.1/{i}" for i in range(101)]])
@pytest.mark.asyncio
async def test_id_count_validation(extractor, relationships, ids):
    with pytest.raises(InputValidationError):
        await extractor.build_subgraph(ids)

    assert relationships.calls == []
