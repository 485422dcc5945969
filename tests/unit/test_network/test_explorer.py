"""Unit tests for relationship exploration."""

from __future__ import annotations

import pytest

from citenet.network.explorer import RelationshipExplorer
from citenet.utils.exceptions import InputValidationError


@pytest.fixture
def explorer(relationships, make_link):
    relationships.add(make_link("10.1/paper", "10.1/cited-a"))
    relationships.add(make_link("10.1/paper", "10.1/cited-b"))
    relationships.add(make_link("10.1/paper", "10.5281/zenodo.1", relation="IsSupplementedBy", kind="dataset"))
    return RelationshipExplorer(relationships)


@pytest.mark.asyncio
async def test_summarizes_by_relation_and_target_kind(explorer):
    result = await explorer.explore("10.1/paper")

    assert result.source_id == "10.1/paper"
    assert len(result.relationships) == 3
    assert result.by_relation == {"cites": 2, "IsSupplementedBy": 1}
    assert result.by_target_kind == {"publication": 2, "dataset": 1}


@pytest.mark.asyncio
async def test_target_kind_filter_and_limit(explorer):
    datasets = await explorer.explore("10.1/paper", target_kind="dataset")
    limited = await explorer.explore("10.1/paper", limit=1)

    assert [r.target.id for r in datasets.relationships] == ["10.5281/zenodo.1"]
    assert len(limited.relationships) == 1


@pytest.mark.asyncio
async def test_relation_filter_is_passed_to_the_source(explorer, relationships):
    await explorer.explore("https://doi.org/10.1/paper", relation="IsSupplementedBy")

    assert relationships.calls[-1] == ("10.1/paper", "outgoing", "IsSupplementedBy")


@pytest.mark.parametrize("kwargs", [{"limit": 0}, {"limit": 101}, {"target_kind": "poster"}])
@pytest.mark.asyncio
async def test_invalid_arguments(explorer, kwargs):
    with pytest.raises(InputValidationError):
        await explorer.explore("10.1/paper", **kwargs)
