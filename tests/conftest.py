"""Shared test fixtures."""

from __future__ import annotations

from typing import Callable

import pytest

from citenet.network.models import Link, LinkEndpoint, NodeMetadata
from citenet.utils.exceptions import NotFoundError
from citenet.utils.text_processing import identifier_key


@pytest.fixture(autouse=True)
def _env_setup(monkeypatch):
    """Keep tests independent of any local .env or shell configuration."""
    monkeypatch.setenv("RELATIONSHIP_BASE_URL", "https://links.test/v3")
    monkeypatch.setenv("METADATA_BASE_URL", "https://meta.test")
    monkeypatch.setenv("HTTP_RETRY_BASE_DELAY_MS", "0")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.setenv("LOG_FORMAT", "console")


class FakeRelationshipSource:
    """In-memory relationship source keyed by (identifier, direction)."""

    def __init__(self) -> None:
        self.links: dict[tuple[str, str], list[Link]] = {}
        self.calls: list[tuple[str, str, str | None]] = []

    def add(self, link: Link) -> None:
        """Register ``link`` as outgoing for its source and incoming for its target."""
        self.links.setdefault((identifier_key(link.source.id), "outgoing"), []).append(link)
        self.links.setdefault((identifier_key(link.target.id), "incoming"), []).append(link)

    async def get_links(self, node_id, direction, *, relation=None, limit=None):
        self.calls.append((node_id, direction, relation))
        found = list(self.links.get((identifier_key(node_id), direction), []))
        return found[:limit] if limit is not None else found

    async def get_citation_count(self, node_id):
        return len(await self.get_links(node_id, "incoming", relation="cites"))


class FakeMetadataSource:
    """Metadata lookups answered from a dict; anything else is NotFound."""

    def __init__(self, records: dict[str, NodeMetadata] | None = None) -> None:
        self.records = records or {}
        self.calls: list[str] = []

    async def get_metadata(self, node_id):
        self.calls.append(node_id)
        try:
            return self.records[node_id]
        except KeyError:
            raise NotFoundError(node_id) from None


def _make_link(
    source: str,
    target: str,
    relation: str = "cites",
    *,
    source_title: str | None = None,
    target_title: str | None = None,
    kind: str = "publication",
    provider: str = "Crossref",
) -> Link:
    return Link(
        source=LinkEndpoint(id=source, kind=kind, title=source_title),
        target=LinkEndpoint(id=target, kind=kind, title=target_title),
        relation=relation,
        provider=provider,
    )


@pytest.fixture
def make_link() -> Callable[..., Link]:
    return _make_link


@pytest.fixture
def relationships() -> FakeRelationshipSource:
    return FakeRelationshipSource()


@pytest.fixture
def metadata() -> FakeMetadataSource:
    return FakeMetadataSource()


@pytest.fixture
def sample_metadata() -> Callable[..., NodeMetadata]:
    def build(node_id: str, title: str = "A Study", **overrides) -> NodeMetadata:
        values = {
            "id": f"openaire____::{node_id}",
            "kind": "publication",
            "title": title,
            "year": 2020,
            "citation_count": 42,
            "open_access": True,
        }
        values.update(overrides)
        return NodeMetadata(**values)

    return build
