"""Knowledge store tests."""

from __future__ import annotations

import pytest

from conductor.knowledge import InMemoryKnowledgeStore, query_terms
from conductor.shared.errors import KnowledgeNotFoundError


def test_query_terms() -> None:
    assert query_terms("Write the OAuth handler for the OAuth flow") == [
        "write",
        "oauth",
        "handler",
        "flow",
    ]
    assert query_terms("a to be") == []


@pytest.mark.asyncio
async def test_search_ranks_by_matched_fraction() -> None:
    store = InMemoryKnowledgeStore(
        {
            "react-hooks": "Rules for react hooks and effects.",
            "react-testing": "Testing react components with jest.",
            "sql-indexes": "When to add database indexes.",
        }
    )

    hits = await store.search("react hooks testing")

    assert [h.name for h in hits] == ["react-hooks", "react-testing"]
    assert hits[0].relevance_score == pytest.approx(2 / 3)
    assert hits[1].relevance_score == pytest.approx(2 / 3)
    assert await store.search("kubernetes") == []
    assert await store.search("a an") == []


@pytest.mark.asyncio
async def test_get_add_remove_list() -> None:
    store = InMemoryKnowledgeStore()
    store.add("style-guide", "Use four spaces.")

    assert await store.get("style-guide") == "Use four spaces."
    assert await store.list() == ["style-guide"]
    assert len(store) == 1

    assert store.remove("style-guide") is True
    assert store.remove("style-guide") is False
    with pytest.raises(KnowledgeNotFoundError):
        await store.get("style-guide")
