"""
Knowledge Store — Named reference content attached to worker requests.

The orchestrator only depends on the KnowledgeStore contract (get, search,
list). Loading content from files or other sources is the caller's concern;
InMemoryKnowledgeStore serves content registered programmatically.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from conductor.classifier.taxonomy import STOP_WORDS
from conductor.shared.errors import KnowledgeNotFoundError

logger = logging.getLogger("conductor.knowledge")

_WORD = re.compile(r"[a-z0-9][a-z0-9+#.-]*")


@dataclass(frozen=True)
class KnowledgeHit:
    name: str
    relevance_score: float


def query_terms(query: str) -> list[str]:
    """Distinct significant words of a query, in order of appearance."""
    words = (w.strip(".") for w in _WORD.findall(query.lower()))
    return list(dict.fromkeys(w for w in words if len(w) > 3 and w not in STOP_WORDS))


# ============================================================================
# Base Interface
# ============================================================================


class KnowledgeStore:
    """Base interface for knowledge stores."""

    async def get(self, name: str) -> str:
        """
        Content of a named entry.

        Raises:
            KnowledgeNotFoundError: If no entry has that name
        """
        raise NotImplementedError

    async def search(self, query: str) -> list[KnowledgeHit]:
        """Entries relevant to a query, most relevant first."""
        raise NotImplementedError

    async def list(self) -> list[str]:
        """All entry names."""
        raise NotImplementedError


class InMemoryKnowledgeStore(KnowledgeStore):
    """
    Dict-backed knowledge store.

    Relevance is the fraction of query terms found in an entry's name or
    content; entries matching no term are not returned.
    """

    def __init__(self, entries: dict[str, str] | None = None):
        self._entries: dict[str, str] = dict(entries or {})

    def add(self, name: str, content: str) -> None:
        self._entries[name] = content
        logger.debug(f"Added knowledge entry: {name}")

    def remove(self, name: str) -> bool:
        return self._entries.pop(name, None) is not None

    async def get(self, name: str) -> str:
        try:
            return self._entries[name]
        except KeyError:
            raise KnowledgeNotFoundError(name) from None

    async def search(self, query: str) -> list[KnowledgeHit]:
        terms = query_terms(query)
        if not terms:
            return []

        hits: list[KnowledgeHit] = []
        for name, content in self._entries.items():
            haystack = f"{name.lower()}\n{content.lower()}"
            matched = sum(1 for term in terms if term in haystack)
            if matched:
                hits.append(KnowledgeHit(name, matched / len(terms)))

        hits.sort(key=lambda h: (-h.relevance_score, h.name))
        return hits

    async def list(self) -> list[str]:
        return sorted(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
