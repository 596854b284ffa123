"""
CONDUCTOR Knowledge — Reference content for worker requests.
"""

from .store import InMemoryKnowledgeStore, KnowledgeHit, KnowledgeStore, query_terms

__all__ = ["KnowledgeStore", "InMemoryKnowledgeStore", "KnowledgeHit", "query_terms"]
