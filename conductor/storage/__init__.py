"""
CONDUCTOR Storage — Document persistence.

Usage:
    from conductor.storage import create_persistence_store

    store = create_persistence_store()
    await store.initialize()
    await store.save("registry:workers", {"workers": []})
"""

from .backend import (
    MemoryPersistenceStore,
    PersistenceStore,
    SQLitePersistenceStore,
    create_persistence_store,
)
from .schema import init_db

__all__ = [
    "PersistenceStore",
    "SQLitePersistenceStore",
    "MemoryPersistenceStore",
    "create_persistence_store",
    "init_db",
]
