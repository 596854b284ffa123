"""
Persistence Store — Durable document store behind the feedback store,
execution log and registry seed data.

Backends:
- SQLitePersistenceStore: aiosqlite, one JSON document per key
- MemoryPersistenceStore: process-local dict, for tests and ephemeral runs
"""

from __future__ import annotations

import copy
import json
import logging
from typing import Any

import aiosqlite

from conductor.shared import settings
from conductor.shared.errors import ConfigurationError, StorageError

from .schema import init_db

logger = logging.getLogger("conductor.storage")


# ============================================================================
# Base Storage Interface
# ============================================================================


class PersistenceStore:
    """Base interface for persistence backends."""

    async def initialize(self) -> None:
        """Open connections and create tables."""
        raise NotImplementedError

    async def load(self, key: str) -> dict[str, Any] | None:
        """Load a document, or None if the key does not exist."""
        raise NotImplementedError

    async def save(self, key: str, doc: dict[str, Any]) -> None:
        """Insert or replace a document."""
        raise NotImplementedError

    async def delete(self, key: str) -> bool:
        """Delete a document. Returns True if it existed."""
        raise NotImplementedError

    async def keys(self, prefix: str = "") -> list[str]:
        """Keys starting with prefix, sorted."""
        raise NotImplementedError

    async def close(self) -> None:
        """Release resources."""
        raise NotImplementedError


# ============================================================================
# SQLite Storage
# ============================================================================


class SQLitePersistenceStore(PersistenceStore):
    """aiosqlite-backed document store."""

    def __init__(self, db_path: str | None = None):
        self.db_path = db_path or settings.DB_PATH
        self.db: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        if self.db is not None:
            return
        self.db = await init_db(self.db_path)
        logger.info(f"SQLite persistence store initialized: {self.db_path}")

    def _conn(self) -> aiosqlite.Connection:
        if self.db is None:
            raise StorageError("Persistence store not initialized")
        return self.db

    async def load(self, key: str) -> dict[str, Any] | None:
        async with self._conn().execute(
            "SELECT doc FROM documents WHERE key = ?", (key,)
        ) as cursor:
            row = await cursor.fetchone()
        if row is None:
            return None
        return json.loads(row["doc"])

    async def save(self, key: str, doc: dict[str, Any]) -> None:
        db = self._conn()
        await db.execute(
            """
            INSERT INTO documents (key, doc) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET
                doc = excluded.doc,
                updated_at = datetime('now')
            """,
            (key, json.dumps(doc)),
        )
        await db.commit()

    async def delete(self, key: str) -> bool:
        db = self._conn()
        cursor = await db.execute("DELETE FROM documents WHERE key = ?", (key,))
        await db.commit()
        return cursor.rowcount > 0

    async def keys(self, prefix: str = "") -> list[str]:
        # Escape LIKE wildcards so the prefix is matched literally
        pattern = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_") + "%"
        async with self._conn().execute(
            "SELECT key FROM documents WHERE key LIKE ? ESCAPE '\\' ORDER BY key",
            (pattern,),
        ) as cursor:
            rows = await cursor.fetchall()
        return [row["key"] for row in rows]

    async def close(self) -> None:
        if self.db is not None:
            await self.db.close()
            self.db = None
            logger.info("SQLite persistence store closed")


# ============================================================================
# In-Memory Storage
# ============================================================================


class MemoryPersistenceStore(PersistenceStore):
    """
    Dict-backed document store.

    Documents are deep-copied on the way in and out so callers never share
    mutable state with the store.
    """

    def __init__(self) -> None:
        self._docs: dict[str, dict[str, Any]] = {}

    async def initialize(self) -> None:
        return None

    async def load(self, key: str) -> dict[str, Any] | None:
        doc = self._docs.get(key)
        return copy.deepcopy(doc) if doc is not None else None

    async def save(self, key: str, doc: dict[str, Any]) -> None:
        self._docs[key] = copy.deepcopy(doc)

    async def delete(self, key: str) -> bool:
        return self._docs.pop(key, None) is not None

    async def keys(self, prefix: str = "") -> list[str]:
        return sorted(k for k in self._docs if k.startswith(prefix))

    async def close(self) -> None:
        return None

    def __len__(self) -> int:
        return len(self._docs)


def create_persistence_store(
    backend: str | None = None, db_path: str | None = None
) -> PersistenceStore:
    """
    Create the configured persistence backend.

    Args:
        backend: "sqlite" or "memory" (default: CONDUCTOR_STORAGE_BACKEND)
        db_path: SQLite database path (default: CONDUCTOR_DB_PATH)

    Raises:
        ConfigurationError: For an unknown backend name
    """
    backend = (backend or settings.STORAGE_BACKEND).lower()

    if backend == "sqlite":
        path = db_path or settings.DB_PATH
        logger.info(f"Using SQLite persistence store at {path}")
        return SQLitePersistenceStore(path)
    if backend == "memory":
        logger.info("Using in-memory persistence store")
        return MemoryPersistenceStore()

    raise ConfigurationError(f"Unknown storage backend: {backend}")
