"""Persistence store tests."""

from __future__ import annotations

import pytest

from conductor.shared.errors import ConfigurationError, StorageError
from conductor.storage import (
    MemoryPersistenceStore,
    SQLitePersistenceStore,
    create_persistence_store,
    init_db,
)


@pytest.mark.asyncio
async def test_init_db_creates_documents_table() -> None:
    db = await init_db(":memory:")
    try:
        async with db.execute(
            "SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'documents'"
        ) as cursor:
            row = await cursor.fetchone()
        assert row["name"] == "documents"
    finally:
        await db.close()


@pytest.mark.asyncio
async def test_sqlite_store_crud() -> None:
    store = SQLitePersistenceStore(":memory:")
    await store.initialize()
    try:
        assert await store.load("missing") is None

        await store.save("feedback:worker:A", {"agent": {"total_executions": 1}})
        await store.save("feedback:worker:A", {"agent": {"total_executions": 2}})
        await store.save("execution:exec_1", {"ok": True})

        assert await store.load("feedback:worker:A") == {"agent": {"total_executions": 2}}
        assert await store.keys("feedback:") == ["feedback:worker:A"]
        assert await store.keys() == ["execution:exec_1", "feedback:worker:A"]

        assert await store.delete("execution:exec_1") is True
        assert await store.delete("execution:exec_1") is False
        assert await store.load("execution:exec_1") is None
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_sqlite_keys_match_prefix_literally() -> None:
    store = SQLitePersistenceStore(":memory:")
    await store.initialize()
    try:
        await store.save("feedback:worker_a", {})
        await store.save("feedbackXworker", {})

        assert await store.keys("feedback:worker_") == ["feedback:worker_a"]
        assert await store.keys("feedback_") == []
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_sqlite_store_persists_across_connections(tmp_path) -> None:
    path = str(tmp_path / "nested" / "conductor.db")

    first = SQLitePersistenceStore(path)
    await first.initialize()
    await first.save("registry:workers", {"workers": [{"id": "A"}]})
    await first.close()

    second = SQLitePersistenceStore(path)
    await second.initialize()
    try:
        assert await second.load("registry:workers") == {"workers": [{"id": "A"}]}
    finally:
        await second.close()


@pytest.mark.asyncio
async def test_sqlite_store_requires_initialize() -> None:
    store = SQLitePersistenceStore(":memory:")

    with pytest.raises(StorageError):
        await store.load("anything")


@pytest.mark.asyncio
async def test_memory_store_copies_documents() -> None:
    store = MemoryPersistenceStore()
    doc = {"entries": [1, 2]}

    await store.save("k", doc)
    doc["entries"].append(3)
    loaded = await store.load("k")
    loaded["entries"].append(4)

    assert await store.load("k") == {"entries": [1, 2]}
    assert len(store) == 1
    assert await store.delete("k") is True
    assert await store.delete("k") is False


def test_create_persistence_store() -> None:
    assert isinstance(create_persistence_store("memory"), MemoryPersistenceStore)

    sqlite_store = create_persistence_store("SQLite", ":memory:")
    assert isinstance(sqlite_store, SQLitePersistenceStore)
    assert sqlite_store.db_path == ":memory:"

    with pytest.raises(ConfigurationError):
        create_persistence_store("postgres")
