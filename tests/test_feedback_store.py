"""Adaptive feedback store tests."""

from __future__ import annotations

import asyncio
import logging

import pytest

from conductor.execution import ErrorKind, WorkerOutcome
from conductor.feedback import FeedbackEntry, FeedbackStore, RunningStat
from conductor.storage import MemoryPersistenceStore


class FailingPersistence(MemoryPersistenceStore):
    async def save(self, key, doc):
        raise OSError("disk full")


def _ok(worker_id: str, latency_ms: float = 100.0, tokens: int = 100, cost: float = 0.0) -> WorkerOutcome:
    return WorkerOutcome.succeeded(worker_id, "ok", latency_ms=latency_ms, tokens_used=tokens, cost_estimate=cost)


def _fail(worker_id: str, latency_ms: float = 0.0) -> WorkerOutcome:
    return WorkerOutcome.failed(worker_id, ErrorKind.TIMEOUT, "slow", latency_ms=latency_ms)


def test_running_stat_matches_arithmetic_mean() -> None:
    stat = RunningStat()
    samples = [2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0]
    for value in samples:
        stat.push(value)

    assert stat.count == len(samples)
    assert stat.mean == pytest.approx(sum(samples) / len(samples))
    assert stat.stddev == pytest.approx(2.0)
    assert RunningStat().mean_or(0.5) == 0.5


def test_entry_validates_scores() -> None:
    with pytest.raises(ValueError):
        FeedbackEntry("A", "testing", True, quality_score=1.5)
    with pytest.raises(ValueError):
        FeedbackEntry("A", "testing", True, user_rating=0)


@pytest.mark.asyncio
async def test_average_latency_is_arithmetic_mean() -> None:
    store = FeedbackStore()
    latencies = [2000.0, 3000.0, 1000.0]
    for latency in latencies:
        await store.record("A", "code-generation", _ok("A", latency_ms=latency))

    stats = store.agent_stats("A")
    assert stats.avg_latency_ms == pytest.approx(2000.0)
    assert stats.avg_latency_ms == pytest.approx(sum(latencies) / len(latencies))
    assert store.task_stats("A", "code-generation").avg_latency_ms == pytest.approx(2000.0)


@pytest.mark.asyncio
async def test_record_updates_agent_and_task_stats() -> None:
    store = FeedbackStore()
    await store.record("A", "code-generation", _ok("A"))
    await store.record("A", "code-generation", _fail("A"))
    await store.record("A", "testing", _ok("A"))

    agent = store.agent_stats("A")
    assert agent.total_executions == 3
    assert agent.success_count == 2
    assert agent.failure_count == 1

    code = store.task_stats("A", "code-generation")
    assert code.total_executions == 2
    assert code.success_rate == 0.5
    assert store.task_stats("A", "testing").success_rate == 1.0
    assert store.task_stats("B", "testing") is None
    assert len(store) == 3
    assert len(store.entries("A")) == 3


@pytest.mark.asyncio
async def test_concurrent_records_are_not_lost() -> None:
    store = FeedbackStore(MemoryPersistenceStore())

    await asyncio.gather(
        *(store.record(wid, "testing", _ok(wid)) for wid in ("A", "B") for _ in range(20))
    )

    assert store.agent_stats("A").total_executions == 20
    assert store.agent_stats("B").total_executions == 20


@pytest.mark.asyncio
async def test_rate_applies_quality_and_rating() -> None:
    store = FeedbackStore()
    await store.record("A", "testing", _ok("A"))

    await store.rate("A", "testing", quality_score=0.9, user_rating=5)

    stats = store.agent_stats("A")
    assert stats.avg_quality == pytest.approx(0.9)
    assert stats.avg_user_rating == 5
    assert stats.user_satisfaction == 1.0
    assert store.task_stats("A", "testing").avg_quality == pytest.approx(0.9)

    with pytest.raises(ValueError):
        await store.rate("A", "testing", quality_score=2.0)
    with pytest.raises(ValueError):
        await store.rate("A", "testing", user_rating=6)


@pytest.mark.asyncio
async def test_unrated_workers_get_neutral_quality() -> None:
    store = FeedbackStore()
    await store.record("A", "testing", _ok("A"))

    stats = store.agent_stats("A")
    assert stats.avg_quality == 0.5
    assert stats.user_satisfaction == 0.5
    assert stats.avg_user_rating is None


@pytest.mark.asyncio
async def test_best_for_and_predict() -> None:
    store = FeedbackStore()

    prediction = store.predict("code-generation")
    assert prediction.worker_id is None
    assert prediction.confidence == 0.0
    assert prediction.reason == "No historical data for this task type"

    for _ in range(3):
        await store.record("A", "code-generation", _ok("A"))
    await store.record("B", "code-generation", _ok("B"))
    await store.record("B", "code-generation", _fail("B"))

    ranked = store.best_for("code-generation")
    assert [s.worker_id for s in ranked] == ["A", "B"]
    assert store.best_for("testing") == []

    prediction = store.predict("code-generation")
    assert prediction.worker_id == "A"
    assert prediction.confidence == pytest.approx(ranked[0].total_score)
    assert prediction.reason == "Based on 3 previous executions with 100% success rate"


@pytest.mark.asyncio
async def test_score() -> None:
    store = FeedbackStore()
    assert store.score("A") == 0.0

    await store.record("A", "testing", _ok("A", latency_ms=1000.0), quality_score=1.0, user_rating=5)

    expected = 0.3 * 1.0 + 0.2 * (1 / 2) + 0.3 * 1.0 + 0.2 * 1.0
    assert store.score("A") == pytest.approx(expected)


@pytest.mark.asyncio
async def test_performance() -> None:
    store = FeedbackStore()
    assert store.performance("A") is None

    await store.record("A", "testing", _ok("A", latency_ms=100.0, tokens=200, cost=0.01))
    await store.record("A", "testing", _fail("A", latency_ms=300.0))

    report = store.performance("A")
    assert report["total_executions"] == 2
    assert report["success_rate"] == 0.5
    assert report["failure_rate"] == 0.5
    assert report["avg_latency_ms"] == pytest.approx(200.0)
    assert report["latency_stddev_ms"] == pytest.approx(100.0)
    assert report["avg_tokens_used"] == pytest.approx(100.0)


@pytest.mark.asyncio
async def test_insights() -> None:
    store = FeedbackStore()
    for _ in range(6):
        await store.record("slow", "research", _fail("slow", latency_ms=9000.0))
    for _ in range(6):
        await store.record("fast", "testing", _ok("fast", latency_ms=100.0))

    insights = store.insights()

    assert insights["total_executions"] == 12
    assert insights["total_workers"] == 2
    assert insights["total_task_types"] == 2
    assert insights["top_performers"][0]["worker_id"] == "fast"
    assert insights["best_per_task_type"]["testing"] == {"worker_id": "fast", "success_rate": 1.0}
    assert any("slow" in r for r in insights["recommendations"])
    assert any("diverse workers" in r for r in insights["recommendations"])


@pytest.mark.asyncio
async def test_persistence_failure_is_logged_not_raised(caplog) -> None:
    store = FeedbackStore(FailingPersistence())

    with caplog.at_level(logging.ERROR, logger="conductor.feedback"):
        entry = await store.record("A", "testing", _ok("A"))

    assert entry.success is True
    assert store.agent_stats("A").total_executions == 1
    assert "disk full" in caplog.text


@pytest.mark.asyncio
async def test_load_restores_history() -> None:
    persistence = MemoryPersistenceStore()
    store = FeedbackStore(persistence)
    await store.record("A", "testing", _ok("A", latency_ms=400.0), quality_score=0.8)
    await store.record("A", "code-generation", _fail("A"))
    await store.record("B", "testing", _ok("B"))

    restored = FeedbackStore(persistence)
    loaded = await restored.load()

    assert loaded == 2
    assert restored.agent_stats("A") == store.agent_stats("A")
    assert restored.task_stats("A", "testing") == store.task_stats("A", "testing")
    assert len(restored) == 3
    assert restored.entries("A")[0].quality_score == 0.8


@pytest.mark.asyncio
async def test_clear_drops_memory_and_persisted_history() -> None:
    persistence = MemoryPersistenceStore()
    store = FeedbackStore(persistence)
    await store.record("A", "testing", _ok("A"))

    await store.clear()

    assert store.agent_stats("A") is None
    assert len(store) == 0
    assert await persistence.keys("feedback:") == []
