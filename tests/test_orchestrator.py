"""Orchestrator tests."""

from __future__ import annotations

import asyncio

import pytest

from conductor.archive import ExecutionLog
from conductor.core import Orchestrator, OrchestratorConfig
from conductor.execution import CancellationToken, ErrorKind
from conductor.feedback import FeedbackStore
from conductor.knowledge import InMemoryKnowledgeStore, KnowledgeHit, KnowledgeStore
from conductor.registry import WorkerRegistry
from conductor.shared.errors import (
    ConfigurationError,
    ExecutionNotFoundError,
    UnknownStrategyError,
    WorkerNotFoundError,
    WorkerUnavailableError,
)
from conductor.storage import MemoryPersistenceStore

TASK = "Write a function that parses ISO dates"


def _orchestrator(adapter, registry, **config) -> Orchestrator:
    return Orchestrator(adapter, registry=registry, config=OrchestratorConfig(**config))


@pytest.mark.asyncio
async def test_execute_task_end_to_end(adapter_factory, two_worker_registry) -> None:
    adapter = adapter_factory()
    orchestrator = _orchestrator(adapter, two_worker_registry)

    record = await orchestrator.execute_task(TASK)
    await orchestrator.wait_for_feedback()

    assert record.execution_id.startswith("exec_")
    assert record.task_type == "code-generation"
    assert record.decision.worker_ids == ["A", "B"]
    assert [o.worker_id for o in record.outcomes] == ["A", "B"]
    assert record.aggregated.success_rate == 1.0
    assert record.aggregated.consensus["count"] == 2
    assert record.cancelled is False
    assert orchestrator.execution_log.get(record.execution_id) is record
    assert sorted(adapter.invoked) == ["A", "B"]
    assert orchestrator.feedback.agent_stats("A").total_executions == 1


@pytest.mark.asyncio
async def test_request_carries_classification(adapter_factory, two_worker_registry) -> None:
    adapter = adapter_factory()
    orchestrator = _orchestrator(adapter, two_worker_registry, max_workers_per_task=1)

    record = await orchestrator.execute_task(TASK)

    _, request, timeout = adapter.calls[0]
    assert request.task == TASK
    assert request.execution_id == record.execution_id
    assert request.classification.task_type == "code-generation"
    assert timeout == 30.0


@pytest.mark.asyncio
async def test_all_workers_fail_is_degraded_result(adapter_factory, two_worker_registry) -> None:
    adapter = adapter_factory(
        {"A": WorkerUnavailableError("A", "no key"), "B": RuntimeError("boom")}
    )
    orchestrator = _orchestrator(adapter, two_worker_registry)

    record = await orchestrator.execute_task(TASK)
    await orchestrator.wait_for_feedback()

    assert record.aggregated.success_rate == 0
    assert record.aggregated.consensus is None
    assert [f["error_kind"] for f in record.aggregated.failures] == ["unavailable", "invocation-error"]
    assert len(orchestrator.execution_log) == 1
    assert orchestrator.feedback.agent_stats("A").success_rate == 0.0


@pytest.mark.asyncio
async def test_no_capable_worker_still_logs_record(adapter_factory, make_worker) -> None:
    registry = WorkerRegistry([make_worker("tester", capabilities=["testing"])])
    adapter = adapter_factory()
    orchestrator = _orchestrator(adapter, registry)

    record = await orchestrator.execute_task(TASK)

    assert record.decision.is_empty
    assert record.outcomes == ()
    assert record.aggregated.consensus is None
    assert adapter.calls == []
    assert len(orchestrator.execution_log) == 1


@pytest.mark.asyncio
async def test_unknown_strategy_raises_before_execution(adapter_factory, two_worker_registry) -> None:
    adapter = adapter_factory()
    orchestrator = _orchestrator(adapter, two_worker_registry)

    with pytest.raises(UnknownStrategyError):
        await orchestrator.execute_task(TASK, strategy="telepathic")

    assert adapter.calls == []
    assert len(orchestrator.execution_log) == 0


@pytest.mark.asyncio
async def test_learned_falls_back_to_hybrid(adapter_factory, two_worker_registry) -> None:
    orchestrator = _orchestrator(adapter_factory(), two_worker_registry)

    record = await orchestrator.execute_task(TASK, strategy="learned")

    assert record.decision.strategy_used == "hybrid"
    assert record.decision.fallback_from == "learned"
    assert record.decision.worker_ids == ["A", "B"]


@pytest.mark.asyncio
async def test_learned_uses_recorded_outcomes(adapter_factory, two_worker_registry) -> None:
    adapter = adapter_factory({"A": RuntimeError("boom")})
    orchestrator = _orchestrator(adapter, two_worker_registry)

    await orchestrator.execute_task(TASK)
    await orchestrator.wait_for_feedback()
    record = await orchestrator.execute_task(TASK, strategy="learned")

    assert record.decision.strategy_used == "learned"
    assert record.decision.fallback_from is None
    assert record.decision.worker_ids == ["B", "A"]


@pytest.mark.asyncio
async def test_retry_excludes_failed_workers(adapter_factory, make_worker) -> None:
    registry = WorkerRegistry(
        [
            make_worker("A", reliability_tier="very-high"),
            make_worker("B", reliability_tier="high"),
        ]
    )
    adapter = adapter_factory({"A": RuntimeError("boom")})
    orchestrator = _orchestrator(adapter, registry, max_workers_per_task=1, retry_attempts=2)

    record = await orchestrator.execute_task(TASK, strategy="reliability-optimized")

    history = orchestrator.get_execution_history()
    assert len(history) == 2
    first, second = history
    assert first.decision.worker_ids == ["A"]
    assert first.aggregated.success_rate == 0
    assert second is record
    assert second.retry_of == first.execution_id
    assert second.decision.worker_ids == ["B"]
    assert record.aggregated.success_rate == 1.0


@pytest.mark.asyncio
async def test_retry_stops_when_no_workers_remain(adapter_factory, two_worker_registry) -> None:
    adapter = adapter_factory({"A": RuntimeError("boom"), "B": RuntimeError("boom")})
    orchestrator = _orchestrator(adapter, two_worker_registry, retry_attempts=3)

    record = await orchestrator.execute_task(TASK)

    assert len(orchestrator.execution_log) == 2
    assert record.decision.is_empty
    assert record.retry_of is not None


@pytest.mark.asyncio
async def test_timeout_recorded_as_failure(adapter_factory, two_worker_registry) -> None:
    adapter = adapter_factory({"A": ("hang",)})
    orchestrator = _orchestrator(adapter, two_worker_registry, per_call_timeout_ms=50)

    record = await orchestrator.execute_task(TASK)

    assert record.outcome_map["A"].error_kind is ErrorKind.TIMEOUT
    assert record.outcome_map["B"].success is True
    assert record.aggregated.success_rate == 0.5


@pytest.mark.asyncio
async def test_token_cancellation_logs_cancelled_record(adapter_factory, two_worker_registry) -> None:
    adapter = adapter_factory({"A": ("hang",)})
    orchestrator = _orchestrator(adapter, two_worker_registry)
    token = CancellationToken()

    task = asyncio.create_task(orchestrator.execute_task(TASK, cancel_token=token))
    await asyncio.sleep(0.02)
    token.cancel("user aborted")
    record = await task
    await orchestrator.wait_for_feedback()

    assert record.cancelled is True
    assert record.outcome_map["A"].error_kind is ErrorKind.CANCELLED
    assert record.outcome_map["B"].success is True
    # Cancelled outcomes are not learned from
    assert orchestrator.feedback.agent_stats("A") is None
    assert orchestrator.feedback.agent_stats("B").total_executions == 1


@pytest.mark.asyncio
async def test_caller_cancellation_still_logs_record(adapter_factory, two_worker_registry) -> None:
    adapter = adapter_factory({"A": ("hang",)})
    orchestrator = _orchestrator(adapter, two_worker_registry)

    task = asyncio.create_task(orchestrator.execute_task(TASK))
    await asyncio.sleep(0.02)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    await asyncio.sleep(0.01)

    history = orchestrator.get_execution_history()
    assert len(history) == 1
    record = history[0]
    assert record.cancelled is True
    assert record.outcome_map["A"].error_kind is ErrorKind.CANCELLED
    assert record.outcome_map["B"].success is True
    assert "A" in adapter.cancelled


@pytest.mark.asyncio
async def test_submit_feedback(adapter_factory, two_worker_registry) -> None:
    orchestrator = _orchestrator(adapter_factory(), two_worker_registry)
    record = await orchestrator.execute_task(TASK)
    await orchestrator.wait_for_feedback()

    await orchestrator.submit_feedback(record.execution_id, "A", quality_score=0.9, user_rating=4)

    stats = orchestrator.feedback.task_stats("A", "code-generation")
    assert stats.avg_quality == pytest.approx(0.9)
    assert stats.avg_user_rating == 4

    with pytest.raises(ExecutionNotFoundError):
        await orchestrator.submit_feedback("exec_missing", "A", quality_score=0.5)
    with pytest.raises(WorkerNotFoundError):
        await orchestrator.submit_feedback(record.execution_id, "Z", quality_score=0.5)
    with pytest.raises(ValueError):
        await orchestrator.submit_feedback(record.execution_id, "A", quality_score=3.0)


@pytest.mark.asyncio
async def test_submit_feedback_for_persisted_execution(adapter_factory, two_worker_registry) -> None:
    persistence = MemoryPersistenceStore()
    first = Orchestrator(
        adapter_factory(), registry=two_worker_registry, execution_log=ExecutionLog(persistence)
    )
    record = await first.execute_task(TASK)
    await first.shutdown()

    feedback = FeedbackStore(persistence)
    second = Orchestrator(
        adapter_factory(),
        registry=two_worker_registry,
        feedback=feedback,
        execution_log=ExecutionLog(persistence),
    )
    await second.submit_feedback(record.execution_id, "B", user_rating=5)

    assert feedback.task_stats("B", "code-generation").avg_user_rating == 5


@pytest.mark.asyncio
async def test_knowledge_attached_to_request(adapter_factory, two_worker_registry) -> None:
    knowledge = InMemoryKnowledgeStore(
        {
            "date-parsing": "Prefer datetime.fromisoformat when parsing ISO dates.",
            "logging": "Use the module logger.",
        }
    )
    adapter = adapter_factory()
    orchestrator = Orchestrator(
        adapter,
        registry=two_worker_registry,
        knowledge_store=knowledge,
        config=OrchestratorConfig(max_workers_per_task=1, knowledge_hits=1),
    )

    await orchestrator.execute_task(TASK)

    _, request, _ = adapter.calls[0]
    assert len(request.context) == 1
    assert request.context[0]["name"] == "date-parsing"
    assert "fromisoformat" in request.context[0]["content"]


class UnreachableKnowledgeStore(KnowledgeStore):
    def __init__(self, fail_on: str):
        self.fail_on = fail_on

    async def search(self, query: str) -> list[KnowledgeHit]:
        if self.fail_on == "search":
            raise RuntimeError("store down")
        return [KnowledgeHit("style-guide", 1.0)]

    async def get(self, name: str) -> str:
        raise RuntimeError("store down")

    async def list(self) -> list[str]:
        return []


@pytest.mark.asyncio
@pytest.mark.parametrize("fail_on", ["search", "get"])
async def test_knowledge_failure_does_not_abort_task(
    adapter_factory, two_worker_registry, fail_on
) -> None:
    adapter = adapter_factory()
    orchestrator = Orchestrator(
        adapter,
        registry=two_worker_registry,
        knowledge_store=UnreachableKnowledgeStore(fail_on),
        config=OrchestratorConfig(knowledge_hits=2),
    )

    record = await orchestrator.execute_task("Implement a rate limiter")

    assert record.aggregated.success_rate == 1.0
    assert len(orchestrator.execution_log) == 1
    assert all(request.context == () for _, request, _ in adapter.calls)


@pytest.mark.asyncio
async def test_domain_aware_strategy(adapter_factory, make_worker) -> None:
    registry = WorkerRegistry(
        [
            make_worker("anthropic-1", capabilities=["data-analysis"]),
            make_worker("openai-1", provider_family="openai", capabilities=["data-analysis"]),
        ]
    )
    orchestrator = _orchestrator(adapter_factory(), registry, domain_aware=True)

    classification, decision = orchestrator.route_task(
        "Compare pandas and numpy data statistics for the model"
    )

    assert classification.domain == "data-science"
    assert decision.strategy_used == "parallel-diverse"
    assert decision.worker_ids == ["anthropic-1", "openai-1"]


def test_route_task_and_recommend(adapter_factory, two_worker_registry) -> None:
    orchestrator = _orchestrator(adapter_factory(), two_worker_registry, default_strategy="speed-optimized")

    _, decision = orchestrator.route_task(TASK)
    assert decision.strategy_used == "speed-optimized"
    assert decision.worker_ids == ["B", "A"]

    recommendations = orchestrator.recommend(TASK)
    assert recommendations["reliability-optimized"].worker_ids == ["A", "B"]
    assert recommendations["learned"].worker_ids == []


@pytest.mark.asyncio
async def test_predict_uses_feedback(adapter_factory, two_worker_registry) -> None:
    orchestrator = _orchestrator(adapter_factory({"A": RuntimeError("boom")}), two_worker_registry)
    assert orchestrator.predict(TASK).worker_id is None

    await orchestrator.execute_task(TASK)
    await orchestrator.wait_for_feedback()

    assert orchestrator.predict(TASK).worker_id == "B"


@pytest.mark.asyncio
async def test_statistics(adapter_factory, two_worker_registry) -> None:
    orchestrator = _orchestrator(adapter_factory(), two_worker_registry)
    await orchestrator.execute_task(TASK)
    await orchestrator.shutdown()

    stats = orchestrator.get_statistics()

    assert stats["executions"]["total_executions"] == 1
    assert stats["registry"]["total_workers"] == 2
    assert stats["feedback"]["total_executions"] == 2
    assert stats["config"]["default_strategy"] == "hybrid"


@pytest.mark.parametrize(
    "options",
    [
        {"max_workers_per_task": 0},
        {"per_call_timeout_ms": 0},
        {"retry_attempts": -1},
        {"exploration_rate": 1.5},
        {"knowledge_hits": -1},
        {"default_strategy": "telepathic"},
    ],
)
def test_invalid_config(options) -> None:
    with pytest.raises(ConfigurationError):
        OrchestratorConfig(**options)


def test_config_from_settings(monkeypatch) -> None:
    from conductor.shared import settings

    monkeypatch.setattr(settings, "MAX_WORKERS_PER_TASK", 5)
    monkeypatch.setattr(settings, "DEFAULT_STRATEGY", "cost-optimized")

    config = OrchestratorConfig.from_settings()

    assert config.max_workers_per_task == 5
    assert config.default_strategy == "cost-optimized"
