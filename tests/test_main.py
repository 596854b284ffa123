"""Tests for the CONDUCTOR application entry point."""

from __future__ import annotations

import importlib
import logging
import os

import pytest

from conductor.execution import WorkerAdapter, WorkerRequest, WorkerResponse
from conductor.main import ConductorApp, init_feedback_store, init_persistence, init_registry
from conductor.registry import DEFAULT_WORKERS
from conductor.shared import settings


class EchoAdapter(WorkerAdapter):
    async def invoke(self, worker_id: str, request: WorkerRequest, timeout: float) -> WorkerResponse:
        return WorkerResponse(content=f"{worker_id} handled {request.task}", tokens_used=50)


@pytest.fixture
def restore_settings():
    saved = dict(os.environ)
    yield
    os.environ.clear()
    os.environ.update(saved)
    importlib.reload(settings)


@pytest.mark.asyncio
async def test_create_reads_env_file(tmp_path, restore_settings) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "CONDUCTOR_MAX_WORKERS_PER_TASK=2\n"
        "CONDUCTOR_DEFAULT_STRATEGY=cost-optimized\n"
        "CONDUCTOR_STORAGE_BACKEND=memory\n"
    )

    app = await ConductorApp.create(EchoAdapter(), env_file=str(env_file))
    try:
        config = app.orchestrator.config
        assert config.max_workers_per_task == 2
        assert config.default_strategy == "cost-optimized"
        assert len(app.orchestrator.registry) == len(DEFAULT_WORKERS)

        record = await app.execute_task("Write a function that parses ISO dates")
        assert record.decision.strategy_used == "cost-optimized"
        assert len(record.outcomes) == 2
        assert record.aggregated.success_rate == 1.0
        # Local workers first
        assert all(o.worker_id.startswith("ollama-") for o in record.outcomes)

        await app.submit_feedback(record.execution_id, record.outcomes[0].worker_id, user_rating=5)
        stats = app.get_statistics()
        assert stats["executions"]["total_executions"] == 1
    finally:
        await app.shutdown()


@pytest.mark.asyncio
async def test_state_survives_restart(tmp_path, restore_settings) -> None:
    db_path = str(tmp_path / "conductor.db")
    task = "Write a function that parses ISO dates"

    first = await ConductorApp.create(EchoAdapter(), storage_backend="sqlite", db_path=db_path)
    record = await first.execute_task(task)
    await first.shutdown()

    second = await ConductorApp.create(EchoAdapter(), storage_backend="sqlite", db_path=db_path)
    try:
        worker_id = record.outcomes[0].worker_id
        assert second.orchestrator.feedback.agent_stats(worker_id).total_executions == 1
        await second.submit_feedback(record.execution_id, worker_id, quality_score=0.7)
        stats = second.orchestrator.feedback.task_stats(worker_id, record.task_type)
        assert stats.avg_quality == pytest.approx(0.7)
    finally:
        await second.shutdown()


@pytest.mark.asyncio
async def test_init_registry_merges_stored_workers() -> None:
    persistence = await init_persistence("memory")
    await persistence.save(
        "registry:workers",
        {
            "workers": [
                {"id": "custom-worker", "provider_family": "internal", "capabilities": ["testing"]}
            ]
        },
    )

    registry = await init_registry(persistence)

    assert "custom-worker" in registry
    assert len(registry) == len(DEFAULT_WORKERS) + 1
    stored = await persistence.load("registry:workers")
    assert len(stored["workers"]) == len(registry)

    bare = await init_registry(persistence, seed_defaults=False)
    assert len(bare) == len(DEFAULT_WORKERS) + 1


@pytest.mark.asyncio
async def test_init_feedback_store_without_history() -> None:
    persistence = await init_persistence("memory")

    feedback = await init_feedback_store(persistence)

    assert len(feedback) == 0


@pytest.mark.asyncio
async def test_create_with_log_file(tmp_path, monkeypatch, restore_settings) -> None:
    log_dir = tmp_path / "logs"
    monkeypatch.setenv("CONDUCTOR_LOG_DIR", str(log_dir))
    conductor_logger = logging.getLogger("conductor")
    before = list(conductor_logger.handlers)

    app = await ConductorApp.create(
        EchoAdapter(), storage_backend="memory", log_file="conductor.log"
    )
    try:
        assert (log_dir / "conductor.log").exists()
    finally:
        await app.shutdown()
        for handler in list(conductor_logger.handlers):
            if handler not in before:
                conductor_logger.removeHandler(handler)
                handler.close()
