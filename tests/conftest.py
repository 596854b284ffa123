"""Shared fixtures for CONDUCTOR tests."""

from __future__ import annotations

import asyncio
from typing import Any, Callable

import pytest

from conductor.classifier import TaskClassification, TaskClassifier
from conductor.execution import WorkerAdapter, WorkerRequest, WorkerResponse
from conductor.registry import Worker, WorkerRegistry


class ScriptedAdapter(WorkerAdapter):
    """
    Deterministic Worker Adapter.

    Each worker id maps to a script entry:
    - str: respond with that content
    - Exception instance: raise it
    - ("sleep", seconds, content): respond after a delay
    - ("hang",): never respond until cancelled
    Unscripted workers answer "<worker_id>: ok".
    """

    def __init__(self, script: dict[str, Any] | None = None, tokens_used: int = 100):
        self.script = dict(script or {})
        self.tokens_used = tokens_used
        self.calls: list[tuple[str, WorkerRequest, float]] = []
        self.cancelled: list[str] = []

    async def invoke(self, worker_id: str, request: WorkerRequest, timeout: float) -> WorkerResponse:
        self.calls.append((worker_id, request, timeout))
        entry = self.script.get(worker_id, f"{worker_id}: ok")

        try:
            if isinstance(entry, Exception):
                raise entry
            if isinstance(entry, tuple) and entry[0] == "hang":
                await asyncio.Event().wait()
            if isinstance(entry, tuple) and entry[0] == "sleep":
                await asyncio.sleep(entry[1])
                entry = entry[2]
        except asyncio.CancelledError:
            self.cancelled.append(worker_id)
            raise

        return WorkerResponse(content=entry, tokens_used=self.tokens_used, latency_ms=10.0)

    @property
    def invoked(self) -> list[str]:
        return [worker_id for worker_id, _, _ in self.calls]


def build_worker(worker_id: str, **overrides: Any) -> Worker:
    fields: dict[str, Any] = {
        "id": worker_id,
        "provider_family": "anthropic",
        "capabilities": frozenset({"code-generation"}),
        "cost_per_k_tokens": 0.01,
        "speed_tier": "medium",
        "reliability_tier": "medium",
    }
    fields.update(overrides)
    return Worker(**fields)


@pytest.fixture
def make_worker() -> Callable[..., Worker]:
    return build_worker


@pytest.fixture
def adapter_factory() -> Callable[..., ScriptedAdapter]:
    return ScriptedAdapter


@pytest.fixture
def classify() -> Callable[[str], TaskClassification]:
    return TaskClassifier().classify


@pytest.fixture
def two_worker_registry() -> WorkerRegistry:
    """A: very reliable but medium speed; B: medium reliability, very fast."""
    return WorkerRegistry(
        [
            build_worker("A", reliability_tier="very-high", speed_tier="medium"),
            build_worker("B", reliability_tier="medium", speed_tier="very-fast"),
        ]
    )
