"""
Worker Adapter — Contract for invoking a worker.

The orchestration core never produces worker content itself; every call
goes through a WorkerAdapter supplied by the caller (an HTTP client, a
local model runner, a test double, ...).

Adapters signal failures by raising:
- WorkerUnavailableError: missing credentials or unreachable backend
- WorkerTimeoutError: the backend gave up before the deadline
- ProviderError: the backend reported an error
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from conductor.classifier.task_classifier import TaskClassification


@dataclass(frozen=True)
class WorkerRequest:
    """
    Payload handed to every selected worker.

    Attributes:
        task: Full task text
        classification: Classification of the task
        execution_id: Execution this call belongs to
        context: Knowledge entries attached to the request
    """

    task: str
    classification: TaskClassification | None = None
    execution_id: str = ""
    context: tuple[dict[str, Any], ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "task": self.task,
            "classification": self.classification.to_dict() if self.classification else None,
            "execution_id": self.execution_id,
            "context": list(self.context),
            "metadata": self.metadata,
        }


@dataclass(frozen=True)
class WorkerResponse:
    content: str
    tokens_used: int = 0
    latency_ms: float = 0.0


class WorkerAdapter:
    """
    Abstract worker adapter.

    Implementations must be safe to call concurrently for different workers.
    """

    async def invoke(
        self, worker_id: str, request: WorkerRequest, timeout: float
    ) -> WorkerResponse:
        """
        Invoke a worker.

        Args:
            worker_id: Registered worker id
            request: Request payload
            timeout: Deadline in seconds the adapter may use for its own I/O

        Returns:
            WorkerResponse with content, tokens used and latency
        """
        raise NotImplementedError
