"""
CONDUCTOR Archive — Execution Log

Append-only record of every orchestrated task.

Features:
  - One ExecutionRecord per top-level task, appended exactly once
  - Recent records kept in memory for history and statistics
  - Records persisted through the Persistence Store (best-effort)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from conductor.aggregation.aggregator import AggregatedResult
    from conductor.classifier.task_classifier import TaskClassification
    from conductor.execution.models import WorkerOutcome
    from conductor.scheduler.policy_engine import RoutingDecision
    from conductor.storage.backend import PersistenceStore

logger = logging.getLogger("conductor.archive")

KEY_PREFIX = "execution:"


@dataclass(frozen=True)
class ExecutionRecord:
    """
    One full task invocation.

    Attributes:
        execution_id: Unique id (exec_<hex>)
        task_preview: Task text truncated for display
        classification: Task classification
        decision: Routing decision that was executed
        outcomes: One outcome per selected worker, in selection order
        aggregated: Aggregated result
        total_latency_ms: Wall-clock time from classification to aggregation
        cancelled: The execution was cancelled before every call settled
        retry_of: Execution this one retried, if any
    """

    execution_id: str
    task_preview: str
    classification: TaskClassification
    decision: RoutingDecision
    outcomes: tuple[WorkerOutcome, ...]
    aggregated: AggregatedResult
    total_latency_ms: float
    timestamp: datetime
    cancelled: bool = False
    retry_of: str | None = None

    @property
    def outcome_map(self) -> dict[str, WorkerOutcome]:
        """Outcomes keyed by worker id (insertion order = selection order)."""
        return {o.worker_id: o for o in self.outcomes}

    @property
    def task_type(self) -> str:
        return self.classification.task_type

    @property
    def succeeded(self) -> bool:
        return any(o.success for o in self.outcomes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "execution_id": self.execution_id,
            "task_preview": self.task_preview,
            "classification": self.classification.to_dict(),
            "decision": self.decision.to_dict(),
            "outcomes": {o.worker_id: o.to_dict() for o in self.outcomes},
            "aggregated": self.aggregated.to_dict(),
            "total_latency_ms": self.total_latency_ms,
            "timestamp": self.timestamp.isoformat(),
            "cancelled": self.cancelled,
            "retry_of": self.retry_of,
        }


class ExecutionLog:
    """
    Append-only execution log.

    Records are never mutated after append; appending an id twice is a
    programmer error.
    """

    def __init__(self, persistence: PersistenceStore | None = None, max_recent: int = 1000):
        self.persistence = persistence
        self._records: dict[str, ExecutionRecord] = {}
        self._max_recent = max_recent

    async def append(self, record: ExecutionRecord) -> None:
        """
        Append a finalized record.

        Raises:
            ValueError: If the execution id was already appended
        """
        if record.execution_id in self._records:
            raise ValueError(f"Execution already logged: {record.execution_id}")

        self._records[record.execution_id] = record
        while len(self._records) > self._max_recent:
            oldest = next(iter(self._records))
            del self._records[oldest]

        logger.info(
            f"Logged {record.execution_id}: {record.task_type}, "
            f"{record.aggregated.successful_workers}/{record.aggregated.total_workers} succeeded"
            + (" (cancelled)" if record.cancelled else "")
        )

        if self.persistence is not None:
            try:
                await self.persistence.save(f"{KEY_PREFIX}{record.execution_id}", record.to_dict())
            except Exception as e:
                logger.error(f"Failed to persist execution {record.execution_id}: {e}")

    def get(self, execution_id: str) -> ExecutionRecord | None:
        return self._records.get(execution_id)

    async def load_persisted(self, execution_id: str) -> dict[str, Any] | None:
        """Persisted form of a record, for ids no longer held in memory."""
        if self.persistence is None:
            return None
        return await self.persistence.load(f"{KEY_PREFIX}{execution_id}")

    def history(self, limit: int | None = None) -> list[ExecutionRecord]:
        """Records oldest first; with a limit, the most recent `limit`."""
        records = list(self._records.values())
        if limit is not None:
            records = records[-limit:] if limit > 0 else []
        return records

    def statistics(self) -> dict[str, Any]:
        records = list(self._records.values())
        total = len(records)

        by_task_type: dict[str, int] = {}
        by_strategy: dict[str, int] = {}
        for record in records:
            by_task_type[record.task_type] = by_task_type.get(record.task_type, 0) + 1
            strategy = record.decision.strategy_used
            by_strategy[strategy] = by_strategy.get(strategy, 0) + 1

        return {
            "total_executions": total,
            "average_latency_ms": (
                sum(r.total_latency_ms for r in records) / total if total else 0.0
            ),
            "success_rate": sum(1 for r in records if r.succeeded) / total if total else 0.0,
            "cancelled": sum(1 for r in records if r.cancelled),
            "retries": sum(1 for r in records if r.retry_of),
            "total_cost": sum(r.aggregated.total_cost for r in records),
            "by_task_type": by_task_type,
            "by_strategy": by_strategy,
            "last_execution_at": records[-1].timestamp.isoformat() if records else None,
        }

    def __len__(self) -> int:
        return len(self._records)
