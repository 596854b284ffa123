"""
Adaptive Feedback Store — Per-worker outcome history feeding learned routing.

Every recorded outcome updates two running-statistics rows: one per worker
(AgentStats) and one per (worker, task type) (TaskTypeStats). Updates for a
worker are applied under that worker's own asyncio.Lock; unrelated workers
never contend.

Persistence is best-effort: a failed save is logged and never surfaces to
the caller.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from conductor.scheduler.scoring import LearnedScore
from conductor.shared.errors import FeedbackPersistenceFailure

from .models import AgentStats, FeedbackEntry, TaskTypeStats

if TYPE_CHECKING:
    from conductor.execution.models import WorkerOutcome
    from conductor.storage.backend import PersistenceStore

logger = logging.getLogger("conductor.feedback")

KEY_PREFIX = "feedback:worker:"

# Insight thresholds
INSIGHT_MIN_EXECUTIONS = 10
INSIGHT_MIN_SUCCESS_RATE = 0.7
INSIGHT_SLOW_LATENCY_MS = 5000
INSIGHT_PERFORMERS = 3


@dataclass(frozen=True)
class Prediction:
    worker_id: str | None
    confidence: float
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"worker_id": self.worker_id, "confidence": self.confidence, "reason": self.reason}


class FeedbackStore:
    """
    Learning store for worker outcomes.

    Usage:
        store = FeedbackStore(persistence)
        await store.load()
        await store.record("claude-3-opus", "code-generation", outcome)
        ranked = store.best_for("code-generation", 3)
    """

    # Health score weights (general metric, not the routing score)
    SUCCESS_WEIGHT = 0.3
    EFFICIENCY_WEIGHT = 0.2
    QUALITY_WEIGHT = 0.3
    SATISFACTION_WEIGHT = 0.2

    def __init__(self, persistence: PersistenceStore | None = None):
        self.persistence = persistence
        self._agents: dict[str, AgentStats] = {}
        self._task_stats: dict[tuple[str, str], TaskTypeStats] = {}
        self._entries: dict[str, list[FeedbackEntry]] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock(self, worker_id: str) -> asyncio.Lock:
        lock = self._locks.get(worker_id)
        if lock is None:
            lock = self._locks[worker_id] = asyncio.Lock()
        return lock

    # ========================================================================
    # Recording
    # ========================================================================

    async def record(
        self,
        worker_id: str,
        task_type: str,
        outcome: WorkerOutcome,
        quality_score: float | None = None,
        user_rating: float | None = None,
    ) -> FeedbackEntry:
        """
        Record one worker outcome.

        Args:
            worker_id: Worker that produced the outcome
            task_type: Task type the worker was routed for
            outcome: Settled worker outcome
            quality_score: Caller-reported quality in [0, 1], if known
            user_rating: Caller-reported rating in [1, 5], if known

        Returns:
            The appended FeedbackEntry
        """
        entry = FeedbackEntry(
            worker_id=worker_id,
            task_type=task_type,
            success=outcome.success,
            latency_ms=outcome.latency_ms,
            tokens_used=outcome.tokens_used,
            cost=outcome.cost_estimate,
            quality_score=quality_score,
            user_rating=user_rating,
        )
        await self.record_entry(entry)
        return entry

    async def record_entry(self, entry: FeedbackEntry) -> None:
        async with self._lock(entry.worker_id):
            self._agent(entry.worker_id).apply(entry)
            self._task(entry.worker_id, entry.task_type).apply(entry)
            self._entries.setdefault(entry.worker_id, []).append(entry)
            await self._persist(entry.worker_id)

        logger.debug(
            f"Recorded {entry.worker_id}/{entry.task_type}: "
            f"success={entry.success}, latency={entry.latency_ms:.0f}ms"
        )

    async def rate(
        self,
        worker_id: str,
        task_type: str,
        quality_score: float | None = None,
        user_rating: float | None = None,
    ) -> None:
        """
        Apply caller feedback to a worker after the fact.

        Raises:
            ValueError: If a score is out of range
        """
        if quality_score is not None and not 0.0 <= quality_score <= 1.0:
            raise ValueError(f"quality_score must be in [0, 1], got {quality_score}")
        if user_rating is not None and not 1.0 <= user_rating <= 5.0:
            raise ValueError(f"user_rating must be in [1, 5], got {user_rating}")

        async with self._lock(worker_id):
            self._agent(worker_id).apply_rating(quality_score, user_rating)
            self._task(worker_id, task_type).apply_rating(quality_score, user_rating)
            await self._persist(worker_id)

        logger.info(
            f"Rated {worker_id}/{task_type}: quality={quality_score}, rating={user_rating}"
        )

    def _agent(self, worker_id: str) -> AgentStats:
        stats = self._agents.get(worker_id)
        if stats is None:
            stats = self._agents[worker_id] = AgentStats(worker_id=worker_id)
        return stats

    def _task(self, worker_id: str, task_type: str) -> TaskTypeStats:
        key = (worker_id, task_type)
        stats = self._task_stats.get(key)
        if stats is None:
            stats = self._task_stats[key] = TaskTypeStats(worker_id=worker_id, task_type=task_type)
        return stats

    # ========================================================================
    # Queries
    # ========================================================================

    def agent_stats(self, worker_id: str) -> AgentStats | None:
        return self._agents.get(worker_id)

    def task_stats(self, worker_id: str, task_type: str) -> TaskTypeStats | None:
        return self._task_stats.get((worker_id, task_type))

    def entries(self, worker_id: str | None = None) -> list[FeedbackEntry]:
        if worker_id is not None:
            return list(self._entries.get(worker_id, []))
        return [e for entries in self._entries.values() for e in entries]

    def best_for(self, task_type: str, n: int = 3) -> list[LearnedScore]:
        """Workers with history for a task type, ranked by learned score."""
        scores = [
            LearnedScore.calculate(worker_id, stats)
            for (worker_id, tt), stats in self._task_stats.items()
            if tt == task_type and stats.total_executions > 0
        ]
        scores.sort(key=lambda s: s.total_score, reverse=True)
        return scores[:n]

    def predict(self, task_type: str) -> Prediction:
        best = self.best_for(task_type, 1)
        if not best:
            return Prediction(None, 0.0, "No historical data for this task type")

        top = best[0]
        return Prediction(
            worker_id=top.worker_id,
            confidence=top.total_score,
            reason=(
                f"Based on {top.sample_count} previous executions with "
                f"{round(top.success_score * 100)}% success rate"
            ),
        )

    def score(self, worker_id: str) -> float:
        """
        General health score for a worker (0.0 without history).

        Blends success rate, latency efficiency, quality and user
        satisfaction; unrated workers get neutral quality and satisfaction.
        """
        stats = self._agents.get(worker_id)
        if stats is None:
            return 0.0

        efficiency = 1.0 / (1.0 + stats.avg_latency_ms / 1000.0)
        return (
            stats.success_rate * self.SUCCESS_WEIGHT
            + efficiency * self.EFFICIENCY_WEIGHT
            + stats.avg_quality * self.QUALITY_WEIGHT
            + stats.user_satisfaction * self.SATISFACTION_WEIGHT
        )

    def performance(self, worker_id: str) -> dict[str, Any] | None:
        stats = self._agents.get(worker_id)
        if stats is None:
            return None

        return {
            "worker_id": worker_id,
            "total_executions": stats.total_executions,
            "success_rate": stats.success_rate,
            "failure_rate": 1.0 - stats.success_rate if stats.total_executions else 0.0,
            "avg_latency_ms": stats.avg_latency_ms,
            "latency_stddev_ms": stats.latency_ms.stddev,
            "avg_tokens_used": stats.avg_tokens_used,
            "avg_cost": stats.avg_cost,
            "avg_quality": stats.avg_quality,
            "avg_user_rating": stats.avg_user_rating,
            "overall_score": self.score(worker_id),
        }

    def insights(self) -> dict[str, Any]:
        entries = self.entries()
        ranked = sorted(
            ((worker_id, self.score(worker_id)) for worker_id in self._agents),
            key=lambda pair: pair[1],
            reverse=True,
        )
        task_types = sorted({tt for _, tt in self._task_stats})

        best_per_task: dict[str, dict[str, Any]] = {}
        for task_type in task_types:
            best = self.best_for(task_type, 1)
            if best:
                best_per_task[task_type] = {
                    "worker_id": best[0].worker_id,
                    "success_rate": best[0].success_score,
                }

        recommendations: list[str] = []
        if len(entries) > INSIGHT_MIN_EXECUTIONS:
            success_rate = sum(1 for e in entries if e.success) / len(entries)
            if success_rate < INSIGHT_MIN_SUCCESS_RATE:
                recommendations.append(
                    "Consider adding more diverse workers to improve success rate"
                )
            slow = [
                worker_id
                for worker_id, stats in self._agents.items()
                if stats.avg_latency_ms > INSIGHT_SLOW_LATENCY_MS
            ]
            if slow:
                recommendations.append(
                    f"Workers {', '.join(slow)} are slow. Consider using faster alternatives."
                )

        return {
            "total_executions": len(entries),
            "total_workers": len(self._agents),
            "total_task_types": len(task_types),
            "top_performers": [
                {"worker_id": w, "score": s} for w, s in ranked[:INSIGHT_PERFORMERS]
            ],
            "bottom_performers": [
                {"worker_id": w, "score": s} for w, s in ranked[-INSIGHT_PERFORMERS:]
            ],
            "best_per_task_type": best_per_task,
            "recommendations": recommendations,
        }

    # ========================================================================
    # Persistence
    # ========================================================================

    async def _persist(self, worker_id: str) -> None:
        """Save one worker's statistics. Caller holds the worker's lock."""
        if self.persistence is None:
            return

        doc = {
            "agent": self._agents[worker_id].to_dict(),
            "task_types": [
                stats.to_dict()
                for (wid, _), stats in self._task_stats.items()
                if wid == worker_id
            ],
            "entries": [e.to_dict() for e in self._entries.get(worker_id, [])],
        }
        try:
            await self.persistence.save(f"{KEY_PREFIX}{worker_id}", doc)
        except Exception as e:
            failure = FeedbackPersistenceFailure(worker_id, str(e))
            logger.error(str(failure))

    async def load(self) -> int:
        """
        Load persisted statistics, replacing in-memory state.

        Returns:
            Number of workers loaded
        """
        if self.persistence is None:
            return 0

        self._agents.clear()
        self._task_stats.clear()
        self._entries.clear()

        for key in await self.persistence.keys(KEY_PREFIX):
            doc = await self.persistence.load(key)
            if not doc:
                continue
            agent = AgentStats.from_dict(doc["agent"])
            self._agents[agent.worker_id] = agent
            for data in doc.get("task_types", []):
                stats = TaskTypeStats.from_dict(data)
                self._task_stats[(stats.worker_id, stats.task_type)] = stats
            self._entries[agent.worker_id] = [
                FeedbackEntry.from_dict(e) for e in doc.get("entries", [])
            ]

        logger.info(f"Loaded feedback history for {len(self._agents)} workers")
        return len(self._agents)

    async def clear(self) -> None:
        """Drop all history, in memory and in the persistence store."""
        worker_ids = list(self._agents)
        self._agents.clear()
        self._task_stats.clear()
        self._entries.clear()

        if self.persistence is not None:
            for key in await self.persistence.keys(KEY_PREFIX):
                await self.persistence.delete(key)

        logger.info(f"Cleared feedback history ({len(worker_ids)} workers)")

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._entries.values())
