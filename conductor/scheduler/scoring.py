"""
Worker Scoring — Composite scores used to rank workers.

Two scores exist:
- HybridScore: static profile blend (reliability, speed, cost, locality)
  used when no outcome history is available.
- LearnedScore: blend of observed outcomes for one worker on one task type.

Both are task-specific routing scores; the feedback store's health score
is a separate, general metric.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from conductor.feedback.models import OutcomeStats
    from conductor.registry.models import Worker

# Guards the cost term against division by zero for free workers
COST_EPSILON = 0.001


@dataclass
class HybridScore:
    """
    Profile-based score for a worker.

    Attributes:
        worker_id: Worker identifier
        reliability_score: Reliability ordinal (1-5)
        speed_score: Speed ordinal (2-5)
        cost_score: 1 / (cost_per_k_tokens + epsilon)
        local_score: 1.0 for local workers, else 0.0
        total_score: Weighted total
    """

    worker_id: str
    reliability_score: float
    speed_score: float
    cost_score: float
    local_score: float
    total_score: float = 0.0

    # Scoring weights (must sum to 1.0)
    RELIABILITY_WEIGHT = 0.4
    SPEED_WEIGHT = 0.3
    COST_WEIGHT = 0.2
    LOCAL_WEIGHT = 0.1

    @classmethod
    def calculate(cls, worker: Worker) -> HybridScore:
        reliability = float(worker.reliability_score)
        speed = float(worker.speed_score)
        cost = 1.0 / (worker.cost_per_k_tokens + COST_EPSILON)
        local = 1.0 if worker.is_local else 0.0

        total = (
            reliability * cls.RELIABILITY_WEIGHT
            + speed * cls.SPEED_WEIGHT
            + cost * cls.COST_WEIGHT
            + local * cls.LOCAL_WEIGHT
        )

        return cls(
            worker_id=worker.id,
            reliability_score=reliability,
            speed_score=speed,
            cost_score=cost,
            local_score=local,
            total_score=total,
        )

    def __repr__(self) -> str:
        return (
            f"HybridScore({self.worker_id}: "
            f"total={self.total_score:.2f}, "
            f"reliability={self.reliability_score:.0f}, "
            f"speed={self.speed_score:.0f}, "
            f"cost={self.cost_score:.2f}, "
            f"local={self.local_score:.0f})"
        )


@dataclass
class LearnedScore:
    """
    History-based score for a worker on one task type.

    Attributes:
        worker_id: Worker identifier
        success_score: Observed success rate (0.0-1.0)
        quality_score: Mean caller-reported quality (0.5 when unrated)
        latency_score: 1 / (1 + avg latency in seconds)
        cost_score: 1 / (1 + avg cost)
        sample_count: Number of recorded outcomes
        total_score: Weighted total (0.0-1.0)
    """

    worker_id: str
    success_score: float
    quality_score: float
    latency_score: float
    cost_score: float
    sample_count: int = 0
    total_score: float = 0.0

    SUCCESS_WEIGHT = 0.4
    QUALITY_WEIGHT = 0.3
    LATENCY_WEIGHT = 0.2
    COST_WEIGHT = 0.1

    @classmethod
    def calculate(cls, worker_id: str, stats: OutcomeStats) -> LearnedScore:
        """
        Calculate the learned score from running statistics.

        Args:
            worker_id: Worker identifier
            stats: Per-(worker, task type) outcome statistics

        Returns:
            LearnedScore with total_score calculated
        """
        success = stats.success_rate
        quality = stats.avg_quality
        latency = 1.0 / (1.0 + stats.avg_latency_ms / 1000.0)
        cost = 1.0 / (1.0 + stats.avg_cost)

        total = (
            success * cls.SUCCESS_WEIGHT
            + quality * cls.QUALITY_WEIGHT
            + latency * cls.LATENCY_WEIGHT
            + cost * cls.COST_WEIGHT
        )

        return cls(
            worker_id=worker_id,
            success_score=success,
            quality_score=quality,
            latency_score=latency,
            cost_score=cost,
            sample_count=stats.total_executions,
            total_score=total,
        )

    def __repr__(self) -> str:
        return (
            f"LearnedScore({self.worker_id}: "
            f"total={self.total_score:.2f}, "
            f"success={self.success_score:.2f}, "
            f"quality={self.quality_score:.2f}, "
            f"latency={self.latency_score:.2f}, "
            f"samples={self.sample_count})"
        )


def rank_hybrid(workers: list[Worker]) -> list[HybridScore]:
    """Hybrid scores sorted descending; stable for equal totals."""
    scores = [HybridScore.calculate(w) for w in workers]
    scores.sort(key=lambda s: s.total_score, reverse=True)
    return scores
