"""
Feedback Models — Outcome samples and incrementally maintained statistics.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from conductor.shared.utils import utc_now

NEUTRAL_QUALITY = 0.5
NEUTRAL_SATISFACTION = 0.5


@dataclass
class RunningStat:
    """
    Incremental mean and variance (Welford).

    ``mean`` after n pushes equals the arithmetic mean of the n samples; no
    raw sample list is kept.
    """

    count: int = 0
    mean: float = 0.0
    m2: float = 0.0

    def push(self, value: float) -> None:
        self.count += 1
        delta = value - self.mean
        self.mean += delta / self.count
        self.m2 += delta * (value - self.mean)

    @property
    def variance(self) -> float:
        return self.m2 / self.count if self.count > 1 else 0.0

    @property
    def stddev(self) -> float:
        return math.sqrt(self.variance)

    def mean_or(self, default: float) -> float:
        return self.mean if self.count else default

    def to_dict(self) -> dict[str, Any]:
        return {"count": self.count, "mean": self.mean, "m2": self.m2}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> RunningStat:
        if not data:
            return cls()
        return cls(count=data["count"], mean=data["mean"], m2=data.get("m2", 0.0))


@dataclass
class FeedbackEntry:
    """
    One outcome sample for a worker on a task type.

    quality_score and user_rating come from caller feedback; they are None
    when the caller has not rated the result.
    """

    worker_id: str
    task_type: str
    success: bool
    latency_ms: float = 0.0
    tokens_used: int = 0
    cost: float = 0.0
    quality_score: float | None = None
    user_rating: float | None = None
    timestamp: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        if self.quality_score is not None and not 0.0 <= self.quality_score <= 1.0:
            raise ValueError(f"quality_score must be in [0, 1], got {self.quality_score}")
        if self.user_rating is not None and not 1.0 <= self.user_rating <= 5.0:
            raise ValueError(f"user_rating must be in [1, 5], got {self.user_rating}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "worker_id": self.worker_id,
            "task_type": self.task_type,
            "success": self.success,
            "latency_ms": self.latency_ms,
            "tokens_used": self.tokens_used,
            "cost": self.cost,
            "quality_score": self.quality_score,
            "user_rating": self.user_rating,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FeedbackEntry:
        return cls(
            worker_id=data["worker_id"],
            task_type=data["task_type"],
            success=data["success"],
            latency_ms=data.get("latency_ms", 0.0),
            tokens_used=data.get("tokens_used", 0),
            cost=data.get("cost", 0.0),
            quality_score=data.get("quality_score"),
            user_rating=data.get("user_rating"),
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )


@dataclass
class OutcomeStats:
    """Running statistics over a stream of feedback entries."""

    total_executions: int = 0
    success_count: int = 0
    latency_ms: RunningStat = field(default_factory=RunningStat)
    tokens_used: RunningStat = field(default_factory=RunningStat)
    cost: RunningStat = field(default_factory=RunningStat)
    quality: RunningStat = field(default_factory=RunningStat)
    user_rating: RunningStat = field(default_factory=RunningStat)

    def apply(self, entry: FeedbackEntry) -> None:
        self.total_executions += 1
        if entry.success:
            self.success_count += 1
        self.latency_ms.push(entry.latency_ms)
        self.tokens_used.push(entry.tokens_used)
        self.cost.push(entry.cost)
        self.apply_rating(entry.quality_score, entry.user_rating)

    def apply_rating(self, quality_score: float | None, user_rating: float | None) -> None:
        if quality_score is not None:
            self.quality.push(quality_score)
        if user_rating is not None:
            self.user_rating.push(user_rating)

    @property
    def failure_count(self) -> int:
        return self.total_executions - self.success_count

    @property
    def success_rate(self) -> float:
        if not self.total_executions:
            return 0.0
        return self.success_count / self.total_executions

    @property
    def avg_latency_ms(self) -> float:
        return self.latency_ms.mean

    @property
    def avg_tokens_used(self) -> float:
        return self.tokens_used.mean

    @property
    def avg_cost(self) -> float:
        return self.cost.mean

    @property
    def avg_quality(self) -> float:
        return self.quality.mean_or(NEUTRAL_QUALITY)

    @property
    def avg_user_rating(self) -> float | None:
        return self.user_rating.mean if self.user_rating.count else None

    @property
    def user_satisfaction(self) -> float:
        """User rating mapped from [1, 5] onto [0, 1]; neutral when unrated."""
        if not self.user_rating.count:
            return NEUTRAL_SATISFACTION
        return (self.user_rating.mean - 1.0) / 4.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_executions": self.total_executions,
            "success_count": self.success_count,
            "latency_ms": self.latency_ms.to_dict(),
            "tokens_used": self.tokens_used.to_dict(),
            "cost": self.cost.to_dict(),
            "quality": self.quality.to_dict(),
            "user_rating": self.user_rating.to_dict(),
        }

    @classmethod
    def _fields_from_dict(cls, data: dict[str, Any]) -> dict[str, Any]:
        return {
            "total_executions": data.get("total_executions", 0),
            "success_count": data.get("success_count", 0),
            "latency_ms": RunningStat.from_dict(data.get("latency_ms")),
            "tokens_used": RunningStat.from_dict(data.get("tokens_used")),
            "cost": RunningStat.from_dict(data.get("cost")),
            "quality": RunningStat.from_dict(data.get("quality")),
            "user_rating": RunningStat.from_dict(data.get("user_rating")),
        }


@dataclass
class AgentStats(OutcomeStats):
    """Statistics for one worker across all task types."""

    worker_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"worker_id": self.worker_id, **super().to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AgentStats:
        return cls(worker_id=data["worker_id"], **cls._fields_from_dict(data))


@dataclass
class TaskTypeStats(OutcomeStats):
    """Statistics for one worker on one task type."""

    worker_id: str = ""
    task_type: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"worker_id": self.worker_id, "task_type": self.task_type, **super().to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskTypeStats:
        return cls(
            worker_id=data["worker_id"],
            task_type=data["task_type"],
            **cls._fields_from_dict(data),
        )
