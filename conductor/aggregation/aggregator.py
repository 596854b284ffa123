"""
Result Aggregator — Merges worker outcomes into a decision-ready result.

No semantic merging is attempted: with several successful responses the
consensus is a "multiple perspectives" marker and reconciling the content is
left to the caller. Recommendations and next steps are static rules keyed
off the classification.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from conductor.classifier.task_classifier import TaskClassification
    from conductor.execution.models import WorkerOutcome

MULTIPLE_PERSPECTIVES = "multiple-perspectives"

NEXT_STEPS: dict[str, tuple[str, ...]] = {
    "code-generation": (
        "Review generated code",
        "Add unit tests",
        "Perform code review",
    ),
    "system-design": (
        "Create detailed architecture diagram",
        "Define API contracts",
        "Plan implementation phases",
    ),
    "refactoring": (
        "Run the existing test suite",
        "Compare behaviour before and after the change",
    ),
    "testing": (
        "Run the new tests",
        "Check coverage of edge cases",
    ),
    "code-review": (
        "Address the reported issues",
        "Request a follow-up review",
    ),
}


@dataclass(frozen=True)
class AggregatedResult:
    """
    Merged view of every outcome of one execution.

    Callers branch on success_rate == 0 (or consensus is None) to detect a
    degraded result; aggregation never raises for zero successes.
    """

    total_workers: int
    successful_workers: int
    failed_workers: int
    success_rate: float
    responses: tuple[dict[str, Any], ...]
    failures: tuple[dict[str, Any], ...]
    consensus: Any
    summary: str
    recommendations: tuple[str, ...] = ()
    next_steps: tuple[str, ...] = ()
    total_tokens: int = 0
    total_cost: float = 0.0
    metadata: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def is_degraded(self) -> bool:
        return self.successful_workers == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_workers": self.total_workers,
            "successful_workers": self.successful_workers,
            "failed_workers": self.failed_workers,
            "success_rate": self.success_rate,
            "responses": list(self.responses),
            "failures": list(self.failures),
            "consensus": self.consensus,
            "summary": self.summary,
            "recommendations": list(self.recommendations),
            "next_steps": list(self.next_steps),
            "total_tokens": self.total_tokens,
            "total_cost": self.total_cost,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AggregatedResult:
        return cls(
            total_workers=data["total_workers"],
            successful_workers=data["successful_workers"],
            failed_workers=data["failed_workers"],
            success_rate=data["success_rate"],
            responses=tuple(data.get("responses", [])),
            failures=tuple(data.get("failures", [])),
            consensus=data.get("consensus"),
            summary=data.get("summary", ""),
            recommendations=tuple(data.get("recommendations", [])),
            next_steps=tuple(data.get("next_steps", [])),
            total_tokens=data.get("total_tokens", 0),
            total_cost=data.get("total_cost", 0.0),
        )


class ResultAggregator:
    """Stateless outcome aggregator."""

    def aggregate(
        self,
        outcomes: list[WorkerOutcome],
        classification: TaskClassification,
    ) -> AggregatedResult:
        successful = [o for o in outcomes if o.success]
        failed = [o for o in outcomes if not o.success]
        total = len(outcomes)

        responses = tuple(
            {"worker_id": o.worker_id, "content": o.content, "latency_ms": o.latency_ms}
            for o in successful
        )
        failures = tuple(
            {
                "worker_id": o.worker_id,
                "error_kind": o.error_kind.value if o.error_kind else None,
                "error": o.error_message,
            }
            for o in failed
        )

        return AggregatedResult(
            total_workers=total,
            successful_workers=len(successful),
            failed_workers=len(failed),
            success_rate=len(successful) / total if total else 0.0,
            responses=responses,
            failures=failures,
            consensus=self.find_consensus([o.content for o in successful]),
            summary=self.summarize(successful, failed),
            recommendations=self.recommend(successful, classification),
            next_steps=NEXT_STEPS.get(classification.task_type, ()),
            total_tokens=sum(o.tokens_used for o in outcomes),
            total_cost=sum(o.cost_estimate for o in outcomes),
        )

    # ========================================================================
    # Rules
    # ========================================================================

    @staticmethod
    def find_consensus(contents: list[str | None]) -> Any:
        if not contents:
            return None
        if len(contents) == 1:
            return contents[0]
        return {
            "type": MULTIPLE_PERSPECTIVES,
            "count": len(contents),
            "note": f"Multiple perspectives, {len(contents)} responses",
        }

    @staticmethod
    def summarize(successful: list[WorkerOutcome], failed: list[WorkerOutcome]) -> str:
        if not successful and not failed:
            return "No workers were invoked"
        summary = f"Received {len(successful)} responses from {len(successful) + len(failed)} workers"
        if failed:
            kinds = sorted({o.error_kind.value for o in failed if o.error_kind})
            summary += f"; {len(failed)} failed ({', '.join(kinds)})"
        return summary

    @staticmethod
    def recommend(
        successful: list[WorkerOutcome], classification: TaskClassification
    ) -> tuple[str, ...]:
        recommendations: list[str] = []
        if len(successful) > 1:
            recommendations.append(
                "Compare responses from different workers for comprehensive understanding"
            )
        if classification.complexity == "high":
            recommendations.append(
                "Consider implementing the solution iteratively based on worker feedback"
            )
        if classification.has_code:
            recommendations.append("Review code suggestions from multiple workers for best practices")
        return tuple(recommendations)
