"""
Routing Strategies — Named algorithms turning a classified task into a
bounded worker selection.

Strategies form a closed set: StrategyName enumerates them and STRATEGIES
maps each name to its implementation. Every strategy returns a selection
(possibly empty) and never raises for "no capable worker".
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from conductor.shared.errors import UnknownStrategyError

from .scoring import LearnedScore, rank_hybrid

if TYPE_CHECKING:
    from conductor.classifier.task_classifier import TaskClassification
    from conductor.feedback.store import FeedbackStore
    from conductor.registry.models import Worker
    from conductor.registry.worker_registry import WorkerRegistry

# Provider families visited, in order, by the parallel-diverse strategy
PARALLEL_FAMILIES: tuple[str, ...] = ("anthropic", "openai", "google", "github-copilot")

ALTERNATE_COUNT = 2


class StrategyName(str, Enum):
    BEST_MATCH = "best-match"
    PARALLEL_DIVERSE = "parallel-diverse"
    COST_OPTIMIZED = "cost-optimized"
    SPEED_OPTIMIZED = "speed-optimized"
    RELIABILITY_OPTIMIZED = "reliability-optimized"
    HYBRID = "hybrid"
    LEARNED = "learned"


@dataclass
class RoutingContext:
    """Inputs shared by every strategy for one routing request."""

    classification: TaskClassification
    registry: WorkerRegistry
    feedback: FeedbackStore | None = None
    max_workers: int = 3
    exploration_rate: float = 0.0
    rng: random.Random = field(default_factory=random.Random)

    @property
    def task_type(self) -> str:
        return self.classification.task_type

    def capable_workers(self) -> list[Worker]:
        """Workers intersecting the required capabilities, registration order."""
        return self.registry.by_capabilities(self.classification.required_capabilities)


@dataclass
class StrategySelection:
    workers: list[Worker]
    alternates: list[Worker]
    rationale: str


def _split(ranked: list[Worker], max_workers: int) -> tuple[list[Worker], list[Worker]]:
    return ranked[:max_workers], ranked[max_workers:max_workers + ALTERNATE_COUNT]


def _ids(workers: list[Worker]) -> str:
    return ", ".join(w.id for w in workers) or "none"


# ============================================================================
# Strategy Base
# ============================================================================


class RoutingStrategy:
    """
    Base class for routing strategies.

    Subclasses implement select(); they may return more workers than
    max_workers and the policy engine enforces the final bound.
    """

    name: StrategyName

    def select(self, context: RoutingContext) -> StrategySelection:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name.value})"


class BestMatchStrategy(RoutingStrategy):
    """Registry best(): reliability first, then speed."""

    name = StrategyName.BEST_MATCH

    def select(self, context: RoutingContext) -> StrategySelection:
        ranked = context.registry.best(context.task_type, context.max_workers + ALTERNATE_COUNT)
        selected, alternates = _split(ranked, context.max_workers)
        return StrategySelection(
            selected,
            alternates,
            f"Best match for {context.task_type} by reliability then speed: {_ids(selected)}",
        )


class ParallelDiverseStrategy(RoutingStrategy):
    """One capable worker per provider family, for cross-provider consensus."""

    name = StrategyName.PARALLEL_DIVERSE

    def __init__(self, families: tuple[str, ...] = PARALLEL_FAMILIES) -> None:
        self.families = families

    def select(self, context: RoutingContext) -> StrategySelection:
        if not context.classification.parallelizable:
            fallback = BestMatchStrategy().select(context)
            fallback.rationale = f"Task not parallelizable; {fallback.rationale}"
            return fallback

        required = context.classification.required_capabilities
        selected: list[Worker] = []
        for family in self.families:
            if len(selected) >= context.max_workers:
                break
            for worker in context.registry.by_platform(family):
                if worker.supports_any(required):
                    selected.append(worker)
                    break

        if not selected:
            fallback = BestMatchStrategy().select(context)
            fallback.rationale = f"No diverse providers available; {fallback.rationale}"
            return fallback

        chosen = {w.id for w in selected}
        alternates = [w for w in context.capable_workers() if w.id not in chosen]
        families = ", ".join(w.provider_family for w in selected)
        return StrategySelection(
            selected,
            alternates[:ALTERNATE_COUNT],
            f"Parallel execution across providers ({families}) for diverse perspectives",
        )


class CostOptimizedStrategy(RoutingStrategy):
    """Local workers first, then ascending price."""

    name = StrategyName.COST_OPTIMIZED

    def select(self, context: RoutingContext) -> StrategySelection:
        ranked = sorted(
            context.capable_workers(),
            key=lambda w: (not w.is_local, w.cost_per_k_tokens),
        )
        selected, alternates = _split(ranked, context.max_workers)
        return StrategySelection(
            selected, alternates, f"Cost-optimized selection, local workers first: {_ids(selected)}"
        )


class SpeedOptimizedStrategy(RoutingStrategy):
    name = StrategyName.SPEED_OPTIMIZED

    def select(self, context: RoutingContext) -> StrategySelection:
        ranked = sorted(context.capable_workers(), key=lambda w: w.speed_score, reverse=True)
        selected, alternates = _split(ranked, context.max_workers)
        return StrategySelection(
            selected, alternates, f"Fastest capable workers: {_ids(selected)}"
        )


class ReliabilityOptimizedStrategy(RoutingStrategy):
    name = StrategyName.RELIABILITY_OPTIMIZED

    def select(self, context: RoutingContext) -> StrategySelection:
        ranked = sorted(context.capable_workers(), key=lambda w: w.reliability_score, reverse=True)
        selected, alternates = _split(ranked, context.max_workers)
        return StrategySelection(
            selected, alternates, f"Most reliable capable workers: {_ids(selected)}"
        )


class HybridStrategy(RoutingStrategy):
    """Weighted blend of reliability, speed, cost and locality."""

    name = StrategyName.HYBRID

    def select(self, context: RoutingContext) -> StrategySelection:
        capable = {w.id: w for w in context.capable_workers()}
        ranked = [capable[s.worker_id] for s in rank_hybrid(list(capable.values()))]
        selected, alternates = _split(ranked, context.max_workers)
        return StrategySelection(
            selected,
            alternates,
            f"Hybrid score (reliability, speed, cost, locality): {_ids(selected)}",
        )


class LearnedStrategy(RoutingStrategy):
    """
    Ranks workers by observed outcomes on this task type.

    Workers without history for the task type are excluded, so the selection
    is empty until feedback exists; the orchestrator then falls back to
    hybrid. With a positive exploration rate the last slot may be given to
    the best unexplored capable worker (by hybrid score).
    """

    name = StrategyName.LEARNED

    def select(self, context: RoutingContext) -> StrategySelection:
        capable = context.capable_workers()
        if context.feedback is None:
            return StrategySelection([], [], "No feedback history available")

        scored: list[tuple[LearnedScore, Worker]] = []
        unexplored: list[Worker] = []
        for worker in capable:
            stats = context.feedback.task_stats(worker.id, context.task_type)
            if stats is None or stats.total_executions < 1:
                unexplored.append(worker)
                continue
            scored.append((LearnedScore.calculate(worker.id, stats), worker))

        scored.sort(key=lambda pair: pair[0].total_score, reverse=True)
        ranked = [worker for _, worker in scored]
        selected, alternates = _split(ranked, context.max_workers)

        rationale = (
            f"Learned ranking from {sum(s.sample_count for s, _ in scored)} samples "
            f"for {context.task_type}: {_ids(selected)}"
        )

        if unexplored and context.exploration_rate > 0 and (
            context.rng.random() < context.exploration_rate
        ):
            explorer_id = rank_hybrid(unexplored)[0].worker_id
            explorer = next(w for w in unexplored if w.id == explorer_id)
            if len(selected) >= context.max_workers:
                displaced = selected.pop()
                alternates = [displaced, *alternates][:ALTERNATE_COUNT]
            selected.append(explorer)
            rationale += f"; exploring {explorer.id}"

        if not scored and not selected:
            rationale = f"No feedback history for {context.task_type}"

        return StrategySelection(selected, alternates, rationale)


# ============================================================================
# Strategy Mapping
# ============================================================================

STRATEGIES: dict[StrategyName, type[RoutingStrategy]] = {
    StrategyName.BEST_MATCH: BestMatchStrategy,
    StrategyName.PARALLEL_DIVERSE: ParallelDiverseStrategy,
    StrategyName.COST_OPTIMIZED: CostOptimizedStrategy,
    StrategyName.SPEED_OPTIMIZED: SpeedOptimizedStrategy,
    StrategyName.RELIABILITY_OPTIMIZED: ReliabilityOptimizedStrategy,
    StrategyName.HYBRID: HybridStrategy,
    StrategyName.LEARNED: LearnedStrategy,
}

STRATEGY_NAMES: tuple[str, ...] = tuple(name.value for name in StrategyName)


def resolve_strategy_name(strategy: StrategyName | str) -> StrategyName:
    """
    Raises:
        UnknownStrategyError: If the name is not a known strategy
    """
    try:
        return StrategyName(strategy)
    except ValueError:
        raise UnknownStrategyError(str(strategy)) from None
