"""
Routing Policy Engine — Selects a bounded set of workers for a classified task.

Given a TaskClassification, a registry view and an optional feedback view,
applies a named strategy and returns a RoutingDecision. An empty selection
means "no capable worker" and is a business outcome, not an error.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from conductor.shared.errors import ConfigurationError, UnknownStrategyError

from .strategies import (
    STRATEGIES,
    RoutingContext,
    RoutingStrategy,
    StrategyName,
    resolve_strategy_name,
)

if TYPE_CHECKING:
    from conductor.classifier.task_classifier import TaskClassification
    from conductor.feedback.store import FeedbackStore
    from conductor.registry.models import Worker
    from conductor.registry.worker_registry import WorkerRegistry

logger = logging.getLogger("conductor.scheduler")


@dataclass(frozen=True)
class RoutingDecision:
    """
    Output of the policy engine.

    Attributes:
        selected_workers: Ordered, deduplicated selection (<= max_workers)
        alternates: Next-best workers not selected
        strategy_used: Strategy that produced the selection
        rationale: Human-readable explanation
        estimated_cost: Expected spend for the selection, from token estimates
        fallback_from: Strategy originally requested when a fallback was applied
    """

    selected_workers: tuple[Worker, ...]
    alternates: tuple[Worker, ...]
    strategy_used: str
    rationale: str
    estimated_cost: float = 0.0
    fallback_from: str | None = None

    @property
    def worker_ids(self) -> list[str]:
        return [w.id for w in self.selected_workers]

    @property
    def alternate_ids(self) -> list[str]:
        return [w.id for w in self.alternates]

    @property
    def is_empty(self) -> bool:
        return not self.selected_workers

    def to_dict(self) -> dict[str, Any]:
        return {
            "selected_workers": self.worker_ids,
            "alternates": self.alternate_ids,
            "strategy_used": self.strategy_used,
            "rationale": self.rationale,
            "estimated_cost": self.estimated_cost,
            "fallback_from": self.fallback_from,
        }


def estimate_cost(workers: tuple[Worker, ...], total_tokens: int) -> float:
    return sum(total_tokens / 1000 * w.cost_per_k_tokens for w in workers)


class RoutingPolicyEngine:
    """
    Applies routing strategies from a closed mapping.

    Usage:
        engine = RoutingPolicyEngine()
        decision = engine.route(classification, "hybrid", registry, feedback, 3)
    """

    def __init__(
        self,
        exploration_rate: float = 0.0,
        rng: random.Random | None = None,
        strategies: dict[StrategyName, type[RoutingStrategy]] | None = None,
    ) -> None:
        if not 0.0 <= exploration_rate <= 1.0:
            raise ConfigurationError(
                f"exploration_rate must be in [0, 1], got {exploration_rate}"
            )
        self.exploration_rate = exploration_rate
        self._rng = rng or random.Random()
        self._strategies: dict[StrategyName, RoutingStrategy] = {
            name: cls() for name, cls in (strategies or STRATEGIES).items()
        }

    # ========================================================================
    # Routing
    # ========================================================================

    def route(
        self,
        classification: TaskClassification,
        strategy: StrategyName | str,
        registry: WorkerRegistry,
        feedback: FeedbackStore | None = None,
        max_workers: int = 3,
    ) -> RoutingDecision:
        """
        Route a classified task.

        Args:
            classification: Task classification
            strategy: Strategy name
            registry: Registry view to select from
            feedback: Feedback view (required for meaningful learned routing)
            max_workers: Upper bound on the selection size

        Returns:
            RoutingDecision (selected_workers may be empty)

        Raises:
            UnknownStrategyError: If the strategy name is not known
            ConfigurationError: If max_workers is not positive
        """
        if max_workers <= 0:
            raise ConfigurationError(f"max_workers must be positive, got {max_workers}")

        name = resolve_strategy_name(strategy)
        implementation = self._strategies.get(name)
        if implementation is None:
            raise UnknownStrategyError(name.value)

        context = RoutingContext(
            classification=classification,
            registry=registry,
            feedback=feedback,
            max_workers=max_workers,
            exploration_rate=self.exploration_rate,
            rng=self._rng,
        )
        selection = implementation.select(context)

        required = classification.required_capabilities
        selected = self._bound(selection.workers, required, max_workers)
        chosen = {w.id for w in selected}
        alternates = tuple(
            w for w in self._bound(selection.alternates, required, len(selection.alternates))
            if w.id not in chosen
        )

        decision = RoutingDecision(
            selected_workers=selected,
            alternates=alternates,
            strategy_used=name.value,
            rationale=selection.rationale,
            estimated_cost=estimate_cost(selected, classification.estimated_tokens.total),
        )

        if decision.is_empty:
            logger.warning(
                f"No capable worker for {classification.task_type} "
                f"(capabilities={sorted(required)}, strategy={name.value})"
            )
        else:
            logger.info(
                f"Routed {classification.task_type} via {name.value}: "
                f"{decision.worker_ids} (alternates={decision.alternate_ids})"
            )

        return decision

    def recommendations(
        self,
        classification: TaskClassification,
        registry: WorkerRegistry,
        feedback: FeedbackStore | None = None,
        max_workers: int = 3,
    ) -> dict[str, RoutingDecision]:
        """Run every strategy and return each decision keyed by strategy name."""
        return {
            name.value: self.route(classification, name, registry, feedback, max_workers)
            for name in self._strategies
        }

    @property
    def strategy_names(self) -> list[str]:
        return [name.value for name in self._strategies]

    @staticmethod
    def _bound(
        workers: list[Worker], required: frozenset[str], limit: int
    ) -> tuple[Worker, ...]:
        """Deduplicate, drop incapable workers and cap the size."""
        seen: set[str] = set()
        bounded: list[Worker] = []
        for worker in workers:
            if worker.id in seen or not worker.supports_any(required):
                continue
            seen.add(worker.id)
            bounded.append(worker)
            if len(bounded) >= limit:
                break
        return tuple(bounded)
