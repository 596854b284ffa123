"""
CONDUCTOR Scheduler — Routing policy engine.

Selects a bounded set of workers for a classified task under a named
strategy:
- best-match, parallel-diverse, cost-optimized, speed-optimized,
  reliability-optimized, hybrid (default), learned

Usage:
    from conductor.scheduler import RoutingPolicyEngine

    engine = RoutingPolicyEngine()
    decision = engine.route(classification, "hybrid", registry, feedback)
"""

from .policy_engine import RoutingDecision, RoutingPolicyEngine, estimate_cost
from .scoring import HybridScore, LearnedScore, rank_hybrid
from .strategies import (
    PARALLEL_FAMILIES,
    STRATEGIES,
    STRATEGY_NAMES,
    RoutingContext,
    RoutingStrategy,
    StrategyName,
    StrategySelection,
    resolve_strategy_name,
)

__all__ = [
    "RoutingPolicyEngine",
    "RoutingDecision",
    "estimate_cost",
    "HybridScore",
    "LearnedScore",
    "rank_hybrid",
    "RoutingStrategy",
    "RoutingContext",
    "StrategySelection",
    "StrategyName",
    "STRATEGIES",
    "STRATEGY_NAMES",
    "PARALLEL_FAMILIES",
    "resolve_strategy_name",
]
