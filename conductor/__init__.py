"""
CONDUCTOR — Task routing and multi-agent orchestration core.

Given a free-text task and a pool of heterogeneous workers, decides which
workers to invoke, runs them concurrently under per-call timeouts, merges
their results and learns from the outcomes.

Main Components:
- conductor.registry: Worker catalogue
- conductor.classifier: Task classification
- conductor.scheduler: Routing policy engine and strategies
- conductor.execution: Settle-all executor and Worker Adapter contract
- conductor.aggregation: Result aggregation
- conductor.feedback: Outcome statistics and learned scores
- conductor.archive: Execution log
- conductor.storage: Document persistence (aiosqlite)
- conductor.knowledge: Knowledge store contract
- conductor.core: Orchestrator
- conductor.shared: Settings, errors, logging, utilities

Usage:
    from conductor import Orchestrator, WorkerRegistry

    orchestrator = Orchestrator(adapter, registry=WorkerRegistry.with_defaults())
    record = await orchestrator.execute_task("Write unit tests for the parser")
"""

# Version
__version__ = "1.0.0"

# Main exports
from conductor.shared.settings import PROJECT_NAME, VERSION

from conductor.classifier import TaskClassification, TaskClassifier
from conductor.core.orchestrator import Orchestrator, OrchestratorConfig
from conductor.execution import (
    CancellationToken,
    WorkerAdapter,
    WorkerOutcome,
    WorkerRequest,
    WorkerResponse,
)
from conductor.registry import Worker, WorkerRegistry
from conductor.scheduler import RoutingDecision, RoutingPolicyEngine

__all__ = [
    # Version
    "__version__",
    # Settings
    "PROJECT_NAME",
    "VERSION",
    # Components
    "Orchestrator",
    "OrchestratorConfig",
    "TaskClassifier",
    "TaskClassification",
    "RoutingPolicyEngine",
    "RoutingDecision",
    "WorkerRegistry",
    "Worker",
    "WorkerAdapter",
    "WorkerRequest",
    "WorkerResponse",
    "WorkerOutcome",
    "CancellationToken",
]
