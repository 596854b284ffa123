"""
CONDUCTOR Core — Orchestrator

Composition root for one routing and execution pipeline:

    task text → Classifier → Policy Engine → Executor → Aggregator → caller

Outcomes flow back into the Feedback Store in the background. Every task
produces exactly one ExecutionRecord in the Execution Log, including tasks
whose workers all failed and tasks that were cancelled mid-flight.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from conductor.aggregation import ResultAggregator
from conductor.archive import ExecutionLog, ExecutionRecord
from conductor.classifier import DOMAINS_BY_NAME, TaskClassifier
from conductor.execution import (
    CancellationToken,
    ErrorKind,
    OrchestrationExecutor,
    WorkerOutcome,
    WorkerRequest,
)
from conductor.feedback import FeedbackStore, Prediction
from conductor.knowledge import KnowledgeStore
from conductor.registry import WorkerRegistry
from conductor.scheduler import RoutingDecision, RoutingPolicyEngine, StrategyName
from conductor.shared import settings
from conductor.shared.errors import (
    ConfigurationError,
    ExecutionNotFoundError,
    KnowledgeNotFoundError,
    UnknownStrategyError,
    WorkerNotFoundError,
)
from conductor.shared.utils import format_duration, generate_execution_id, truncate, utc_now

if TYPE_CHECKING:
    from conductor.classifier import TaskClassification
    from conductor.execution import ExecutionHandle, WorkerAdapter

logger = logging.getLogger("conductor.core.orchestrator")


@dataclass(frozen=True)
class OrchestratorConfig:
    """
    Orchestrator options, immutable per orchestrator instance.

    Attributes:
        max_workers_per_task: Upper bound on concurrent worker calls per task
        per_call_timeout_ms: Deadline for each worker call
        default_strategy: Strategy used when the caller names none
        retry_attempts: Re-routes allowed after a task with zero successes
        exploration_rate: Probability the learned strategy tries an unexplored worker
        knowledge_hits: Knowledge entries attached to each request (0 disables)
        domain_aware: Use the detected domain's preferred strategy by default
    """

    max_workers_per_task: int = 3
    per_call_timeout_ms: int = 30_000
    default_strategy: str = StrategyName.HYBRID.value
    retry_attempts: int = 0
    exploration_rate: float = 0.0
    knowledge_hits: int = 3
    domain_aware: bool = False

    def __post_init__(self) -> None:
        if self.max_workers_per_task <= 0:
            raise ConfigurationError(
                f"max_workers_per_task must be positive, got {self.max_workers_per_task}"
            )
        if self.per_call_timeout_ms <= 0:
            raise ConfigurationError(
                f"per_call_timeout_ms must be positive, got {self.per_call_timeout_ms}"
            )
        if self.retry_attempts < 0:
            raise ConfigurationError(
                f"retry_attempts must be >= 0, got {self.retry_attempts}"
            )
        if not 0.0 <= self.exploration_rate <= 1.0:
            raise ConfigurationError(
                f"exploration_rate must be in [0, 1], got {self.exploration_rate}"
            )
        if self.knowledge_hits < 0:
            raise ConfigurationError(
                f"knowledge_hits must be >= 0, got {self.knowledge_hits}"
            )
        try:
            StrategyName(self.default_strategy)
        except ValueError:
            raise ConfigurationError(
                f"Unknown default_strategy: {self.default_strategy}"
            ) from None

    @classmethod
    def from_settings(cls) -> OrchestratorConfig:
        """Build a config from CONDUCTOR_* environment settings."""
        return cls(
            max_workers_per_task=settings.MAX_WORKERS_PER_TASK,
            per_call_timeout_ms=settings.PER_CALL_TIMEOUT_MS,
            default_strategy=settings.DEFAULT_STRATEGY,
            retry_attempts=settings.RETRY_ATTEMPTS,
            exploration_rate=settings.EXPLORATION_RATE,
            knowledge_hits=settings.KNOWLEDGE_HITS,
            domain_aware=settings.ENABLE_DOMAIN_ROUTING,
        )

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)


class Orchestrator:
    """
    Main coordinator for task routing and execution.

    Example:
        orchestrator = Orchestrator(adapter, registry=WorkerRegistry.with_defaults())
        record = await orchestrator.execute_task("Implement a rate limiter")
        if record.aggregated.success_rate == 0:
            ...  # degraded result, inspect record.aggregated.failures
        await orchestrator.submit_feedback(record.execution_id, "gpt-4o", quality_score=0.9)
    """

    def __init__(
        self,
        adapter: WorkerAdapter,
        registry: WorkerRegistry | None = None,
        feedback: FeedbackStore | None = None,
        execution_log: ExecutionLog | None = None,
        knowledge_store: KnowledgeStore | None = None,
        config: OrchestratorConfig | None = None,
        classifier: TaskClassifier | None = None,
        policy_engine: RoutingPolicyEngine | None = None,
        aggregator: ResultAggregator | None = None,
    ):
        """
        Initialize the Orchestrator.

        Args:
            adapter: Worker Adapter used for every invocation
            registry: Worker registry (default: empty registry)
            feedback: Feedback store (default: in-memory, unpersisted)
            execution_log: Execution log (default: in-memory, unpersisted)
            knowledge_store: Knowledge collaborator (optional)
            config: Orchestrator options (default: OrchestratorConfig())
        """
        self.config = config or OrchestratorConfig()
        self.registry = registry if registry is not None else WorkerRegistry()
        self.feedback = feedback if feedback is not None else FeedbackStore()
        self.execution_log = execution_log if execution_log is not None else ExecutionLog()
        self.knowledge_store = knowledge_store
        self.classifier = classifier or TaskClassifier()
        self.policy_engine = policy_engine or RoutingPolicyEngine(
            exploration_rate=self.config.exploration_rate
        )
        self.executor = OrchestrationExecutor(adapter)
        self.aggregator = aggregator or ResultAggregator()

        # Background feedback recordings, awaited by wait_for_feedback()
        self._feedback_tasks: set[asyncio.Task[None]] = set()

        logger.info(
            f"Orchestrator initialized (workers={len(self.registry)}, "
            f"strategy={self.config.default_strategy}, "
            f"max_workers={self.config.max_workers_per_task}, "
            f"timeout={self.config.per_call_timeout_ms}ms, "
            f"knowledge={self.knowledge_store is not None})"
        )

    # ========================================================================
    # Routing
    # ========================================================================

    def classify(self, task: str) -> TaskClassification:
        return self.classifier.classify(task)

    def route_task(
        self, task: str, strategy: str | None = None
    ) -> tuple[TaskClassification, RoutingDecision]:
        """Classify and route a task without executing it."""
        classification = self.classify(task)
        return classification, self._route(classification, strategy, self.registry)

    def recommend(self, task: str) -> dict[str, RoutingDecision]:
        """Decision of every strategy for a task, keyed by strategy name."""
        classification = self.classify(task)
        return self.policy_engine.recommendations(
            classification, self.registry, self.feedback, self.config.max_workers_per_task
        )

    def predict(self, task: str) -> Prediction:
        """Best worker for the task's type according to feedback history."""
        return self.feedback.predict(self.classify(task).task_type)

    def _resolve_strategy(self, classification: TaskClassification, strategy: str | None) -> str:
        if strategy:
            return strategy
        if self.config.domain_aware and classification.domain:
            return DOMAINS_BY_NAME[classification.domain].routing_strategy
        return self.config.default_strategy

    def _route(
        self,
        classification: TaskClassification,
        strategy: str | None,
        registry: WorkerRegistry,
    ) -> RoutingDecision:
        requested = self._resolve_strategy(classification, strategy)
        decision = self.policy_engine.route(
            classification,
            requested,
            registry,
            self.feedback,
            self.config.max_workers_per_task,
        )

        if decision.is_empty and decision.strategy_used == StrategyName.LEARNED.value:
            fallback = self.policy_engine.route(
                classification,
                StrategyName.HYBRID,
                registry,
                self.feedback,
                self.config.max_workers_per_task,
            )
            logger.info(
                f"Learned routing had no history for {classification.task_type}; "
                f"falling back to hybrid"
            )
            decision = dataclasses.replace(
                fallback,
                fallback_from=StrategyName.LEARNED.value,
                rationale=f"No learned history; {fallback.rationale}",
            )

        return decision

    # ========================================================================
    # Execution
    # ========================================================================

    async def execute_task(
        self,
        task: str,
        strategy: str | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> ExecutionRecord:
        """
        Route, execute and aggregate a task.

        Args:
            task: Free-text task description
            strategy: Strategy name (default: config default or domain strategy)
            cancel_token: Cooperative cancellation for in-flight worker calls

        Returns:
            The final ExecutionRecord (the last retry when retries happened).
            A record with success_rate == 0 is a degraded, completed result.

        Raises:
            UnknownStrategyError: If the strategy name is not known
        """
        if strategy is not None:
            try:
                StrategyName(strategy)
            except ValueError:
                raise UnknownStrategyError(strategy) from None

        token = cancel_token or CancellationToken()
        classification = self.classify(task)
        logger.info(
            f"Task classified: {classification.task_type} "
            f"(complexity={classification.complexity}, priority={classification.priority})"
        )

        record = await self._run_once(task, classification, strategy, self.registry, token)

        attempts = 0
        excluded: set[str] = set()
        while (
            attempts < self.config.retry_attempts
            and record.aggregated.success_rate == 0
            and not record.decision.is_empty
            and not record.cancelled
            and not token.is_cancelled
        ):
            attempts += 1
            excluded.update(record.decision.worker_ids)
            logger.warning(
                f"Execution {record.execution_id} had no successes; "
                f"retry {attempts}/{self.config.retry_attempts} without {sorted(excluded)}"
            )
            record = await self._run_once(
                task,
                classification,
                strategy,
                self.registry.excluding(excluded),
                token,
                retry_of=record.execution_id,
            )

        return record

    async def _run_once(
        self,
        task: str,
        classification: TaskClassification,
        strategy: str | None,
        registry: WorkerRegistry,
        token: CancellationToken,
        retry_of: str | None = None,
    ) -> ExecutionRecord:
        started = time.monotonic()
        timestamp = utc_now()
        execution_id = generate_execution_id()
        decision = self._route(classification, strategy, registry)

        handle: ExecutionHandle | None = None
        try:
            context = await self._gather_knowledge(task)
            request = WorkerRequest(
                task=task,
                classification=classification,
                execution_id=execution_id,
                context=context,
            )
            handle = self.executor.start(
                request, decision, self.config.per_call_timeout_ms, token
            )
            outcomes = await handle.wait()
        except asyncio.CancelledError:
            token.cancel("caller cancelled")
            if handle is not None:
                handle.cancel("caller cancelled")
                outcomes = handle.snapshot()
            else:
                outcomes = [
                    WorkerOutcome.failed(w.id, ErrorKind.CANCELLED, "caller cancelled")
                    for w in decision.selected_workers
                ]
            record = self._finalize(
                execution_id, task, classification, decision, outcomes,
                started, timestamp, retry_of, cancelled=True,
            )
            # Finalize even though the caller is going away
            await asyncio.shield(self.execution_log.append(record))
            logger.warning(f"Execution {execution_id} cancelled by caller")
            raise

        record = self._finalize(
            execution_id, task, classification, decision, outcomes,
            started, timestamp, retry_of,
            cancelled=any(o.cancelled for o in outcomes),
        )
        await self.execution_log.append(record)
        self._schedule_feedback(record)

        logger.info(
            f"Execution {execution_id} completed in {format_duration(record.total_latency_ms)}: "
            f"{record.aggregated.summary}"
        )
        return record

    def _finalize(
        self,
        execution_id: str,
        task: str,
        classification: TaskClassification,
        decision: RoutingDecision,
        outcomes: list[WorkerOutcome],
        started: float,
        timestamp: datetime,
        retry_of: str | None,
        cancelled: bool = False,
    ) -> ExecutionRecord:
        return ExecutionRecord(
            execution_id=execution_id,
            task_preview=truncate(task, settings.TASK_PREVIEW_CHARS),
            classification=classification,
            decision=decision,
            outcomes=tuple(outcomes),
            aggregated=self.aggregator.aggregate(outcomes, classification),
            total_latency_ms=(time.monotonic() - started) * 1000,
            timestamp=timestamp,
            cancelled=cancelled,
            retry_of=retry_of,
        )

    async def _gather_knowledge(self, task: str) -> tuple[dict[str, Any], ...]:
        if self.knowledge_store is None or self.config.knowledge_hits == 0:
            return ()

        try:
            hits = await self.knowledge_store.search(task)
        except Exception as e:
            logger.error(f"Knowledge search failed, continuing without context: {e}")
            return ()

        context: list[dict[str, Any]] = []
        for hit in hits[: self.config.knowledge_hits]:
            try:
                content = await self.knowledge_store.get(hit.name)
            except KnowledgeNotFoundError:
                logger.warning(f"Knowledge entry vanished during lookup: {hit.name}")
                continue
            except Exception as e:
                logger.error(f"Failed to load knowledge entry {hit.name}: {e}")
                continue
            context.append(
                {"name": hit.name, "relevance_score": hit.relevance_score, "content": content}
            )

        if context:
            logger.debug(f"Attached knowledge: {[c['name'] for c in context]}")
        return tuple(context)

    # ========================================================================
    # Feedback
    # ========================================================================

    def _schedule_feedback(self, record: ExecutionRecord) -> None:
        outcomes = [o for o in record.outcomes if not o.cancelled]
        if not outcomes:
            return

        task = asyncio.create_task(self._record_feedback(record.task_type, outcomes))
        self._feedback_tasks.add(task)
        task.add_done_callback(self._feedback_tasks.discard)

    async def _record_feedback(self, task_type: str, outcomes: list[WorkerOutcome]) -> None:
        for outcome in outcomes:
            try:
                await self.feedback.record(outcome.worker_id, task_type, outcome)
            except Exception as e:
                logger.error(f"Failed to record feedback for {outcome.worker_id}: {e}")

    async def wait_for_feedback(self) -> None:
        """Wait until every scheduled feedback recording has been applied."""
        while self._feedback_tasks:
            await asyncio.gather(*list(self._feedback_tasks))

    async def submit_feedback(
        self,
        execution_id: str,
        worker_id: str,
        quality_score: float | None = None,
        user_rating: float | None = None,
    ) -> None:
        """
        Rate a worker's contribution to a past execution.

        Raises:
            ExecutionNotFoundError: If the execution is unknown
            WorkerNotFoundError: If the worker was not part of the execution
            ValueError: If a score is out of range
        """
        record = self.execution_log.get(execution_id)
        if record is not None:
            task_type = record.task_type
            worker_ids = record.outcome_map.keys()
        else:
            doc = await self.execution_log.load_persisted(execution_id)
            if doc is None:
                raise ExecutionNotFoundError(execution_id)
            task_type = doc["classification"]["task_type"]
            worker_ids = doc["outcomes"].keys()

        if worker_id not in worker_ids:
            raise WorkerNotFoundError(worker_id)

        await self.feedback.rate(worker_id, task_type, quality_score, user_rating)

    # ========================================================================
    # Introspection
    # ========================================================================

    def get_execution_history(self, limit: int | None = None) -> list[ExecutionRecord]:
        return self.execution_log.history(limit)

    def get_statistics(self) -> dict[str, Any]:
        return {
            "executions": self.execution_log.statistics(),
            "registry": self.registry.statistics(),
            "feedback": self.feedback.insights(),
            "config": self.config.to_dict(),
        }

    async def shutdown(self) -> None:
        await self.wait_for_feedback()
        logger.info("Orchestrator shut down")
