"""
CONDUCTOR — Main Entry Point

Wires all components together and provides the startup sequence for
applications embedding the routing core. The caller supplies the
WorkerAdapter; everything else is built from settings.
"""

from __future__ import annotations

import importlib
import logging
from typing import Any

from dotenv import load_dotenv

from conductor.archive import ExecutionLog, ExecutionRecord
from conductor.core.orchestrator import Orchestrator, OrchestratorConfig
from conductor.execution import CancellationToken, WorkerAdapter
from conductor.feedback import FeedbackStore
from conductor.knowledge import KnowledgeStore
from conductor.registry import WorkerRegistry
from conductor.shared import settings
from conductor.shared.logging import configure_file_logging, setup_logging
from conductor.storage import PersistenceStore, create_persistence_store

logger = logging.getLogger("conductor.main")


# Component initialization functions
async def init_persistence(
    backend: str | None = None, db_path: str | None = None
) -> PersistenceStore:
    """Initialize the Persistence Store."""
    logger.info("Initializing Persistence Store...")
    store = create_persistence_store(backend, db_path)
    await store.initialize()
    return store


async def init_registry(
    persistence: PersistenceStore, seed_defaults: bool = True
) -> WorkerRegistry:
    """Initialize the Worker Registry from the default catalogue and stored workers."""
    logger.info("Initializing Worker Registry...")
    registry = WorkerRegistry.with_defaults() if seed_defaults else WorkerRegistry()
    await registry.load_catalogue(persistence)
    await registry.save_catalogue(persistence)
    logger.info(f"Worker Registry initialized ({len(registry)} workers)")
    return registry


async def init_feedback_store(persistence: PersistenceStore) -> FeedbackStore:
    """Initialize the Feedback Store and load its history."""
    logger.info("Initializing Feedback Store...")
    feedback = FeedbackStore(persistence)
    loaded = await feedback.load()
    logger.info(f"Feedback Store initialized ({loaded} workers with history)")
    return feedback


def init_orchestrator(
    adapter: WorkerAdapter,
    registry: WorkerRegistry,
    feedback: FeedbackStore,
    execution_log: ExecutionLog,
    knowledge_store: KnowledgeStore | None = None,
    config: OrchestratorConfig | None = None,
) -> Orchestrator:
    """Initialize the Orchestrator."""
    logger.info("Initializing Orchestrator...")
    return Orchestrator(
        adapter,
        registry=registry,
        feedback=feedback,
        execution_log=execution_log,
        knowledge_store=knowledge_store,
        config=config or OrchestratorConfig.from_settings(),
    )


# Main application
class ConductorApp:
    """
    Main CONDUCTOR application.

    Example:
        app = await ConductorApp.create(adapter)
        record = await app.execute_task("Review the payment service for race conditions")
        await app.shutdown()
    """

    def __init__(
        self,
        orchestrator: Orchestrator,
        persistence: PersistenceStore,
    ):
        self.orchestrator = orchestrator
        self.persistence = persistence

        logger.info("CONDUCTOR application initialized")

    @classmethod
    async def create(
        cls,
        adapter: WorkerAdapter,
        knowledge_store: KnowledgeStore | None = None,
        config: OrchestratorConfig | None = None,
        storage_backend: str | None = None,
        db_path: str | None = None,
        env_file: str | None = None,
        log_file: str | None = None,
    ) -> ConductorApp:
        """
        Factory method to create and initialize the application.

        Args:
            adapter: Worker Adapter used for every worker call
            knowledge_store: Knowledge collaborator (optional)
            config: Orchestrator options (default: from CONDUCTOR_* settings)
            storage_backend: "sqlite" or "memory" (default: CONDUCTOR_STORAGE_BACKEND)
            db_path: SQLite path (default: CONDUCTOR_DB_PATH)
            env_file: .env file to load (default: search from the working directory)
            log_file: Also write logs to this file under CONDUCTOR_LOG_DIR

        Returns:
            Initialized ConductorApp instance
        """
        # Load environment variables, then re-read settings so .env values apply
        load_dotenv(env_file)
        importlib.reload(settings)

        setup_logging(settings.LOG_LEVEL)
        if log_file:
            configure_file_logging(logging.getLogger("conductor"), log_file)

        logger.info("=" * 60)
        logger.info(f"{settings.PROJECT_NAME} {settings.VERSION} — Starting initialization")
        logger.info("=" * 60)

        persistence = await init_persistence(storage_backend, db_path)
        registry = await init_registry(persistence, settings.SEED_DEFAULT_CATALOGUE)
        feedback = await init_feedback_store(persistence)
        execution_log = ExecutionLog(persistence)
        orchestrator = init_orchestrator(
            adapter,
            registry,
            feedback,
            execution_log,
            knowledge_store=knowledge_store,
            config=config,
        )

        logger.info("=" * 60)
        logger.info(f"{settings.PROJECT_NAME} — Initialization complete")
        logger.info("=" * 60)

        return cls(orchestrator, persistence)

    # Public API - delegates to orchestrator
    async def execute_task(
        self,
        task: str,
        strategy: str | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> ExecutionRecord:
        """Route, execute and aggregate a task."""
        return await self.orchestrator.execute_task(task, strategy, cancel_token)

    async def submit_feedback(
        self,
        execution_id: str,
        worker_id: str,
        quality_score: float | None = None,
        user_rating: float | None = None,
    ) -> None:
        await self.orchestrator.submit_feedback(
            execution_id, worker_id, quality_score, user_rating
        )

    def get_statistics(self) -> dict[str, Any]:
        return self.orchestrator.get_statistics()

    async def shutdown(self) -> None:
        """Graceful shutdown: flush feedback, persist the registry, close storage."""
        logger.info(f"{settings.PROJECT_NAME} - Shutting down...")
        await self.orchestrator.shutdown()
        await self.orchestrator.registry.save_catalogue(self.persistence)
        await self.persistence.close()
        logger.info(f"{settings.PROJECT_NAME} - Shutdown complete")
