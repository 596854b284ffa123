"""
CONDUCTOR Registry - Worker Registry

Catalogue of invocable workers and their capability / cost / speed /
reliability profiles. Read-mostly: workers are appended, never mutated.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable

from conductor.shared.errors import DuplicateWorkerError, WorkerNotFoundError

from .catalogue import default_catalogue
from .models import Worker

if TYPE_CHECKING:
    from conductor.storage.backend import PersistenceStore

logger = logging.getLogger("conductor.registry")

CATALOGUE_KEY = "registry:workers"


class WorkerRegistry:
    """
    In-process worker registry.

    Registration order is preserved and used as the final tie-breaker in
    every ranking, so identical inputs always yield identical orderings.
    """

    def __init__(self, workers: Iterable[Worker] | None = None) -> None:
        self._workers: dict[str, Worker] = {}
        self._platforms: dict[str, list[str]] = {}
        for worker in workers or []:
            self.register(worker)

    @classmethod
    def with_defaults(cls) -> WorkerRegistry:
        """Registry seeded with the built-in catalogue."""
        return cls(default_catalogue())

    # ========================================================================
    # Registration
    # ========================================================================

    def register(self, worker: Worker) -> Worker:
        """
        Add a worker to the registry.

        Raises:
            DuplicateWorkerError: If a worker with the same id exists
        """
        if worker.id in self._workers:
            raise DuplicateWorkerError(worker.id)

        self._workers[worker.id] = worker
        self._platforms.setdefault(worker.provider_family, []).append(worker.id)
        logger.debug(f"Registered worker {worker.id} ({worker.provider_family})")
        return worker

    def excluding(self, worker_ids: Iterable[str]) -> WorkerRegistry:
        """Return a new registry without the given workers, order preserved."""
        excluded = set(worker_ids)
        return WorkerRegistry(w for w in self._workers.values() if w.id not in excluded)

    # ========================================================================
    # Lookup
    # ========================================================================

    def get(self, worker_id: str) -> Worker:
        try:
            return self._workers[worker_id]
        except KeyError:
            raise WorkerNotFoundError(worker_id) from None

    def find(self, worker_id: str) -> Worker | None:
        return self._workers.get(worker_id)

    def all(self) -> list[Worker]:
        return list(self._workers.values())

    def by_capability(self, capability: str) -> list[Worker]:
        return [w for w in self._workers.values() if w.supports(capability)]

    def by_capabilities(self, capabilities: Iterable[str]) -> list[Worker]:
        """Workers supporting at least one of the given capabilities."""
        wanted = frozenset(capabilities)
        return [w for w in self._workers.values() if w.supports_any(wanted)]

    def by_platform(self, provider_family: str) -> list[Worker]:
        return [self._workers[wid] for wid in self._platforms.get(provider_family, [])]

    def local(self) -> list[Worker]:
        return [w for w in self._workers.values() if w.is_local]

    def cloud(self) -> list[Worker]:
        return [w for w in self._workers.values() if not w.is_local]

    def best(self, task_type: str, n: int = 3) -> list[Worker]:
        """
        Top-n workers supporting a task type.

        Reliability is the primary key and speed the secondary key; Python's
        stable sort keeps registration order for full ties.
        """
        candidates = self.by_capability(task_type)
        candidates.sort(key=lambda w: (w.reliability_score, w.speed_score), reverse=True)
        return candidates[:n]

    # ========================================================================
    # Statistics
    # ========================================================================

    def statistics(self) -> dict[str, Any]:
        workers = self.all()
        capabilities = sorted({cap for w in workers for cap in w.capabilities})
        return {
            "total_workers": len(workers),
            "by_platform": {family: len(ids) for family, ids in self._platforms.items()},
            "local_workers": sum(1 for w in workers if w.is_local),
            "cloud_workers": sum(1 for w in workers if not w.is_local),
            "capabilities": capabilities,
        }

    # ========================================================================
    # Persistence
    # ========================================================================

    async def load_catalogue(self, store: PersistenceStore) -> int:
        """
        Register workers persisted in the store that are not yet known.

        Returns:
            Number of newly registered workers
        """
        doc = await store.load(CATALOGUE_KEY)
        if not doc:
            return 0

        added = 0
        for data in doc.get("workers", []):
            if data.get("id") in self._workers:
                continue
            self.register(Worker.from_dict(data))
            added += 1

        logger.info(f"Loaded {added} workers from persistence store")
        return added

    async def save_catalogue(self, store: PersistenceStore) -> None:
        await store.save(CATALOGUE_KEY, {"workers": [w.to_dict() for w in self.all()]})

    def __len__(self) -> int:
        return len(self._workers)

    def __contains__(self, worker_id: object) -> bool:
        return worker_id in self._workers

    def __repr__(self) -> str:
        return f"WorkerRegistry(workers={len(self._workers)}, platforms={len(self._platforms)})"
