"""
CONDUCTOR Registry — Catalogue of invocable workers.

Usage:
    from conductor.registry import WorkerRegistry

    registry = WorkerRegistry.with_defaults()
    workers = registry.best("code-generation", 3)
"""

from .catalogue import DEFAULT_WORKERS, default_catalogue
from .models import (
    RELIABILITY_SCORES,
    SPEED_SCORES,
    ReliabilityTier,
    SpeedTier,
    Worker,
    reliability_score,
    speed_score,
)
from .worker_registry import WorkerRegistry

__all__ = [
    "WorkerRegistry",
    "Worker",
    "SpeedTier",
    "ReliabilityTier",
    "SPEED_SCORES",
    "RELIABILITY_SCORES",
    "speed_score",
    "reliability_score",
    "DEFAULT_WORKERS",
    "default_catalogue",
]
