"""
CONDUCTOR — Shared Settings

Central configuration for the routing and orchestration core.
Load from environment variables with sensible defaults.
"""

import os


# =============================================================================
# Project Identity
# =============================================================================
PROJECT_NAME: str = "CONDUCTOR"
VERSION: str = "1.0.0"


# =============================================================================
# Orchestration
# =============================================================================
MAX_WORKERS_PER_TASK: int = int(os.environ.get("CONDUCTOR_MAX_WORKERS_PER_TASK", "3"))
PER_CALL_TIMEOUT_MS: int = int(os.environ.get("CONDUCTOR_PER_CALL_TIMEOUT_MS", "30000"))
DEFAULT_STRATEGY: str = os.environ.get("CONDUCTOR_DEFAULT_STRATEGY", "hybrid")
RETRY_ATTEMPTS: int = int(os.environ.get("CONDUCTOR_RETRY_ATTEMPTS", "0"))

# Probability of swapping the last learned pick for an unexplored worker
EXPLORATION_RATE: float = float(os.environ.get("CONDUCTOR_EXPLORATION_RATE", "0.0"))

# Knowledge entries attached to each worker request
KNOWLEDGE_HITS: int = int(os.environ.get("CONDUCTOR_KNOWLEDGE_HITS", "3"))

TASK_PREVIEW_CHARS: int = int(os.environ.get("CONDUCTOR_TASK_PREVIEW_CHARS", "100"))


# =============================================================================
# Storage
# =============================================================================
DB_PATH: str = os.environ.get("CONDUCTOR_DB_PATH", "data/conductor.db")

# "sqlite" or "memory"
STORAGE_BACKEND: str = os.environ.get("CONDUCTOR_STORAGE_BACKEND", "sqlite")


# =============================================================================
# Logging
# =============================================================================
LOG_LEVEL: str = os.environ.get("CONDUCTOR_LOG_LEVEL", "INFO")
LOG_DIR: str = os.environ.get("CONDUCTOR_LOG_DIR", "logs")


# =============================================================================
# Feature Flags
# =============================================================================
ENABLE_DOMAIN_ROUTING: bool = (
    os.environ.get("CONDUCTOR_ENABLE_DOMAIN_ROUTING", "false").lower() == "true"
)
SEED_DEFAULT_CATALOGUE: bool = (
    os.environ.get("CONDUCTOR_SEED_DEFAULT_CATALOGUE", "true").lower() == "true"
)
