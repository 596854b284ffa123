"""
CONDUCTOR — Shared Error Definitions

Common exceptions used across all CONDUCTOR components.

Worker-local failures (unavailable, timeout, provider errors) are raised by
Worker Adapters and converted into outcome data by the executor; they never
cross into aggregation.
"""


class ConductorError(Exception):
    """Base exception for all CONDUCTOR errors."""
    pass


# =============================================================================
# Configuration Errors
# =============================================================================
class ConfigurationError(ConductorError):
    """Raised when configuration is missing or invalid."""
    pass


# =============================================================================
# Registry Errors
# =============================================================================
class RegistryError(ConductorError):
    """Base exception for worker registry errors."""
    pass


class DuplicateWorkerError(RegistryError):
    """Raised when registering a worker id that already exists."""
    def __init__(self, worker_id: str):
        self.worker_id = worker_id
        super().__init__(f"Worker already registered: {worker_id}")


class WorkerNotFoundError(RegistryError):
    """Raised when a worker id is not in the registry."""
    def __init__(self, worker_id: str):
        self.worker_id = worker_id
        super().__init__(f"Worker not found: {worker_id}")


class InvalidWorkerError(RegistryError):
    """Raised when a worker definition violates registry invariants."""
    def __init__(self, worker_id: str, reason: str):
        self.worker_id = worker_id
        self.reason = reason
        super().__init__(f"Invalid worker {worker_id}: {reason}")


# =============================================================================
# Routing Errors
# =============================================================================
class RoutingError(ConductorError):
    """Base exception for routing errors."""
    pass


class UnknownStrategyError(RoutingError):
    """Raised when a routing strategy name is not registered."""
    def __init__(self, strategy: str):
        self.strategy = strategy
        super().__init__(f"Unknown routing strategy: {strategy}")


# =============================================================================
# Worker Errors
# =============================================================================
class WorkerError(ConductorError):
    """Base exception for worker invocation errors."""
    pass


class WorkerUnavailableError(WorkerError):
    """Raised when a worker is unreachable or missing credentials."""
    def __init__(self, worker_id: str, reason: str = ""):
        self.worker_id = worker_id
        self.reason = reason
        super().__init__(f"Worker {worker_id} unavailable: {reason}")


class WorkerTimeoutError(WorkerError):
    """Raised when a worker call exceeds its timeout."""
    def __init__(self, worker_id: str, timeout_seconds: float):
        self.worker_id = worker_id
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Worker {worker_id} timed out after {timeout_seconds}s")


class ProviderError(WorkerError):
    """Raised when the backend behind a worker reports a failure."""
    def __init__(self, worker_id: str, message: str):
        self.worker_id = worker_id
        super().__init__(f"Provider error from {worker_id}: {message}")


# =============================================================================
# Knowledge Errors
# =============================================================================
class KnowledgeError(ConductorError):
    """Base exception for knowledge store errors."""
    pass


class KnowledgeNotFoundError(KnowledgeError):
    """Raised when a knowledge entry does not exist."""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Knowledge entry not found: {name}")


# =============================================================================
# Storage Errors
# =============================================================================
class StorageError(ConductorError):
    """Base exception for persistence errors."""
    pass


class FeedbackPersistenceFailure(StorageError):
    """Raised when feedback statistics could not be persisted."""
    def __init__(self, worker_id: str, reason: str = ""):
        self.worker_id = worker_id
        self.reason = reason
        super().__init__(f"Failed to persist feedback for {worker_id}: {reason}")


# =============================================================================
# Archive Errors
# =============================================================================
class ExecutionNotFoundError(ConductorError):
    """Raised when an execution id is not in the execution log."""
    def __init__(self, execution_id: str):
        self.execution_id = execution_id
        super().__init__(f"Execution not found: {execution_id}")
