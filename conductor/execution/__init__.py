"""
CONDUCTOR Execution — Concurrent worker dispatch.

Provides:
- OrchestrationExecutor: Settle-all fan-out with per-call timeouts
- WorkerAdapter: Contract for invoking a worker
- CancellationToken: Cooperative cancellation of in-flight calls
- TimeoutManager: Per-call timeout enforcement

Usage:
    from conductor.execution import OrchestrationExecutor

    executor = OrchestrationExecutor(adapter)
    outcomes = await executor.execute(request, decision, per_call_timeout_ms=30000)
"""

from .adapter import WorkerAdapter, WorkerRequest, WorkerResponse
from .cancellation import CancellationToken
from .executor import ExecutionHandle, OrchestrationExecutor
from .models import ErrorKind, WorkerOutcome
from .timeout import DEFAULT_TIMEOUT_MS, TimeoutManager

__all__ = [
    "OrchestrationExecutor",
    "ExecutionHandle",
    "WorkerAdapter",
    "WorkerRequest",
    "WorkerResponse",
    "CancellationToken",
    "TimeoutManager",
    "DEFAULT_TIMEOUT_MS",
    "ErrorKind",
    "WorkerOutcome",
]
